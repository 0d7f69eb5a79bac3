"""Provisioning pipeline shared by the installer CLI and tests."""

from __future__ import annotations

import contextlib
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from tunny_core import paths
from tunny_core.config import ProvisionConfig
from tunny_core.logging_setup import get_logger

from . import fetcher, installer, integrity
from .errors import ProvisionError
from .installer import InstalledBinary
from .resolver import ReleaseDescriptor, TargetSpec, describe_release, resolve_target


log = get_logger("provision")


class Stage(str, Enum):
    RESOLVING = "Resolving"
    DOWNLOADING = "Downloading"
    VALIDATING = "Validating"
    EXTRACTING = "Extracting"
    INSTALLED = "Installed"
    FAILED = "Failed"


@dataclass(frozen=True)
class ProvisionResult:
    target: TargetSpec
    release: ReleaseDescriptor
    binary: InstalledBinary
    byte_size: int


@dataclass
class ProvisionOutcome:
    exit_code: int
    result: ProvisionResult | None = None
    error: ProvisionError | None = None
    stages: list[Stage] = field(default_factory=list)


def _sweep(*targets: Path) -> None:
    for target in targets:
        with contextlib.suppress(OSError):
            if target.is_dir():
                shutil.rmtree(target, ignore_errors=True)
            else:
                target.unlink(missing_ok=True)


class ProvisionRun:
    """One pass through Resolving -> Downloading -> Validating -> Extracting -> Installed."""

    def __init__(self, cfg: ProvisionConfig) -> None:
        if cfg.install_root is None:
            raise ValueError("install_root must be resolved before provisioning")
        self.cfg = cfg
        self.root = cfg.install_root
        self.stage: Stage | None = None
        self.history: list[Stage] = []

    def _enter(self, stage: Stage, message: str) -> None:
        if stage in self.history:
            raise RuntimeError(f"stage {stage.value} entered twice")
        self.history.append(stage)
        self.stage = stage
        log.info(message, extra={"event": "stage_started", "stage": stage.value})

    def run(self) -> ProvisionResult:
        cfg = self.cfg
        archive = paths.archive_path(self.root, cfg.package_name)
        checksums = paths.checksums_path(self.root, cfg.package_name)
        scratch = paths.scratch_dir(self.root)

        try:
            self._enter(Stage.RESOLVING, f"Resolving {cfg.package_name} {cfg.version} for {cfg.system}/{cfg.machine}")
            target = resolve_target(cfg.system, cfg.machine, cfg.version)
            release = describe_release(target, cfg.release_base_url, cfg.package_name)

            self._enter(
                Stage.DOWNLOADING,
                f"Downloading {cfg.package_name} {target.version} for {target.os_name}/{target.arch}: {release.download_url}",
            )
            context = fetcher.build_ssl_context(cfg.ca_bundle, cfg.allow_insecure_tls)
            artifact = fetcher.fetch(
                release.download_url,
                archive,
                timeout=cfg.timeout_s,
                max_redirects=cfg.max_redirects,
                context=context,
            )

            self._enter(Stage.VALIDATING, f"Validating {release.archive_name} ({artifact.byte_size} bytes)")
            size = integrity.validate(artifact.local_path)
            if cfg.verify_checksum:
                fetcher.fetch(
                    release.checksums_url,
                    checksums,
                    timeout=cfg.timeout_s,
                    max_redirects=cfg.max_redirects,
                    context=context,
                )
                integrity.verify_checksum(archive, release.archive_name, checksums)

            final_path = paths.binary_path(self.root, target.os_name, cfg.package_name)
            self._enter(Stage.EXTRACTING, f"Extracting {release.binary_name} to {final_path}")
            binary = installer.install(
                archive,
                release.binary_name,
                final_path,
                scratch=scratch,
                make_executable=not paths.is_windows(target.os_name),
            )

            self._enter(Stage.INSTALLED, f"Installed {cfg.package_name} {target.version} at {binary.path}")
            return ProvisionResult(target=target, release=release, binary=binary, byte_size=size)
        except ProvisionError as exc:
            exc.stage = self.stage.value if self.stage else None
            self.stage = Stage.FAILED
            raise
        finally:
            _sweep(archive, checksums, scratch)


def execute(cfg: ProvisionConfig) -> ProvisionOutcome:
    run = ProvisionRun(cfg)
    try:
        result = run.run()
    except ProvisionError as exc:
        log.error(
            f"Provisioning failed during {exc.stage or 'startup'}: {exc}",
            extra={"event": "provision_failed", "stage": exc.stage},
        )
        return ProvisionOutcome(exit_code=1, error=exc, stages=list(run.history))

    log.info(
        f"{cfg.package_name} {result.target.version} installed successfully",
        extra={"event": "provision_succeeded"},
    )
    return ProvisionOutcome(exit_code=0, result=result, stages=list(run.history))


def provision(cfg: ProvisionConfig) -> int:
    return execute(cfg).exit_code
