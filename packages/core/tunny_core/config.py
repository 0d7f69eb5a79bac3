"""Provisioning settings: defaults, JSON file, environment overlay."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, fields
from importlib import metadata
from pathlib import Path
from typing import Any, Mapping

from .paths import PACKAGE_NAME, install_root


__version__ = "0.1.0"

DEFAULT_RELEASE_BASE_URL = "https://github.com/kayaramazan/tunny-client/releases/download/v{version}"
MAX_REDIRECT_LIMIT = 5


@dataclass
class ProvisionConfig:
    package_name: str = PACKAGE_NAME
    version: str = ""
    release_base_url: str = DEFAULT_RELEASE_BASE_URL
    install_root: Path | None = None
    system: str = ""
    machine: str = ""
    timeout_s: int = 60
    max_redirects: int = 1
    verify_checksum: bool = False
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.install_root is not None:
            data["install_root"] = str(self.install_root)
        return data


def installed_version(package_name: str = PACKAGE_NAME) -> str:
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return __version__


def _merge(raw: dict[str, Any]) -> ProvisionConfig:
    cfg = ProvisionConfig()
    known = {f.name for f in fields(ProvisionConfig)}
    for k, v in raw.items():
        if k in known:
            setattr(cfg, k, v)
    if cfg.install_root is not None:
        cfg.install_root = Path(cfg.install_root).expanduser()
    return cfg


def normalize(cfg: ProvisionConfig) -> ProvisionConfig:
    cfg.max_redirects = max(0, min(MAX_REDIRECT_LIMIT, int(cfg.max_redirects)))
    cfg.timeout_s = max(1, min(600, int(cfg.timeout_s)))
    cfg.verify_checksum = bool(cfg.verify_checksum)
    cfg.allow_insecure_tls = bool(cfg.allow_insecure_tls)
    cfg.version = str(cfg.version or "").strip()
    return cfg


def load_config(path: Path | None = None) -> ProvisionConfig:
    if path is None or not path.exists():
        return ProvisionConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return ProvisionConfig()
    if not isinstance(raw, dict):
        return ProvisionConfig()

    return normalize(_merge(raw))


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip() == "1"


def apply_env(cfg: ProvisionConfig, environ: Mapping[str, str] | None = None) -> ProvisionConfig:
    environ = os.environ if environ is None else environ

    version = environ.get("TUNNY_VERSION", "").strip()
    if version:
        cfg.version = version

    base_url = environ.get("TUNNY_RELEASE_BASE_URL", "").strip()
    if base_url:
        cfg.release_base_url = base_url

    home = environ.get("TUNNY_HOME", "").strip()
    if home:
        cfg.install_root = Path(home).expanduser() / "bin"

    ca_bundle = environ.get("TUNNY_CA_BUNDLE", "").strip()
    if ca_bundle:
        cfg.ca_bundle = ca_bundle

    if _flag(environ, "TUNNY_ALLOW_INSECURE_TLS"):
        cfg.allow_insecure_tls = True
    if _flag(environ, "TUNNY_VERIFY_CHECKSUM"):
        cfg.verify_checksum = True

    return cfg


def resolve_defaults(
    cfg: ProvisionConfig,
    system: str | None = None,
    machine: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProvisionConfig:
    """Fill host identifiers, version and install root left unset."""
    if not cfg.system:
        cfg.system = system or platform.system()
    if not cfg.machine:
        cfg.machine = machine or platform.machine()
    if not cfg.version:
        cfg.version = installed_version(cfg.package_name)
    if cfg.install_root is None:
        cfg.install_root = install_root(cfg.system, environ)
    return normalize(cfg)
