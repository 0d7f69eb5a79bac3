"""Extract a release archive and move its executable into place."""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path

from tunny_core import paths

from .errors import BinaryNotFound, ExtractionFailed, InstallFailed


_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@dataclass(frozen=True)
class InstalledBinary:
    path: Path
    permissions: int


def prepare_scratch(scratch: Path) -> Path:
    if scratch.exists():
        shutil.rmtree(scratch)
    scratch.mkdir(parents=True)
    return scratch


def extract(archive_path: Path, scratch: Path) -> None:
    try:
        with tarfile.open(archive_path, mode="r:gz") as tf:
            if hasattr(tarfile, "data_filter"):
                tf.extractall(scratch, filter="data")
            else:
                tf.extractall(scratch)
    except (tarfile.TarError, EOFError, OSError, zlib.error) as exc:
        raise ExtractionFailed(str(archive_path), exc) from exc


def find_binary(scratch: Path, name: str) -> Path:
    """Look for ``name`` at the archive root, then one directory down.

    Anything nested deeper is not considered, and neither are symlinks,
    which would dangle once the scratch directory is gone.
    """
    direct = scratch / name
    if direct.is_file() and not direct.is_symlink():
        return direct

    for entry in sorted(scratch.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            candidate = entry / name
            if candidate.is_file() and not candidate.is_symlink():
                return candidate

    raise BinaryNotFound(name)


def install(
    archive_path: Path,
    expected_binary_name: str,
    final_path: Path,
    scratch: Path | None = None,
    make_executable: bool = True,
) -> InstalledBinary:
    """Install the binary from ``archive_path`` at ``final_path``.

    ``final_path`` is only touched by a single ``os.replace``, so readers see
    either the previous binary or the complete new one. The scratch directory
    and the archive are removed whether or not the install succeeds.
    """
    scratch = scratch or paths.scratch_dir(final_path.parent)
    try:
        try:
            prepare_scratch(scratch)
        except OSError as exc:
            raise ExtractionFailed(str(archive_path), exc) from exc
        extract(archive_path, scratch)
        found = find_binary(scratch, expected_binary_name)

        try:
            if make_executable:
                found.chmod(found.stat().st_mode | _EXEC_BITS)
            final_path.parent.mkdir(parents=True, exist_ok=True)
            os.replace(found, final_path)
            if make_executable and not os.access(final_path, os.X_OK):
                final_path.chmod(final_path.stat().st_mode | _EXEC_BITS)
            permissions = stat.S_IMODE(final_path.stat().st_mode)
        except OSError as exc:
            raise InstallFailed(str(final_path), exc) from exc

        return InstalledBinary(path=final_path, permissions=permissions)
    finally:
        shutil.rmtree(scratch, ignore_errors=True)
        with contextlib.suppress(OSError):
            archive_path.unlink(missing_ok=True)
