"""Filesystem layout for the installed tunny binary and its scratch files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping


PACKAGE_NAME = "tunny"


def data_root(system: str, environ: Mapping[str, str] | None = None) -> Path:
    environ = os.environ if environ is None else environ
    override = environ.get("TUNNY_HOME", "").strip()
    if override:
        return Path(override).expanduser()

    s = system.lower()
    if s.startswith("win"):
        base = Path(environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Tunny"
    if s.startswith("darwin") or s.startswith("mac"):
        return Path.home() / "Library" / "Application Support" / "Tunny"
    return Path.home() / ".local" / "share" / "tunny"


def install_root(system: str, environ: Mapping[str, str] | None = None) -> Path:
    return data_root(system, environ) / "bin"


def is_windows(system: str) -> bool:
    s = system.lower()
    return s.startswith("win")


def binary_name(system: str, package_name: str = PACKAGE_NAME) -> str:
    """Return the executable file name for a host system or OS token."""
    return f"{package_name}.exe" if is_windows(system) else package_name


def binary_path(root: Path, system: str, package_name: str = PACKAGE_NAME) -> Path:
    return root / binary_name(system, package_name)


def archive_path(root: Path, package_name: str = PACKAGE_NAME, pid: int | None = None) -> Path:
    pid = os.getpid() if pid is None else pid
    return root / f".{package_name}-{pid}.tar.gz"


def checksums_path(root: Path, package_name: str = PACKAGE_NAME, pid: int | None = None) -> Path:
    pid = os.getpid() if pid is None else pid
    return root / f".{package_name}-{pid}-checksums.txt"


def scratch_dir(root: Path, pid: int | None = None) -> Path:
    pid = os.getpid() if pid is None else pid
    return root / f".extract-{pid}"
