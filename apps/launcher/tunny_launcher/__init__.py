"""Read-only location and version of the installed tunny binary.

The binary is looked up under ``TUNNY_HOME`` or the per-OS default data
directory. An install made with ``tunny-install --install-root`` is only
found when the same directory is passed as ``root``.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Mapping

from tunny_core import paths
from tunny_core.config import installed_version


def binary_path(
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
    root: Path | None = None,
) -> Path:
    system = system or platform.system()
    return paths.binary_path(root or paths.install_root(system, environ), system)


def version() -> str:
    return installed_version()


def is_installed(
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
    root: Path | None = None,
) -> bool:
    path = binary_path(system, environ, root)
    return path.is_file() and os.access(path, os.X_OK)


__all__ = ["binary_path", "is_installed", "version"]
