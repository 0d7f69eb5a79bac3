from __future__ import annotations

import io
import sys
import tarfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
for rel in ("packages/core", "installers/bootstrap", "apps/launcher"):
    path = str(ROOT / rel)
    if path not in sys.path:
        sys.path.insert(0, path)

from tunny_core.logging_setup import reset_logging  # noqa: E402


def build_archive(dest: Path, members: dict[str, bytes]) -> Path:
    """Write a .tar.gz at ``dest`` holding ``members`` (name -> content)."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(dest, mode="w:gz") as tf:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return dest


@pytest.fixture
def make_archive(tmp_path):
    def _make(members: dict[str, bytes], name: str = "release.tar.gz") -> Path:
        return build_archive(tmp_path / "archives" / name, members)

    return _make


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
