from __future__ import annotations

import os
import shutil
import sys
import tarfile

import pytest

from tunny_bootstrap.errors import BinaryNotFound, ExtractionFailed
from tunny_bootstrap.installer import find_binary, install


posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permission bits")


def _setup(tmp_path, make_archive, members):
    root = tmp_path / "bin"
    root.mkdir()
    source = make_archive(members)
    archive = root / ".tunny-1.tar.gz"
    shutil.copyfile(source, archive)
    return root, archive, root / ".extract-1"


def test_binary_at_archive_root(tmp_path, make_archive) -> None:
    root, archive, scratch = _setup(tmp_path, make_archive, {"tunny": b"#!/bin/sh\necho hi\n", "README.md": b"x"})

    installed = install(archive, "tunny", root / "tunny", scratch=scratch)
    assert installed.path == root / "tunny"
    assert installed.path.read_bytes() == b"#!/bin/sh\necho hi\n"
    assert sorted(p.name for p in root.iterdir()) == ["tunny"]


def test_binary_one_level_deep(tmp_path, make_archive) -> None:
    root, archive, scratch = _setup(
        tmp_path, make_archive, {"tunny_1.2.0_linux_amd64/tunny": b"nested", "tunny_1.2.0_linux_amd64/LICENSE": b"l"}
    )

    installed = install(archive, "tunny", root / "tunny", scratch=scratch)
    assert installed.path.read_bytes() == b"nested"


def test_binary_two_levels_deep_is_not_found(tmp_path, make_archive) -> None:
    root, archive, scratch = _setup(tmp_path, make_archive, {"dist/linux/tunny": b"deep"})

    with pytest.raises(BinaryNotFound) as excinfo:
        install(archive, "tunny", root / "tunny", scratch=scratch)
    assert "tunny" in str(excinfo.value)
    assert not scratch.exists()
    assert not archive.exists()
    assert not (root / "tunny").exists()


def test_root_match_wins_over_nested(tmp_path) -> None:
    scratch = tmp_path / "scratch"
    (scratch / "a").mkdir(parents=True)
    (scratch / "a" / "tunny").write_bytes(b"nested")
    (scratch / "tunny").write_bytes(b"root")

    assert find_binary(scratch, "tunny") == scratch / "tunny"


def test_directory_named_like_binary_is_skipped(tmp_path) -> None:
    scratch = tmp_path / "scratch"
    (scratch / "tunny" / "tunny").mkdir(parents=True)

    with pytest.raises(BinaryNotFound):
        find_binary(scratch, "tunny")


@posix_only
def test_symlinked_binary_is_not_installed(tmp_path) -> None:
    scratch = tmp_path / "scratch"
    (scratch / "dist").mkdir(parents=True)
    (scratch / "real").write_bytes(b"target")
    (scratch / "tunny").symlink_to(scratch / "real")
    (scratch / "dist" / "tunny").symlink_to(scratch / "real")

    with pytest.raises(BinaryNotFound):
        find_binary(scratch, "tunny")


def test_missing_binary_keeps_previous_install(tmp_path, make_archive) -> None:
    root, archive, scratch = _setup(tmp_path, make_archive, {"other": b"x"})
    previous = root / "tunny"
    previous.write_bytes(b"old build")

    with pytest.raises(BinaryNotFound):
        install(archive, "tunny", previous, scratch=scratch)
    assert previous.read_bytes() == b"old build"
    assert sorted(p.name for p in root.iterdir()) == ["tunny"]


def test_corrupt_archive_is_extraction_failure(tmp_path) -> None:
    root = tmp_path / "bin"
    root.mkdir()
    archive = root / ".tunny-1.tar.gz"
    archive.write_bytes(b"\x1f\x8b" + b"\x00" * 64)
    scratch = root / ".extract-1"

    with pytest.raises(ExtractionFailed):
        install(archive, "tunny", root / "tunny", scratch=scratch)
    assert list(root.iterdir()) == []


def test_stale_scratch_is_cleared(tmp_path, make_archive) -> None:
    root, archive, scratch = _setup(tmp_path, make_archive, {"bin/other": b"x"})
    (scratch / "bin").mkdir(parents=True)
    (scratch / "bin" / "tunny").write_bytes(b"left over from an earlier run")

    with pytest.raises(BinaryNotFound):
        install(archive, "tunny", root / "tunny", scratch=scratch)


def test_install_is_idempotent(tmp_path, make_archive) -> None:
    source = make_archive({"tunny": b"\x7fELF-build-1.2.0"})
    root = tmp_path / "bin"
    root.mkdir()
    final = root / "tunny"

    contents = []
    for _ in range(2):
        archive = root / ".tunny-1.tar.gz"
        shutil.copyfile(source, archive)
        install(archive, "tunny", final, scratch=root / ".extract-1")
        contents.append(final.read_bytes())
        assert sorted(p.name for p in root.iterdir()) == ["tunny"]

    assert contents[0] == contents[1] == b"\x7fELF-build-1.2.0"


@posix_only
def test_installed_binary_is_executable(tmp_path, make_archive) -> None:
    root = tmp_path / "bin"
    root.mkdir()
    archive = make_archive({"tunny": b"#!/bin/sh\n"})

    plain = root / ".tunny-1.tar.gz"
    with tarfile.open(archive) as src, tarfile.open(plain, "w:gz") as dst:
        for member in src.getmembers():
            member.mode = 0o644
            dst.addfile(member, src.extractfile(member))

    installed = install(plain, "tunny", root / "tunny", scratch=root / ".extract-1")
    assert os.access(installed.path, os.X_OK)
    assert installed.permissions & 0o111 == 0o111


def test_default_scratch_lives_next_to_final_path(tmp_path, make_archive) -> None:
    root, archive, _ = _setup(tmp_path, make_archive, {"tunny": b"x"})

    install(archive, "tunny", root / "tunny")
    assert sorted(p.name for p in root.iterdir()) == ["tunny"]
