"""Pre-extraction checks on a downloaded archive."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .errors import ChecksumMismatch, EmptyFile, NotAnArchive


GZIP_MAGIC = b"\x1f\x8b"


def validate(path: Path) -> int:
    """Check size and gzip magic bytes; returns the file size.

    A 200 response carrying an HTML error page passes a status check but
    fails here. Deeper corruption is only caught at extraction.
    """
    size = path.stat().st_size
    if size == 0:
        raise EmptyFile(str(path))

    with path.open("rb") as fh:
        head = fh.read(len(GZIP_MAGIC))
    if head != GZIP_MAGIC:
        raise NotAnArchive(str(path), head, size)
    return size


def parse_checksums(path: Path) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        parts = line.strip().split()
        if len(parts) >= 2:
            out[parts[-1].lstrip("*")] = parts[0]
    return out


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(archive_path: Path, archive_name: str, checksums_path: Path) -> None:
    """Compare against the published entry; a missing entry passes."""
    checksums = parse_checksums(checksums_path)
    expected = checksums.get(archive_name)
    if not expected:
        return
    digest = sha256_file(archive_path)
    if digest.lower() != expected.lower():
        raise ChecksumMismatch(archive_name, expected.lower(), digest)
