import gzip
import hashlib
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))

from tunny_bootstrap.errors import ChecksumMismatch, EmptyFile, NotAnArchive
from tunny_bootstrap.integrity import parse_checksums, sha256_file, validate, verify_checksum


class ValidateTests(unittest.TestCase):
    def test_empty_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "a.tar.gz"
            p.write_bytes(b"")
            with self.assertRaises(EmptyFile):
                validate(p)

    def test_html_error_page(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "a.tar.gz"
            p.write_bytes(b"<!DOCTYPE html><html>Not Found</html>")
            with self.assertRaises(NotAnArchive) as ctx:
                validate(p)
            self.assertEqual(ctx.exception.head, b"<!")
            self.assertIn("bytes", str(ctx.exception))

    def test_single_byte_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "a.tar.gz"
            p.write_bytes(b"\x1f")
            with self.assertRaises(NotAnArchive):
                validate(p)

    def test_magic_bytes_are_sufficient(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "a.tar.gz"
            p.write_bytes(b"\x1f\x8bgarbage")
            self.assertEqual(validate(p), 9)

    def test_real_gzip(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "a.gz"
            p.write_bytes(gzip.compress(b"payload"))
            self.assertGreater(validate(p), 0)
            self.assertEqual(p.read_bytes()[:2], b"\x1f\x8b")


class ChecksumTests(unittest.TestCase):
    def test_parse_checksums(self):
        with tempfile.TemporaryDirectory() as tmp:
            p = Path(tmp) / "checksums.txt"
            p.write_text("abc123  tunny_1.0.0_linux_amd64.tar.gz\nfff999 *tunny_1.0.0_darwin_arm64.tar.gz\n", encoding="utf-8")
            parsed = parse_checksums(p)
            self.assertEqual(parsed["tunny_1.0.0_linux_amd64.tar.gz"], "abc123")
            self.assertEqual(parsed["tunny_1.0.0_darwin_arm64.tar.gz"], "fff999")

    def test_sha256_and_verify(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            archive = root / "download.tar.gz"
            archive.write_bytes(b"hello world")
            name = "tunny_1.0.0_linux_amd64.tar.gz"

            digest = hashlib.sha256(b"hello world").hexdigest()
            self.assertEqual(sha256_file(archive), digest)

            checksums = root / "checksums.txt"
            checksums.write_text(f"{digest.upper()}  {name}\n", encoding="utf-8")
            verify_checksum(archive, name, checksums)

            checksums.write_text(f"deadbeef  {name}\n", encoding="utf-8")
            with self.assertRaises(ChecksumMismatch):
                verify_checksum(archive, name, checksums)

    def test_missing_entry_passes(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            archive = root / "download.tar.gz"
            archive.write_bytes(b"x")
            checksums = root / "checksums.txt"
            checksums.write_text("deadbeef  other.tar.gz\n", encoding="utf-8")
            verify_checksum(archive, "tunny_1.0.0_linux_amd64.tar.gz", checksums)


if __name__ == "__main__":
    unittest.main()
