"""Terminal failures of a provisioning run."""

from __future__ import annotations


class ProvisionError(RuntimeError):
    """Base class; ``stage`` is filled in by the orchestrator."""

    stage: str | None = None


class UnsupportedPlatform(ProvisionError):
    def __init__(self, system: str, machine: str) -> None:
        super().__init__(f"Unsupported platform: {system} {machine}")
        self.system = system
        self.machine = machine


class DownloadFailed(ProvisionError):
    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Download failed for {url}: {cause}")
        self.url = url
        self.cause = cause


class RedirectLoop(ProvisionError):
    def __init__(self, url: str, hops: int) -> None:
        super().__init__(f"Too many redirects ({hops}) while fetching {url}")
        self.url = url
        self.hops = hops


class HttpStatus(ProvisionError):
    def __init__(self, code: int, url: str, message: str | None = None) -> None:
        super().__init__(message or f"HTTP {code} for {url}")
        self.code = code
        self.url = url


class ReleaseNotFound(HttpStatus):
    def __init__(self, url: str) -> None:
        super().__init__(404, url, f"release not found for this version: {url}")


class EmptyFile(ProvisionError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Downloaded archive is empty (0 bytes): {path}")
        self.path = path


class NotAnArchive(ProvisionError):
    def __init__(self, path: str, head: bytes, size: int) -> None:
        super().__init__(
            f"Downloaded file is not a gzip archive (starts with {head.hex() or 'nothing'}, {size} bytes): {path}"
        )
        self.path = path
        self.head = head
        self.size = size


class ChecksumMismatch(ProvisionError):
    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(f"Checksum mismatch for {name}: expected {expected}, got {actual}")
        self.name = name
        self.expected = expected
        self.actual = actual


class ExtractionFailed(ProvisionError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Extraction failed for {path}: {cause}")
        self.path = path
        self.cause = cause


class BinaryNotFound(ProvisionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Binary {name!r} not found in archive")
        self.name = name


class InstallFailed(ProvisionError):
    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Could not replace {path}: {cause}")
        self.path = path
        self.cause = cause
