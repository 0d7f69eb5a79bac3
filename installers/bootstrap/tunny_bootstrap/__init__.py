"""Provisioning pipeline for the native tunny binary."""

from .errors import (
    BinaryNotFound,
    ChecksumMismatch,
    DownloadFailed,
    EmptyFile,
    ExtractionFailed,
    HttpStatus,
    InstallFailed,
    NotAnArchive,
    ProvisionError,
    RedirectLoop,
    ReleaseNotFound,
    UnsupportedPlatform,
)
from .fetcher import DownloadArtifact, fetch
from .installer import InstalledBinary, find_binary, install
from .integrity import validate
from .resolver import ReleaseDescriptor, TargetSpec, describe_release, resolve, resolve_target
from .service import ProvisionOutcome, ProvisionResult, ProvisionRun, Stage, execute, provision

__all__ = [
    "BinaryNotFound",
    "ChecksumMismatch",
    "DownloadArtifact",
    "DownloadFailed",
    "EmptyFile",
    "ExtractionFailed",
    "HttpStatus",
    "InstallFailed",
    "InstalledBinary",
    "NotAnArchive",
    "ProvisionError",
    "ProvisionOutcome",
    "ProvisionResult",
    "ProvisionRun",
    "RedirectLoop",
    "ReleaseDescriptor",
    "ReleaseNotFound",
    "Stage",
    "TargetSpec",
    "UnsupportedPlatform",
    "describe_release",
    "execute",
    "fetch",
    "find_binary",
    "install",
    "provision",
    "resolve",
    "resolve_target",
    "validate",
]
