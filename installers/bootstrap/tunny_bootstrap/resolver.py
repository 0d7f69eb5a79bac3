"""Release artifact naming for OS/architecture specific archives."""

from __future__ import annotations

from dataclasses import dataclass

from tunny_core.paths import PACKAGE_NAME, binary_name

from .errors import UnsupportedPlatform


# Tokens must match the release publisher's archive names exactly.
_OS_TOKENS = {
    "linux": "linux",
    "darwin": "darwin",
    "macos": "darwin",
    "windows": "windows",
    "win32": "windows",
}

_ARCH_TOKENS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

SUPPORTED_OS = frozenset(_OS_TOKENS.values())
SUPPORTED_ARCH = frozenset(_ARCH_TOKENS.values())


@dataclass(frozen=True)
class TargetSpec:
    os_name: str
    arch: str
    version: str


@dataclass(frozen=True)
class ReleaseDescriptor:
    download_url: str
    binary_name: str
    archive_name: str
    checksums_url: str


def resolve(system: str, machine: str) -> tuple[str, str]:
    os_token = _OS_TOKENS.get(system.strip().lower())
    arch_token = _ARCH_TOKENS.get(machine.strip().lower())
    if os_token is None or arch_token is None:
        raise UnsupportedPlatform(system, machine)
    return os_token, arch_token


def normalize_version(version: str) -> str:
    v = version.strip()
    return v[1:] if v.startswith("v") else v


def resolve_target(system: str, machine: str, version: str) -> TargetSpec:
    os_name, arch = resolve(system, machine)
    return TargetSpec(os_name=os_name, arch=arch, version=normalize_version(version))


def release_base_url(template: str, version: str) -> str:
    return template.replace("{version}", version).rstrip("/")


def archive_name(target: TargetSpec, package_name: str = PACKAGE_NAME) -> str:
    return f"{package_name}_{target.version}_{target.os_name}_{target.arch}.tar.gz"


def checksums_name(target: TargetSpec, package_name: str = PACKAGE_NAME) -> str:
    return f"{package_name}_{target.version}_checksums.txt"


def describe_release(
    target: TargetSpec,
    base_url_template: str,
    package_name: str = PACKAGE_NAME,
) -> ReleaseDescriptor:
    base = release_base_url(base_url_template, target.version)
    name = archive_name(target, package_name)
    return ReleaseDescriptor(
        download_url=f"{base}/{name}",
        binary_name=binary_name(target.os_name, package_name),
        archive_name=name,
        checksums_url=f"{base}/{checksums_name(target, package_name)}",
    )
