"""Normalize the running machine to a ``(Platform, Arch)`` pair."""

from __future__ import annotations

import platform as _platform

from formulary.errors import UnsupportedPlatform
from formulary.models.descriptor import Arch, Platform

_SYSTEMS: dict[str, Platform] = {
    "darwin": Platform.DARWIN,
    "linux": Platform.LINUX,
    "windows": Platform.WINDOWS,
}

_MACHINES: dict[str, Arch] = {
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "x64": Arch.X86_64,
    "arm64": Arch.AARCH64,
    "aarch64": Arch.AARCH64,
    "armv8": Arch.AARCH64,
    "armv8l": Arch.AARCH64,
}


def normalize_platform(system: str) -> Platform:
    """Map a ``platform.system()`` value to a ``Platform``."""
    try:
        return _SYSTEMS[system.strip().lower()]
    except KeyError:
        raise UnsupportedPlatform(f"Unsupported operating system: {system!r}") from None


def normalize_arch(machine: str) -> Arch:
    """Map a ``platform.machine()`` value to an ``Arch``."""
    try:
        return _MACHINES[machine.strip().lower()]
    except KeyError:
        raise UnsupportedPlatform(f"Unsupported CPU architecture: {machine!r}") from None


def detect_platform() -> tuple[Platform, Arch]:
    """Return the normalized platform and architecture of this machine."""
    return normalize_platform(_platform.system()), normalize_arch(_platform.machine())
