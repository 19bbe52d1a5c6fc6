"""
Operating system and architecture helpers.

Maps user or host OS names onto the three supported operating systems and
derives the snapshot bucket segments for an OS/arch pair.
"""

import platform
import sys
from typing import Optional

from chromium_fetcher.constants import OS_ALIASES, OS_TO_PLATFORM, STORE_OS_ARCHS
from chromium_fetcher.exceptions import ConfigValidationError

from .interfaces import OSSetting

_OS_SETTINGS = {
    ("linux", "x64"): OSSetting(url="Linux_x64", filename="linux"),
    ("linux", "x86"): OSSetting(url="Linux", filename="linux"),
    ("win", "x64"): OSSetting(url="Win_x64", filename="win"),
    ("win", "x86"): OSSetting(url="Win", filename="win"),
    ("mac", "x64"): OSSetting(url="Mac", filename="mac"),
    ("mac", "arm"): OSSetting(url="Mac_Arm", filename="mac"),
}


def map_os(name: str) -> str:
    """
    Normalize an OS name ("linux", "win", "win32", "mac", "darwin").

    Raises:
        ConfigValidationError: For any other name.
    """
    normalized = OS_ALIASES.get(str(name).strip().lower())
    if normalized is None:
        raise ConfigValidationError(f"Unknown OS: {name}")
    return normalized


def map_os_to_platform(os_name: str) -> str:
    """Release dashboard platform name for a normalized OS."""
    return OS_TO_PLATFORM.get(os_name, "Linux")


def validate_arch(os_name: str, arch: str) -> str:
    archs = STORE_OS_ARCHS.get(os_name, ())
    if arch not in archs:
        raise ConfigValidationError(
            f"Unsupported architecture '{arch}' for {os_name}. "
            f"Valid values: {', '.join(archs)}"
        )
    return arch


def detect_os_setting(os_name: str, arch: str) -> OSSetting:
    """
    Return the snapshot bucket segments for an OS/arch pair.

    Raises:
        ConfigValidationError: If the pair is not supported.
    """
    setting = _OS_SETTINGS.get((os_name, arch))
    if setting is None:
        raise ConfigValidationError(f"Unsupported operating system: {os_name}/{arch}")
    return setting


def detect_host_os() -> str:
    return map_os(sys.platform)


def detect_host_arch(os_name: Optional[str] = None) -> str:
    """Default architecture for the host; only macOS on Apple silicon differs from x64."""
    machine = platform.machine().lower()
    if (os_name or detect_host_os()) == "mac" and machine in ("arm64", "aarch64"):
        return "arm"
    return "x64"
