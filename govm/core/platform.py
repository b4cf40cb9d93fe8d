"""
Platform detection for govm.

Maps the host operating system and CPU identifier onto the tags used in Go
distribution archive names (e.g. 'linux-amd64', 'darwin-arm64').

Usage:
    from govm.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.platform_string())
"""

import functools
import platform
from dataclasses import dataclass
from typing import Optional

from .exceptions import UnsupportedArchitectureError

# Host machine identifier -> Go distribution architecture tag
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "armv6l",
    "armv7l": "armv6l",
    "i386": "386",
    "i686": "386",
}

_OS_MAP = {
    "linux": "linux",
    "darwin": "darwin",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information relevant to Go archive selection.

    Attributes:
        os: Go OS tag ('linux', 'darwin')
        arch: Go architecture tag ('amd64', 'arm64', 'armv6l', '386')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get the platform string used in archive names.

        Example:
            >>> PlatformInfo('linux', 'amd64').platform_string()
            'linux-amd64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def resolve_architecture(machine: Optional[str] = None) -> str:
    """
    Map a host CPU identifier to a Go architecture tag.

    Args:
        machine: CPU identifier as reported by ``uname -m`` (detected if None)

    Returns:
        Go architecture tag

    Raises:
        UnsupportedArchitectureError: If no Go distribution exists for the CPU
    """
    if machine is None:
        machine = platform.machine()

    arch = _ARCH_MAP.get(machine.lower())
    if arch is None:
        raise UnsupportedArchitectureError(machine)
    return arch


def resolve_os(system: Optional[str] = None) -> str:
    """Map the host operating system name to a Go OS tag."""
    if system is None:
        system = platform.system()

    os_tag = _OS_MAP.get(system.lower())
    if os_tag is None:
        raise UnsupportedArchitectureError(system)
    return os_tag


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Raises:
        UnsupportedArchitectureError: If the host is not supported
    """
    return PlatformInfo(os=resolve_os(), arch=resolve_architecture())


def clear_platform_cache():
    """Clear the cached platform detection result (used by tests)."""
    detect_platform.cache_clear()
