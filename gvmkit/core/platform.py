"""
Platform detection for gvmkit.

Go release archives are published per GOOS/GOARCH pair, so this module maps the
running interpreter's platform onto Go's naming ('linux', 'darwin', 'windows';
'amd64', 'arm64', '386', 'armv6l', ...).

Usage:
    from gvmkit.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.platform_string())   # e.g. 'linux-amd64'
    print(platform_info.archive_extension())  # e.g. 'tar.gz'
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information in Go's vocabulary.

    Attributes:
        os: GOOS value ('linux', 'darwin', 'windows', 'freebsd', ...)
        arch: GOARCH value ('amd64', 'arm64', '386', 'armv6l', ...)
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def platform_string(self) -> str:
        """
        Get canonical platform string.

        Example:
            >>> PlatformInfo("linux", "amd64").platform_string()
            'linux-amd64'
        """
        return f"{self.os}-{self.arch}"

    def archive_extension(self) -> str:
        """Extension of the archive package published for this platform."""
        return "zip" if self.is_windows else "tar.gz"

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Example:
        >>> platform_info = detect_platform()
        >>> print(f"Running on {platform_info}")
        Running on linux/amd64
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def clear_platform_cache() -> None:
    """Clear cached platform detection (used by tests)."""
    detect_platform.cache_clear()


def _detect_os() -> str:
    """
    Detect operating system as a GOOS value.

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "darwin"
    elif system in ("linux", "freebsd", "openbsd", "netbsd"):
        return system
    else:
        raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """Detect CPU architecture as a GOARCH value."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "amd64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine.startswith("arm"):
        # Go publishes a single 32-bit ARM archive
        return "armv6l"
    elif machine in ("ppc64le", "s390x", "riscv64", "loong64"):
        return machine
    else:
        # Return original for unknown architectures
        return machine
