"""
Core functionality for gvmkit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    HomeLayout,
    get_default_home_dir,
    DirectoryError,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .settings import (
    Settings,
    load_settings,
)

from .exceptions import (
    GvmKitError,
    CatalogError,
    VersionNotFoundError,
    NoCompatiblePackageError,
    SelectionError,
    AlreadyInstalledError,
    VersionNotInstalledError,
    DownloadFailedError,
    ChecksumUnverifiableError,
    ChecksumMismatchError,
    UnsupportedChecksumAlgorithmError,
    ExtractionFailedError,
    ActivationFailedError,
)

__all__ = [
    "HomeLayout",
    "get_default_home_dir",
    "DirectoryError",
    "LockManager",
    "LockTimeout",
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "Settings",
    "load_settings",
    "GvmKitError",
    "CatalogError",
    "VersionNotFoundError",
    "NoCompatiblePackageError",
    "SelectionError",
    "AlreadyInstalledError",
    "VersionNotInstalledError",
    "DownloadFailedError",
    "ChecksumUnverifiableError",
    "ChecksumMismatchError",
    "UnsupportedChecksumAlgorithmError",
    "ExtractionFailedError",
    "ActivationFailedError",
]
