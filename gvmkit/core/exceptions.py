"""
Centralized exception hierarchy for gvmkit.

Every error raised by the install/activate pipeline derives from GvmKitError,
so the CLI can convert any handled failure into a message and exit code in
one place.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class GvmKitError(Exception):
    """Base exception for all gvmkit errors."""

    pass


# ============================================================================
# Version Resolution Exceptions
# ============================================================================


class CatalogError(GvmKitError):
    """Raised when the release catalog cannot be fetched or parsed."""

    pass


class VersionNotFoundError(CatalogError):
    """Raised when no release matches the requested version."""

    def __init__(self, request: str):
        self.request = request
        super().__init__(f"No Go release matches version: {request}")


# ============================================================================
# Package Selection Exceptions
# ============================================================================


class NoCompatiblePackageError(GvmKitError):
    """Raised when a release has no archive for the current platform."""

    def __init__(self, version: str, os_name: str = "", arch: str = ""):
        self.version = version
        self.os = os_name
        self.arch = arch
        msg = f"No compatible package found for version {version}"
        if os_name and arch:
            msg += f" ({os_name}/{arch})"
        super().__init__(msg)


class SelectionError(GvmKitError):
    """Raised when the package selection strategy fails or returns a bad index."""

    pass


# ============================================================================
# Install Tree Exceptions
# ============================================================================


class AlreadyInstalledError(GvmKitError):
    """Raised when the requested version already has an install directory."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f'"{version}" version has been installed.')


class VersionNotInstalledError(GvmKitError):
    """Raised when activating a version that is not installed."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f'"{version}" version is not installed.')


# ============================================================================
# Acquisition Exceptions
# ============================================================================


class DownloadFailedError(GvmKitError):
    """Raised when an archive or checksum file cannot be downloaded."""

    pass


class ChecksumUnverifiableError(GvmKitError):
    """Raised when a package has no checksum and nobody can approve skipping it."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"Checksum not available for {file_name}")


class UnsupportedChecksumAlgorithmError(GvmKitError):
    """Raised when a package declares a hash algorithm gvmkit cannot compute."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Unsupported checksum algorithm: {algorithm}")


class ChecksumMismatchError(GvmKitError):
    """Raised when an archive digest differs from the published checksum."""

    def __init__(self, path, algorithm: str, expected: str, actual: str):
        self.path = path
        self.algorithm = algorithm
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {path}: "
            f"expected {algorithm} {expected}, got {actual}"
        )


# ============================================================================
# Installation / Activation Exceptions
# ============================================================================


class ExtractionFailedError(GvmKitError):
    """Raised when an archive cannot be extracted or promoted."""

    pass


class ActivationFailedError(GvmKitError):
    """Raised when the active toolchain link cannot be switched."""

    pass
