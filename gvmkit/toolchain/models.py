"""
Data model for the install/activate pipeline.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class VersionDescriptor:
    """A resolved Go release for one platform."""

    name: str
    """Version identifier without the 'go' prefix (e.g. '1.21.5')"""

    os: str
    """GOOS the release was resolved for"""

    arch: str
    """GOARCH the release was resolved for"""

    stable: bool = True

    def __str__(self) -> str:
        return f"go{self.name} {self.os}/{self.arch}"


@dataclass(frozen=True)
class PackageDescriptor:
    """A downloadable artifact of a release."""

    file_name: str
    url: str
    checksum: Optional[str] = None
    checksum_url: Optional[str] = None
    algorithm: str = "SHA256"
    os: str = ""
    arch: str = ""
    kind: str = "archive"
    size: int = 0

    @property
    def is_verifiable(self) -> bool:
        """False when neither a checksum value nor a checksum source is known."""
        return bool(self.checksum or self.checksum_url)


@dataclass(frozen=True)
class AcquisitionResult:
    """Local archive produced by the acquisition pipeline."""

    archive_path: Path
    was_cached: bool
    verified: bool


@dataclass(frozen=True)
class ActivationResult:
    """Outcome of switching the active toolchain link."""

    link_path: Path
    target: Path
    mechanism: str
    """Name of the link strategy that succeeded ('junction' or 'symlink')"""

    probe_output: Optional[str] = None
    """Output of the installed toolchain's version report, if the probe ran"""
