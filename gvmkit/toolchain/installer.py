"""
Installation of verified archives into the version tree.

Every Go archive extracts to a fixed top-level 'go/' directory. Extraction
happens under that unqualified name and the result is promoted to
'versions/<version>' with a single rename, so a version directory is either
complete or absent.
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from gvmkit.core.directory import HomeLayout
from gvmkit.core.exceptions import AlreadyInstalledError, ExtractionFailedError
from gvmkit.core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    extract_archive,
    safe_rmtree,
)

logger = logging.getLogger(__name__)

Extractor = Callable[[Path, Path], None]


class InstallationManager:
    """
    Extracts archives and promotes them into the version tree.

    Example:
        >>> manager = InstallationManager(HomeLayout(Path.home() / ".gvmkit"))
        >>> install_dir = manager.install("1.21.5", archive_path)
    """

    def __init__(self, layout: HomeLayout, extractor: Optional[Extractor] = None):
        self.layout = layout
        self.extractor = extractor or extract_archive

    @property
    def versions_dir(self) -> Path:
        return self.layout.versions_dir

    def version_dir(self, version: str) -> Path:
        return self.layout.version_dir(version)

    def is_valid_name(self, version: str) -> bool:
        """
        Whether a version identifier names a single entry of the version tree.

        Empty names, path components and the extraction staging name never
        name an installed version.
        """
        if version in ("", ".", "..", self.layout.staging_dir.name):
            return False
        if "/" in version or "\\" in version:
            return False
        return self.version_dir(version).parent == self.versions_dir

    def is_installed(self, version: str) -> bool:
        """A version is installed if and only if its directory exists."""
        return self.is_valid_name(version) and self.version_dir(version).is_dir()

    def installed_versions(self) -> List[str]:
        """Installed version identifiers, sorted by name."""
        if not self.versions_dir.is_dir():
            return []
        staging = self.layout.staging_dir.name
        return sorted(
            entry.name
            for entry in self.versions_dir.iterdir()
            if entry.is_dir() and entry.name != staging
        )

    def ensure_not_installed(self, version: str) -> None:
        """
        Raises:
            AlreadyInstalledError: If the version directory exists
        """
        if self.is_installed(version):
            raise AlreadyInstalledError(version)

    def install(self, version: str, archive_path: Path) -> Path:
        """
        Extract an archive and promote it to the version directory.

        Args:
            version: Version identifier naming the final directory
            archive_path: Verified archive

        Returns:
            Path to the InstalledVersionDirectory

        Raises:
            AlreadyInstalledError: If the version is already installed
            ExtractionFailedError: If the name is invalid or extraction or
                promotion fails
        """
        if not self.is_valid_name(version):
            raise ExtractionFailedError(f"Invalid version name: {version!r}")
        self.ensure_not_installed(version)

        target = self.version_dir(version)
        staging = self.layout.staging_dir

        # Clean up legacy files
        self._remove_staging(staging)

        logger.info(f"Extracting {archive_path.name}")
        try:
            self.versions_dir.mkdir(parents=True, exist_ok=True)
            self.extractor(archive_path, self.versions_dir)
        except (ArchiveExtractionError, OSError) as e:
            self._discard_partial(staging)
            raise ExtractionFailedError(f"Failed to extract {archive_path}: {e}") from e

        if not staging.is_dir():
            raise ExtractionFailedError(
                f"Archive {archive_path.name} did not contain a "
                f"'{staging.name}/' directory"
            )

        try:
            os.rename(staging, target)
        except OSError as e:
            self._discard_partial(staging)
            raise ExtractionFailedError(
                f"Failed to promote {staging} to {target}: {e}"
            ) from e

        logger.info(f"Installed go{version} to {target}")
        return target

    def _remove_staging(self, staging: Path) -> None:
        try:
            if safe_rmtree(staging, require_prefix=self.versions_dir):
                logger.debug(f"Removed stale extraction directory: {staging}")
        except FilesystemError as e:
            raise ExtractionFailedError(
                f"Failed to remove stale extraction directory {staging}: {e}"
            ) from e

    def _discard_partial(self, staging: Path) -> None:
        try:
            safe_rmtree(staging, require_prefix=self.versions_dir)
        except FilesystemError as e:
            logger.warning(f"Failed to remove partial extraction {staging}: {e}")
