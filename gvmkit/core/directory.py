"""
Directory layout management for gvmkit.

Home Layout (~/.gvmkit/ or %USERPROFILE%\\.gvmkit\\, overridable with G_HOME):
    - downloads/   : Cached release archives, one file per version/platform
    - versions/    : One directory per installed Go version
    - go           : Active toolchain link (symlink or junction)
    - lock/        : Advisory lock files
    - config.yaml  : Optional user configuration
"""

import os
from dataclasses import dataclass
from pathlib import Path

HOME_ENV = "G_HOME"

# Top-level directory every Go release archive extracts to
ARCHIVE_ROOT_NAME = "go"


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


def get_default_home_dir() -> Path:
    """
    Get the gvmkit home directory.

    Returns:
        Path: $G_HOME if set, otherwise
            - Windows: %USERPROFILE%\\.gvmkit
            - Linux/macOS: ~/.gvmkit

    Raises:
        DirectoryError: If USERPROFILE is unset on Windows
    """
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()

    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine gvmkit home directory."
            )
        return Path(user_profile) / ".gvmkit"
    return Path.home() / ".gvmkit"


@dataclass(frozen=True)
class HomeLayout:
    """Well-known paths under a gvmkit home directory."""

    home: Path

    @property
    def downloads_dir(self) -> Path:
        return self.home / "downloads"

    @property
    def versions_dir(self) -> Path:
        return self.home / "versions"

    @property
    def active_link(self) -> Path:
        return self.home / "go"

    @property
    def lock_dir(self) -> Path:
        return self.home / "lock"

    @property
    def config_file(self) -> Path:
        return self.home / "config.yaml"

    def version_dir(self, version: str) -> Path:
        """InstalledVersionDirectory for a version identifier."""
        return self.versions_dir / version

    @property
    def staging_dir(self) -> Path:
        """Fixed, unqualified directory an archive extracts to."""
        return self.versions_dir / ARCHIVE_ROOT_NAME

    def ensure(self) -> "HomeLayout":
        """
        Create the home directory structure if it doesn't exist.

        Raises:
            DirectoryError: If a directory cannot be created
        """
        for path in (self.home, self.downloads_dir, self.versions_dir, self.lock_dir):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryError(f"Failed to create directory {path}: {e}") from e
        return self
