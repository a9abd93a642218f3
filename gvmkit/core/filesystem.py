"""
Cross-platform file system utilities for gvmkit.

This module provides:
- Archive extraction (tar.gz, tgz, zip) with directory traversal protection
- Safe directory removal
- Path utilities
"""

import os
import shutil
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Optional, Union

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Error Handling
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent (Path.is_relative_to for any version).

    Example:
        >>> is_relative_to(Path('/home/user/file.txt'), Path('/home'))
        True
        >>> is_relative_to(Path('/etc/file.txt'), Path('/home'))
        False
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def path_exists(path: Path) -> bool:
    """True if anything occupies path, including a dangling link."""
    return path.exists() or path.is_symlink()


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """
    Extract an archive to a destination directory.

    Supported formats:
    - .zip
    - .tar.gz, .tgz

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to
        progress_callback: Optional callback(current, total) for progress

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths

    Example:
        >>> extract_archive('go1.21.5.linux-amd64.tar.gz', '~/.gvmkit/versions')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination, progress_callback)
        elif archive_name.endswith((".tar.gz", ".tgz")):
            _extract_tar(archive_path, destination, "r:gz", progress_callback)
        else:
            raise UnsupportedArchiveFormat(
                f"Unsupported archive format: {archive_path.name}. "
                "Supported: .zip, .tar.gz, .tgz"
            )
    except (InsecureArchiveError, UnsupportedArchiveFormat):
        raise
    except Exception as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


def _extract_zip(
    archive_path: Path,
    destination: Path,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Extract a ZIP archive, restoring Unix permission bits when present."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()
        total = len(members)

        # Validate all paths first
        for member in members:
            _validate_archive_path(member.filename, destination)

        for i, member in enumerate(members):
            extracted = zf.extract(member, destination)
            mode = (member.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS:
                os.chmod(extracted, mode)
            if progress_callback:
                progress_callback(i + 1, total)


def _extract_tar(
    archive_path: Path,
    destination: Path,
    mode: str,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        members = tar.getmembers()
        total = len(members)

        # Validate all paths first
        for member in members:
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        # For older Python, we've already validated paths above
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)

        if progress_callback:
            progress_callback(total, total)


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> bool:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Returns:
        True if something was removed, False if path did not exist

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('~/.gvmkit/versions/go', require_prefix='~/.gvmkit')
    """
    path = Path(path).absolute()

    # Safety check: require path to be under specified prefix
    if require_prefix is not None:
        require_prefix = Path(require_prefix).absolute()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path_exists(path):
        return False

    if path.is_symlink() or not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, target, exc):
                """Error handler for Windows read-only files."""
                if not os.access(target, os.W_OK):
                    os.chmod(target, 0o777)
                    func(target)
                else:
                    raise exc[1]

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e

    return True
