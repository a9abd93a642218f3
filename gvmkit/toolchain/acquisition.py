"""
Archive acquisition: cache lookup, download and integrity verification.

The pipeline guarantees that a cached archive which fails verification never
survives for a later run: a checksum mismatch deletes the cache file before
the error is raised.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from gvmkit.core.download import (
    DownloadError,
    ProgressCallback,
    download_file,
    fetch_text,
)
from gvmkit.core.exceptions import (
    ChecksumMismatchError,
    ChecksumUnverifiableError,
    DownloadFailedError,
    UnsupportedChecksumAlgorithmError,
)
from gvmkit.core.verification import (
    HashFormatError,
    compute_file_hash,
    hashes_match,
    parse_checksum_text,
)
from gvmkit.toolchain.models import (
    AcquisitionResult,
    PackageDescriptor,
    VersionDescriptor,
)

logger = logging.getLogger(__name__)

Downloader = Callable[[str, Path, Optional[ProgressCallback]], Path]
ChecksumFetcher = Callable[[str], str]


def cache_path_for(
    downloads_dir: Path, version: str, os_name: str, arch: str, extension: str
) -> Path:
    """
    Deterministic cache location for an archive.

    Example:
        >>> cache_path_for(Path("dl"), "1.21.5", "linux", "amd64", "tar.gz")
        PosixPath('dl/go1.21.5.linux-amd64.tar.gz')
    """
    return Path(downloads_dir) / f"go{version}.{os_name}-{arch}.{extension}"


class ConfirmationStrategy(ABC):
    """Obtains an explicit yes/no decision from the user."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        pass


class StaticConfirmation(ConfirmationStrategy):
    """Returns a fixed answer (scripted use and tests)."""

    def __init__(self, answer: bool):
        self.answer = answer

    def confirm(self, message: str) -> bool:
        logger.debug(f"{message} -> {'yes' if self.answer else 'no'}")
        return self.answer


def _default_downloader(timeout: int) -> Downloader:
    def _download(
        url: str, destination: Path, progress: Optional[ProgressCallback]
    ) -> Path:
        return download_file(url, destination, progress_callback=progress, timeout=timeout)

    return _download


class AcquisitionPipeline:
    """
    Produces a verified (or knowingly unverified) local archive.

    Example:
        >>> pipeline = AcquisitionPipeline(layout.downloads_dir)
        >>> result = pipeline.acquire(version, package, extension="tar.gz")
        >>> print(result.archive_path)
    """

    def __init__(
        self,
        downloads_dir: Path,
        downloader: Optional[Downloader] = None,
        checksum_fetcher: Optional[ChecksumFetcher] = None,
        confirmation: Optional[ConfirmationStrategy] = None,
        progress_callback: Optional[ProgressCallback] = None,
        timeout: int = 30,
    ):
        self.downloads_dir = Path(downloads_dir)
        self.downloader = downloader or _default_downloader(timeout)
        self.checksum_fetcher = checksum_fetcher or (
            lambda url: fetch_text(url, timeout=timeout)
        )
        self.confirmation = confirmation
        self.progress_callback = progress_callback

    def cache_path(self, version: VersionDescriptor, extension: str) -> Path:
        return cache_path_for(
            self.downloads_dir, version.name, version.os, version.arch, extension
        )

    def acquire(
        self,
        version: VersionDescriptor,
        package: PackageDescriptor,
        extension: str,
        skip_checksum: bool = False,
        on_verify: Optional[Callable[[], None]] = None,
    ) -> Optional[AcquisitionResult]:
        """
        Acquire the archive for a selected package.

        Args:
            version: Resolved version
            package: Selected package
            extension: Archive extension used for the cache name
            skip_checksum: Bypass verification unconditionally
            on_verify: Called once verification of the archive starts

        Returns:
            AcquisitionResult, or None if the user declined to continue with
            an unverifiable package

        Raises:
            ChecksumUnverifiableError: Package is unverifiable and no
                confirmation capability is available
            DownloadFailedError: Archive or checksum source could not be fetched
            ChecksumMismatchError: Digest mismatch (cache file removed)
        """
        if not skip_checksum and not package.is_verifiable:
            if self.confirmation is None:
                raise ChecksumUnverifiableError(package.file_name)
            proceed = self.confirmation.confirm(
                "Checksum file not found, do you want to continue?"
            )
            if not proceed:
                logger.info(f"Declined to install unverified package {package.file_name}")
                return None
            logger.warning(f"Continuing without checksum for {package.file_name}")
            skip_checksum = True

        archive_path = self.cache_path(version, extension)
        was_cached = archive_path.exists()

        if was_cached:
            logger.info(f"Using cached archive: {archive_path}")
        else:
            self._download(package, archive_path)

        if skip_checksum:
            logger.debug("Checksum verification skipped")
            return AcquisitionResult(archive_path, was_cached, verified=False)

        if on_verify is not None:
            on_verify()
        self.verify(package, archive_path)
        return AcquisitionResult(archive_path, was_cached, verified=True)

    def _download(self, package: PackageDescriptor, archive_path: Path) -> None:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.downloader(package.url, archive_path, self.progress_callback)
        except DownloadError as e:
            raise DownloadFailedError(str(e)) from e
        except OSError as e:
            archive_path.unlink(missing_ok=True)
            raise DownloadFailedError(f"Failed to download {package.url}: {e}") from e

    def expected_checksum(self, package: PackageDescriptor) -> str:
        """
        Declared checksum, fetched from the checksum source if needed.

        Raises:
            DownloadFailedError: If the checksum source cannot be read
        """
        if package.checksum:
            return package.checksum.strip()

        logger.info(f"Fetching checksum from {package.checksum_url}")
        try:
            text = self.checksum_fetcher(package.checksum_url)
            return parse_checksum_text(text, package.file_name)
        except (DownloadError, HashFormatError) as e:
            raise DownloadFailedError(
                f"Failed to obtain checksum from {package.checksum_url}: {e}"
            ) from e

    def verify(self, package: PackageDescriptor, archive_path: Path) -> None:
        """
        Verify an archive against the package checksum.

        Raises:
            ChecksumMismatchError: On mismatch; the archive is deleted first
            UnsupportedChecksumAlgorithmError: If the algorithm cannot be
                computed; the archive is deleted first
        """
        expected = self.expected_checksum(package)

        logger.info(f"Computing checksum with {package.algorithm}")
        try:
            actual = compute_file_hash(archive_path, package.algorithm)
        except ValueError as e:
            archive_path.unlink(missing_ok=True)
            logger.debug(f"Removed unverifiable archive: {archive_path}")
            raise UnsupportedChecksumAlgorithmError(package.algorithm) from e

        if not hashes_match(actual, expected):
            archive_path.unlink(missing_ok=True)
            logger.debug(f"Removed corrupt archive: {archive_path}")
            raise ChecksumMismatchError(
                archive_path, package.algorithm, expected.lower(), actual
            )

        logger.info("Checksums matched")
