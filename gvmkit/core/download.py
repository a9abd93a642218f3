"""
Network download manager with progress tracking.

This module provides streaming downloads with:
- HTTP/HTTPS downloads with TLS verification
- Progress reporting (bytes, percentage, speed, ETA)
- Timeout handling
- Removal of partially written files on failure

Failed downloads are not retried; callers decide what a failure means.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


ProgressCallback = Callable[[DownloadProgress], None]


class DownloadError(Exception):
    """Exception raised when download fails."""

    pass


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: int = 30,
) -> Path:
    """
    Stream a URL to destination, reporting progress.

    The file is written to exactly `destination`. If the transfer fails the
    partially written file is removed.

    Args:
        url: URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails
        ValueError: If URL or destination is invalid

    Example:
        >>> def on_progress(progress):
        ...     print(f"Downloaded {progress.percentage:.1f}%")
        >>>
        >>> download_file(
        ...     "https://go.dev/dl/go1.21.5.linux-amd64.tar.gz",
        ...     Path("downloads/go1.21.5.linux-amd64.tar.gz"),
        ...     progress_callback=on_progress,
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Downloading from {url}")

    try:
        _download_with_progress(url, destination, progress_callback, timeout)
    except (RequestException, OSError) as e:
        logger.error(f"Error during download: {e}")
        destination.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e
    except BaseException:
        destination.unlink(missing_ok=True)
        raise

    logger.debug(f"Download complete: {destination}")
    return destination


def _download_with_progress(
    url: str,
    destination: Path,
    progress_callback: Optional[ProgressCallback],
    timeout: int,
) -> None:
    """Perform the streaming request and write chunks to destination."""
    with requests.get(
        url, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    progress_callback(
                        _make_progress(downloaded, total_size, start_time, current_time)
                    )
                    last_progress_time = current_time

        # Always finish with a final update for unknown-size responses
        if progress_callback and total_size == 0:
            progress_callback(
                _make_progress(downloaded, total_size, start_time, time.time())
            )


def _make_progress(
    downloaded: int, total_size: int, start_time: float, current_time: float
) -> DownloadProgress:
    elapsed = current_time - start_time
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    eta = remaining / speed if speed > 0 else 0

    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=eta,
    )


def fetch_text(url: str, timeout: int = 30) -> str:
    """
    Fetch a small text resource (e.g. a published checksum file).

    Raises:
        DownloadError: If the request fails
    """
    logger.debug(f"Fetching {url}")
    try:
        response = requests.get(url, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Failed to fetch {url}: {e}") from e
    return response.text


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
