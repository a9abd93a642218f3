"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import pytest
import requests
import responses
from unittest.mock import patch

from gvmkit.core.download import (
    DownloadError,
    DownloadProgress,
    download_file,
    fetch_text,
    format_progress,
)

ARCHIVE_URL = "https://go.dev/dl/go1.21.5.linux-amd64.tar.gz"


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_download_writes_exact_destination(self, tmp_path):
        """Test file is written to exactly the requested path."""
        body = b"archive bytes" * 100
        responses.add(responses.GET, ARCHIVE_URL, body=body, status=200)

        dest = tmp_path / "downloads" / "go1.21.5.linux-amd64.tar.gz"
        result = download_file(ARCHIVE_URL, dest)

        assert result == dest
        assert dest.read_bytes() == body
        assert list(dest.parent.iterdir()) == [dest]

    @responses.activate
    def test_download_reports_progress(self, tmp_path):
        """Test progress callback receives the final byte count."""
        body = b"x" * 20000
        responses.add(
            responses.GET,
            ARCHIVE_URL,
            body=body,
            status=200,
            headers={"content-length": str(len(body))},
        )

        updates = []
        download_file(ARCHIVE_URL, tmp_path / "a.tar.gz", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(body)
        assert updates[-1].percentage == pytest.approx(100.0)

    @responses.activate
    def test_download_unknown_size_reports_final_update(self, tmp_path):
        """Test a response without content-length still ends with an update."""
        responses.add(responses.GET, ARCHIVE_URL, body=b"abc", status=200)

        updates = []
        download_file(ARCHIVE_URL, tmp_path / "a.tar.gz", progress_callback=updates.append)

        assert updates[-1].bytes_downloaded == 3
        assert updates[-1].percentage == 0

    @responses.activate
    def test_http_error_raises_and_leaves_no_file(self, tmp_path):
        """Test HTTP error raises DownloadError and removes partial output."""
        responses.add(responses.GET, ARCHIVE_URL, status=404)

        dest = tmp_path / "a.tar.gz"
        with pytest.raises(DownloadError, match="Failed to download"):
            download_file(ARCHIVE_URL, dest)

        assert not dest.exists()

    @responses.activate
    def test_connection_error_is_not_retried(self, tmp_path):
        """Test a connection failure is reported after a single attempt."""
        responses.add(
            responses.GET,
            ARCHIVE_URL,
            body=requests.exceptions.ConnectionError("connection refused"),
        )

        with pytest.raises(DownloadError):
            download_file(ARCHIVE_URL, tmp_path / "a.tar.gz")

        assert len(responses.calls) == 1

    def test_interrupted_write_removes_partial_file(self, tmp_path):
        """Test partial file is removed when the transfer is interrupted."""
        dest = tmp_path / "a.tar.gz"

        def fake_transfer(url, destination, progress_callback, timeout):
            destination.write_bytes(b"partial")
            raise KeyboardInterrupt()

        with patch(
            "gvmkit.core.download._download_with_progress", side_effect=fake_transfer
        ):
            with pytest.raises(KeyboardInterrupt):
                download_file(ARCHIVE_URL, dest)

        assert not dest.exists()

    def test_empty_url_rejected(self, tmp_path):
        """Test empty URL raises ValueError."""
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "a.tar.gz")


class TestFetchText:
    """Test fetch_text function."""

    @responses.activate
    def test_fetch_text(self):
        """Test small text resource is returned."""
        responses.add(
            responses.GET, ARCHIVE_URL + ".sha256", body="abc123\n", status=200
        )

        assert fetch_text(ARCHIVE_URL + ".sha256") == "abc123\n"

    @responses.activate
    def test_fetch_text_failure(self):
        """Test HTTP error raises DownloadError."""
        responses.add(responses.GET, ARCHIVE_URL + ".sha256", status=500)

        with pytest.raises(DownloadError):
            fetch_text(ARCHIVE_URL + ".sha256")


class TestFormatProgress:
    """Test format_progress function."""

    def test_known_size(self):
        """Test formatting with a known total size."""
        progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)

        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s"

    def test_unknown_size(self):
        """Test formatting without a total size."""
        progress = DownloadProgress(1048576, 1048576, 0, 1048576, 0)

        assert format_progress(progress) == "1.0 MB at 1.0 MB/s"
