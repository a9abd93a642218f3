"""
Unit tests for filesystem module.
"""

import io
import os
import sys
import tarfile
import zipfile

import pytest

from gvmkit.core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
    extract_archive,
    is_relative_to,
    path_exists,
    safe_rmtree,
)


class TestPathHelpers:
    """Test path helper functions."""

    def test_is_relative_to(self, tmp_path):
        assert is_relative_to(tmp_path / "a" / "b", tmp_path)
        assert not is_relative_to(tmp_path, tmp_path / "a")

    @pytest.mark.skipif(sys.platform == "win32", reason="Symlinks need privileges")
    def test_path_exists_dangling_link(self, tmp_path):
        """Test a dangling symlink still counts as existing."""
        link = tmp_path / "link"
        link.symlink_to(tmp_path / "missing")

        assert not link.exists()
        assert path_exists(link)


class TestExtractArchive:
    """Test extract_archive function."""

    def test_extract_tar_gz(self, make_go_archive, tmp_path):
        """Test tar.gz extraction keeps the top-level directory."""
        archive = make_go_archive("1.21.5")
        dest = tmp_path / "out"

        extract_archive(archive, dest)

        assert (dest / "go" / "VERSION").read_text() == "go1.21.5\n"
        assert (dest / "go" / "bin" / "go").is_file()

    @pytest.mark.skipif(sys.platform == "win32", reason="Unix permissions")
    def test_extract_zip_restores_executable_bit(self, make_go_archive, tmp_path):
        """Test zip extraction restores Unix mode bits."""
        archive = make_go_archive("1.21.5", fmt="zip")
        dest = tmp_path / "out"

        extract_archive(archive, dest)

        assert os.access(dest / "go" / "bin" / "go", os.X_OK)

    def test_missing_archive(self, tmp_path):
        with pytest.raises(ArchiveExtractionError, match="Archive not found"):
            extract_archive(tmp_path / "missing.tar.gz", tmp_path / "out")

    def test_unsupported_format(self, tmp_path):
        archive = tmp_path / "go.rar"
        archive.write_bytes(b"rar")

        with pytest.raises(UnsupportedArchiveFormat):
            extract_archive(archive, tmp_path / "out")

    def test_corrupt_archive(self, tmp_path):
        """Test a truncated archive raises ArchiveExtractionError."""
        archive = tmp_path / "go.tar.gz"
        archive.write_bytes(b"\x1f\x8b not really gzip")

        with pytest.raises(ArchiveExtractionError):
            extract_archive(archive, tmp_path / "out")

    def test_tar_traversal_blocked(self, tmp_path):
        """Test members escaping the destination are rejected."""
        archive = tmp_path / "evil.tar.gz"
        with tarfile.open(archive, "w:gz") as tar:
            info = tarfile.TarInfo("../escaped.txt")
            info.size = 4
            tar.addfile(info, io.BytesIO(b"evil"))

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, tmp_path / "out")

        assert not (tmp_path / "escaped.txt").exists()

    def test_zip_traversal_blocked(self, tmp_path):
        archive = tmp_path / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../escaped.txt", b"evil")

        with pytest.raises(InsecureArchiveError):
            extract_archive(archive, tmp_path / "out")


class TestSafeRmtree:
    """Test safe_rmtree function."""

    def test_remove_tree(self, tmp_path):
        target = tmp_path / "tree"
        (target / "sub").mkdir(parents=True)
        (target / "sub" / "file.txt").write_text("x")

        assert safe_rmtree(target) is True
        assert not target.exists()

    def test_missing_path(self, tmp_path):
        """Test a missing path is not an error."""
        assert safe_rmtree(tmp_path / "missing") is False

    def test_outside_prefix_rejected(self, tmp_path):
        target = tmp_path / "outside"
        target.mkdir()

        with pytest.raises(ValueError, match="not under required prefix"):
            safe_rmtree(target, require_prefix=tmp_path / "inside")

        assert target.exists()

    def test_file_rejected(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")

        with pytest.raises(FilesystemError, match="not a directory"):
            safe_rmtree(path)

    @pytest.mark.skipif(sys.platform == "win32", reason="Symlinks need privileges")
    def test_symlink_rejected(self, tmp_path):
        """Test a symlink is never followed."""
        real = tmp_path / "real"
        real.mkdir()
        (real / "keep.txt").write_text("x")
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        with pytest.raises(FilesystemError):
            safe_rmtree(link)

        assert (real / "keep.txt").exists()
