"""
Pytest configuration and shared fixtures for gvmkit tests.
"""

import hashlib
import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import pytest

from gvmkit.core.directory import HomeLayout
from gvmkit.core.platform import PlatformInfo
from gvmkit.toolchain.models import PackageDescriptor, VersionDescriptor


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Helpers
# ============================================================================


def sha256_of(path: Path) -> str:
    """SHA256 hex digest of a file."""
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def _go_script(version: str) -> bytes:
    return f'#!/bin/sh\necho "go version go{version} linux/amd64"\n'.encode()


def build_tar_gz(path: Path, members: dict) -> Path:
    """Write a .tar.gz whose members map name -> (bytes, mode)."""
    with tarfile.open(path, "w:gz") as tar:
        for name, (data, mode) in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
    return path


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def gvm_home(tmp_path: Path) -> HomeLayout:
    """Empty gvmkit home with its standard directories."""
    return HomeLayout(tmp_path / "gvmkit").ensure()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(os="linux", arch="amd64")


@pytest.fixture
def version_1215() -> VersionDescriptor:
    return VersionDescriptor(name="1.21.5", os="linux", arch="amd64")


@pytest.fixture
def make_go_archive(tmp_path: Path) -> Callable[..., Path]:
    """
    Factory building a Go-shaped archive (top-level 'go/' directory).

    The archive holds go/VERSION and an executable go/bin/go script that
    prints a 'go version' line.
    """

    def _make(version: str = "1.21.5", name: str = None, fmt: str = "tar.gz") -> Path:
        name = name or f"go{version}.linux-amd64.{fmt}"
        path = tmp_path / "archives" / name
        path.parent.mkdir(parents=True, exist_ok=True)

        members = {
            "go/VERSION": (f"go{version}\n".encode(), 0o644),
            "go/bin/go": (_go_script(version), 0o755),
        }
        if fmt == "zip":
            with zipfile.ZipFile(path, "w") as zf:
                for member, (data, mode) in members.items():
                    info = zipfile.ZipInfo(member)
                    info.external_attr = mode << 16
                    zf.writestr(info, data)
            return path
        return build_tar_gz(path, members)

    return _make


@pytest.fixture
def package_for() -> Callable[..., PackageDescriptor]:
    """Factory for linux/amd64 archive package descriptors."""

    def _make(version: str = "1.21.5", **kwargs) -> PackageDescriptor:
        file_name = kwargs.pop("file_name", f"go{version}.linux-amd64.tar.gz")
        defaults = dict(
            file_name=file_name,
            url=f"https://go.dev/dl/{file_name}",
            os="linux",
            arch="amd64",
        )
        defaults.update(kwargs)
        return PackageDescriptor(**defaults)

    return _make


@pytest.fixture
def tar_gz_builder() -> Callable[[Path, dict], Path]:
    return build_tar_gz
