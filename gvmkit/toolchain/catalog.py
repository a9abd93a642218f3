"""
Go release catalog and version resolution.

Releases are read from the JSON feed published alongside the official
downloads (https://go.dev/dl/?mode=json&include=all). A catalog may be
configured with several mirrors; each is tried once, in order, until one
answers.

Version requests:
    latest      newest stable release
    1.21.5      exact release (a leading 'go' is accepted)
    1.21.x      highest release of the 1.21 series ('1.21.*' also works)
    1.21        exact release if one exists, otherwise highest of the series
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from packaging.version import InvalidVersion, Version
from requests.exceptions import RequestException

from gvmkit.core.exceptions import CatalogError, VersionNotFoundError
from gvmkit.core.settings import DEFAULT_MIRROR
from gvmkit.toolchain.models import PackageDescriptor, VersionDescriptor

logger = logging.getLogger(__name__)

ARCHIVE_KIND = "archive"


@dataclass
class Release:
    """One entry of the release feed."""

    name: str
    stable: bool
    files: List[Dict[str, Any]] = field(default_factory=list)
    mirror: str = DEFAULT_MIRROR

    @property
    def sort_key(self) -> Optional[Version]:
        try:
            return Version(self.name)
        except InvalidVersion:
            return None


class VersionCatalog(ABC):
    """Resolves a version request into a release and its platform packages."""

    @abstractmethod
    def resolve(
        self, request: str, os_name: str, arch: str
    ) -> Tuple[VersionDescriptor, List[PackageDescriptor]]:
        """
        Raises:
            VersionNotFoundError: If no release matches
            CatalogError: If the catalog cannot be read
        """
        pass


def strip_go_prefix(name: str) -> str:
    """'go1.21.5' -> '1.21.5'"""
    name = name.strip()
    return name[2:] if name.startswith("go") else name


def find_release(releases: Sequence[Release], request: str) -> Release:
    """
    Pick the release matching a version request.

    Raises:
        VersionNotFoundError: If no release matches
    """
    wanted = strip_go_prefix(request)
    if not wanted:
        raise VersionNotFoundError(request)

    if wanted == "latest":
        candidates = [r for r in releases if r.stable]
    else:
        for release in releases:
            if release.name == wanted:
                return release

        series = wanted
        for suffix in (".x", ".*"):
            if series.endswith(suffix):
                series = series[: -len(suffix)]
        in_series = [r for r in releases if r.name.startswith(series + ".")]
        candidates = [r for r in in_series if r.stable] or in_series

    ordered = sorted(
        (r for r in candidates if r.sort_key is not None),
        key=lambda r: r.sort_key,
    )
    if not ordered:
        raise VersionNotFoundError(request)
    return ordered[-1]


def packages_for(release: Release, os_name: str, arch: str) -> List[PackageDescriptor]:
    """Archive packages of a release for one platform, in feed order."""
    packages = []
    for entry in release.files:
        if entry.get("kind") != ARCHIVE_KIND:
            continue
        if entry.get("os") != os_name or entry.get("arch") != arch:
            continue
        file_name = entry["filename"]
        packages.append(
            PackageDescriptor(
                file_name=file_name,
                url=_join_url(release.mirror, file_name),
                checksum=entry.get("sha256") or None,
                algorithm="SHA256",
                os=os_name,
                arch=arch,
                kind=ARCHIVE_KIND,
                size=int(entry.get("size") or 0),
            )
        )
    return packages


def _join_url(base: str, file_name: str) -> str:
    return base.rstrip("/") + "/" + file_name


class GoReleaseCatalog(VersionCatalog):
    """
    Catalog backed by the Go release JSON feed.

    Example:
        >>> catalog = GoReleaseCatalog(["https://go.dev/dl/"])
        >>> version, packages = catalog.resolve("1.21", "linux", "amd64")
    """

    def __init__(self, mirrors: Optional[Sequence[str]] = None, timeout: int = 30):
        self.mirrors = [m for m in (mirrors or [DEFAULT_MIRROR]) if m]
        self.timeout = timeout
        self._releases: Optional[List[Release]] = None

    def releases(self) -> List[Release]:
        """
        All releases from the first mirror that answers.

        Raises:
            CatalogError: If every mirror fails
        """
        if self._releases is not None:
            return self._releases

        errors = []
        for mirror in self.mirrors:
            try:
                self._releases = self._fetch(mirror)
                return self._releases
            except CatalogError as e:
                logger.warning(f"Mirror {mirror} unavailable: {e}")
                errors.append(f"{mirror}: {e}")

        raise CatalogError("No release catalog available. " + "; ".join(errors))

    def _fetch(self, mirror: str) -> List[Release]:
        logger.debug(f"Fetching release catalog from {mirror}")
        try:
            response = requests.get(
                mirror,
                params={"mode": "json", "include": "all"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except RequestException as e:
            raise CatalogError(f"request failed: {e}") from e
        except ValueError as e:
            raise CatalogError(f"invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise CatalogError("unexpected catalog structure")

        releases = []
        for item in data:
            if not isinstance(item, dict) or "version" not in item:
                continue
            releases.append(
                Release(
                    name=strip_go_prefix(item["version"]),
                    stable=bool(item.get("stable", False)),
                    files=list(item.get("files") or []),
                    mirror=mirror,
                )
            )
        logger.debug(f"Loaded {len(releases)} releases from {mirror}")
        return releases

    def resolve(
        self, request: str, os_name: str, arch: str
    ) -> Tuple[VersionDescriptor, List[PackageDescriptor]]:
        release = find_release(self.releases(), request)
        version = VersionDescriptor(
            name=release.name, os=os_name, arch=arch, stable=release.stable
        )
        return version, packages_for(release, os_name, arch)
