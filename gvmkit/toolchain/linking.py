"""
gvmkit/toolchain/linking.py

Active toolchain link management.

A single link (symlink, or directory junction on Windows) identifies the Go
version currently in effect. Link creation mechanisms are modelled as
strategies selected once per platform; the ActivationSwitch tries them in
order and never branches on the platform itself.
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gvmkit.core.exceptions import ActivationFailedError
from gvmkit.core.locking import LockManager, LockTimeout
from gvmkit.core.platform import PlatformInfo, detect_platform
from gvmkit.toolchain.models import ActivationResult

logger = logging.getLogger(__name__)

# FILE_ATTRIBUTE_REPARSE_POINT
_REPARSE_POINT = 0x400


class LinkCreationError(Exception):
    """Failed to create a symbolic link or junction."""

    pass


# ============================================================================
# Link Strategies
# ============================================================================


class LinkStrategy(ABC):
    """A mechanism for creating a directory link."""

    name: str = ""

    @abstractmethod
    def create(self, link_path: Path, target_path: Path) -> None:
        """
        Create link_path pointing at target_path.

        Raises:
            LinkCreationError: If the mechanism fails
        """
        pass


class SymlinkLinkStrategy(LinkStrategy):
    """Standard symbolic link."""

    name = "symlink"

    def create(self, link_path: Path, target_path: Path) -> None:
        try:
            os.symlink(target_path, link_path, target_is_directory=True)
        except OSError as e:
            if getattr(e, "winerror", None) == 1314:  # ERROR_PRIVILEGE_NOT_HELD
                raise LinkCreationError(
                    "Creating symlinks requires administrator privileges "
                    "or Developer Mode on Windows"
                ) from e
            raise LinkCreationError(f"Failed to create symlink: {e}") from e


class JunctionLinkStrategy(LinkStrategy):
    """Windows directory junction (no elevated privilege required)."""

    name = "junction"

    def create(self, link_path: Path, target_path: Path) -> None:
        # Try using _winapi (Python 3.8+)
        try:
            import _winapi

            _winapi.CreateJunction(str(target_path), str(link_path))  # type: ignore
            return
        except (ImportError, AttributeError, OSError) as e:
            logger.debug(f"_winapi.CreateJunction failed: {e}, trying mklink")

        try:
            result = subprocess.run(
                ["cmd", "/c", "mklink", "/J", str(link_path), str(target_path)],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise LinkCreationError(f"Failed to run mklink: {e}") from e

        if result.returncode != 0:
            raise LinkCreationError(
                f"Failed to create junction: {result.stderr.strip()}"
            )


def select_link_strategies(platform: Optional[PlatformInfo] = None) -> List[LinkStrategy]:
    """
    Ordered link strategies for a platform.

    Windows tries a junction first and falls back to a symlink; every other
    platform uses symlinks only.
    """
    platform = platform or detect_platform()
    if platform.is_windows:
        return [JunctionLinkStrategy(), SymlinkLinkStrategy()]
    return [SymlinkLinkStrategy()]


# ============================================================================
# Link Inspection
# ============================================================================


def is_junction(path: Path) -> bool:
    """Check if path is a Windows directory junction."""
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError:
        return False
    attributes = getattr(st, "st_file_attributes", 0)
    return bool(attributes & _REPARSE_POINT) and not path.is_symlink()


def is_link(path: Path) -> bool:
    return path.is_symlink() or is_junction(path)


def resolve_link(link_path: Path) -> Optional[Path]:
    """
    Resolve a symlink or junction to its absolute target path.

    Returns:
        Target path, or None if link_path is not a link
    """
    if not is_link(link_path):
        return None

    target = Path(os.readlink(link_path))
    target_str = str(target)
    # Normalize Windows extended-length prefix
    for prefix in ("\\\\?\\", "//?/"):
        if target_str.startswith(prefix):
            target = Path(target_str[len(prefix):])
            break

    if not target.is_absolute():
        target = link_path.parent / target
    return Path(os.path.abspath(target))


def remove_link(link_path: Path) -> bool:
    """
    Remove whatever occupies the active link path.

    Symlinks, junctions, regular files and empty directories are removed.

    Returns:
        True if something was removed, False if the path was empty

    Raises:
        ActivationFailedError: If the path is a non-empty real directory or
            cannot be removed
    """
    if not (link_path.exists() or link_path.is_symlink()):
        return False

    try:
        if is_junction(link_path):
            # Junctions are removed with rmdir, never unlink
            os.rmdir(link_path)
        elif link_path.is_symlink() or link_path.is_file():
            link_path.unlink()
        elif link_path.is_dir():
            if any(link_path.iterdir()):
                raise ActivationFailedError(
                    f"{link_path} is a directory, not a link. "
                    "Please remove it manually."
                )
            link_path.rmdir()
    except OSError as e:
        raise ActivationFailedError(f"Failed to remove {link_path}: {e}") from e

    logger.debug(f"Removed link: {link_path}")
    return True


# ============================================================================
# Version Probe
# ============================================================================


class VersionProbe:
    """
    Runs the installed toolchain's own version report.

    The probe is informational: failures are logged and reported as None.
    """

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def go_binary(self, root: Path) -> Path:
        name = "go.exe" if os.name == "nt" else "go"
        return root / "bin" / name

    def __call__(self, root: Path) -> Optional[str]:
        binary = self.go_binary(root)
        try:
            result = subprocess.run(
                [str(binary), "version"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Failed to run {binary} version: {e}")
            return None

        if result.returncode != 0:
            logger.warning(
                f"{binary} version exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
            return None

        output = result.stdout.strip()
        if output.startswith("go version "):
            output = output[len("go version "):]
        return output


Probe = Callable[[Path], Optional[str]]


# ============================================================================
# Activation Switch
# ============================================================================


class ActivationSwitch:
    """
    Single writer of the active toolchain link.

    Example:
        >>> switch = ActivationSwitch(layout.active_link)
        >>> result = switch.activate(layout.version_dir("1.21.5"))
        >>> print(result.probe_output)
        go1.21.5 linux/amd64
    """

    def __init__(
        self,
        link_path: Path,
        strategies: Optional[Sequence[LinkStrategy]] = None,
        probe: Optional[Probe] = None,
        lock_manager: Optional[LockManager] = None,
        lock_timeout: float = 30,
    ):
        self.link_path = Path(link_path)
        self.strategies = (
            list(strategies) if strategies is not None else select_link_strategies()
        )
        self.probe = probe
        self.lock_manager = lock_manager
        self.lock_timeout = lock_timeout

    def current_target(self) -> Optional[Path]:
        """Target of the active link, or None if there is no link."""
        return resolve_link(self.link_path)

    def activate(self, target: Path) -> ActivationResult:
        """
        Point the active link at an installed version directory.

        Raises:
            ActivationFailedError: If the link cannot be switched. The
                installed version directory is left untouched.
        """
        target = Path(os.path.abspath(target))
        if not target.is_dir():
            raise ActivationFailedError(f"Activation target does not exist: {target}")

        if self.lock_manager is None:
            mechanism = self._switch(target)
        else:
            try:
                with self.lock_manager.activation_lock(timeout=self.lock_timeout):
                    mechanism = self._switch(target)
            except LockTimeout as e:
                raise ActivationFailedError(
                    f"Timed out waiting for activation lock {e}"
                ) from e

        logger.info(f"Linked {self.link_path} -> {target} ({mechanism})")

        probe_output = None
        if self.probe is not None:
            probe_output = self._run_probe()

        return ActivationResult(
            link_path=self.link_path,
            target=target,
            mechanism=mechanism,
            probe_output=probe_output,
        )

    def _switch(self, target: Path) -> str:
        remove_link(self.link_path)
        self.link_path.parent.mkdir(parents=True, exist_ok=True)

        errors = []
        for strategy in self.strategies:
            try:
                strategy.create(self.link_path, target)
                return strategy.name
            except LinkCreationError as e:
                logger.debug(f"{strategy.name} failed: {e}")
                errors.append(f"{strategy.name}: {e}")

        raise ActivationFailedError(
            f"Failed to link {self.link_path} -> {target}: " + "; ".join(errors)
        )

    def _run_probe(self) -> Optional[str]:
        try:
            return self.probe(self.link_path)
        except Exception as e:
            logger.warning(f"Version probe failed: {e}")
            return None
