"""
Advisory locking for gvmkit.

The active toolchain link is process-wide mutable state. Two gvmkit processes
sharing a home directory take this lock around the remove/create sequence so
their link switches never interleave. Processes that do not take the lock
(or other tools touching the link) are not serialized.

Usage:
    from gvmkit.core.locking import LockManager

    lock_manager = LockManager(layout.lock_dir)
    with lock_manager.activation_lock(timeout=30):
        # Replace the active link
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)


class LockManager:
    """
    Manages file-based locks for gvmkit resources.

    Uses the `filelock` library for cross-platform, cross-process locking
    with automatic release on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    @property
    def activation_lock_path(self) -> Path:
        return self.lock_dir / "activation.lock"

    @contextmanager
    def activation_lock(self, timeout: float = 30):
        """
        Acquire the lock guarding the active toolchain link.

        Args:
            timeout: Maximum wait time in seconds (default: 30)

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        lock = FileLock(self.activation_lock_path, timeout=timeout)

        try:
            lock.acquire()
        except LockTimeout as e:
            logger.error(
                f"Could not acquire activation lock after {timeout}s. "
                "Another gvmkit process may be switching versions."
            )
            raise LockTimeout(str(self.activation_lock_path)) from e

        logger.debug(f"Acquired activation lock: {self.activation_lock_path}")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Released activation lock: {self.activation_lock_path}")


__all__ = ["LockManager", "LockTimeout"]
