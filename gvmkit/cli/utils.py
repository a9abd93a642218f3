"""
Shared utilities for CLI commands.

Provides output helpers, interactive prompt strategies and the wiring that
turns resolved settings into an install orchestrator.
"""

import logging
import sys
from typing import Optional, Sequence

from gvmkit.core.download import DownloadProgress, format_progress
from gvmkit.core.locking import LockManager
from gvmkit.core.settings import Settings
from gvmkit.toolchain.acquisition import AcquisitionPipeline, ConfirmationStrategy
from gvmkit.toolchain.catalog import GoReleaseCatalog
from gvmkit.toolchain.installer import InstallationManager
from gvmkit.toolchain.linking import ActivationSwitch, VersionProbe
from gvmkit.toolchain.models import PackageDescriptor
from gvmkit.toolchain.orchestrator import InstallOrchestrator
from gvmkit.toolchain.selector import (
    FirstCandidateStrategy,
    PackageSelector,
    SelectionStrategy,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Output
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for Windows console.

    Falls back to ASCII if the console cannot encode the message.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        print(message.encode("ascii", "replace").decode("ascii"), file=file)


class ProgressPrinter:
    """Renders download progress on a single stderr line."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr
        self._active = False

    def __call__(self, progress: DownloadProgress) -> None:
        self._active = True
        self.stream.write(f"\r  Downloading: {format_progress(progress)}   ")
        self.stream.flush()

    def finish(self) -> None:
        """Terminate the progress line, if one was drawn."""
        if self._active:
            self.stream.write("\n")
            self.stream.flush()
            self._active = False


# ============================================================================
# Interactive Prompts
# ============================================================================


class PromptSelectionStrategy(SelectionStrategy):
    """
    Numbered menu on stdout. An empty answer picks the first package.

    Non-numeric answers raise ValueError, which the selector reports as a
    SelectionError.
    """

    def choose(self, candidates: Sequence[PackageDescriptor]) -> int:
        print("Several packages match this platform:")
        for number, package in enumerate(candidates, start=1):
            print(f"  {number}) {package.file_name}")

        try:
            answer = input("Select a package [1]: ").strip()
        except EOFError:
            print()
            return 0

        if not answer:
            return 0
        return int(answer) - 1


class PromptConfirmation(ConfirmationStrategy):
    """Yes/no question on stdin. Anything but y/yes declines."""

    def confirm(self, message: str) -> bool:
        try:
            response = input(f"{message} [y/N] ").strip().lower()
        except EOFError:
            print()
            return False
        return response in ["y", "yes"]


def is_interactive() -> bool:
    """Check if stdin is attached to a terminal."""
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError, OSError):
        return False


# ============================================================================
# Orchestrator Wiring
# ============================================================================


def build_orchestrator(
    settings: Settings,
    interactive: bool = False,
    progress: Optional[ProgressPrinter] = None,
) -> InstallOrchestrator:
    """
    Assemble an InstallOrchestrator from resolved settings.

    Interactive sessions get prompt-based selection and confirmation; scripted
    sessions pick the first package and refuse unverifiable packages.

    Args:
        settings: Resolved settings
        interactive: Whether the user can answer prompts
        progress: Optional download progress observer

    Returns:
        Configured InstallOrchestrator
    """
    layout = settings.layout.ensure()

    if interactive:
        strategy: SelectionStrategy = PromptSelectionStrategy()
        confirmation: Optional[ConfirmationStrategy] = PromptConfirmation()
    else:
        strategy = FirstCandidateStrategy()
        confirmation = None

    lock_manager = LockManager(layout.lock_dir) if settings.activation_lock else None
    logger.debug(
        f"Home: {layout.home}, mirrors: {settings.mirrors}, "
        f"activation lock: {'on' if lock_manager else 'off'}"
    )

    return InstallOrchestrator(
        catalog=GoReleaseCatalog(settings.mirrors, timeout=settings.download_timeout),
        layout=layout,
        selector=PackageSelector(strategy),
        acquisition=AcquisitionPipeline(
            layout.downloads_dir,
            confirmation=confirmation,
            progress_callback=progress,
            timeout=settings.download_timeout,
        ),
        installer=InstallationManager(layout),
        switch=ActivationSwitch(
            layout.active_link,
            probe=VersionProbe(),
            lock_manager=lock_manager,
        ),
    )


def report_active(version: str, probe_output: Optional[str] = None) -> None:
    """
    Print the toolchain now in effect.

    Prefers the toolchain's own version report ("go1.21.5 linux/amd64") and
    falls back to the version identifier when the probe produced nothing.
    """
    safe_print(f"Now using {probe_output or 'go' + version}")
