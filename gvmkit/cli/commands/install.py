"""
Install command implementation.

Downloads, verifies and installs a Go version, then activates it.
"""

import logging

from gvmkit.cli.utils import (
    ProgressPrinter,
    build_orchestrator,
    is_interactive,
    print_error,
    report_active,
    safe_print,
)
from gvmkit.core.directory import DirectoryError
from gvmkit.core.exceptions import GvmKitError
from gvmkit.core.settings import load_settings
from gvmkit.toolchain.orchestrator import InstallOutcome

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments with:
            - version: Version request
            - skip_checksum: Bypass archive verification
            - no_activate: Leave the active toolchain unchanged
            - home: Optional home directory override

    Returns:
        Exit code (0 for success or a declined install, 1 on failure)
    """
    try:
        settings = load_settings(home=args.home)
    except (ValueError, DirectoryError) as e:
        print_error("Failed to load settings", str(e))
        return 1

    skip_checksum = args.skip_checksum or settings.skip_checksum
    progress = None if args.quiet else ProgressPrinter()

    try:
        orchestrator = build_orchestrator(
            settings, interactive=is_interactive(), progress=progress
        )
        result = orchestrator.install(
            args.version,
            skip_checksum=skip_checksum,
            activate=not args.no_activate,
        )
    except (GvmKitError, DirectoryError) as e:
        print_error(str(e))
        return 1
    finally:
        if progress is not None:
            progress.finish()

    if result.outcome == InstallOutcome.ABORTED:
        safe_print("Installation cancelled")
        return 0

    if result.activation is None:
        safe_print(f"Installed go{result.version.name} to {result.install_dir}")
        return 0

    report_active(result.version.name, result.activation.probe_output)
    return 0

