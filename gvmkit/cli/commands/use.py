"""
Use command implementation.

Switches the active toolchain to an installed Go version.
"""

import logging

from gvmkit.cli.utils import build_orchestrator, print_error, report_active
from gvmkit.core.directory import DirectoryError
from gvmkit.core.exceptions import GvmKitError
from gvmkit.core.settings import load_settings
from gvmkit.toolchain.catalog import strip_go_prefix

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the use command.

    Args:
        args: Parsed command-line arguments with:
            - version: Installed version to activate
            - home: Optional home directory override

    Returns:
        Exit code (0 for success, 1 on failure)
    """
    try:
        settings = load_settings(home=args.home)
    except (ValueError, DirectoryError) as e:
        print_error("Failed to load settings", str(e))
        return 1

    try:
        orchestrator = build_orchestrator(settings)
        activation = orchestrator.use(args.version)
    except (GvmKitError, DirectoryError) as e:
        print_error(str(e))
        return 1

    logger.debug(f"Active link: {activation.link_path} -> {activation.target}")
    report_active(strip_go_prefix(args.version), activation.probe_output)
    return 0
