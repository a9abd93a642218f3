"""
gvmkit CLI argument parser.

This module implements the command-line interface for gvmkit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from gvmkit import __version__
from gvmkit.cli.utils import print_error
from gvmkit.core.exceptions import GvmKitError

logger = logging.getLogger(__name__)


class CLI:
    """gvmkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="gvmkit",
            description="gvmkit - Go toolchain version manager",
            epilog='Use "gvmkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"gvmkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--home",
            type=Path,
            metavar="PATH",
            help="gvmkit home directory (default: $G_HOME or ~/.gvmkit)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_use_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Download and install a Go version",
            description=(
                "Download, verify and install a Go version, then make it the "
                "active toolchain"
            ),
        )
        parser.add_argument(
            "version",
            metavar="VERSION",
            help="Version to install (e.g., 1.21.5, 1.21, 1.21.x, latest)",
        )
        parser.add_argument(
            "--skip-checksum",
            action="store_true",
            help="Skip archive checksum verification",
        )
        parser.add_argument(
            "--no-activate",
            action="store_true",
            help="Install without switching the active toolchain",
        )

    def _add_use_command(self, subparsers):
        """Add 'use' subcommand."""
        parser = subparsers.add_parser(
            "use",
            help="Switch to an installed Go version",
            description="Point the active toolchain link at an installed version",
        )
        parser.add_argument(
            "version",
            metavar="VERSION",
            help="Installed version to activate (e.g., 1.21.5)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except GvmKitError as e:
            print_error(str(e))
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "install": "gvmkit.cli.commands.install",
            "use": "gvmkit.cli.commands.use",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            # Dynamic import of command module
            import importlib

            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1

        # Call run() function in module
        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
