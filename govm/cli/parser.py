"""
govm CLI argument parser.

This module implements the command-line interface for govm using argparse.
"""

import argparse
import importlib
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from ..core.exceptions import GovmError
from .utils import print_error

# Get version from package
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("govm")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

SIGTERM_EXIT_CODE = 128 + signal.SIGTERM


class CLI:
    """govm command-line interface."""

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
            prog="govm",
            description="govm - install and switch between Go versions",
            epilog='Use "govm COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"govm {__version__}"
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
            "--silent",
            "-y",
            action="store_true",
            help="Unattended mode: never prompt, accept default decisions",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ~/.config/govm/config.yaml)",
        )
        parser.add_argument(
            "--install-root",
            type=Path,
            metavar="PATH",
            help="Directory holding Go installations (default: /usr/local)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_use_command(subparsers)
        self._add_list_command(subparsers)
        self._add_current_command(subparsers)
        self._add_cleanup_command(subparsers)
        self._add_migrate_command(subparsers)
        self._add_env_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install a Go version and make it active",
            description="Download, install and activate a Go version (latest if omitted)",
        )
        parser.add_argument(
            "version",
            nargs="?",
            metavar="VERSION",
            help="Version to install, e.g. 1.21.0 or go1.21.0 (default: latest)",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Reinstall even if the version is already installed",
        )
        parser.add_argument(
            "--no-profile",
            action="store_true",
            help="Do not add environment exports to the shell profile",
        )

    def _add_use_command(self, subparsers):
        """Add 'use' subcommand."""
        parser = subparsers.add_parser(
            "use",
            help="Switch the active Go version",
            description="Point the active Go symlink at an installed version",
        )
        parser.add_argument("version", metavar="VERSION", help="Installed version to activate")

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        subparsers.add_parser(
            "list",
            help="List installed Go versions",
            description="List installed versions, newest first, marking the active one",
        )

    def _add_current_command(self, subparsers):
        """Add 'current' subcommand."""
        subparsers.add_parser(
            "current",
            help="Show the active Go version",
            description="Show the active Go version, its binary and installation root",
        )

    def _add_cleanup_command(self, subparsers):
        """Add 'cleanup' subcommand."""
        parser = subparsers.add_parser(
            "cleanup",
            help="Remove unused Go versions",
            description="Remove installed Go versions other than the active one",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be removed without removing",
        )

    def _add_migrate_command(self, subparsers):
        """Add 'migrate' subcommand."""
        subparsers.add_parser(
            "migrate",
            help="Convert a single-version installation",
            description="Move a plain go/ directory into a versioned directory and link it",
        )

    def _add_env_command(self, subparsers):
        """Add 'env' subcommand."""
        subparsers.add_parser(
            "env",
            help="Print shell exports for the Go environment",
            description="Print GOPATH, GOBIN and PATH export lines (eval \"$(govm env)\")",
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
            Exit code (0 for success, 1 for error, 130 if interrupted)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except GovmError as e:
            print_error(str(e), e.remedy)
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.debug(f"Unhandled {type(e).__name__} in '{parsed_args.command}'")
            print_error(f"Unexpected error: {e}", "Re-run with --verbose for details")
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
        command_map = {
            "install": "govm.cli.commands.install",
            "use": "govm.cli.commands.use",
            "list": "govm.cli.commands.list",
            "current": "govm.cli.commands.current",
            "cleanup": "govm.cli.commands.cleanup",
            "migrate": "govm.cli.commands.migrate",
            "env": "govm.cli.commands.env",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def _raise_system_exit(signum, frame):
    raise SystemExit(SIGTERM_EXIT_CODE)


def main():
    """Main entry point for CLI."""
    signal.signal(signal.SIGTERM, _raise_system_exit)

    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
