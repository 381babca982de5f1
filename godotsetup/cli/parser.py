"""
godotsetup CLI argument parser.

This module implements the command-line interface for godotsetup using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from godotsetup.core.platform import get_supported_platforms

# Get version from package
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("godotsetup")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """godotsetup command-line interface."""

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
            prog="godotsetup",
            description="godotsetup - Install Godot Engine builds on CI runners",
            epilog='Use "godotsetup COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"godotsetup {__version__}"
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
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./godotsetup.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            help="Project root directory (default: current directory)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)

        return parser

    def _add_version_arguments(self, parser):
        """Arguments shared by commands that resolve a Godot version."""
        parser.add_argument(
            "version",
            nargs="?",
            default=None,
            help="Godot version (e.g. 4.2.1, 4.0.0-beta.16) or a global.json path",
        )
        parser.add_argument(
            "--path",
            metavar="DIR",
            help="Installation directory, relative to home (default: godot)",
        )
        parser.add_argument(
            "--custom-url",
            metavar="URL",
            help="Download a custom Godot build from this URL",
        )
        parser.add_argument(
            "--use-dotnet",
            action="store_true",
            default=None,
            help="Use the .NET-enabled Godot build",
        )
        parser.add_argument(
            "--include-templates",
            action="store_true",
            default=None,
            help="Also install export templates",
        )
        parser.add_argument(
            "--url-scheme",
            choices=["releases", "legacy", "auto"],
            metavar="SCHEME",
            help="Download layout (releases|legacy|auto) [default: releases]",
        )
        parser.add_argument(
            "--legacy-url-before",
            metavar="VERSION",
            help="With --url-scheme auto, use the legacy layout below this version",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install Godot and expose it to later CI steps",
            description=(
                "Download, extract and cache a Godot build, link it into the bin "
                "directory and export GODOT/GODOT4"
            ),
        )
        self._add_version_arguments(parser)
        parser.add_argument(
            "--downloads-path",
            metavar="DIR",
            help="Downloads directory, relative to home (default: godot_downloads)",
        )
        parser.add_argument(
            "--bin-path",
            metavar="DIR",
            help="Bin directory added to PATH, relative to home (default: godot_bin)",
        )
        parser.add_argument(
            "--godot-sharp-release",
            action="store_true",
            default=None,
            help="Link the release GodotSharp assemblies instead of debug",
        )
        parser.add_argument(
            "--no-cache",
            dest="cache",
            action="store_false",
            default=None,
            help="Do not restore from or save to the artifact cache",
        )
        parser.add_argument(
            "--cache-dir",
            metavar="DIR",
            help="Artifact cache directory (default: ~/.godotsetup/cache)",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Show download URLs and paths without installing",
            description="Resolve file names, URLs and install paths for a version",
        )
        self._add_version_arguments(parser)
        parser.add_argument(
            "--platform",
            choices=get_supported_platforms(),
            metavar="PLATFORM",
            help="Target platform (linux|windows|macos) [default: host]",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the result as JSON",
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
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
        except Exception as e:
            logger.error(f"🚨 {e}")
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
            "install": "godotsetup.cli.commands.install",
            "resolve": "godotsetup.cli.commands.resolve",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
