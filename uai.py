#!/usr/bin/env python3
"""uai - User agent classifier.

Entry point for the command-line interface.
"""

import argparse
import logging
import sys
from pathlib import Path

from uainfo import __version__
from uainfo.core.config import Config, load_config
from uainfo.core.logging_config import setup_logging
from uainfo.ui.cli.commands import (
    run_batch_command,
    run_classify_command,
    run_validate_command,
    run_version_command,
)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="uai",
        description="Classify HTTP User-Agent strings",
        epilog="Source data locations are read from the configuration file.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)",
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Classify command
    classify_parser = subparsers.add_parser("classify", help="Classify user agents")
    classify_parser.add_argument("user_agents", nargs="+", help="User agent strings")
    classify_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    classify_parser.add_argument(
        "--detailed", "-d",
        action="store_true",
        help="Show patch versions",
    )
    classify_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Bypass the identity cache",
    )

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Classify user agents from a file")
    batch_parser.add_argument("file", type=Path, help="File with one user agent per line, - for stdin")
    batch_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    batch_parser.add_argument(
        "--stats",
        action="store_true",
        help="Show classification statistics",
    )

    # Version command
    version_parser = subparsers.add_parser("version", help="Show the data version")
    version_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check a signature file")
    validate_parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        help="Signature file (omit for the configured one)",
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    return parser


def get_log_level(verbose: int) -> int:
    """Get logging level from verbosity count."""
    if verbose >= 2:
        return logging.DEBUG
    elif verbose >= 1:
        return logging.INFO
    return logging.WARNING


COMMANDS = {
    "classify": run_classify_command,
    "batch": run_batch_command,
    "version": run_version_command,
    "validate": run_validate_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Load configuration
    config: Config = load_config(args.config) if args.config else load_config()

    # Setup logging
    if args.verbose:
        log_level = get_log_level(args.verbose)
    else:
        log_level = logging.getLevelName(config.logging.level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    setup_logging(
        config.logs_dir,
        log_level=log_level,
        console_output=(args.verbose > 0 or config.logging.console_output) and not args.quiet,
    )

    # Execute command
    if args.command is None:
        parser.print_help()
        return 0

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
