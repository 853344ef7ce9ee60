"""CLI command implementations.

This module provides the command handlers for all CLI commands. Each
handler takes the parsed arguments and the configuration and returns an
exit code.
"""

import argparse
import logging
import sys
from pathlib import Path

from uainfo.classification.engine import ClassificationEngine, create_default_engine
from uainfo.classification.signatures import SignatureDatabase
from uainfo.core.config import Config
from uainfo.core.errors import ConfigurationError

from .formatters import JsonFormatter, TextFormatter

logger = logging.getLogger("uainfo.ui.cli")


def _get_formatter(args: argparse.Namespace) -> TextFormatter | JsonFormatter:
    """Get the appropriate formatter based on args."""
    if getattr(args, "json", False):
        return JsonFormatter()
    return TextFormatter(verbose=getattr(args, "detailed", False))


def _create_engine(config: Config) -> ClassificationEngine | None:
    """Create the engine, printing the reason if the data cannot be loaded."""
    try:
        return create_default_engine(config)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return None


def _read_user_agents(path: Path) -> list[str]:
    """Read one user agent per line, skipping blank lines."""
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def run_classify_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the classify command.

    Args:
        args: Command-line arguments
        config: Configuration object

    Returns:
        Exit code
    """
    engine = _create_engine(config)
    if engine is None:
        return 1

    formatter = _get_formatter(args)
    use_cache = not getattr(args, "no_cache", False)

    classifications = [engine.classify(ua, use_cache=use_cache) for ua in args.user_agents]

    if len(classifications) == 1:
        print(formatter.format_classification(classifications[0]))
    elif isinstance(formatter, JsonFormatter):
        print(formatter.format_classification_list(classifications))
    else:
        print("\n\n".join(formatter.format_classification(c) for c in classifications))

    return 0


def run_batch_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the batch command.

    Classifies every line of a file, "-" reads from standard input.

    Args:
        args: Command-line arguments
        config: Configuration object

    Returns:
        Exit code
    """
    if str(args.file) == "-":
        user_agents = [line.strip() for line in sys.stdin if line.strip()]
    else:
        try:
            user_agents = _read_user_agents(args.file)
        except OSError as e:
            print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
            return 1

    engine = _create_engine(config)
    if engine is None:
        return 1

    classifications = engine.classify_batch(user_agents)
    print(_get_formatter(args).format_classification_list(classifications))

    if getattr(args, "stats", False):
        stats = engine.get_statistics()
        logger.info(f"Batch statistics: {stats}")
        print(_get_formatter(args).format_version_info(stats))

    return 0


def run_version_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the version command.

    Prints the data version, which changes whenever the signature file,
    the override rules or a detection source changes.
    """
    engine = _create_engine(config)
    if engine is None:
        return 1

    context = engine.context
    info = {
        "data_version": engine.data_version,
        "signatures": context.signature_db.get_version_info(),
        "override_rules": context.rules.count,
        "rules_version": context.rules.version,
        "mobile_source": context.mobile_source.get_source_name(),
        "mobile_rules_version": context.mobile_source.script_version,
        "generic_source": context.generic_source.get_source_name(),
        "generic_fingerprint": context.generic_source.fingerprint,
    }

    print(_get_formatter(args).format_version_info(info))
    return 0


def run_validate_command(args: argparse.Namespace, config: Config) -> int:
    """Execute the validate command.

    Loads the signature file on its own and reports structural problems.

    Returns:
        0 if the file is valid, 1 otherwise
    """
    path = args.file if getattr(args, "file", None) else config.signatures_path
    database = SignatureDatabase()

    try:
        database.load_from_file(path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    problems = database.validate()
    print(_get_formatter(args).format_problems(problems))

    return 1 if problems else 0
