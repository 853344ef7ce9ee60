"""CLI module for uainfo."""

from .commands import (
    run_batch_command,
    run_classify_command,
    run_validate_command,
    run_version_command,
)
from .formatters import (
    JsonFormatter,
    OutputFormatter,
    TextFormatter,
    format_classification,
    format_classification_list,
)

__all__ = [
    # Formatters
    "OutputFormatter",
    "TextFormatter",
    "JsonFormatter",
    "format_classification",
    "format_classification_list",
    # Commands
    "run_classify_command",
    "run_batch_command",
    "run_version_command",
    "run_validate_command",
]
