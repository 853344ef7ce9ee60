"""User interface modules.

This package contains the user interface components:
- cli: Command-line interface with formatters and commands
"""

from .cli import (
    JsonFormatter,
    OutputFormatter,
    TextFormatter,
    format_classification,
    format_classification_list,
)

__all__ = [
    # CLI Formatters
    "OutputFormatter",
    "TextFormatter",
    "JsonFormatter",
    "format_classification",
    "format_classification_list",
]
