"""Output formatters for CLI output.

This module provides formatters for displaying classifications and
database information as text or JSON.
"""

import json
import sys
from abc import ABC, abstractmethod
from typing import Any

from uainfo.core.models import Classification, IdentificationLevel


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    # Identification level colors
    LEVEL_FULL = "\033[92m"  # Green
    LEVEL_PARTIAL = "\033[93m"  # Yellow
    LEVEL_NONE = "\033[90m"  # Gray

    # Status colors
    SUCCESS = "\033[92m"  # Green
    FAILURE = "\033[91m"  # Red

    @classmethod
    def is_supported(cls) -> bool:
        """Check if terminal supports colors."""
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def colorize(text: str, color: str, force: bool = False) -> str:
    """Apply color to text if supported.

    Args:
        text: Text to colorize
        color: ANSI color code
        force: Force color even if not supported

    Returns:
        Colored text or plain text
    """
    if force or Colors.is_supported():
        return f"{color}{text}{Colors.RESET}"
    return text


def get_level_color(level: IdentificationLevel) -> str:
    """Get color for an identification level."""
    color_map = {
        IdentificationLevel.FULL: Colors.LEVEL_FULL,
        IdentificationLevel.PARTIAL: Colors.LEVEL_PARTIAL,
        IdentificationLevel.NONE: Colors.LEVEL_NONE,
    }
    return color_map.get(level, Colors.RESET)


def _flags(classification: Classification) -> list[str]:
    """Names of the flags that are set."""
    flags = [
        ("mobile", classification.is_mobile),
        ("tablet", classification.is_mobile_tablet),
        ("bot", classification.is_bot),
        ("bot reader", classification.is_bot_reader),
        ("banned", classification.is_banned),
    ]
    return [name for name, value in flags if value]


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_classification(self, classification: Classification) -> str:
        """Format a single classification."""
        pass

    @abstractmethod
    def format_classification_list(self, classifications: list[Classification]) -> str:
        """Format a list of classifications."""
        pass

    @abstractmethod
    def format_version_info(self, info: dict[str, Any]) -> str:
        """Format data version information."""
        pass


class TextFormatter(OutputFormatter):
    """Plain text formatter with optional colors."""

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        """Initialize the text formatter.

        Args:
            use_colors: Whether to use ANSI colors
            verbose: Whether to show detailed versions
        """
        self.use_colors = use_colors and Colors.is_supported()
        self.verbose = verbose

    def _colorize(self, text: str, color: str) -> str:
        """Apply color if enabled."""
        if self.use_colors:
            return colorize(text, color, force=True)
        return text

    def format_classification(self, classification: Classification) -> str:
        """Format a single classification."""
        level = classification.id_level
        lines = [
            self._colorize(classification.user_agent or "(empty)", Colors.BOLD),
            f"  Level:   {self._colorize(level.name, get_level_color(level))}",
            f"  Browser: {classification.render_info_browser(self.verbose) or '-'}",
            f"  OS:      {classification.render_info_os(self.verbose) or '-'}",
            f"  Device:  {classification.render_info_device() or '-'}",
        ]

        flags = _flags(classification)
        if flags:
            lines.append(f"  Flags:   {', '.join(flags)}")

        if classification.is_mobile_grade_rated():
            lines.append(f"  Grade:   {classification.mobile_grade.value}")

        return "\n".join(lines)

    def format_classification_list(self, classifications: list[Classification]) -> str:
        """Format a list of classifications, one line each."""
        if not classifications:
            return "No user agents classified."

        lines = []
        for classification in classifications:
            level = classification.id_level
            info = classification.render_info_all(self.verbose) or "-"
            lines.append(
                f"{self._colorize(f'{level.name:<8}', get_level_color(level))} {info}"
                f"  [{classification.user_agent}]"
            )

        counts: dict[str, int] = {}
        for classification in classifications:
            counts[classification.id_level.name] = counts.get(classification.id_level.name, 0) + 1

        lines.append("")
        lines.append(f"Total: {len(classifications)} user agents")
        for name, count in sorted(counts.items()):
            lines.append(f"  {name}: {count}")

        return "\n".join(lines)

    def format_version_info(self, info: dict[str, Any]) -> str:
        """Format data version information."""
        lines = [f"Data version: {self._colorize(info.get('data_version', ''), Colors.BOLD)}"]
        for key, value in info.items():
            if key == "data_version":
                continue
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)

    def format_problems(self, problems: list[str]) -> str:
        """Format signature database validation problems."""
        if not problems:
            return self._colorize("Signature database is valid.", Colors.SUCCESS)

        lines = [self._colorize(f"Found {len(problems)} problem(s):", Colors.FAILURE)]
        lines.extend(f"  - {problem}" for problem in problems)
        return "\n".join(lines)


class JsonFormatter(OutputFormatter):
    """JSON output formatter."""

    def __init__(self, indent: int = 2, compact: bool = False):
        """Initialize the JSON formatter.

        Args:
            indent: Indentation level
            compact: Whether to use compact output
        """
        self.indent = None if compact else indent

    def format_classification(self, classification: Classification) -> str:
        """Format a single classification as JSON."""
        return json.dumps(classification.to_dict(), indent=self.indent)

    def format_classification_list(self, classifications: list[Classification]) -> str:
        """Format a list of classifications as JSON."""
        data = {
            "count": len(classifications),
            "classifications": [c.to_dict() for c in classifications],
        }
        return json.dumps(data, indent=self.indent)

    def format_version_info(self, info: dict[str, Any]) -> str:
        return json.dumps(info, indent=self.indent, default=str)

    def format_problems(self, problems: list[str]) -> str:
        return json.dumps({"valid": not problems, "problems": problems}, indent=self.indent)


# Convenience functions


def format_classification(classification: Classification, as_json: bool = False) -> str:
    """Format a classification.

    Args:
        classification: Classification to format
        as_json: Whether to output as JSON

    Returns:
        Formatted string
    """
    formatter: OutputFormatter = JsonFormatter() if as_json else TextFormatter()
    return formatter.format_classification(classification)


def format_classification_list(
    classifications: list[Classification], as_json: bool = False
) -> str:
    """Format a list of classifications."""
    formatter: OutputFormatter = JsonFormatter() if as_json else TextFormatter()
    return formatter.format_classification_list(classifications)
