"""Mobile heuristics source - rule based detection of phones and tablets.

Rules are loaded from a JSON table with named regular expressions for
phone devices, tablet devices, operating systems, browsers and utilities
(bots, consoles, ...), version lookup patterns and mobile grade rules.

All rules are matched case-insensitively against the user agent.
"""

import json
import logging
import operator
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from uainfo.core.models import MobileGrade
from uainfo.sources.base import MobileDetection, MobileHeuristicsSource

logger = logging.getLogger("uainfo.sources.mobile_detect")

# "[VER]" in a version pattern is replaced by this group
VERSION_PLACEHOLDER = "[VER]"
VERSION_GROUP = r"([\w._\+]+)"

RULE_GROUPS = ("phone_devices", "tablet_devices", "operating_systems", "browsers")

COMPARISONS: dict[str, Callable[[float, float], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
}

_VERSION_NUMBER = re.compile(r"^\d+(?:\.\d+)?")


def version_to_float(value: str) -> float | None:
    """Convert a version string to a comparable number.

    "4.0.4" becomes 4.04 and "6_1" becomes 6.1. Returns None if the string
    does not start with a number.
    """
    for separator in ("_", " ", "/"):
        value = value.replace(separator, ".")

    major, dot, rest = value.partition(".")
    if dot:
        value = major + "." + rest.replace(".", "")

    match = _VERSION_NUMBER.match(value)
    if match is None:
        return None
    return float(match.group(0))


def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE | re.DOTALL)


class RuleBasedDetection(MobileDetection):
    """Detection results for one user agent.

    Rule matches are memoized, so repeated checks are cheap.
    """

    def __init__(self, user_agent: str, source: "MobileDetectSource") -> None:
        self.user_agent = user_agent
        self._source = source
        self._matches: dict[str, bool] = {}

    def _matches_rule(self, name: str, regex: re.Pattern[str]) -> bool:
        if name not in self._matches:
            self._matches[name] = bool(self.user_agent) and regex.search(self.user_agent) is not None
        return self._matches[name]

    def is_mobile(self) -> bool:
        return any(
            self._matches_rule(name, regex) for name, regex in self._source.mobile_rules.items()
        )

    def is_tablet(self) -> bool:
        return any(
            self._matches_rule(name, regex) for name, regex in self._source.tablet_rules.items()
        )

    def is_(self, name: str) -> bool:
        entry = self._source.named_rules.get(name.lower())
        if entry is None:
            return False
        rule_name, regex = entry
        return self._matches_rule(rule_name, regex)

    def match(self, pattern: str) -> bool:
        """Match an arbitrary pattern against the user agent."""
        return bool(self.user_agent) and _compile(pattern).search(self.user_agent) is not None

    def version(self, name: str) -> str:
        for regex in self._source.version_rules.get(name, []):
            found = regex.search(self.user_agent)
            if found and found.group(1):
                return found.group(1)
        return ""

    def version_number(self, name: str) -> float | None:
        value = self.version(name)
        return version_to_float(value) if value else None

    def mobile_grade(self) -> MobileGrade:
        for grade, alternatives in self._source.grade_rules:
            if any(all(self._check(clause) for clause in clauses) for clauses in alternatives):
                return grade
        return self._source.default_grade

    def _check(self, clause: dict[str, Any]) -> bool:
        """Evaluate one grade clause: {"is": name}, {"match": regex} or
        {"version": name, "<op>": number}."""
        if "is" in clause:
            return self.is_(clause["is"])
        if "match" in clause:
            return self.match(clause["match"])

        number = self.version_number(clause["version"])
        if number is None:
            return False

        for symbol, compare in COMPARISONS.items():
            if symbol in clause and not compare(number, float(clause[symbol])):
                return False
        return True


class MobileDetectSource(MobileHeuristicsSource):
    """Mobile detection driven by a JSON rule table.

    Example:
        source = MobileDetectSource()
        source.load_from_file(Path("data/mobile_detect.json"))
        detection = source.detect(user_agent)
        if detection.is_tablet():
            ...
    """

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        """Clear all loaded rules."""
        self.mobile_rules: dict[str, re.Pattern[str]] = {}
        self.tablet_rules: dict[str, re.Pattern[str]] = {}
        self.named_rules: dict[str, tuple[str, re.Pattern[str]]] = {}
        self.version_rules: dict[str, list[re.Pattern[str]]] = {}
        self.grade_rules: list[tuple[MobileGrade, list[list[dict[str, Any]]]]] = []
        self.default_grade = MobileGrade.C
        self._lists: dict[str, list[str]] = {group: [] for group in RULE_GROUPS}
        self._version = "unknown"

    def load_from_file(self, file_path: Path) -> int:
        """Load a rule table from a JSON file.

        Args:
            file_path: Path to the rules JSON file.

        Returns:
            Number of named rules loaded.

        Raises:
            FileNotFoundError: If file doesn't exist.
            ValueError: If the JSON or a regular expression is invalid.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Mobile rules file not found: {file_path}")

        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in mobile rules file: {e}") from e

        count = self.load_from_dict(data)
        logger.info(f"Loaded {count} mobile rules from {file_path} (version: {self._version})")
        return count

    def load_from_dict(self, data: dict[str, Any]) -> int:
        """Load a rule table from parsed JSON data.

        Raises:
            ValueError: If a regular expression or grade is invalid.
        """
        self.clear()
        self._version = str(data.get("version", "unknown"))

        try:
            for group in RULE_GROUPS:
                for name, pattern in data.get(group, {}).items():
                    regex = _compile(pattern)
                    self._lists[group].append(name)
                    self.mobile_rules[name] = regex
                    self.named_rules[name.lower()] = (name, regex)
                    if group == "tablet_devices":
                        self.tablet_rules[name] = regex

            for name, pattern in data.get("utilities", {}).items():
                self.named_rules[name.lower()] = (name, _compile(pattern))

            for name, patterns in data.get("properties", {}).items():
                self.version_rules[name] = [
                    _compile(p.replace(VERSION_PLACEHOLDER, VERSION_GROUP)) for p in patterns
                ]
        except re.error as e:
            raise ValueError(f"Invalid regex in mobile rules: {e}") from e

        for entry in data.get("grades", []):
            self.grade_rules.append((MobileGrade(entry["grade"]), entry.get("any", [])))
        self.default_grade = MobileGrade(data.get("default_grade", MobileGrade.C.value))

        return len(self.named_rules)

    def detect(self, user_agent: str) -> RuleBasedDetection:
        return RuleBasedDetection(user_agent, self)

    @property
    def browsers(self) -> list[str]:
        return list(self._lists["browsers"])

    @property
    def operating_systems(self) -> list[str]:
        return list(self._lists["operating_systems"])

    @property
    def phone_devices(self) -> list[str]:
        return list(self._lists["phone_devices"])

    @property
    def tablet_devices(self) -> list[str]:
        return list(self._lists["tablet_devices"])

    @property
    def script_version(self) -> str:
        return self._version
