"""Override rules - hand written corrections to the signature database.

Rules come in two kinds:
    - ExactRule: matches one user agent string exactly (case sensitive)
    - RegexRule: matches a delimited regular expression such as "#^Opera/(\\d+)#i"

A rule maps to a patch, property name -> value. Patch values of regex
rules may contain "%N$s" placeholders that are replaced by capture group N.

Rule lists are ordered; the first matching rule wins, so more specific
rules must come before more general ones.
"""

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from uainfo.classification.signatures import DEFAULT_NAME, patch_record
from uainfo.core.errors import MalformedOverrideRule
from uainfo.core.models import SignatureRecord

logger = logging.getLogger("uainfo.classification.overrides")

# Bumped whenever rule matching changes in a way that affects results
RULES_PARSER_VERSION = 8

# Length of the rules hash used in the data version
RULES_HASH_LENGTH = 5

PLACEHOLDER_PATTERN = re.compile(r"%(?:(\d+)\$s|%)")

# Trailing modifiers of delimited regular expressions
REGEX_MODIFIERS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}


def compile_delimited(expression: str) -> re.Pattern[str]:
    """Compile a delimited regular expression like "#^foo/(\\d+)#i".

    The first character is the delimiter; everything after its last
    occurrence is a list of modifiers.

    Args:
        expression: Delimited regular expression.

    Returns:
        Compiled pattern.

    Raises:
        ValueError: If the expression is not delimited or has unknown modifiers.
    """
    if len(expression) < 2:
        raise ValueError(f"Not a delimited regular expression: {expression!r}")

    delimiter = expression[0]
    end = expression.rfind(delimiter)
    if end <= 0:
        raise ValueError(f"Missing closing delimiter in {expression!r}")

    flags = 0
    for modifier in expression[end + 1 :]:
        if modifier not in REGEX_MODIFIERS:
            raise ValueError(f"Unknown modifier {modifier!r} in {expression!r}")
        flags |= REGEX_MODIFIERS[modifier]

    return re.compile(expression[1:end], flags)


def substitute_captures(value: str, match: re.Match[str]) -> str:
    """Replace "%N$s" placeholders with capture groups of a match.

    Groups that did not take part in the match become empty strings.

    Raises:
        MalformedOverrideRule: If a placeholder references a group the
            pattern does not have.
    """
    group_count = match.re.groups

    def _replace(placeholder: re.Match[str]) -> str:
        index = placeholder.group(1)
        if index is None:
            return "%"
        number = int(index)
        if number < 1 or number > group_count:
            raise MalformedOverrideRule(
                f"Placeholder %{number}$s used but pattern has {group_count} groups"
            )
        return match.group(number) or ""

    return PLACEHOLDER_PATTERN.sub(_replace, value)


@dataclass(frozen=True)
class ExactRule:
    """Rule matching one exact user agent string."""

    user_agent: str
    patch: dict[str, str] = field(default_factory=dict)

    @property
    def matched_pattern(self) -> str:
        return "^" + re.escape(self.user_agent) + "$"


@dataclass(frozen=True)
class RegexRule:
    """Rule matching a delimited regular expression.

    Attributes:
        expression: Delimited expression, e.g. "#Ezooms/(\\d+)\\.([\\w\\.]+)#"
        patch: Property name -> value, may contain "%N$s" placeholders
    """

    expression: str
    patch: dict[str, str] = field(default_factory=dict)
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_delimited(self.expression))

    @property
    def matched_pattern(self) -> str:
        return self.regex.pattern

    def render(self, match: re.Match[str]) -> dict[str, str]:
        """Build the patch for a match, filling in capture placeholders."""
        return {name: substitute_captures(value, match) for name, value in self.patch.items()}


def apply_rules(
    user_agent: str,
    exact_rules: list[ExactRule],
    regex_rules: list[RegexRule],
    base_record: SignatureRecord,
) -> SignatureRecord:
    """Apply the first matching rule to a signature record.

    Exact rules are checked first. Regex rules are only checked when no
    exact rule matched. A regex rule with a broken placeholder is skipped.

    Args:
        user_agent: User agent string.
        exact_rules: Ordered exact rules.
        regex_rules: Ordered regex rules.
        base_record: Record to patch.

    Returns:
        Patched copy of base_record, or base_record itself if nothing matched.
    """
    for exact in exact_rules:
        if exact.user_agent == user_agent:
            patch: dict[str, Any] = dict(exact.patch)
            patch["browser_name_regex"] = exact.matched_pattern
            return patch_record(base_record, patch)

    for rule in regex_rules:
        match = rule.regex.search(user_agent)
        if match is None:
            continue

        try:
            patch = rule.render(match)
        except MalformedOverrideRule as e:
            logger.debug(f"Skipping rule {rule.expression}: {e}")
            continue

        patch["browser_name_regex"] = rule.matched_pattern
        return patch_record(base_record, patch)

    return base_record


@dataclass(frozen=True)
class OverrideRuleSet:
    """The two ordered rule collections.

    Attributes:
        override_exact: Exact rules that always win over the database
        override_regex: Regex rules that always win over the database
        fallback_exact: Exact rules used when the database knows nothing
        fallback_regex: Regex rules used when the database knows nothing
    """

    override_exact: list[ExactRule] = field(default_factory=list)
    override_regex: list[RegexRule] = field(default_factory=list)
    fallback_exact: list[ExactRule] = field(default_factory=list)
    fallback_regex: list[RegexRule] = field(default_factory=list)

    def resolve(self, user_agent: str, record: SignatureRecord) -> SignatureRecord:
        """Apply override rules, then fallback rules if still unidentified.

        Args:
            user_agent: User agent string.
            record: Record returned by the signature database.

        Returns:
            Final signature record.
        """
        record = apply_rules(user_agent, self.override_exact, self.override_regex, record)

        if record.browser == DEFAULT_NAME:
            record = apply_rules(user_agent, self.fallback_exact, self.fallback_regex, record)

        return record

    @property
    def count(self) -> int:
        return (
            len(self.override_exact)
            + len(self.override_regex)
            + len(self.fallback_exact)
            + len(self.fallback_regex)
        )

    @property
    def version(self) -> str:
        """Get a version string that changes whenever any rule changes.

        Format: "<parser version>.<first characters of the rules md5>".
        """
        tables = [
            [[rule.user_agent, rule.patch] for rule in self.fallback_exact],
            [[rule.user_agent, rule.patch] for rule in self.override_exact],
            [[rule.expression, rule.patch] for rule in self.fallback_regex],
            [[rule.expression, rule.patch] for rule in self.override_regex],
        ]
        serialized = json.dumps(tables, ensure_ascii=False)
        digest = hashlib.md5(serialized.encode("utf-8")).hexdigest()
        return f"{RULES_PARSER_VERSION}.{digest[:RULES_HASH_LENGTH]}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OverrideRuleSet":
        """Create a rule set from a dictionary of rule lists.

        Expected keys: "override_exact", "override_regex", "fallback_exact",
        "fallback_regex". Each is a list of [match, patch] pairs.

        Raises:
            ValueError: If a regex rule cannot be compiled.
        """
        try:
            return cls(
                override_exact=[ExactRule(m, dict(p)) for m, p in data.get("override_exact", [])],
                override_regex=[RegexRule(m, dict(p)) for m, p in data.get("override_regex", [])],
                fallback_exact=[ExactRule(m, dict(p)) for m, p in data.get("fallback_exact", [])],
                fallback_regex=[RegexRule(m, dict(p)) for m, p in data.get("fallback_regex", [])],
            )
        except re.error as e:
            raise ValueError(f"Invalid override rule: {e}") from e
