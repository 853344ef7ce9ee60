"""Signature Database - compiled browscap style user agent signatures.

This module loads a compiled signature database and resolves a user agent
string to a flat property map by walking a chain of records, each of which
may inherit unset properties from a parent record.

File format (JSON)::

    {
        "version": "5031",
        "properties": ["browser_name", "browser_name_regex", "Parent", "Browser", ...],
        "user_agents": ["DefaultProperties", "Chrome Generic", ...],
        "records": [{"3": "Default Browser"}, {"2": 0, "3": "Chrome"}, ...],
        "patterns": [
            {"pattern": "^mozilla/5\\\\.0 .*chrome/.*$", "key": 1},
            {"pattern": "^mozilla/5\\\\.0 .*firefox/(\\\\d)(\\\\d)\\\\..*$",
             "keys": {"@2|6": 4, "@2|7": 5}}
        ]
    }

Record values are keyed by the index of their property name. The value of
the "Parent" property is the index of the parent record. "user_agents"
holds the name of each record and has the same length as "records".
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from uainfo.core.errors import SourceUnavailable
from uainfo.core.models import SignatureRecord

logger = logging.getLogger("uainfo.classification.signatures")

# What the database says about user agents it does not know
DEFAULT_NAME = "Default Browser"
DEFAULT_OS = "unknown"

# Properties filled in for every resolved user agent
PROPERTY_USER_AGENT = "browser_name"
PROPERTY_REGEX = "browser_name_regex"
PROPERTY_PARENT = "Parent"

# Sub-record keys are "@" followed by the captures joined with "|"
SUBKEY_PREFIX = "@"
SUBKEY_SEPARATOR = "|"

# Maximum number of parent hops followed for one record
MAX_CHAIN_DEPTH = 32


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _to_str(value).strip().lower() in ("1", "true")


# Property name (lower case) -> (SignatureRecord field, converter)
PROPERTY_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "browser": ("browser", _to_str),
    "version": ("version", _to_str),
    "majorver": ("major_ver", _to_str),
    "minorver": ("minor_ver", _to_str),
    "platform": ("platform", _to_str),
    "platform_version": ("platform_version", _to_str),
    "parent": ("parent", _to_str),
    "ismobiledevice": ("is_mobile_device", _to_bool),
    "issyndicationreader": ("is_syndication_reader", _to_bool),
    "crawler": ("crawler", _to_bool),
    "isbanned": ("is_banned", _to_bool),
    "win64": ("win64", _to_bool),
    "browser_name_regex": ("matched_pattern", _to_str),
}


def record_fields(properties: dict[str, Any]) -> dict[str, Any]:
    """Map property names to SignatureRecord field values.

    Names are matched case-insensitively, unknown names are ignored.

    Args:
        properties: Property name -> raw value.

    Returns:
        SignatureRecord field name -> converted value.
    """
    values: dict[str, Any] = {}
    for name, raw_value in properties.items():
        target = PROPERTY_FIELDS.get(name.lower())
        if target is None:
            continue
        field_name, convert = target
        values[field_name] = convert(raw_value)
    return values


def record_from_properties(properties: dict[str, Any]) -> SignatureRecord:
    """Build a SignatureRecord from a resolved property map."""
    return SignatureRecord(**record_fields(properties))


def patch_record(record: SignatureRecord, properties: dict[str, Any]) -> SignatureRecord:
    """Return a copy of record with the given properties overwritten."""
    return replace(record, **record_fields(properties))


@dataclass
class PatternEntry:
    """A compiled database pattern.

    Attributes:
        source: Pattern as stored in the file
        regex: Compiled, case-insensitive regular expression
        key: Record index for simple patterns
        sub_keys: Capture key -> record index for patterns with wildcard groups
    """

    source: str
    regex: re.Pattern[str]
    key: int | None = None
    sub_keys: dict[str, int] | None = None


class SignatureDatabase:
    """Compiled signature database.

    Loaded once and read-only afterwards, so one instance can be shared by
    any number of concurrent lookups.

    Example:
        db = SignatureDatabase()
        db.load_from_file(Path("data/signatures.json"))
        record = db.lookup("Mozilla/5.0 (Windows NT 6.1) ... Chrome/30.0 ...")
        print(record.browser, record.platform)
    """

    def __init__(self) -> None:
        """Initialize an empty signature database."""
        self.properties: list[str] = []
        self.user_agents: list[str] = []
        self.records: list[dict[int, Any]] = []
        self.patterns: list[PatternEntry] = []
        self.version: str = "unknown"
        self._parent_index: int | None = None
        self._loaded_file: Path | None = None
        self._file_size: int | None = None
        self._invalid_patterns: list[str] = []

    def load_from_file(self, file_path: Path) -> int:
        """Load a compiled signature database from a JSON file.

        Args:
            file_path: Path to the signature JSON file.

        Returns:
            Number of patterns loaded.

        Raises:
            FileNotFoundError: If file doesn't exist.
            ValueError: If the JSON is invalid or not a signature database.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"Signature file not found: {file_path}")

        content = file_path.read_text(encoding="utf-8")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in signature file: {e}") from e

        count = self.load_from_dict(data)

        self._loaded_file = file_path
        self._file_size = file_path.stat().st_size
        logger.info(f"Loaded {count} signature patterns from {file_path} (version: {self.version})")

        return count

    def load_from_dict(self, data: dict[str, Any]) -> int:
        """Load a compiled signature database from parsed JSON data.

        Replaces anything loaded before.

        Args:
            data: Parsed signature database.

        Returns:
            Number of patterns loaded.

        Raises:
            ValueError: If the data is not a signature database.
        """
        if not isinstance(data, dict):
            raise ValueError("Invalid signature file format")

        properties = data.get("properties")
        records = data.get("records")
        patterns = data.get("patterns")
        if not isinstance(properties, list) or not isinstance(records, list):
            raise ValueError("Signature file must contain 'properties' and 'records' lists")
        if not isinstance(patterns, list):
            raise ValueError("Signature file must contain a 'patterns' list")

        self.clear()
        self.version = str(data.get("version", "unknown"))
        self.properties = [str(name) for name in properties]
        self.user_agents = [str(name) for name in data.get("user_agents", [])]
        self.records = [
            {int(index): value for index, value in record.items()} for record in records
        ]

        if PROPERTY_PARENT in self.properties:
            self._parent_index = self.properties.index(PROPERTY_PARENT)

        for entry in patterns:
            compiled = self._compile_entry(entry)
            if compiled is not None:
                self.patterns.append(compiled)

        return len(self.patterns)

    def _compile_entry(self, entry: dict[str, Any]) -> PatternEntry | None:
        """Compile one pattern entry, logging and skipping broken ones."""
        source = entry.get("pattern", "")
        try:
            regex = re.compile(source, re.IGNORECASE)
        except re.error:
            logger.warning(f"Invalid regex pattern: {source}")
            self._invalid_patterns.append(source)
            return None

        sub_keys = entry.get("keys")
        if sub_keys is not None:
            return PatternEntry(
                source=source,
                regex=regex,
                sub_keys={str(k): int(v) for k, v in sub_keys.items()},
            )

        return PatternEntry(source=source, regex=regex, key=int(entry.get("key", -1)))

    @property
    def is_loaded(self) -> bool:
        """Check if any patterns are available for lookups."""
        return bool(self.patterns)

    @property
    def count(self) -> int:
        """Get total number of patterns."""
        return len(self.patterns)

    @property
    def fingerprint(self) -> str:
        """Get a cheap fingerprint of the loaded data.

        The byte size of the definition file is used instead of a content
        hash, which would be too costly to compute on every process start.
        """
        if self._file_size is not None:
            return str(self._file_size)
        return f"memory-{self.version}"

    def resolve(self, user_agent: str) -> dict[str, Any]:
        """Resolve a user agent to a flat property map.

        The first pattern (in stored order) that matches selects a record.
        Patterns with wildcard groups select a sub-record by their captures;
        when no sub-record exists for the captures the scan continues.

        Args:
            user_agent: User agent string.

        Returns:
            Property name -> value, in declared property order.

        Raises:
            SourceUnavailable: If no signature data was loaded.
        """
        if not self.is_loaded:
            raise SourceUnavailable("Signature database returned no data, nothing was loaded")

        for entry in self.patterns:
            match = entry.regex.search(user_agent)
            if match is None:
                continue

            key = self._select_key(entry, match)
            if key is None:
                continue

            return self._build_properties(user_agent, entry.source, key)

        return {
            PROPERTY_USER_AGENT: user_agent,
            "Browser": DEFAULT_NAME,
            "Platform": DEFAULT_OS,
        }

    def lookup(self, user_agent: str) -> SignatureRecord:
        """Resolve a user agent to a typed SignatureRecord.

        Args:
            user_agent: User agent string.

        Returns:
            Resolved record; the default record if nothing matched.
        """
        return record_from_properties(self.resolve(user_agent))

    def _select_key(self, entry: PatternEntry, match: re.Match[str]) -> int | None:
        if entry.sub_keys is None or not match.groups():
            return entry.key

        captures = [group or "" for group in match.groups()]
        match_string = SUBKEY_PREFIX + SUBKEY_SEPARATOR.join(captures)
        return entry.sub_keys.get(match_string)

    def _build_properties(self, user_agent: str, pattern: str, key: int) -> dict[str, Any]:
        """Merge a record with its parent chain, closest to the leaf wins."""
        merged: dict[int, Any] = {}
        leaf_parent: Any = None
        visited: set[int] = set()
        current: int | None = key
        hops = 0

        while current is not None:
            if current in visited or hops >= MAX_CHAIN_DEPTH:
                logger.warning(f"Parent chain of record {key} truncated at record {current}")
                break
            if not 0 <= current < len(self.records):
                logger.warning(f"Record {key} references missing record {current}")
                break

            visited.add(current)
            record = self.records[current]
            for index, value in record.items():
                merged.setdefault(index, value)

            parent = record.get(self._parent_index) if self._parent_index is not None else None
            if current == key:
                leaf_parent = parent
            try:
                current = int(parent) if parent is not None else None
            except (TypeError, ValueError):
                logger.warning(f"Record {current} has a non-integer parent {parent!r}")
                break
            hops += 1

        properties: dict[str, Any] = {}
        for index, name in enumerate(self.properties):
            if name == PROPERTY_USER_AGENT:
                properties[name] = user_agent
            elif name == PROPERTY_REGEX:
                properties[name] = pattern.lower()
            elif index == self._parent_index:
                if leaf_parent is not None:
                    properties[name] = self._user_agent_name(leaf_parent)
            elif index in merged:
                properties[name] = self._normalize(merged[index])

        properties.setdefault(PROPERTY_USER_AGENT, user_agent)
        properties.setdefault(PROPERTY_REGEX, pattern.lower())
        return properties

    def _user_agent_name(self, key: Any) -> str:
        try:
            key = int(key)
        except (TypeError, ValueError):
            return ""
        if 0 <= key < len(self.user_agents):
            return self.user_agents[key]
        return ""

    @staticmethod
    def _normalize(value: Any) -> Any:
        if value == "true":
            return True
        if value == "false":
            return False
        return value

    def validate(self) -> list[str]:
        """Check the loaded data for structural problems.

        Returns:
            List of problem descriptions, empty if the data is consistent.
        """
        problems = [f"invalid regex: {source}" for source in self._invalid_patterns]
        record_count = len(self.records)

        if self.user_agents and len(self.user_agents) != record_count:
            problems.append(
                f"user_agents has {len(self.user_agents)} entries for {record_count} records"
            )

        for entry in self.patterns:
            keys = [entry.key] if entry.sub_keys is None else list(entry.sub_keys.values())
            for key in keys:
                if key is None or not 0 <= key < record_count:
                    problems.append(f"pattern {entry.source!r} references missing record {key}")

        if self._parent_index is None:
            return problems

        for start in range(record_count):
            visited: set[int] = set()
            current: int | None = start
            while current is not None:
                if current in visited or len(visited) >= MAX_CHAIN_DEPTH:
                    problems.append(f"record {start} has a cyclic or too deep parent chain")
                    break
                if not 0 <= current < record_count:
                    problems.append(f"record {start} references missing parent {current}")
                    break
                visited.add(current)
                parent = self.records[current].get(self._parent_index)
                try:
                    current = int(parent) if parent is not None else None
                except (TypeError, ValueError):
                    if current == start:
                        problems.append(f"record {start} has a non-integer parent {parent!r}")
                    break

        return problems

    def get_version_info(self) -> dict[str, Any]:
        """Get version information about the loaded database."""
        return {
            "version": self.version,
            "file": str(self._loaded_file) if self._loaded_file else None,
            "fingerprint": self.fingerprint,
            "patterns": self.count,
            "records": len(self.records),
        }

    def clear(self) -> None:
        """Clear all loaded data."""
        self.properties = []
        self.user_agents = []
        self.records = []
        self.patterns = []
        self.version = "unknown"
        self._parent_index = None
        self._loaded_file = None
        self._file_size = None
        self._invalid_patterns = []

