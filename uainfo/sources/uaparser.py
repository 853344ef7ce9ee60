"""Generic substring source backed by ua-parser."""

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from ua_parser import user_agent_parser

from uainfo.sources.base import GenericParse, GenericSubstringSource

logger = logging.getLogger("uainfo.sources.uaparser")

UAPARSER_DISTRIBUTION = "ua-parser"


def _version_string(parsed: dict[str, Any], *keys: str) -> str:
    """Join the known version parts of a ua-parser result with dots."""
    parts = []
    for key in keys:
        value = parsed.get(key)
        if not value:
            break
        parts.append(str(value))
    return ".".join(parts)


class UAParserSource(GenericSubstringSource):
    """Parse user agents with the ua-parser regexes.

    The regexes ship inside the ua-parser distribution, so its installed
    version is used as the fingerprint.
    """

    def __init__(self) -> None:
        try:
            self._fingerprint = version(UAPARSER_DISTRIBUTION)
        except PackageNotFoundError:
            logger.warning("Could not determine the installed ua-parser version")
            self._fingerprint = "unknown"

    def parse(self, user_agent: str) -> GenericParse:
        parsed = user_agent_parser.Parse(user_agent) if user_agent else {}

        browser = parsed.get("user_agent") or {}
        os_info = parsed.get("os") or {}
        device = parsed.get("device") or {}

        return GenericParse(
            browser_family=browser.get("family") or "",
            browser_version=_version_string(browser, "major", "minor", "patch"),
            os_family=os_info.get("family") or "",
            os_version=_version_string(os_info, "major", "minor", "patch", "patch_minor"),
            device_family=device.get("family") or "",
        )

    @property
    def fingerprint(self) -> str:
        return self._fingerprint
