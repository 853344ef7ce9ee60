"""Core data models for uainfo.

This module defines all enums, data classes, and type definitions used
throughout the classifier.
"""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any

# Version number parts are separated by a dot
SEPARATOR_VERSION = "."

# Used for joining human readable data
SEPARATOR_GENERIC = ", "

# Label appended to rendered names of 64 bit software
NAME_64_BIT = "64 bit"

# Browser names used by the Internet Explorer version check
UA_IE_DESKTOP = "IE"
UA_IE_MOBILE = "IE Mobile"


class IdentificationLevel(Enum):
    """How well a user agent was identified.

    Levels:
        NONE: Nothing useful was found
        PARTIAL: Browser name, mobile or bot status is known
        FULL: Identified by the signature database or a specific mobile match
    """

    NONE = 0
    PARTIAL = 1
    FULL = 2


class MobileGrade(Enum):
    """Mobile browser quality grades.

    Grades:
        A: Full support for current web technologies
        B: Partial support, no AJAX
        C: Basic HTML only
        UNKNOWN: Not rated
    """

    A = "A"
    B = "B"
    C = "C"
    UNKNOWN = ""


@dataclass(frozen=True)
class ExtractedSignal:
    """A normalized (family, version) opinion about a browser or an OS.

    Attributes:
        family: Family name, never empty
        major: Major version part
        minor: Minor version part
        patch: Everything after the minor part
    """

    family: str
    major: str = ""
    minor: str = ""
    patch: str = ""

    @property
    def has_version(self) -> bool:
        """Check if the signal carries a major version."""
        return self.major != ""


@dataclass(frozen=True)
class DeviceSignal:
    """A device family and a free text version (model) string."""

    family: str = ""
    version: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.family and not self.version


@dataclass(frozen=True)
class Architecture:
    """Bitness of the browser and the operating system.

    A None value means the user agent did not say anything about it.
    """

    browser: int | None = None
    os: int | None = None

    @property
    def is_browser_64bit(self) -> bool:
        return self.browser == 64

    @property
    def is_os_64bit(self) -> bool:
        return self.os == 64


@dataclass(frozen=True)
class SignatureRecord:
    """Typed view of the properties resolved from the signature database.

    Attributes:
        browser: Browser name ("Default Browser" if not identified)
        version: Full browser version string
        major_ver: Browser major version
        minor_ver: Browser minor version
        platform: Platform code ("unknown" if not identified)
        platform_version: Platform version
        parent: Name of the parent record
        is_mobile_device: Whether the database says it is a mobile device
        is_syndication_reader: Whether it is a feed reader
        crawler: Whether it is a crawler
        is_banned: Whether it should be banned right away
        win64: Whether it is a 64 bit Windows build
        matched_pattern: Pattern that selected the record
    """

    browser: str = "Default Browser"
    version: str = ""
    major_ver: str = ""
    minor_ver: str = ""
    platform: str = "unknown"
    platform_version: str = ""
    parent: str = ""
    is_mobile_device: bool = False
    is_syndication_reader: bool = False
    crawler: bool = False
    is_banned: bool = False
    win64: bool = False
    matched_pattern: str = ""


@dataclass(frozen=True)
class Classification:
    """Final, cacheable information about a single user agent string.

    Instances are immutable. They are created by the classification engine
    and stored in the identity cache; a cached instance whose data_version
    differs from the active one is treated as absent.
    """

    user_agent: str
    id_level: IdentificationLevel
    data_version: str
    browser: str = ""
    browser_major: str = ""
    browser_minor: str = ""
    browser_patch: str = ""
    device_family: str = ""
    device_version: str = ""
    os: str = ""
    os_major: str = ""
    os_minor: str = ""
    os_patch: str = ""
    is_banned: bool = False
    is_mobile: bool = False
    is_mobile_tablet: bool = False
    is_bot: bool = False
    is_bot_reader: bool = False
    is_64_bit_os: bool = False
    is_64_bit_browser: bool = False
    mobile_grade: MobileGrade = MobileGrade.UNKNOWN

    def is_identified(self) -> bool:
        """Was the user agent identified at least a little bit?"""
        return self.id_level != IdentificationLevel.NONE

    def is_identified_fully(self) -> bool:
        """Was the user agent identified fully?"""
        return self.id_level == IdentificationLevel.FULL

    def is_mobile_android(self) -> bool:
        """Is the operating system Android (which also means a mobile device)?"""
        return self.is_mobile and self.os == "Android"

    def is_mobile_apple_ios(self) -> bool:
        """Is the operating system iOS (an iPhone or an iPad)?"""
        return self.is_mobile and self.os == "iOS"

    def is_mobile_grade_rated(self) -> bool:
        return self.mobile_grade != MobileGrade.UNKNOWN

    def is_mobile_grade_a(self) -> bool:
        """Is this a grade A mobile browser?

        Devices that were not rated are not grade A, so to find devices that
        most likely lack support for current technologies check
        ``is_mobile_grade_rated() and not is_mobile_grade_a()``.
        """
        return self.mobile_grade == MobileGrade.A

    def is_ie_version(
        self,
        include_version: int,
        also_match_lower: bool,
        include_mobile: bool = False,
    ) -> bool:
        """Detect an Internet Explorer version.

        Args:
            include_version: IE major version to check for.
            also_match_lower: Also match all older IE versions.
            include_mobile: Also match IE Mobile.

        Returns:
            True if this is IE and its version matches the filter.
        """
        try:
            major = int(self.browser_major)
        except ValueError:
            return False

        if major > include_version:
            return False

        if not also_match_lower and major < include_version:
            return False

        if self.browser == UA_IE_DESKTOP:
            return True

        return include_mobile and self.browser == UA_IE_MOBILE

    def browser_version(self, detailed: bool = False) -> str:
        """Get the browser version.

        Args:
            detailed: Also include the patch part.

        Returns:
            Version string, empty if unknown.
        """
        return _join_version(self.browser_major, self.browser_minor, self.browser_patch, detailed)

    def os_version(self, detailed: bool = False) -> str:
        """Get the operating system version (empty for Windows)."""
        return _join_version(self.os_major, self.os_minor, self.os_patch, detailed)

    def render_info_browser(self, detailed: bool = False) -> str:
        """Render browser information, for example 'Opera 12.16 (64 bit)'."""
        return _render_named(
            self.browser, self.browser_version(detailed), self.is_64_bit_browser
        )

    def render_info_os(self, detailed: bool = False) -> str:
        """Render OS information, for example 'Windows 7 (64 bit)'."""
        return _render_named(self.os, self.os_version(detailed), self.is_64_bit_os)

    def render_info_device(self) -> str:
        """Render device information, for example 'Samsung GT-I9000'."""
        if self.device_family:
            if not self.device_version:
                return self.device_family
            if self.device_version.startswith("-"):
                return self.device_family + self.device_version
            return f"{self.device_family} {self.device_version}"

        return self.device_version

    def render_info_all(self, detailed: bool = False) -> str:
        """Render browser, OS and device, for example 'Mobile Safari 6.0, iOS 6.1, iPhone'."""
        parts = [
            self.render_info_browser(detailed),
            self.render_info_os(detailed),
            self.render_info_device(),
        ]
        return SEPARATOR_GENERIC.join(part for part in parts if part)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON serializable dictionary."""
        data = asdict(self)
        data["id_level"] = self.id_level.name
        data["mobile_grade"] = self.mobile_grade.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Classification":
        """Create a classification from a dictionary made by to_dict().

        Raises:
            KeyError: If a required key or enum name is missing.
            ValueError: If an enum value is invalid.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values["id_level"] = IdentificationLevel[data["id_level"]]
        values["mobile_grade"] = MobileGrade(data.get("mobile_grade", ""))
        return cls(**values)


def _join_version(major: str, minor: str, patch: str, detailed: bool) -> str:
    if not major:
        return ""

    version = major
    if minor:
        version += SEPARATOR_VERSION + minor
        if detailed and patch:
            version += SEPARATOR_VERSION + patch

    return version


def _render_named(name: str, version: str, is_64bit: bool) -> str:
    if not name:
        return ""

    info = name
    if version:
        info += f" {version}"
    if is_64bit:
        info += f" ({NAME_64_BIT})"

    return info


@dataclass
class FusionResult:
    """Intermediate output of signal fusion, before it is frozen.

    Attributes:
        browser: Winning browser signal
        os: Winning OS signal
        device: Reconciled device
        architecture: Bitness guess
        is_mobile: Mobile flag
        is_bot: Bot flag
        mobile_grade: Mobile grade
        id_level: Identification level
        sources: Which source supplied browser and os ("generic", "mobile", "signature")
    """

    browser: ExtractedSignal | None
    os: ExtractedSignal | None
    device: DeviceSignal
    architecture: Architecture
    is_mobile: bool
    is_bot: bool
    mobile_grade: MobileGrade
    id_level: IdentificationLevel
    sources: dict[str, str] = field(default_factory=dict)
