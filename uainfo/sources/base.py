"""Base interfaces for detection sources.

The classifier combines two detection sources with the signature database:

    - GenericSubstringSource: a substring based parser with good browser and
      OS coverage (ua-parser by default)
    - MobileHeuristicsSource: rule based mobile detection, only trusted for
      mobile devices

Sources are loaded once and must be safe to use from several threads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from uainfo.core.models import MobileGrade


@dataclass(frozen=True)
class GenericParse:
    """Parsed output of a generic substring source.

    Versions are combined strings such as "30.0.1599", empty if unknown.
    """

    browser_family: str = ""
    browser_version: str = ""
    os_family: str = ""
    os_version: str = ""
    device_family: str = ""


class GenericSubstringSource(ABC):
    """Abstract base class for generic substring parsers.

    Subclasses must implement:
        - parse(): Parse one user agent
        - fingerprint: Cheap version of the parser's definition data
    """

    @abstractmethod
    def parse(self, user_agent: str) -> GenericParse:
        """Parse a user agent string.

        Args:
            user_agent: User agent string.

        Returns:
            GenericParse with whatever the parser found.
        """
        pass

    @property
    @abstractmethod
    def fingerprint(self) -> str:
        """Return a value that changes whenever the parser data changes."""
        pass

    def get_source_name(self) -> str:
        return type(self).__name__


class MobileDetection(ABC):
    """Result of mobile detection for one user agent.

    Reusable for any number of checks against the same user agent.

    Example:
        detection = source.detect(user_agent)
        if detection.is_mobile() and detection.is_("AndroidOS"):
            print(detection.version("Android"))
    """

    @abstractmethod
    def is_mobile(self) -> bool:
        """Check if the user agent belongs to a phone or a tablet."""
        pass

    @abstractmethod
    def is_tablet(self) -> bool:
        """Check if the user agent belongs to a tablet."""
        pass

    @abstractmethod
    def is_(self, name: str) -> bool:
        """Check membership in a named browser, OS, device or utility list.

        Args:
            name: Rule name, e.g. "Chrome", "AndroidOS", "iPhone", "Bot".

        Returns:
            True if the rule matches the user agent.
        """
        pass

    @abstractmethod
    def version(self, name: str) -> str:
        """Get the version of a named property, empty if not found."""
        pass

    @abstractmethod
    def mobile_grade(self) -> MobileGrade:
        """Rate the browser as A, B or C grade."""
        pass


class MobileHeuristicsSource(ABC):
    """Abstract base class for mobile detection sources.

    The name lists are ordered; the first matching name is used when
    looking for a browser, OS or device family.
    """

    @abstractmethod
    def detect(self, user_agent: str) -> MobileDetection:
        """Run detection for a user agent."""
        pass

    @property
    @abstractmethod
    def browsers(self) -> list[str]:
        pass

    @property
    @abstractmethod
    def operating_systems(self) -> list[str]:
        pass

    @property
    @abstractmethod
    def phone_devices(self) -> list[str]:
        pass

    @property
    @abstractmethod
    def tablet_devices(self) -> list[str]:
        pass

    @property
    @abstractmethod
    def script_version(self) -> str:
        """Return the version of the detection rules."""
        pass

    def get_source_name(self) -> str:
        return type(self).__name__
