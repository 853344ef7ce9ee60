"""Source-specific extractors.

Each detection source names things its own way. The functions in this
module turn the output of one source into ExtractedSignal and
DeviceSignal values, mapping internal family codes to display names and
dropping the placeholder names a source uses when it knows nothing.
"""

from uainfo.classification.signatures import DEFAULT_NAME, DEFAULT_OS
from uainfo.core.models import SEPARATOR_VERSION, ExtractedSignal, SignatureRecord
from uainfo.sources.base import GenericParse, MobileDetection

# Names the generic substring source uses for unknown, bot and Windows
UAPARSER_DEFAULT_NAME = "Other"
UAPARSER_BOT_NAME = "Spider"
UAPARSER_GENERIC_WINDOWS = "Windows"

# Device families that carry no information
GENERIC_DEVICES = (
    UAPARSER_DEFAULT_NAME,
    UAPARSER_BOT_NAME,
    "Generic Feature Phone",
    "Generic Smartphone",
    "GenericTablet",
    "GenericPhone",
)

MOBILE_TABLET_SUFFIX = "Tablet"

# Mobile heuristics OS rule name -> display name
MD_OS_PROPER_NAMES = {
    "AndroidOS": "Android",
    "BlackBerryOS": "BlackBerry OS",
    "PalmOS": "Palm OS",
    "SymbianOS": "Symbian OS",
    "WindowsMobileOS": "Windows Mobile",
    "WindowsPhoneOS": "Windows Phone",
    "iOS": "iOS",
    "JavaOS": "JAVA",
    "MeeGoOS": "MeeGo",
    "MaemoOS": "Maemo",
    "webOS": "webOS",
    "badaOS": "Bada",
    "BREWOS": "BREW",
}

# Signature database platform -> display name
BC_OS_PROPER_NAMES = {
    "MacOSX": "Mac OS X",
    "SymbianOS": "Symbian OS",
    "iPhone OSX": "iOS",
    "Win31": "",
    "ChromeOS": "Chrome OS",
}

BC_WINDOWS_PREFIX = "Win"
BC_WINDOWS_PHONE_PREFIX = "WinPhone"
WINDOWS_NAME = "Windows"
WINDOWS_PHONE_NAME = "Windows Phone"

# Extra families that are split off the front of a device string
DEVICE_FAMILIES = ("DoCoMo", "Nintendo")


def split_version(family: str, version: str) -> ExtractedSignal | None:
    """Build a signal from a family name and a dotted version string.

    The version is split into at most three parts. Versions made only of
    zeros (like "0.0") are dropped.

    Args:
        family: Family name.
        version: Version string such as "12.16" or "10.8.2".

    Returns:
        The signal, or None if the family is empty.
    """
    if not family:
        return None

    parts = (version or "").split(SEPARATOR_VERSION, 2)
    parts += [""] * (3 - len(parts))

    if all(part in ("", "0") for part in parts):
        return ExtractedSignal(family=family)

    major, minor, patch = parts
    return ExtractedSignal(family=family, major=major, minor=minor, patch=patch)


# Generic substring source


def browser_from_generic(parsed: GenericParse) -> ExtractedSignal | None:
    if parsed.browser_family == UAPARSER_DEFAULT_NAME:
        return None
    return split_version(parsed.browser_family, parsed.browser_version)


def os_from_generic(parsed: GenericParse) -> ExtractedSignal | None:
    family = parsed.os_family
    if family == UAPARSER_DEFAULT_NAME:
        return None
    if family == "linux":
        family = "Linux"
    return split_version(family, parsed.os_version)


def device_from_generic(parsed: GenericParse) -> str:
    """Get the combined device family and model string, empty if generic."""
    device = parsed.device_family
    if device in GENERIC_DEVICES:
        return ""
    if device == "Palm OS":
        return "Palm"
    return device


# Mobile heuristics source


def browser_from_mobile(detection: MobileDetection, browsers: list[str]) -> ExtractedSignal | None:
    """Get the first named mobile browser that matches, with its version."""
    for family in browsers:
        if detection.is_(family):
            return split_version(family, detection.version(family))
    return None


def os_from_mobile(
    detection: MobileDetection, operating_systems: list[str]
) -> ExtractedSignal | None:
    """Get the first named mobile OS that matches, without a version."""
    for family in operating_systems:
        if detection.is_(family):
            return split_version(MD_OS_PROPER_NAMES.get(family, family), "")
    return None


def device_from_mobile(detection: MobileDetection, devices: list[str]) -> str:
    """Get the first named device family that matches, empty if generic.

    The tablet suffix is removed, tablets are reported by is_tablet().
    """
    for family in devices:
        if detection.is_(family):
            if family in GENERIC_DEVICES:
                return ""
            return family.replace(MOBILE_TABLET_SUFFIX, "")
    return ""


def generic_device_families(phone_devices: list[str], tablet_devices: list[str]) -> list[str]:
    """Build the list of family prefixes used to split device strings."""
    families: list[str] = []
    for device in [*phone_devices, *tablet_devices, "Nokia"]:
        if device in GENERIC_DEVICES:
            continue
        name = device.replace(MOBILE_TABLET_SUFFIX, "")
        if name and name not in families:
            families.append(name)
    return families


# Signature database


def browser_from_signature(record: SignatureRecord) -> ExtractedSignal | None:
    if record.browser == DEFAULT_NAME:
        return None
    return split_version(record.browser, record.version)


def os_from_signature(record: SignatureRecord) -> ExtractedSignal | None:
    """Get the OS from the signature database.

    Platform codes are mapped to display names ("Win7" -> "Windows 7").
    Every Windows family, Windows Phone included, drops its version
    (like 6.1).
    """
    family = "" if record.platform == DEFAULT_OS else record.platform
    version = "" if record.platform_version == DEFAULT_OS else record.platform_version

    if family in BC_OS_PROPER_NAMES:
        family = BC_OS_PROPER_NAMES[family]
    elif family.startswith(BC_WINDOWS_PHONE_PREFIX):
        family = WINDOWS_PHONE_NAME
    elif family.startswith(BC_WINDOWS_PREFIX) and not family.startswith(WINDOWS_NAME):
        family = f"{WINDOWS_NAME} {family[len(BC_WINDOWS_PREFIX):]}"

    if family.startswith(WINDOWS_NAME):
        version = ""

    return split_version(family, version)
