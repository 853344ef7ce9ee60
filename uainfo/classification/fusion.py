"""Signal Fusion - merges all detection sources into one classification.

The generic substring source is preferred for browser and OS names, the
mobile heuristics source is only trusted for mobile devices and the
signature database fills in the rest. The order in which sources are
consulted is fixed and every step is documented in fuse().
"""

from dataclasses import dataclass

from uainfo.classification import extractors
from uainfo.classification.signatures import DEFAULT_NAME
from uainfo.core.models import (
    Architecture,
    Classification,
    DeviceSignal,
    ExtractedSignal,
    FusionResult,
    IdentificationLevel,
    MobileGrade,
    SignatureRecord,
)
from uainfo.sources.base import GenericParse, MobileDetection, MobileHeuristicsSource

# User agents containing one of these are known to fool the generic source
SIGNATURE_ONLY_MARKERS = ("WSCommand",)

MOBILE_DETECT_BOT_NAME = "Bot"
MOBILE_DETECT_MOBILE_BOT_NAME = "MobileBot"

# Renamed so that browser and OS are not both "Android"
ANDROID_NAME = "Android"
ANDROID_BROWSER_NAME = "Android Browser"

# Sub-brand reported as a version of its parent brand
NEXUS_TOKEN = "nexus"
NEXUS_FAMILY = "Google"

LUMIA_PREFIX = "lumia"
LUMIA_FAMILY = "Nokia"

SOURCE_GENERIC = "generic"
SOURCE_MOBILE = "mobile"
SOURCE_SIGNATURE = "signature"


@dataclass(frozen=True)
class FusionTables:
    """Name lists the fusion steps need from the mobile heuristics source.

    Attributes:
        browsers: Ordered mobile browser rule names
        operating_systems: Ordered mobile OS rule names
        devices: Ordered phone then tablet device rule names
        generic_families: Family prefixes for splitting device strings
        signature_only_markers: Substrings routing the browser to the database
    """

    browsers: tuple[str, ...] = ()
    operating_systems: tuple[str, ...] = ()
    devices: tuple[str, ...] = ()
    generic_families: tuple[str, ...] = ()
    signature_only_markers: tuple[str, ...] = SIGNATURE_ONLY_MARKERS

    @classmethod
    def from_source(
        cls,
        source: MobileHeuristicsSource,
        signature_only_markers: tuple[str, ...] = SIGNATURE_ONLY_MARKERS,
    ) -> "FusionTables":
        phones = source.phone_devices
        tablets = source.tablet_devices
        return cls(
            browsers=tuple(source.browsers),
            operating_systems=tuple(source.operating_systems),
            devices=tuple(phones + tablets),
            generic_families=tuple(extractors.generic_device_families(phones, tablets)),
            signature_only_markers=tuple(signature_only_markers),
        )


def _strip_prefix(value: str, prefix: str) -> str:
    return value[len(prefix) :].strip()


def reconcile_device(
    md_family: str, uap_device: str, generic_families: tuple[str, ...] | list[str]
) -> DeviceSignal:
    """Merge a device family guess with a combined family and model string.

    Args:
        md_family: Device family from the mobile heuristics source.
        uap_device: Combined family and model from the generic source.
        generic_families: Known family prefixes used to split uap_device.

    Returns:
        Reconciled device family and version.
    """
    if not md_family and not uap_device:
        return DeviceSignal()

    if NEXUS_TOKEN in uap_device.lower():
        return DeviceSignal(NEXUS_FAMILY, uap_device)

    if md_family == "iPhone" and uap_device == "iPod":
        return DeviceSignal(md_family, "")

    lowered = uap_device.lower()

    if not md_family:
        for family in generic_families:
            if lowered.startswith(family.lower()):
                return DeviceSignal(family, _strip_prefix(uap_device, family))

        if lowered.startswith(LUMIA_PREFIX):
            return DeviceSignal(LUMIA_FAMILY, uap_device)

        for family in extractors.DEVICE_FAMILIES:
            if lowered.startswith(family.lower()):
                return DeviceSignal(uap_device[: len(family)], _strip_prefix(uap_device, family))

        return DeviceSignal("", uap_device)

    if not uap_device or md_family == uap_device:
        return DeviceSignal(md_family, "")

    if lowered.startswith(md_family.lower()):
        return DeviceSignal(md_family, _strip_prefix(uap_device, md_family))

    return DeviceSignal(md_family, uap_device)


def parse_architecture(user_agent: str) -> Architecture:
    """Guess browser and OS bitness from well known tokens.

    Tokens are checked in order: WOW64 (32 bit browser on 64 bit Windows),
    "Win64; x64" (64 bit browser), x86_64/amd64 (64 bit OS) and i686
    (32 bit). Matching is case-insensitive.
    """
    if not user_agent:
        return Architecture()

    lowered = user_agent.lower()

    if "wow64" in lowered:
        return Architecture(browser=32, os=64)

    if "win64; x64" in lowered:
        return Architecture(browser=64, os=64)

    if "x86_64" in lowered or "amd64" in lowered:
        return Architecture(os=64)

    if "i686" in lowered:
        return Architecture(browser=32, os=32)

    return Architecture()


def fuse(
    user_agent: str,
    record: SignatureRecord,
    generic: GenericParse,
    mobile: MobileDetection,
    tables: FusionTables,
) -> FusionResult:
    """Combine the signature record and both detection sources.

    Args:
        user_agent: Trimmed user agent string.
        record: Signature record after override rules.
        generic: Output of the generic substring source.
        mobile: Output of the mobile heuristics source.
        tables: Name lists from the mobile heuristics source.

    Returns:
        FusionResult with the winning signals and the identification level.
    """
    sources: dict[str, str] = {}

    # 1. Mobile detection results are only used for mobile devices
    md_is_mobile = mobile.is_mobile()
    md_browser = (
        extractors.browser_from_mobile(mobile, list(tables.browsers)) if md_is_mobile else None
    )
    is_mobile = md_is_mobile or record.is_mobile_device

    # 2. Browser
    browser: ExtractedSignal | None = None
    if any(marker in user_agent for marker in tables.signature_only_markers):
        browser = extractors.browser_from_signature(record)
        if browser:
            sources["browser"] = SOURCE_SIGNATURE
    else:
        for source_name, candidate in (
            (SOURCE_GENERIC, lambda: extractors.browser_from_generic(generic)),
            (SOURCE_MOBILE, lambda: md_browser),
            (SOURCE_SIGNATURE, lambda: extractors.browser_from_signature(record)),
        ):
            browser = candidate()
            if browser:
                sources["browser"] = source_name
                break

    # 3. Browser and OS are not both called "Android"
    if browser and browser.family == ANDROID_NAME:
        browser = ExtractedSignal(ANDROID_BROWSER_NAME, browser.major, browser.minor, browser.patch)

    # 4. Device
    device = reconcile_device(
        extractors.device_from_mobile(mobile, list(tables.devices)),
        extractors.device_from_generic(generic),
        tables.generic_families,
    )

    # 5. OS
    os_signal = extractors.os_from_generic(generic)
    if os_signal:
        sources["os"] = SOURCE_GENERIC
    if (os_signal is None or not os_signal.has_version) and md_is_mobile:
        os_signal = extractors.os_from_mobile(mobile, list(tables.operating_systems))
        sources["os"] = SOURCE_MOBILE

    if os_signal is None:
        os_signal = extractors.os_from_signature(record)
        sources["os"] = SOURCE_SIGNATURE
    elif os_signal.family == extractors.UAPARSER_GENERIC_WINDOWS:
        specific = extractors.os_from_signature(record)
        if specific:
            os_signal = specific
            sources["os"] = SOURCE_SIGNATURE

    if os_signal is None:
        sources.pop("os", None)

    # 6. Architecture
    architecture = parse_architecture(user_agent)

    # 7. Bots
    is_bot = (
        record.crawler
        or generic.device_family == extractors.UAPARSER_BOT_NAME
        or mobile.is_(MOBILE_DETECT_BOT_NAME)
        or mobile.is_(MOBILE_DETECT_MOBILE_BOT_NAME)
    )

    # 8. Mobile grade
    mobile_grade = MobileGrade.UNKNOWN
    if md_is_mobile and md_browser is not None:
        mobile_grade = mobile.mobile_grade()

    # 9. Identification level
    if (
        is_mobile
        and not is_bot
        and browser
        and os_signal
        and (device.family or device.version)
    ):
        id_level = IdentificationLevel.FULL
    elif record.browser != DEFAULT_NAME:
        id_level = IdentificationLevel.FULL
    elif browser or is_mobile or is_bot:
        id_level = IdentificationLevel.PARTIAL
        if not browser:
            name = "generic " + ("mobile " if is_mobile else "") + ("bot " if is_bot else "")
            browser = ExtractedSignal(family=name.strip())
    else:
        id_level = IdentificationLevel.NONE

    return FusionResult(
        browser=browser,
        os=os_signal,
        device=device,
        architecture=architecture,
        is_mobile=is_mobile,
        is_bot=is_bot,
        mobile_grade=mobile_grade,
        id_level=id_level,
        sources=sources,
    )


def build_classification(
    user_agent: str,
    data_version: str,
    result: FusionResult,
    record: SignatureRecord,
    mobile: MobileDetection,
) -> Classification:
    """Freeze a fusion result into a Classification.

    Args:
        user_agent: Trimmed user agent string.
        data_version: Active data version.
        result: Output of fuse().
        record: Signature record after override rules.
        mobile: Output of the mobile heuristics source.

    Returns:
        Immutable classification.
    """
    browser = result.browser or ExtractedSignal(family="")
    os_signal = result.os or ExtractedSignal(family="")

    return Classification(
        user_agent=user_agent,
        id_level=result.id_level,
        data_version=data_version,
        browser=browser.family,
        browser_major=browser.major,
        browser_minor=browser.minor,
        browser_patch=browser.patch,
        device_family=result.device.family,
        device_version=result.device.version,
        os=os_signal.family,
        os_major=os_signal.major,
        os_minor=os_signal.minor,
        os_patch=os_signal.patch,
        is_banned=record.is_banned,
        is_mobile=result.is_mobile,
        is_mobile_tablet=result.is_mobile and mobile.is_tablet(),
        is_bot=result.is_bot,
        is_bot_reader=result.is_bot and record.is_syndication_reader,
        is_64_bit_os=result.architecture.is_os_64bit,
        is_64_bit_browser=result.architecture.is_browser_64bit,
        mobile_grade=result.mobile_grade,
    )
