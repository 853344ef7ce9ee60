"""Detection sources consulted next to the signature database."""

from .base import GenericParse, GenericSubstringSource, MobileDetection, MobileHeuristicsSource
from .mobile_detect import MobileDetectSource, RuleBasedDetection
from .uaparser import UAParserSource

__all__ = [
    "GenericParse",
    "GenericSubstringSource",
    "MobileDetection",
    "MobileHeuristicsSource",
    "MobileDetectSource",
    "RuleBasedDetection",
    "UAParserSource",
]
