"""Classification of user agent strings."""

from .engine import (
    CLASS_PARSER_VERSION,
    ClassificationContext,
    ClassificationEngine,
    compute_data_version,
    create_default_engine,
    load_context,
)
from .fusion import FusionTables, build_classification, fuse, parse_architecture, reconcile_device
from .overrides import ExactRule, OverrideRuleSet, RegexRule, apply_rules
from .rules import create_default_rules
from .signatures import DEFAULT_NAME, DEFAULT_OS, SignatureDatabase

__all__ = [
    # Signature Database
    "SignatureDatabase",
    "DEFAULT_NAME",
    "DEFAULT_OS",
    # Override Rules
    "ExactRule",
    "RegexRule",
    "OverrideRuleSet",
    "apply_rules",
    "create_default_rules",
    # Signal Fusion
    "FusionTables",
    "fuse",
    "build_classification",
    "reconcile_device",
    "parse_architecture",
    # Classification Engine
    "CLASS_PARSER_VERSION",
    "ClassificationContext",
    "ClassificationEngine",
    "compute_data_version",
    "create_default_engine",
    "load_context",
]
