"""Core module - models, configuration, errors and logging."""

from .config import Config, get_default_config, load_config, save_config
from .errors import CacheTierFailure, ConfigurationError, MalformedOverrideRule, SourceUnavailable
from .logging_config import setup_logging
from .models import (
    Architecture,
    Classification,
    DeviceSignal,
    ExtractedSignal,
    FusionResult,
    IdentificationLevel,
    MobileGrade,
    SignatureRecord,
)

__all__ = [
    # Models
    "IdentificationLevel",
    "MobileGrade",
    "ExtractedSignal",
    "DeviceSignal",
    "Architecture",
    "SignatureRecord",
    "Classification",
    "FusionResult",
    # Errors
    "ConfigurationError",
    "SourceUnavailable",
    "MalformedOverrideRule",
    "CacheTierFailure",
    # Config
    "Config",
    "load_config",
    "save_config",
    "get_default_config",
    "setup_logging",
]
