"""Configuration management for uainfo.

This module handles loading, saving, and validating configuration
from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Default paths
DEFAULT_CONFIG_DIR = Path(os.environ.get("UAINFO_HOME", "~/.uainfo"))
DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_LOGS_DIR = "logs"

# Packaged source definition files
PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_SIGNATURES_FILE = PACKAGE_DATA_DIR / "signatures.json"
DEFAULT_MOBILE_RULES_FILE = PACKAGE_DATA_DIR / "mobile_detect.json"

# All shared cache keys are prefixed
DEFAULT_CACHE_KEY_PREFIX = "UAI:"


@dataclass
class SourcesConfig:
    """Locations of the source definition files.

    Empty strings select the files packaged with uainfo.
    """

    signatures_file: str = ""
    mobile_rules_file: str = ""


@dataclass
class CacheConfig:
    """Configuration for the identity cache."""

    enabled: bool = True
    backend: str = "memory"  # memory, ttl, none, or "package.module:ClassName"
    key_prefix: str = DEFAULT_CACHE_KEY_PREFIX
    max_size: int = 100_000  # ttl backend only
    ttl_seconds: int = 604_800  # ttl backend only, one week


@dataclass
class ClassificationConfig:
    """Configuration for classification behavior."""

    use_overrides: bool = True
    # User agents containing one of these go straight to the signature database
    signature_only_markers: list[str] = field(default_factory=lambda: ["WSCommand"])


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    console_output: bool = False
    log_classifications: bool = False


@dataclass
class Config:
    """Main configuration container for uainfo.

    Attributes:
        config_dir: Base directory for uainfo data
        logs_dir: Directory for log files
        sources: Source definition files
        cache: Identity cache configuration
        classification: Classification configuration
        logging: Logging configuration
    """

    config_dir: Path = field(default_factory=lambda: DEFAULT_CONFIG_DIR.expanduser())
    logs_dir: Path = field(default_factory=lambda: Path(DEFAULT_LOGS_DIR))

    sources: SourcesConfig = field(default_factory=SourcesConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Resolve relative paths to absolute paths."""
        if not self.logs_dir.is_absolute():
            self.logs_dir = self.config_dir / self.logs_dir

    @property
    def signatures_path(self) -> Path:
        """Get the signature database file to load."""
        return self._resolve_source(self.sources.signatures_file, DEFAULT_SIGNATURES_FILE)

    @property
    def mobile_rules_path(self) -> Path:
        """Get the mobile detection rules file to load."""
        return self._resolve_source(self.sources.mobile_rules_file, DEFAULT_MOBILE_RULES_FILE)

    def _resolve_source(self, value: str, default: Path) -> Path:
        if not value:
            return default
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for JSON serialization."""
        return {
            "config_dir": str(self.config_dir),
            "logs_dir": str(self.logs_dir),
            "sources": {
                "signatures_file": self.sources.signatures_file,
                "mobile_rules_file": self.sources.mobile_rules_file,
            },
            "cache": {
                "enabled": self.cache.enabled,
                "backend": self.cache.backend,
                "key_prefix": self.cache.key_prefix,
                "max_size": self.cache.max_size,
                "ttl_seconds": self.cache.ttl_seconds,
            },
            "classification": {
                "use_overrides": self.classification.use_overrides,
                "signature_only_markers": self.classification.signature_only_markers,
            },
            "logging": {
                "level": self.logging.level,
                "console_output": self.logging.console_output,
                "log_classifications": self.logging.log_classifications,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        config = cls()

        if "config_dir" in data:
            config.config_dir = Path(data["config_dir"])
        if "logs_dir" in data:
            config.logs_dir = Path(data["logs_dir"])
        else:
            config.logs_dir = Path(DEFAULT_LOGS_DIR)

        # Load sources config
        if "sources" in data:
            sources_data = data["sources"]
            config.sources = SourcesConfig(
                signatures_file=sources_data.get("signatures_file", ""),
                mobile_rules_file=sources_data.get("mobile_rules_file", ""),
            )

        # Load cache config
        if "cache" in data:
            cache_data = data["cache"]
            config.cache = CacheConfig(
                enabled=cache_data.get("enabled", True),
                backend=cache_data.get("backend", "memory"),
                key_prefix=cache_data.get("key_prefix", DEFAULT_CACHE_KEY_PREFIX),
                max_size=cache_data.get("max_size", 100_000),
                ttl_seconds=cache_data.get("ttl_seconds", 604_800),
            )

        # Load classification config
        if "classification" in data:
            class_data = data["classification"]
            config.classification = ClassificationConfig(
                use_overrides=class_data.get("use_overrides", True),
                signature_only_markers=class_data.get("signature_only_markers", ["WSCommand"]),
            )

        # Load logging config
        if "logging" in data:
            logging_data = data["logging"]
            config.logging = LoggingConfig(
                level=logging_data.get("level", "INFO"),
                console_output=logging_data.get("console_output", False),
                log_classifications=logging_data.get("log_classifications", False),
            )

        # Re-run post_init to resolve paths
        config.__post_init__()

        return config


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Config object with loaded settings.

    Raises:
        json.JSONDecodeError: If config file contains invalid JSON.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_DIR.expanduser() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        # Return default config if no config file exists
        return Config()

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    return Config.from_dict(data)


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Config object to save.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = config.config_dir / DEFAULT_CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def get_default_config() -> Config:
    """Get the default configuration.

    Returns:
        A new Config object with default settings.
    """
    return Config()
