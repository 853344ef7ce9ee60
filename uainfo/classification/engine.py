"""Classification Engine - entry point for classifying user agents.

The engine checks the identity cache, and on a miss resolves the user
agent in the signature database, applies override rules, runs both
detection sources and fuses everything into a Classification.

All source data lives in a ClassificationContext that is built once and
never modified, so one engine can serve many threads.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from uainfo.cache.backends import SharedCacheBackend, create_cache_backend
from uainfo.cache.identity import TIER_MISS, IdentityCache
from uainfo.classification.fusion import (
    SIGNATURE_ONLY_MARKERS,
    FusionTables,
    build_classification,
    fuse,
)
from uainfo.classification.overrides import OverrideRuleSet
from uainfo.classification.rules import create_default_rules
from uainfo.classification.signatures import SignatureDatabase
from uainfo.core.config import DEFAULT_CACHE_KEY_PREFIX, Config
from uainfo.core.errors import ConfigurationError
from uainfo.core.logging_config import log_classification
from uainfo.core.models import SEPARATOR_GENERIC, Classification, SignatureRecord
from uainfo.sources.base import GenericSubstringSource, MobileHeuristicsSource
from uainfo.sources.mobile_detect import MobileDetectSource
from uainfo.sources.uaparser import UAParserSource

logger = logging.getLogger("uainfo.classification.engine")

# Bumped whenever classification logic changes in a way that affects results
CLASS_PARSER_VERSION = 2


def compute_data_version(
    signature_db: SignatureDatabase,
    rules: OverrideRuleSet,
    mobile_source: MobileHeuristicsSource,
    generic_source: GenericSubstringSource,
) -> str:
    """Build the human readable data version.

    Any change to the parser, the signature file, the override rules or
    one of the detection sources produces a different version.
    """
    return SEPARATOR_GENERIC.join(
        [
            str(CLASS_PARSER_VERSION),
            signature_db.fingerprint,
            rules.version,
            mobile_source.script_version,
            generic_source.fingerprint,
        ]
    )


@dataclass(frozen=True)
class ClassificationContext:
    """Everything a classification depends on, loaded once.

    Attributes:
        signature_db: Loaded signature database
        rules: Override and fallback rules
        mobile_source: Mobile heuristics source
        generic_source: Generic substring source
        tables: Name lists derived from the mobile source
        data_version: Version of all of the above
    """

    signature_db: SignatureDatabase
    rules: OverrideRuleSet
    mobile_source: MobileHeuristicsSource
    generic_source: GenericSubstringSource
    tables: FusionTables
    data_version: str

    @classmethod
    def build(
        cls,
        signature_db: SignatureDatabase,
        mobile_source: MobileHeuristicsSource,
        generic_source: GenericSubstringSource,
        rules: OverrideRuleSet | None = None,
        signature_only_markers: Iterable[str] = SIGNATURE_ONLY_MARKERS,
    ) -> "ClassificationContext":
        """Create a context, deriving the name tables and data version."""
        rules = rules if rules is not None else create_default_rules()
        return cls(
            signature_db=signature_db,
            rules=rules,
            mobile_source=mobile_source,
            generic_source=generic_source,
            tables=FusionTables.from_source(mobile_source, tuple(signature_only_markers)),
            data_version=compute_data_version(signature_db, rules, mobile_source, generic_source),
        )


@dataclass
class EngineStatistics:
    """Counters kept by the engine."""

    classified: int = 0
    by_tier: dict[str, int] = field(default_factory=dict)
    by_level: dict[str, int] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, tier: str, classification: Classification) -> None:
        level = classification.id_level.name
        with self._lock:
            self.classified += 1
            self.by_tier[tier] = self.by_tier.get(tier, 0) + 1
            self.by_level[level] = self.by_level.get(level, 0) + 1

    def snapshot(self) -> tuple[int, dict[str, int], dict[str, int]]:
        with self._lock:
            return self.classified, dict(self.by_tier), dict(self.by_level)


class ClassificationEngine:
    """Engine for classifying user agent strings.

    Example:
        engine = create_default_engine()
        info = engine.classify("Mozilla/5.0 (Windows NT 6.1; WOW64; rv:24.0) Gecko/20100101 Firefox/24.0")
        print(info.render_info_all())
    """

    def __init__(
        self,
        context: ClassificationContext,
        cache: IdentityCache | None = None,
        identity_provider: Callable[[], str | None] | None = None,
        log_classifications: bool = False,
    ) -> None:
        """Initialize the classification engine.

        Args:
            context: Loaded source data.
            cache: Identity cache; a local-only cache is created if None.
            identity_provider: Returns the user agent of the current request.
            log_classifications: Whether to write one line per classification
                to the classification log.
        """
        self.context = context
        self.cache = cache or IdentityCache(None, context.data_version)
        self.identity_provider = identity_provider
        self.log_classifications = log_classifications
        self._stats = EngineStatistics()

        if self.cache.data_version != context.data_version:
            raise ConfigurationError(
                "Identity cache data version does not match the classification context"
            )

    @property
    def data_version(self) -> str:
        return self.context.data_version

    def classify(self, user_agent: str, use_cache: bool = True) -> Classification:
        """Classify a user agent.

        Args:
            user_agent: User agent string; surrounding whitespace is ignored.
            use_cache: Whether to read from and write to the identity cache.

        Returns:
            Classification; unknown user agents get IdentificationLevel.NONE.

        Raises:
            SourceUnavailable: If the signature database has no data.
        """
        started = time.perf_counter()
        user_agent = user_agent.strip()

        classification: Classification | None = None
        tier = TIER_MISS

        if use_cache:
            classification, tier = self.cache.lookup(user_agent)

        if classification is None:
            classification = self._resolve(user_agent)
            if use_cache:
                self.cache.put(user_agent, classification)

        self._stats.record(tier, classification)

        if self.log_classifications:
            duration_ms = (time.perf_counter() - started) * 1000
            log_classification(user_agent, classification.id_level.name, tier, duration_ms)

        return classification

    def classify_current(self, use_cache: bool = True) -> Classification:
        """Classify the user agent of the current request.

        The user agent comes from the identity provider given to the
        engine; a missing provider or value classifies an empty string.
        """
        user_agent = self.identity_provider() if self.identity_provider else None
        return self.classify(user_agent or "", use_cache=use_cache)

    def classify_batch(
        self,
        user_agents: Iterable[str],
        use_cache: bool = True,
    ) -> list[Classification]:
        """Classify multiple user agents.

        Args:
            user_agents: User agent strings.
            use_cache: Whether to use the identity cache.

        Returns:
            Classifications in input order.
        """
        return [self.classify(ua, use_cache=use_cache) for ua in user_agents]

    def resolve_signature(self, user_agent: str) -> SignatureRecord:
        """Get the signature record of a user agent after override rules."""
        context = self.context
        record = context.signature_db.lookup(user_agent)
        return context.rules.resolve(user_agent, record)

    def _resolve(self, user_agent: str) -> Classification:
        context = self.context

        record = self.resolve_signature(user_agent)
        generic = context.generic_source.parse(user_agent)
        mobile = context.mobile_source.detect(user_agent)

        result = fuse(user_agent, record, generic, mobile, context.tables)
        logger.debug(
            f"Classified {user_agent[:80]!r}: {result.id_level.name}, sources {result.sources}"
        )

        return build_classification(user_agent, context.data_version, result, record, mobile)

    def get_statistics(self) -> dict[str, Any]:
        """Get classification statistics.

        Returns:
            Dictionary with statistics.
        """
        classified, by_tier, by_level = self._stats.snapshot()
        return {
            "total_classified": classified,
            "by_cache_tier": by_tier,
            "by_id_level": by_level,
            "local_cache_size": self.cache.local_size,
            "data_version": self.data_version,
        }

    def reset_statistics(self) -> None:
        self._stats = EngineStatistics()


def load_context(config: Config) -> ClassificationContext:
    """Load all source data named in the configuration.

    Args:
        config: Configuration.

    Returns:
        Loaded ClassificationContext.

    Raises:
        ConfigurationError: If a source definition file is missing or invalid.
    """
    signature_db = SignatureDatabase()
    mobile_source = MobileDetectSource()

    try:
        signature_db.load_from_file(config.signatures_path)
        mobile_source.load_from_file(config.mobile_rules_path)
    except (FileNotFoundError, ValueError, OSError) as e:
        raise ConfigurationError(f"Cannot load source data: {e}") from e

    return ClassificationContext.build(
        signature_db=signature_db,
        mobile_source=mobile_source,
        generic_source=UAParserSource(),
        rules=create_default_rules() if config.classification.use_overrides else OverrideRuleSet(),
        signature_only_markers=config.classification.signature_only_markers,
    )


def create_default_engine(
    config: Config | None = None,
    backend: SharedCacheBackend | None = None,
    identity_provider: Callable[[], str | None] | None = None,
) -> ClassificationEngine:
    """Create a classification engine with default settings.

    Args:
        config: Configuration; defaults are used if None.
        backend: Shared cache backend; created from the configuration if None.
        identity_provider: Returns the user agent of the current request.

    Returns:
        Configured ClassificationEngine.

    Raises:
        ConfigurationError: If source data or the cache backend is unusable.
    """
    config = config or Config()
    context = load_context(config)

    if backend is None:
        backend = create_cache_backend(config.cache)

    key_prefix = config.cache.key_prefix or DEFAULT_CACHE_KEY_PREFIX
    cache = IdentityCache(backend, context.data_version, key_prefix)

    logger.info(f"Classification engine ready, data version {context.data_version}")

    return ClassificationEngine(
        context,
        cache=cache,
        identity_provider=identity_provider,
        log_classifications=config.logging.log_classifications,
    )
