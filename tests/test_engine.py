"""Unit tests for classification engine module."""

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from stubs import CHROME_WIN7_UA, IPHONE_UA, SEOKICKS_UA
from uainfo.cache.backends import MemoryCacheBackend
from uainfo.cache.identity import TIER_LOCAL, TIER_MISS, TIER_SHARED, IdentityCache
from uainfo.classification.engine import (
    CLASS_PARSER_VERSION,
    ClassificationContext,
    ClassificationEngine,
    create_default_engine,
    load_context,
)
from uainfo.classification.overrides import OverrideRuleSet
from uainfo.core.config import Config, SourcesConfig
from uainfo.core.errors import ConfigurationError
from uainfo.core.models import IdentificationLevel, MobileGrade

YACYBOT_UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/30.0.1599.101 Safari/537.36 yacybot"
)


class TestClassificationContext:
    """Tests for ClassificationContext."""

    def test_data_version_parts(self, context: ClassificationContext):
        """Test the data version names every input."""
        parts = context.data_version.split(", ")

        assert parts[0] == str(CLASS_PARSER_VERSION)
        assert parts[2] == context.rules.version
        assert parts[3] == context.mobile_source.script_version
        assert parts[4] == "stub-1"

    def test_rules_change_data_version(self, context: ClassificationContext):
        """Test other override rules give another data version."""
        other = ClassificationContext.build(
            signature_db=context.signature_db,
            mobile_source=context.mobile_source,
            generic_source=context.generic_source,
            rules=OverrideRuleSet(),
        )
        assert other.data_version != context.data_version


class TestClassify:
    """Tests for ClassificationEngine.classify."""

    def test_exact_override(self, engine: ClassificationEngine):
        """Test an exact override rule identifies a crawler."""
        info = engine.classify(SEOKICKS_UA)

        assert info.browser == "SEOkicks-Robot"
        assert info.is_bot
        assert not info.is_banned
        assert info.id_level == IdentificationLevel.FULL

    def test_bare_mozilla_is_banned(self, engine: ClassificationEngine):
        """Test a bare Mozilla user agent is a banned fake browser."""
        info = engine.classify("Mozilla")

        assert info.browser == "fake generic browser"
        assert info.is_banned
        assert info.is_bot
        assert info.is_identified_fully()

    def test_unknown_user_agent(self, engine: ClassificationEngine):
        """Test an unknown user agent is not identified."""
        info = engine.classify("xq7 random garbage 0000")

        assert info.id_level == IdentificationLevel.NONE
        assert not info.is_identified()
        assert not info.is_bot
        assert not info.is_banned
        assert info.render_info_all() == ""

    def test_empty_user_agent(self, engine: ClassificationEngine):
        """Test an empty user agent is not identified."""
        assert engine.classify("").id_level == IdentificationLevel.NONE

    def test_iphone(self, engine: ClassificationEngine):
        """Test the mobile source identifies an iPhone."""
        info = engine.classify(IPHONE_UA)

        assert info.browser == "Safari"
        assert info.browser_version() == "6.0"
        assert info.os == "iOS"
        assert info.device_family == "iPhone"
        assert info.is_mobile
        assert not info.is_mobile_tablet
        assert info.is_mobile_apple_ios()
        assert info.mobile_grade == MobileGrade.A
        assert info.id_level == IdentificationLevel.FULL
        assert info.render_info_all() == "Safari 6.0, iOS, iPhone"

    def test_desktop_chrome(self, engine: ClassificationEngine):
        """Test desktop Chrome takes the OS from the signature database."""
        info = engine.classify(CHROME_WIN7_UA)

        assert info.render_info_browser() == "Chrome 30.0"
        assert info.render_info_os() == "Windows 7 (64 bit)"
        assert not info.is_64_bit_browser
        assert not info.is_mobile
        assert info.id_level == IdentificationLevel.FULL

    def test_data_version_stamped(self, engine: ClassificationEngine):
        """Test results carry the engine data version."""
        assert engine.classify(SEOKICKS_UA).data_version == engine.data_version

    def test_whitespace_stripped(self, engine: ClassificationEngine):
        """Test surrounding whitespace is ignored and hits the cache."""
        first = engine.classify(SEOKICKS_UA)
        second = engine.classify(f"  {SEOKICKS_UA}\n")

        assert second == first
        assert second.user_agent == SEOKICKS_UA
        assert engine.get_statistics()["by_cache_tier"] == {TIER_MISS: 1, TIER_LOCAL: 1}

    def test_deterministic_without_cache(self, engine: ClassificationEngine):
        """Test repeated uncached classification gives equal results."""
        first = engine.classify(IPHONE_UA, use_cache=False)
        second = engine.classify(IPHONE_UA, use_cache=False)

        assert first == second
        assert engine.cache.local_size == 0

    def test_batch_keeps_order(self, engine: ClassificationEngine):
        """Test batch results are in input order."""
        results = engine.classify_batch([SEOKICKS_UA, "Mozilla", ""])
        assert [r.browser for r in results] == ["SEOkicks-Robot", "fake generic browser", ""]


class TestResolveSignature:
    """Tests for ClassificationEngine.resolve_signature."""

    def test_override_wins_over_database(self, engine: ClassificationEngine):
        """Test an override rule replaces the browser of a database match."""
        record = engine.resolve_signature(YACYBOT_UA)

        assert record.browser == "YaCy-Bot"
        assert record.is_banned
        assert record.crawler
        assert record.version == "30.0"

    def test_database_match(self, engine: ClassificationEngine):
        """Test a plain database match."""
        record = engine.resolve_signature(CHROME_WIN7_UA)
        assert record.browser == "Chrome"
        assert record.platform == "Win7"


class TestCacheTiers:
    """Tests for engines sharing a cache backend."""

    def test_shared_hit(self, context: ClassificationContext):
        """Test a second engine finds results in the shared tier."""
        backend = MemoryCacheBackend()
        first = ClassificationEngine(context, IdentityCache(backend, context.data_version))
        second = ClassificationEngine(context, IdentityCache(backend, context.data_version))

        expected = first.classify(IPHONE_UA)
        assert second.classify(IPHONE_UA) == expected
        assert second.get_statistics()["by_cache_tier"] == {TIER_SHARED: 1}

    def test_data_version_change_invalidates(self, context: ClassificationContext):
        """Test entries of another data version are not reused."""
        backend = MemoryCacheBackend()
        ClassificationEngine(context, IdentityCache(backend, context.data_version)).classify(
            SEOKICKS_UA
        )

        other_context = ClassificationContext.build(
            signature_db=context.signature_db,
            mobile_source=context.mobile_source,
            generic_source=context.generic_source,
            rules=OverrideRuleSet(),
        )
        other = ClassificationEngine(
            other_context, IdentityCache(backend, other_context.data_version)
        )
        info = other.classify(SEOKICKS_UA)

        assert other.get_statistics()["by_cache_tier"] == {TIER_MISS: 1}
        assert info.data_version == other_context.data_version
        assert info.browser != "SEOkicks-Robot"

    def test_mismatched_cache_rejected(self, context: ClassificationContext):
        """Test a cache built for another data version is rejected."""
        with pytest.raises(ConfigurationError):
            ClassificationEngine(context, IdentityCache(None, "something else"))


class TestClassifyCurrent:
    """Tests for ClassificationEngine.classify_current."""

    def test_with_provider(self, context: ClassificationContext):
        """Test the provider supplies the user agent."""
        engine = ClassificationEngine(context, identity_provider=lambda: SEOKICKS_UA)
        assert engine.classify_current().browser == "SEOkicks-Robot"

    def test_without_provider(self, engine: ClassificationEngine):
        """Test no provider classifies an empty user agent."""
        info = engine.classify_current()
        assert info.user_agent == ""
        assert info.id_level == IdentificationLevel.NONE

    def test_provider_returns_none(self, context: ClassificationContext):
        """Test a provider without a value classifies an empty user agent."""
        engine = ClassificationEngine(context, identity_provider=lambda: None)
        assert engine.classify_current().user_agent == ""


class TestStatistics:
    """Tests for engine statistics."""

    def test_statistics(self, engine: ClassificationEngine):
        """Test counters by tier and identification level."""
        engine.classify(SEOKICKS_UA)
        engine.classify(SEOKICKS_UA)
        engine.classify("xq7 random garbage 0000")

        stats = engine.get_statistics()

        assert stats["total_classified"] == 3
        assert stats["by_id_level"] == {"FULL": 2, "NONE": 1}
        assert stats["local_cache_size"] == 2
        assert stats["data_version"] == engine.data_version

    def test_counts_from_many_threads(self, engine: ClassificationEngine):
        """Test no classification is lost from the counters under concurrency."""
        agents = [SEOKICKS_UA, "xq7 random garbage 0000"] * 200

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(engine.classify, agents))

        stats = engine.get_statistics()
        assert stats["total_classified"] == 400
        assert stats["by_id_level"] == {"FULL": 200, "NONE": 200}
        assert sum(stats["by_cache_tier"].values()) == 400

    def test_reset_statistics(self, engine: ClassificationEngine):
        """Test counters are cleared but the cache is kept."""
        engine.classify(SEOKICKS_UA)
        engine.reset_statistics()

        stats = engine.get_statistics()
        assert stats["total_classified"] == 0
        assert stats["by_cache_tier"] == {}
        assert stats["local_cache_size"] == 1


class TestFactory:
    """Tests for loading the engine from configuration."""

    def test_missing_signature_file(self, tmp_path: Path):
        """Test a missing source file is a configuration error."""
        config = Config(config_dir=tmp_path, sources=SourcesConfig(signatures_file="missing.json"))
        with pytest.raises(ConfigurationError, match="Cannot load source data"):
            load_context(config)

    def test_invalid_mobile_rules(self, tmp_path: Path):
        """Test an invalid rules file is a configuration error."""
        (tmp_path / "rules.json").write_text("not json")
        config = Config(config_dir=tmp_path, sources=SourcesConfig(mobile_rules_file="rules.json"))
        with pytest.raises(ConfigurationError):
            load_context(config)

    def test_custom_signature_file(self, tmp_path: Path, signature_file: Path):
        """Test a configured signature file is loaded."""
        config = Config(
            config_dir=tmp_path, sources=SourcesConfig(signatures_file=signature_file.name)
        )
        context = load_context(config)
        assert context.signature_db.version == "test-1"

    def test_create_default_engine(self, tmp_path: Path):
        """Test the default engine loads the packaged data."""
        engine = create_default_engine(Config(config_dir=tmp_path))

        assert engine.data_version.startswith(f"{CLASS_PARSER_VERSION}, ")
        assert engine.context.rules.count > 0
        assert engine.classify(SEOKICKS_UA).browser == "SEOkicks-Robot"

    def test_overrides_disabled(self, tmp_path: Path):
        """Test override rules can be switched off."""
        config = Config.from_dict(
            {"config_dir": str(tmp_path), "classification": {"use_overrides": False}}
        )
        engine = create_default_engine(config)
        assert engine.context.rules.count == 0

    def test_explicit_backend(self, tmp_path: Path):
        """Test a given backend is used as the shared tier."""
        backend = MemoryCacheBackend()
        engine = create_default_engine(Config(config_dir=tmp_path), backend=backend)
        engine.classify(SEOKICKS_UA)

        assert len(backend) == 1
        stored = json.loads(next(iter(backend._data.values())))
        assert stored["browser"] == "SEOkicks-Robot"
