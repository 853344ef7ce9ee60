"""Tests for the rule based mobile detection source."""

import json
from pathlib import Path

import pytest

from stubs import GOOGLEBOT_UA, IPAD_UA, IPHONE_UA
from uainfo.core.models import MobileGrade
from uainfo.sources.mobile_detect import MobileDetectSource, version_to_float

ANDROID_UA = (
    "Mozilla/5.0 (Linux; U; Android 2.3.6; en-us; Nexus S Build/GRK39F) AppleWebKit/533.1 "
    "(KHTML, like Gecko) Version/4.0 Mobile Safari/533.1"
)
OPERA_MINI_UA = "Opera/9.80 (J2ME/MIDP; Opera Mini/4.2.14912/870; U; id) Presto/2.4.15"
DESKTOP_UA = "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:24.0) Gecko/20100101 Firefox/24.0"


class TestVersionToFloat:
    """Tests for version_to_float."""

    @pytest.mark.parametrize(
        "value,expected",
        [("4.0.4", 4.04), ("6_1", 6.1), ("12", 12.0), ("2.3.6", 2.36), ("abc", None)],
    )
    def test_conversion(self, value, expected):
        """Test version strings become comparable numbers."""
        assert version_to_float(value) == expected


class TestLoading:
    """Tests for loading rule tables."""

    def test_packaged_rules(self, mobile_source: MobileDetectSource):
        """Test the packaged table loads with ordered name lists."""
        assert mobile_source.script_version == "2.8.15"
        assert mobile_source.browsers[0] == "Chrome"
        assert mobile_source.phone_devices[0] == "iPhone"
        assert mobile_source.tablet_devices[0] == "iPad"
        assert "AndroidOS" in mobile_source.operating_systems

    def test_file_not_found(self):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            MobileDetectSource().load_from_file(Path("/nonexistent/rules.json"))

    def test_invalid_json(self, tmp_path: Path):
        """Test invalid JSON raises ValueError."""
        path = tmp_path / "rules.json"
        path.write_text("{{{")
        with pytest.raises(ValueError, match="Invalid JSON"):
            MobileDetectSource().load_from_file(path)

    def test_invalid_regex(self):
        """Test a broken rule raises ValueError."""
        with pytest.raises(ValueError, match="Invalid regex"):
            MobileDetectSource().load_from_dict({"browsers": {"Broken": "(unclosed"}})

    def test_reload_replaces_rules(self, tmp_path: Path):
        """Test loading again drops the previous rules."""
        source = MobileDetectSource()
        source.load_from_dict({"version": "1", "browsers": {"Old": "old"}})
        source.load_from_dict({"version": "2", "browsers": {"New": "new"}})

        assert source.browsers == ["New"]
        assert source.script_version == "2"
        assert not source.detect("old").is_("Old")


class TestDetection:
    """Tests for detection results."""

    def test_iphone(self, mobile_source: MobileDetectSource):
        """Test an iPhone user agent."""
        detection = mobile_source.detect(IPHONE_UA)

        assert detection.is_mobile()
        assert not detection.is_tablet()
        assert detection.is_("iPhone")
        assert detection.is_("ios")
        assert detection.is_("Safari")
        assert detection.version("Safari") == "6.0"
        assert detection.mobile_grade() == MobileGrade.A

    def test_ipad_is_tablet(self, mobile_source: MobileDetectSource):
        """Test an iPad is a mobile tablet."""
        detection = mobile_source.detect(IPAD_UA)
        assert detection.is_mobile()
        assert detection.is_tablet()

    def test_old_android_grade(self, mobile_source: MobileDetectSource):
        """Test Android above 2.1 with WebKit is grade A."""
        detection = mobile_source.detect(ANDROID_UA)

        assert detection.is_("AndroidOS")
        assert detection.version("Android") == "2.3.6"
        assert detection.mobile_grade() == MobileGrade.A

    def test_default_grade(self, mobile_source: MobileDetectSource):
        """Test old Opera Mini falls back to grade C."""
        detection = mobile_source.detect(OPERA_MINI_UA)

        assert detection.is_mobile()
        assert detection.is_("Opera")
        assert detection.mobile_grade() == MobileGrade.C

    def test_desktop(self, mobile_source: MobileDetectSource):
        """Test a desktop browser is not mobile."""
        detection = mobile_source.detect(DESKTOP_UA)
        assert not detection.is_mobile()
        assert not detection.is_tablet()

    def test_bot_utility(self, mobile_source: MobileDetectSource):
        """Test utility rules such as Bot."""
        detection = mobile_source.detect(GOOGLEBOT_UA)
        assert detection.is_("Bot")
        assert not detection.is_("MobileBot")

    def test_unknown_name(self, mobile_source: MobileDetectSource):
        """Test unknown rule names never match."""
        assert not mobile_source.detect(IPHONE_UA).is_("Teleporter")

    def test_empty_user_agent(self, mobile_source: MobileDetectSource):
        """Test an empty user agent matches nothing."""
        detection = mobile_source.detect("")
        assert not detection.is_mobile()
        assert detection.version("Safari") == ""

    def test_grade_clause_with_missing_version(self):
        """Test a version clause fails when the version is unknown."""
        source = MobileDetectSource()
        source.load_from_dict(
            {
                "phone_devices": {"Phone": "phone"},
                "properties": {"Phone": ["Phone/[VER]"]},
                "grades": [{"grade": "A", "any": [[{"version": "Phone", ">=": 2}]]}],
                "default_grade": "B",
            }
        )

        assert source.detect("Phone/3.0").mobile_grade() == MobileGrade.A
        assert source.detect("Phone/1.0").mobile_grade() == MobileGrade.B
        assert source.detect("phone").mobile_grade() == MobileGrade.B

    def test_rules_from_json_file(self, tmp_path: Path):
        """Test loading a custom table from disk."""
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"version": "x", "tablet_devices": {"Slate": "slate"}}))

        source = MobileDetectSource()
        assert source.load_from_file(path) == 1
        assert source.detect("My Slate").is_tablet()
