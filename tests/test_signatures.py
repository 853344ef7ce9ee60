"""Unit tests for signature database module."""

import json
import logging
from dataclasses import fields
from pathlib import Path

import pytest

from uainfo.classification.signatures import (
    PROPERTY_FIELDS,
    SignatureDatabase,
    patch_record,
    record_fields,
    record_from_properties,
)
from uainfo.core.errors import SourceUnavailable
from uainfo.core.models import SignatureRecord

FIREFOX_24 = "Mozilla/5.0 (X11; Linux x86_64; rv:24.0) Gecko/20100101 Firefox/24.0"
FIREFOX_26 = "Mozilla/5.0 (X11; Linux x86_64; rv:26.0) Gecko/20100101 Firefox/26.0"


class TestLoading:
    """Tests for loading signature files."""

    def test_init_empty_database(self) -> None:
        """Test creating an empty signature database."""
        db = SignatureDatabase()
        assert db.count == 0
        assert not db.is_loaded

    def test_load_from_file(self, signature_file: Path) -> None:
        """Test loading a compiled database from JSON."""
        db = SignatureDatabase()
        count = db.load_from_file(signature_file)

        assert count == 3
        assert db.is_loaded
        assert db.version == "test-1"

    def test_fingerprint_is_file_size(self, signature_file: Path) -> None:
        """Test the fingerprint of a file is its byte size."""
        db = SignatureDatabase()
        db.load_from_file(signature_file)
        assert db.fingerprint == str(signature_file.stat().st_size)

    def test_fingerprint_without_file(self, signature_db: SignatureDatabase) -> None:
        """Test the fingerprint of data loaded from a dict."""
        assert signature_db.fingerprint == "memory-test-1"

    def test_load_from_file_not_found(self) -> None:
        """Test loading from non-existent file raises error."""
        db = SignatureDatabase()
        with pytest.raises(FileNotFoundError):
            db.load_from_file(Path("/nonexistent/file.json"))

    def test_load_from_file_invalid_json(self, tmp_path: Path) -> None:
        """Test loading invalid JSON raises error."""
        sig_file = tmp_path / "invalid.json"
        sig_file.write_text("not valid json {{{")

        db = SignatureDatabase()
        with pytest.raises(ValueError, match="Invalid JSON"):
            db.load_from_file(sig_file)

    def test_load_missing_sections(self) -> None:
        """Test data without records is rejected."""
        db = SignatureDatabase()
        with pytest.raises(ValueError):
            db.load_from_dict({"properties": [], "patterns": []})

    def test_invalid_pattern_is_skipped(self, signature_data, caplog) -> None:
        """Test a broken regex is logged and skipped."""
        signature_data["patterns"].insert(0, {"pattern": "^(unclosed", "key": 1})

        db = SignatureDatabase()
        with caplog.at_level(logging.WARNING):
            count = db.load_from_dict(signature_data)

        assert count == 3
        assert "Invalid regex pattern" in caplog.text
        assert "invalid regex: ^(unclosed" in db.validate()

    def test_get_version_info(self, signature_file: Path) -> None:
        """Test version information."""
        db = SignatureDatabase()
        db.load_from_file(signature_file)
        info = db.get_version_info()

        assert info["version"] == "test-1"
        assert info["patterns"] == 3
        assert info["records"] == 5
        assert info["file"] == str(signature_file)

    def test_clear(self, signature_db: SignatureDatabase) -> None:
        """Test clearing the database."""
        signature_db.clear()
        assert not signature_db.is_loaded
        assert signature_db.fingerprint == "memory-unknown"


class TestResolve:
    """Tests for resolving user agents."""

    def test_leaf_wins_over_parent(self, signature_db: SignatureDatabase) -> None:
        """Test values closer to the leaf override the parent chain."""
        properties = signature_db.resolve(FIREFOX_24)

        assert properties["Browser"] == "Firefox"
        assert properties["Version"] == "24.0"
        assert properties["Platform"] == "Win7"
        assert properties["Parent"] == "Firefox Generic"

    def test_boolean_strings_normalized(self, signature_db: SignatureDatabase) -> None:
        """Test "true"/"false" become booleans."""
        properties = signature_db.resolve(FIREFOX_24)
        assert properties["isMobileDevice"] is False
        assert properties["Crawler"] is False

    def test_declared_property_order(self, signature_db, signature_data) -> None:
        """Test properties come out in declared order."""
        properties = signature_db.resolve(FIREFOX_24)
        assert list(properties) == signature_data["properties"]

    def test_matched_pattern_and_user_agent(self, signature_db: SignatureDatabase) -> None:
        """Test the user agent and the lowercase pattern are reported."""
        properties = signature_db.resolve(FIREFOX_24)
        assert properties["browser_name"] == FIREFOX_24
        assert properties["browser_name_regex"] == "^mozilla/5\\.0 .*firefox/(\\d+)\\.0$"

    def test_sub_record_miss_continues_scanning(self, signature_db: SignatureDatabase) -> None:
        """Test a capture key without a sub-record is not a match."""
        record = signature_db.lookup(FIREFOX_26)

        assert record.browser == "Firefox"
        assert record.version == ""
        assert record.platform == "Linux"
        assert record.matched_pattern == "^mozilla/5\\.0 .*firefox/.*$"

    def test_case_insensitive_match(self, signature_db: SignatureDatabase) -> None:
        """Test patterns match case-insensitively."""
        assert signature_db.lookup("LOOP").browser == "Loop"

    def test_cycle_is_truncated(self, signature_db: SignatureDatabase, caplog) -> None:
        """Test a cyclic parent chain resolves what it can and logs."""
        with caplog.at_level(logging.WARNING):
            record = signature_db.lookup("loop")

        assert record.browser == "Loop"
        assert record.crawler is True
        assert record.parent == "Loop B"
        assert "truncated" in caplog.text

    def test_non_integer_parent_is_truncated(self, signature_data, caplog) -> None:
        """Test a parent given by name instead of index ends the chain."""
        signature_data["records"][3]["2"] = "Loop B"
        db = SignatureDatabase()
        db.load_from_dict(signature_data)

        with caplog.at_level(logging.WARNING):
            record = db.lookup("loop")

        assert record.browser == "Loop"
        assert record.crawler is False
        assert record.parent == ""
        assert "non-integer parent" in caplog.text

    def test_no_match_returns_default(self, signature_db: SignatureDatabase) -> None:
        """Test an unknown user agent gets the default record."""
        properties = signature_db.resolve("curl/7.29.0")
        assert properties["Browser"] == "Default Browser"
        assert properties["Platform"] == "unknown"

        record = signature_db.lookup("curl/7.29.0")
        assert record == SignatureRecord()

    def test_empty_database_raises(self) -> None:
        """Test lookups without data raise SourceUnavailable."""
        with pytest.raises(SourceUnavailable):
            SignatureDatabase().lookup(FIREFOX_24)


class TestValidate:
    """Tests for structural validation."""

    def test_cycle_reported(self, signature_db: SignatureDatabase) -> None:
        """Test that parent cycles are reported."""
        problems = signature_db.validate()
        assert any("record 3" in p and "cyclic" in p for p in problems)

    def test_missing_records_reported(self, signature_data) -> None:
        """Test dangling pattern keys and parents are reported."""
        signature_data["records"] = signature_data["records"][:3]
        signature_data["user_agents"] = signature_data["user_agents"][:3]
        signature_data["records"][2]["2"] = 9

        db = SignatureDatabase()
        db.load_from_dict(signature_data)
        problems = db.validate()

        assert any("references missing record 3" in p for p in problems)
        assert any("missing parent 9" in p for p in problems)

    def test_non_integer_parent_reported(self, signature_data) -> None:
        """Test a parent given by name is reported once, for its own record."""
        signature_data["records"][3]["2"] = "Loop B"
        db = SignatureDatabase()
        db.load_from_dict(signature_data)

        assert db.validate() == ["record 3 has a non-integer parent 'Loop B'"]

    def test_packaged_database_is_valid(self, packaged_signature_db: SignatureDatabase) -> None:
        """Test the sample database shipped with the package."""
        assert packaged_signature_db.validate() == []


class TestRecordMapping:
    """Tests for property name to record field mapping."""

    def test_every_record_field_is_mapped(self) -> None:
        """Test each SignatureRecord field is reachable from a property name."""
        targets = {target for target, _ in PROPERTY_FIELDS.values()}
        assert targets == {f.name for f in fields(SignatureRecord)}

    def test_names_are_case_insensitive(self) -> None:
        """Test property names map regardless of case."""
        assert record_fields({"ISMOBILEDEVICE": "true"}) == {"is_mobile_device": True}
        assert record_fields({"isMobileDevice": "0"}) == {"is_mobile_device": False}

    def test_unknown_names_ignored(self) -> None:
        """Test unknown property names are dropped."""
        assert record_fields({"CssVersion": "3", "Browser": "Chrome"}) == {"browser": "Chrome"}

    def test_record_from_properties(self) -> None:
        """Test building a typed record."""
        record = record_from_properties(
            {"Browser": "IE", "MajorVer": 10, "Win64": True, "browser_name_regex": "^x$"}
        )
        assert record.browser == "IE"
        assert record.major_ver == "10"
        assert record.win64 is True
        assert record.matched_pattern == "^x$"

    def test_patch_record(self) -> None:
        """Test patching returns a modified copy."""
        record = SignatureRecord(browser="IE", version="10.0")
        patched = patch_record(record, {"crawler": "1"})

        assert patched.crawler is True
        assert patched.version == "10.0"
        assert record.crawler is False

    def test_round_trip_json_file(self, tmp_path: Path, signature_data) -> None:
        """Test numeric record keys survive JSON files."""
        path = tmp_path / "db.json"
        path.write_text(json.dumps(signature_data))

        db = SignatureDatabase()
        db.load_from_file(path)
        assert db.lookup(FIREFOX_24).major_ver == "24"
