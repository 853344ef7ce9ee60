"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path
from typing import Any

import pytest

# Add the project root and the tests directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from stubs import CHROME_WIN7_UA, StubGenericSource
from uainfo.classification.engine import ClassificationContext, ClassificationEngine
from uainfo.classification.signatures import SignatureDatabase
from uainfo.core.config import DEFAULT_MOBILE_RULES_FILE, DEFAULT_SIGNATURES_FILE
from uainfo.sources.base import GenericParse
from uainfo.sources.mobile_detect import MobileDetectSource


@pytest.fixture
def signature_data() -> dict[str, Any]:
    """Create a small compiled signature database.

    Records 3 and 4 are each other's parent.
    """
    return {
        "version": "test-1",
        "properties": [
            "browser_name",
            "browser_name_regex",
            "Parent",
            "Browser",
            "Version",
            "MajorVer",
            "MinorVer",
            "Platform",
            "isMobileDevice",
            "Crawler",
        ],
        "user_agents": ["DefaultProperties", "Firefox Generic", "Firefox 24.0", "Loop A", "Loop B"],
        "records": [
            {"3": "Default Browser", "7": "unknown", "8": "false", "9": "false"},
            {"2": 0, "3": "Firefox", "7": "Linux"},
            {"2": 1, "4": "24.0", "5": "24", "6": "0", "7": "Win7"},
            {"2": 4, "3": "Loop"},
            {"2": 3, "9": "true"},
        ],
        "patterns": [
            {"pattern": "^mozilla/5\\.0 .*firefox/(\\d+)\\.0$", "keys": {"@24": 2}},
            {"pattern": "^loop$", "key": 3},
            {"pattern": "^mozilla/5\\.0 .*firefox/.*$", "key": 1},
        ],
    }


@pytest.fixture
def signature_file(tmp_path: Path, signature_data: dict[str, Any]) -> Path:
    """Write the small signature database to a file."""
    path = tmp_path / "signatures.json"
    path.write_text(json.dumps(signature_data))
    return path


@pytest.fixture
def signature_db(signature_data: dict[str, Any]) -> SignatureDatabase:
    """Create a signature database loaded with the small test data."""
    db = SignatureDatabase()
    db.load_from_dict(signature_data)
    return db


@pytest.fixture
def packaged_signature_db() -> SignatureDatabase:
    """Create a signature database loaded from the packaged sample file."""
    db = SignatureDatabase()
    db.load_from_file(DEFAULT_SIGNATURES_FILE)
    return db


@pytest.fixture
def mobile_source() -> MobileDetectSource:
    """Create a mobile detection source loaded from the packaged rules."""
    source = MobileDetectSource()
    source.load_from_file(DEFAULT_MOBILE_RULES_FILE)
    return source


@pytest.fixture
def generic_source() -> StubGenericSource:
    """Create a generic source that knows a desktop Chrome user agent."""
    return StubGenericSource(
        {
            CHROME_WIN7_UA: GenericParse(
                browser_family="Chrome",
                browser_version="30.0.1599",
                os_family="Windows",
                os_version="7",
                device_family="Other",
            ),
        }
    )


@pytest.fixture
def context(
    packaged_signature_db: SignatureDatabase,
    mobile_source: MobileDetectSource,
    generic_source: StubGenericSource,
) -> ClassificationContext:
    """Create a classification context with the default rules."""
    return ClassificationContext.build(
        signature_db=packaged_signature_db,
        mobile_source=mobile_source,
        generic_source=generic_source,
    )


@pytest.fixture
def engine(context: ClassificationContext) -> ClassificationEngine:
    """Create an engine with a local-only identity cache."""
    return ClassificationEngine(context)
