"""Shared fixtures for integration tests.

These tests run the engine with the packaged source data and the real
ua-parser regexes.
"""

from pathlib import Path

import pytest

from uainfo.cache.backends import MemoryCacheBackend
from uainfo.classification.engine import ClassificationEngine, create_default_engine
from uainfo.core.config import Config


@pytest.fixture
def real_config(tmp_path: Path) -> Config:
    """Create a real Config pointing to a temporary directory."""
    return Config(config_dir=tmp_path)


@pytest.fixture
def shared_backend() -> MemoryCacheBackend:
    """Create a shared cache tier."""
    return MemoryCacheBackend()


@pytest.fixture
def real_engine(real_config: Config, shared_backend: MemoryCacheBackend) -> ClassificationEngine:
    """Create an engine with all real sources."""
    return create_default_engine(real_config, backend=shared_backend)
