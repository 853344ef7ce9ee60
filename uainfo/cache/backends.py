"""Shared cache backends.

A shared backend is anything with get(key) and set(key, value) methods.
get() returns None (or any other false value) for missing keys.

Backends:
    - MemoryCacheBackend: plain dictionary, no expiry, for debugging and tests
    - TTLCacheBackend: size bounded cache with expiry (cachetools)

Other stores (memcached, redis, ...) can be plugged in by naming their
class as "package.module:ClassName" in the cache configuration.
"""

import importlib
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

from cachetools import TTLCache

from uainfo.core.config import CacheConfig
from uainfo.core.errors import ConfigurationError

logger = logging.getLogger("uainfo.cache.backends")

BACKEND_MEMORY = "memory"
BACKEND_TTL = "ttl"
BACKEND_NONE = "none"


class SharedCacheBackend(ABC):
    """Abstract base class for shared cache backends.

    Subclasses must implement:
        - get(): Return the stored value or None
        - set(): Store a value
    """

    @abstractmethod
    def get(self, key: str) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass


class MemoryCacheBackend(SharedCacheBackend):
    """Keep everything in a dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __len__(self) -> int:
        return len(self._data)


class TTLCacheBackend(SharedCacheBackend):
    """Size bounded cache whose entries expire after ttl_seconds.

    Args:
        max_size: Maximum number of entries; least recently used go first.
        ttl_seconds: Lifetime of an entry.
    """

    def __init__(self, max_size: int = 100_000, ttl_seconds: int = 604_800) -> None:
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


def validate_backend(backend: Any) -> None:
    """Check that an object can be used as a shared cache backend.

    Raises:
        ConfigurationError: If get() or set() is missing.
    """
    for method in ("get", "set"):
        if not callable(getattr(backend, method, None)):
            raise ConfigurationError(
                f"Cache backend {type(backend).__name__} does not implement {method}()"
            )


def _import_backend(path: str) -> Any:
    module_name, _, class_name = path.partition(":")
    if not module_name or not class_name:
        raise ConfigurationError(f"Unknown cache backend: {path}")

    try:
        module = importlib.import_module(module_name)
        backend_class = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import cache backend {path}: {e}") from e

    return backend_class()


def create_cache_backend(config: CacheConfig) -> SharedCacheBackend | None:
    """Create the shared cache backend named in the configuration.

    Args:
        config: Cache configuration.

    Returns:
        Backend instance, or None if the shared tier is disabled.

    Raises:
        ConfigurationError: If the backend is unknown or breaks the contract.
    """
    name = config.backend

    if not config.enabled or name == BACKEND_NONE:
        return None

    if name == BACKEND_MEMORY:
        backend: Any = MemoryCacheBackend()
    elif name == BACKEND_TTL:
        backend = TTLCacheBackend(max_size=config.max_size, ttl_seconds=config.ttl_seconds)
    else:
        backend = _import_backend(name)

    validate_backend(backend)
    logger.debug(f"Using shared cache backend {type(backend).__name__}")
    return backend
