"""Identity cache and shared cache backends."""

from .backends import (
    MemoryCacheBackend,
    SharedCacheBackend,
    TTLCacheBackend,
    create_cache_backend,
    validate_backend,
)
from .identity import TIER_LOCAL, TIER_MISS, TIER_SHARED, IdentityCache, hash_user_agent

__all__ = [
    # Backends
    "SharedCacheBackend",
    "MemoryCacheBackend",
    "TTLCacheBackend",
    "create_cache_backend",
    "validate_backend",
    # Identity Cache
    "IdentityCache",
    "hash_user_agent",
    "TIER_LOCAL",
    "TIER_SHARED",
    "TIER_MISS",
]
