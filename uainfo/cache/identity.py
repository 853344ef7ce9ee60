"""Identity Cache - two tier cache of classifications.

Classifications are keyed by the md5 of the trimmed user agent. The local
tier is a dictionary owned by the process; the shared tier is an optional
backend such as memcached. Every entry carries the data version it was
computed with, and entries from another data version are ignored.

Concurrent misses for the same user agent may both classify it. The work
is deterministic, so the duplicate result is simply written twice.
"""

import hashlib
import json
import logging
from collections.abc import Iterable
from typing import Any

from uainfo.cache.backends import SharedCacheBackend, validate_backend
from uainfo.core.config import DEFAULT_CACHE_KEY_PREFIX
from uainfo.core.errors import CacheTierFailure
from uainfo.core.models import Classification

logger = logging.getLogger("uainfo.cache.identity")

TIER_LOCAL = "local"
TIER_SHARED = "shared"
TIER_MISS = "miss"


def hash_user_agent(user_agent: str) -> str:
    """Get the md5 hex digest of a trimmed user agent."""
    return hashlib.md5(user_agent.strip().encode("utf-8")).hexdigest()


class IdentityCache:
    """Version checked cache with a local and a shared tier.

    Example:
        cache = IdentityCache(MemoryCacheBackend(), data_version="2, 1024, 8.ab12c")
        classification = cache.get(user_agent)
        if classification is None:
            classification = classify(user_agent)
            cache.put(user_agent, classification)
    """

    def __init__(
        self,
        backend: SharedCacheBackend | None,
        data_version: str,
        key_prefix: str = DEFAULT_CACHE_KEY_PREFIX,
    ) -> None:
        """Initialize the cache.

        Args:
            backend: Shared tier, None to use the local tier only.
            data_version: Active data version.
            key_prefix: Prefix of shared tier keys.

        Raises:
            ConfigurationError: If the backend lacks get() or set().
        """
        if backend is not None:
            validate_backend(backend)

        self.backend = backend
        self.data_version = data_version
        self.key_prefix = key_prefix
        self._local: dict[str, Classification] = {}

    def key_for(self, user_agent: str) -> str:
        """Get the shared tier key of a user agent."""
        return self.key_prefix + hash_user_agent(user_agent)

    def get(self, user_agent: str) -> Classification | None:
        """Get a cached classification of the active data version."""
        classification, _ = self.lookup(user_agent)
        return classification

    def lookup(self, user_agent: str) -> tuple[Classification | None, str]:
        """Get a cached classification and the tier it came from.

        Args:
            user_agent: User agent string.

        Returns:
            Tuple of (classification or None, "local", "shared" or "miss").
        """
        ua_hash = hash_user_agent(user_agent)

        cached = self._local.get(ua_hash)
        if cached is not None and cached.data_version == self.data_version:
            return cached, TIER_LOCAL

        if self.backend is None:
            return None, TIER_MISS

        try:
            payload = self._shared_get(self.key_prefix + ua_hash)
        except CacheTierFailure as e:
            logger.warning(str(e))
            return None, TIER_MISS

        classification = self._decode(payload)
        if classification is None or classification.data_version != self.data_version:
            return None, TIER_MISS

        self._local[ua_hash] = classification
        return classification, TIER_SHARED

    def put(self, user_agent: str, classification: Classification) -> None:
        """Store a classification in both tiers.

        Args:
            user_agent: User agent string.
            classification: Classification to store.
        """
        ua_hash = hash_user_agent(user_agent)
        self._local[ua_hash] = classification

        if self.backend is None:
            return

        try:
            self._shared_set(self.key_prefix + ua_hash, json.dumps(classification.to_dict()))
        except CacheTierFailure as e:
            logger.warning(str(e))

    def prime(self, classifications: Iterable[Classification]) -> int:
        """Fill the local tier, for example before a batch job.

        Classifications of another data version are skipped.

        Returns:
            Number of classifications added.
        """
        added = 0
        for classification in classifications:
            if classification.data_version != self.data_version:
                continue
            self._local[hash_user_agent(classification.user_agent)] = classification
            added += 1
        return added

    def clear_local(self) -> None:
        """Clear the local tier."""
        self._local.clear()

    @property
    def local_size(self) -> int:
        return len(self._local)

    def _shared_get(self, key: str) -> Any:
        try:
            return self.backend.get(key)  # type: ignore[union-attr]
        except Exception as e:
            raise CacheTierFailure(f"Shared cache get failed for {key}: {e}") from e

    def _shared_set(self, key: str, value: str) -> None:
        try:
            self.backend.set(key, value)  # type: ignore[union-attr]
        except Exception as e:
            raise CacheTierFailure(f"Shared cache set failed for {key}: {e}") from e

    @staticmethod
    def _decode(payload: Any) -> Classification | None:
        """Rebuild a classification from a shared tier value."""
        if not payload:
            return None

        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            if isinstance(payload, str):
                payload = json.loads(payload)
            if not isinstance(payload, dict):
                return None
            return Classification.from_dict(payload)
        except (ValueError, KeyError, TypeError) as e:
            logger.debug(f"Ignoring malformed shared cache entry: {e}")
            return None
