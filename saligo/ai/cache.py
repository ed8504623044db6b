"""In-memory response cache keyed on operation and parameters."""

import copy
import hashlib
import json
import time
from typing import Any, Callable

from loguru import logger
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CacheEntry(BaseModel):
    """A cached provider result.

    Attributes:
        key: Operation name plus a short hash of the parameters
        value: Cached result
        created_at: Creation time (seconds since epoch)
        source: Un-hashed key material the key was derived from
    """

    key: str
    value: Any
    created_at: float
    source: str


class CacheStats(BaseModel):
    size: int
    hits: int
    misses: int


def make_cache_key(operation: str, params: dict[str, Any]) -> tuple[str, str]:
    """Derive a deterministic cache key from an operation and its parameters.

    Args:
        operation: Operation name, kept readable as the key prefix
        params: Parameters, serialized with sorted keys

    Returns:
        Tuple of (key, source) where source is the serialized key material
    """
    serialized = json.dumps(to_jsonable_python(params), sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:16]
    return f"{operation}:{digest}", f"{operation}:{serialized}"


class ResponseCache:
    """TTL cache whose expired entries are deleted lazily on read.

    Values are deep-copied on the way in and out, so callers never share state
    with a cached entry.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Clock = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if self.clock() - entry.created_at > self.ttl_seconds:
            del self._entries[key]
            self._misses += 1
            logger.debug(f"Cache entry {key} expired")
            return None

        self._hits += 1
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, source: str = "") -> None:
        if not self.enabled:
            return
        self._entries[key] = CacheEntry(
            key=key, value=copy.deepcopy(value), created_at=self.clock(), source=source
        )

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cache cleared")

    def stats(self) -> CacheStats:
        return CacheStats(size=len(self._entries), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
