# cache.py
# Response cache for the unfiltered catalogue listing

# Holds the default listing (no filters, page 1, default page size) for a
# fixed TTL and is invalidated by every successful write. The in-memory
# backend is the default; the Redis backend shares one snapshot between
# worker processes and degrades to a miss when Redis is unavailable.

# @see: isim_api/routers/catalogue.py - Reads/populates the cache, sets X-Cache
# @see: isim_api/main.py - Chooses the backend from Settings.redis_enabled
# @note: Set REDIS_ENABLED=true and REDIS_URL to use the Redis backend

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from isim_api.logging_config import get_logger

logger = get_logger("cache")

DEFAULT_TTL_SECONDS = 5 * 60
CATALOGUE_CACHE_KEY = "isim:catalogue:default"


# ============================================================================
# IN-MEMORY BACKEND
# ============================================================================


@dataclass
class CacheEntry:
    data: List[Dict[str, Any]]
    captured_at: float


class MemoryResponseCache:
    """
    Single-slot TTL cache living in process memory.

    Example:
        cache = MemoryResponseCache(ttl=300)
        cache.put(page)
        cache.get()         # page, until 300 s pass or invalidate() runs
    """

    def __init__(
        self,
        ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._generation = 0
        self._lock = threading.Lock()

    def generation(self) -> int:
        """Counter bumped by every invalidate()."""
        with self._lock:
            return self._generation

    def get(self) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            entry = self._entry
            if entry is None:
                return None
            if self._clock() - entry.captured_at >= self.ttl:
                self._entry = None
                return None
            return entry.data

    def put(self, data: List[Dict[str, Any]], generation: Optional[int] = None) -> None:
        """Store a snapshot; skipped if invalidate() ran since `generation` was read."""
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Catalogue changed while loading; snapshot not cached")
                return
            self._entry = CacheEntry(data=list(data), captured_at=self._clock())

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._entry = None

    def is_available(self) -> bool:
        return True


# ============================================================================
# REDIS BACKEND
# ============================================================================


class RedisResponseCache:
    """
    Redis-backed cache slot with graceful degradation.

    Any Redis failure is logged and treated as a miss (get) or a no-op
    (put/invalidate), so the listing is served from the store instead.
    """

    def __init__(
        self,
        url: str,
        ttl: int = DEFAULT_TTL_SECONDS,
        key: str = CATALOGUE_CACHE_KEY,
        client: Any = None,
    ):
        self.url = url
        self.ttl = ttl
        self.key = key
        self.generation_key = f"{key}:generation"
        self._client = client

    def _get_client(self):
        """Get or create the Redis client connection."""
        if self._client is not None:
            return self._client

        try:
            import redis

            self._client = redis.Redis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        except Exception as e:
            logger.warning(f"Redis client creation failed: {e}, caching disabled")
            self._client = None

        return self._client

    def is_available(self) -> bool:
        client = self._get_client()
        if client is None:
            return False
        try:
            return bool(client.ping())
        except Exception:
            return False

    def get(self) -> Optional[List[Dict[str, Any]]]:
        client = self._get_client()
        if client is None:
            return None
        try:
            value = client.get(self.key)
            if value is None:
                return None
            return json.loads(value)
        except Exception as e:
            logger.warning(f"Cache get failed for {self.key}: {e}")
            return None

    def generation(self) -> Optional[int]:
        """Shared invalidation counter, or None when Redis is unreachable."""
        client = self._get_client()
        if client is None:
            return None
        try:
            return int(client.get(self.generation_key) or 0)
        except Exception as e:
            logger.warning(f"Cache generation read failed for {self.generation_key}: {e}")
            return None

    def put(self, data: List[Dict[str, Any]], generation: Optional[int] = None) -> None:
        client = self._get_client()
        if client is None:
            return
        payload = json.dumps(data, default=str, ensure_ascii=False)
        try:
            if generation is None:
                client.setex(self.key, self.ttl, payload)
                return
            # WATCH makes the write fail if invalidate() bumps the counter meanwhile
            with client.pipeline() as pipe:
                pipe.watch(self.generation_key)
                if int(pipe.get(self.generation_key) or 0) != generation:
                    pipe.unwatch()
                    logger.debug("Catalogue changed while loading; snapshot not cached")
                    return
                pipe.multi()
                pipe.setex(self.key, self.ttl, payload)
                pipe.execute()
        except Exception as e:
            logger.warning(f"Cache set failed for {self.key}: {e}")

    def invalidate(self) -> None:
        client = self._get_client()
        if client is None:
            return
        try:
            client.incr(self.generation_key)
            client.delete(self.key)
        except Exception as e:
            logger.warning(f"Cache delete failed for {self.key}: {e}")
