# Single-entry response cache keyed by request path. Memory by default, Redis when configured.
import logging
import time
from typing import Callable, Optional

import redis

from .settings import settings

logger = logging.getLogger(__name__)


class ResponseCache:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, body: str) -> None:
        raise NotImplementedError

    def lookup(self, key: str) -> Optional[str]:
        """Read `key`; any backend failure counts as a miss."""
        try:
            return self.get(key)
        except Exception:
            logger.exception("cache read failed for %s", key)
            return None

    def store(self, key: str, body: str) -> None:
        """Write `body`, logging instead of raising. Runs as a background task."""
        try:
            self.set(key, body)
            logger.debug("cached %s", key)
        except Exception:
            logger.exception("cache write failed for %s", key)


class NullCache(ResponseCache):
    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, body: str) -> None:
        pass


class MemoryCache(ResponseCache):
    def __init__(self, ttl: int, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    def get(self, key: str) -> Optional[str]:
        hit = self._entries.get(key)
        if not hit:
            return None
        expires_at, body = hit
        if self.clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return body

    def set(self, key: str, body: str) -> None:
        now = self.clock()
        # purge expired
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            self._entries.pop(k, None)
        self._entries[key] = (now + self.ttl, body)

    def clear(self) -> None:
        self._entries.clear()


class RedisCache(ResponseCache):
    def __init__(self, client, ttl: int, prefix: str = "blogfeed:"):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl: int) -> "RedisCache":
        return cls(redis.Redis.from_url(url, decode_responses=True), ttl)

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(self.prefix + key)
        except redis.RedisError as exc:
            # treat as a miss
            logger.warning("cache read failed for %s: %s", key, exc)
            return None

    def set(self, key: str, body: str) -> None:
        self.client.setex(self.prefix + key, self.ttl, body)


_cache: Optional[ResponseCache] = None

def get_cache() -> ResponseCache:
    global _cache
    if _cache is None:
        try:
            if settings.CACHE_BACKEND == "redis":
                _cache = RedisCache.from_url(settings.REDIS_URL, settings.CACHE_SECONDS)
            else:
                _cache = MemoryCache(settings.CACHE_SECONDS)
        except Exception:
            # not remembered, so the next request tries again
            logger.exception("could not set up %s cache, serving uncached", settings.CACHE_BACKEND)
            return NullCache()
        logger.info("using %s response cache", type(_cache).__name__)
    return _cache
