"""Redis caching and rate limiting."""

from __future__ import annotations

import hashlib
import json
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import redis

from core.config import settings

if TYPE_CHECKING:
    from redis import Redis


class RedisCache:
    """Redis client for JSON values and rate limiting."""

    _instance: RedisCache | None = None
    _client: Redis[str] | None = None

    def __new__(cls) -> RedisCache:
        """Singleton pattern for connection reuse."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def client(self) -> Redis[str]:
        """Lazy connection initialization."""
        if self._client is None:
            self._client = redis.from_url(settings.cache_redis_url, decode_responses=True)
        return self._client

    def get(self, key: str) -> dict[str, Any] | None:
        """Get cached JSON value."""
        data = self.client.get(key)
        return json.loads(data) if data else None

    def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> None:
        """Cache JSON value with optional TTL."""
        ttl = ttl or settings.cache_ttl_seconds
        self.client.setex(key, ttl, json.dumps(value))

    def set_if_exists(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        """Overwrite a JSON value only if the key is already present (atomic SET XX)."""
        ttl = ttl or settings.cache_ttl_seconds
        return bool(self.client.set(key, json.dumps(value), ex=ttl, xx=True))

    def exists(self, key: str) -> bool:
        return bool(self.client.exists(key))

    def update(
        self,
        key: str,
        func: Callable[[dict[str, Any]], dict[str, Any]],
        ttl: int | None = None,
    ) -> dict[str, Any] | None:
        """
        Atomically rewrite a JSON value with func (WATCH/MULTI, retried on conflict).

        Returns the new value, or None if the key does not exist.
        """
        ttl = ttl or settings.cache_ttl_seconds

        def apply(pipe: Any) -> dict[str, Any] | None:
            data = pipe.get(key)
            if not data:
                return None
            value = func(json.loads(data))
            pipe.multi()
            pipe.set(key, json.dumps(value), ex=ttl)
            return value

        return self.client.transaction(apply, key, value_from_callable=True)

    def rate_limit(self, key: str, limit: int) -> bool:
        """
        Check rate limit. Returns True if within limit.

        Uses sliding window counter pattern.
        """
        current = self.client.incr(key)
        if current == 1:
            self.client.expire(key, settings.rate_limit_window_seconds)
        return current <= limit

    def wait_for_rate_limit(self, key: str, limit: int) -> None:
        """Block until rate limit allows a request."""
        while not self.rate_limit(key, limit):
            time.sleep(0.1)


def file_cache_key(prefix: str, path: str | Path) -> str:
    """Generate cache key from the content hash of a file."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            digest.update(chunk)
    return f"{prefix}:{digest.hexdigest()[:16]}"


def create_cache() -> RedisCache | None:
    """Create cache instance, returning None if Redis unavailable."""
    try:
        cache = RedisCache()
        cache.client.ping()
        return cache
    except (redis.ConnectionError, redis.TimeoutError):
        return None
