"""Tests for the Redis cache wrapper."""

import json
from unittest.mock import MagicMock, patch

import pytest
import redis

from core.cache import RedisCache, create_cache, file_cache_key


@pytest.fixture
def cache():
    instance = RedisCache()
    original = instance._client
    instance._client = MagicMock()
    yield instance
    instance._client = original


class TestRedisCache:
    def test_singleton(self):
        assert RedisCache() is RedisCache()

    def test_get(self, cache):
        cache.client.get.return_value = json.dumps({"a": 1})

        assert cache.get("k") == {"a": 1}

    def test_get_missing(self, cache):
        cache.client.get.return_value = None

        assert cache.get("k") is None

    def test_set_uses_ttl(self, cache):
        cache.set("k", {"a": 1}, ttl=30)

        cache.client.setex.assert_called_once_with("k", 30, json.dumps({"a": 1}))

    def test_set_if_exists(self, cache):
        cache.client.set.return_value = None

        assert cache.set_if_exists("k", {"a": 1}, ttl=30) is False
        cache.client.set.assert_called_once_with("k", json.dumps({"a": 1}), ex=30, xx=True)

    def test_update(self, cache):
        pipe = MagicMock()
        pipe.get.return_value = json.dumps({"a": 1})
        cache.client.transaction.side_effect = lambda func, *keys, **kwargs: func(pipe)

        result = cache.update("k", lambda v: {**v, "b": 2}, ttl=30)

        assert result == {"a": 1, "b": 2}
        assert cache.client.transaction.call_args.args[1] == "k"
        pipe.multi.assert_called_once()
        pipe.set.assert_called_once_with("k", json.dumps({"a": 1, "b": 2}), ex=30)

    def test_update_missing(self, cache):
        pipe = MagicMock()
        pipe.get.return_value = None
        cache.client.transaction.side_effect = lambda func, *keys, **kwargs: func(pipe)

        assert cache.update("k", lambda v: v, ttl=30) is None
        pipe.set.assert_not_called()

    def test_rate_limit(self, cache):
        cache.client.incr.side_effect = [1, 2, 3]

        assert [cache.rate_limit("rl", 2) for _ in range(3)] == [True, True, False]
        cache.client.expire.assert_called_once()


def test_file_cache_key_depends_on_content(tmp_path):
    a = tmp_path / "a.wav"
    b = tmp_path / "b.wav"
    a.write_bytes(b"same")
    b.write_bytes(b"same")

    assert file_cache_key("p", a) == file_cache_key("p", b)

    b.write_bytes(b"different")
    assert file_cache_key("p", a) != file_cache_key("p", b)


def test_create_cache_without_redis():
    with patch.object(RedisCache, "client", new_callable=MagicMock) as client:
        client.ping.side_effect = redis.ConnectionError("refused")

        assert create_cache() is None
