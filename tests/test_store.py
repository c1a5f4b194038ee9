"""
Unit tests for the store adapter and its backends.
"""

import pytest
from unittest.mock import MagicMock

import redis
from redis.exceptions import OutOfMemoryError, ResponseError

from apicache.repos.memory_store import MemoryStore
from apicache.repos.redis_store import RedisStore
from apicache.repos.store import (
    QuotaExceededError, StoreAdapter, StoreError, StoreUnavailableError, UnreadableValueError
)


class TestMemoryStore:

    def test_rejects_write_over_quota_and_keeps_state(self):
        backend = MemoryStore(quota=10)
        backend.set("a", "1234")  # 5 chars

        with pytest.raises(QuotaExceededError):
            backend.set("b", "123456")  # would need 12

        assert backend.get("b") is None
        assert backend.used() == 5

    def test_overwrite_reuses_space_of_old_value(self):
        backend = MemoryStore(quota=10)
        backend.set("k", "123456789")
        backend.set("k", "987654321")

        assert backend.get("k") == "987654321"
        assert backend.used() == 10

    def test_delete_frees_space(self):
        backend = MemoryStore(quota=10)
        backend.set("k", "123456789")
        backend.delete("k")
        backend.delete("k")

        assert backend.used() == 0
        backend.set("j", "123456789")

    def test_keys_filtered_by_prefix(self):
        backend = MemoryStore()
        backend.set("api_cache_a", "1")
        backend.set("api_cache_b", "2")
        backend.set("authToken", "x")

        assert sorted(backend.keys("api_cache_")) == ["api_cache_a", "api_cache_b"]
        assert len(backend.keys()) == 3

    def test_invalid_quota(self):
        with pytest.raises(ValueError):
            MemoryStore(quota=0)


class TestStoreAdapter:

    def test_read_missing_key_returns_none(self, store):
        assert store.read("nope") is None

    def test_write_then_read(self, store):
        assert store.write("k", "v") is True
        assert store.read("k") == "v"

    def test_write_reports_capacity_exceeded(self):
        store = StoreAdapter(MemoryStore(quota=4))
        assert store.write("key", "value") is False
        assert store.read("key") is None

    def test_remove_is_idempotent(self, store):
        store.write("k", "v")
        store.remove("k")
        store.remove("k")
        assert store.read("k") is None

    def test_keys(self, store):
        store.write("api_cache_x", "1")
        store.write("other", "2")
        assert store.keys("api_cache_") == ["api_cache_x"]


class TestRedisStore:

    @pytest.fixture
    def client(self):
        return MagicMock(spec=redis.Redis)

    def test_get_delegates(self, client):
        client.get.return_value = "payload"
        assert RedisStore(client).get("k") == "payload"
        client.get.assert_called_once_with("k")

    def test_oom_error_becomes_quota_exceeded(self, client):
        client.set.side_effect = OutOfMemoryError("command not allowed when used memory > 'maxmemory'.")
        adapter = StoreAdapter(RedisStore(client))

        assert adapter.write("k", "v") is False

    def test_maxmemory_response_error_becomes_quota_exceeded(self, client):
        client.set.side_effect = ResponseError("OOM command not allowed when used memory > 'maxmemory'.")

        with pytest.raises(QuotaExceededError):
            RedisStore(client).set("k", "v")

    def test_other_response_errors_become_store_errors(self, client):
        client.set.side_effect = ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")

        with pytest.raises(StoreError) as exc_info:
            RedisStore(client).set("k", "v")
        assert not isinstance(exc_info.value, QuotaExceededError)

    def test_wrongtype_get_is_unreadable_value(self, client):
        client.get.side_effect = ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")

        with pytest.raises(UnreadableValueError):
            RedisStore(client).get("api_cache_hash")

    def test_undecodable_value_is_unreadable_value(self, client):
        client.get.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        with pytest.raises(UnreadableValueError):
            RedisStore(client).get("api_cache_bin")

    def test_remaining_redis_errors_become_store_errors(self, client):
        client.delete.side_effect = redis.RedisError("READONLY You can't write against a read only replica.")
        client.scan_iter.side_effect = redis.RedisError("ERR unknown command")

        backend = RedisStore(client)
        with pytest.raises(StoreError):
            backend.delete("k")
        with pytest.raises(StoreError):
            backend.keys("api_cache_")

    def test_connection_error_becomes_unavailable(self, client):
        client.get.side_effect = redis.ConnectionError("refused")
        client.delete.side_effect = redis.TimeoutError("slow")

        backend = RedisStore(client)
        with pytest.raises(StoreUnavailableError):
            backend.get("k")
        with pytest.raises(StoreUnavailableError):
            backend.delete("k")

    def test_keys_scans_with_escaped_prefix(self, client):
        client.scan_iter.return_value = iter(["api_cache_a", "api_cache_b"])

        found = RedisStore(client).keys("api_cache_")

        assert found == ["api_cache_a", "api_cache_b"]
        client.scan_iter.assert_called_once_with(match="api_cache_*", count=500)

    def test_keys_escapes_glob_characters(self, client):
        client.scan_iter.return_value = iter([])

        RedisStore(client).keys("odd*[prefix]?")

        client.scan_iter.assert_called_once_with(match="odd\\*\\[prefix\\]\\?*", count=500)
