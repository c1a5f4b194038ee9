# services/cache_service.py
"""
TTL cache for API responses on top of a StoreAdapter.
- Records are JSON: {"data": ..., "timestamp": <ms>, "ttl": <ms>}
- Expired and corrupt records are deleted when they are next read or swept
- Every key lives under one namespace prefix so other data in the store is left alone
- All operations are synchronous; nothing here awaits
"""

import json
import math
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from apicache.repos.store import StoreAdapter, StoreError, UnreadableValueError
from apicache.services.cache_stats import CacheStats

logger = logging.getLogger(__name__)

CACHE_PREFIX = "api_cache_"
DEFAULT_TTL_MS = 5 * 60 * 1000  # 5 minutes


def now_ms() -> int:
    return int(time.time() * 1000)


class CorruptRecordError(ValueError):
    """Raised when a stored value is not a well-formed cache record."""


@dataclass(frozen=True)
class CacheRecord:
    data: Any
    stored_at: int
    ttl_ms: int

    def is_expired(self, now: int) -> bool:
        return now - self.stored_at > self.ttl_ms

    def dumps(self) -> str:
        return json.dumps({"data": self.data, "timestamp": self.stored_at, "ttl": self.ttl_ms})

    @classmethod
    def loads(cls, raw: str) -> "CacheRecord":
        try:
            payload = json.loads(raw)
            stored_at = payload["timestamp"]
            ttl_ms = payload["ttl"]
            data = payload["data"]
        except (ValueError, TypeError, KeyError) as e:
            raise CorruptRecordError(f"Unreadable cache record: {str(e)}") from e
        for field, value in (("timestamp", stored_at), ("ttl", ttl_ms)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise CorruptRecordError(f"Cache record {field} must be numeric")
            # json accepts NaN/Infinity; a NaN timestamp would never expire
            if not math.isfinite(value):
                raise CorruptRecordError(f"Cache record {field} must be finite")
        return cls(data=data, stored_at=stored_at, ttl_ms=ttl_ms)


class ApiCache:
    def __init__(
        self,
        store: StoreAdapter,
        prefix: str = CACHE_PREFIX,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ):
        if not prefix:
            raise ValueError("Cache prefix must be a non-empty string")
        if default_ttl_ms <= 0:
            raise ValueError("default_ttl_ms must be positive")
        self.store = store
        self.prefix = prefix
        self.default_ttl_ms = default_ttl_ms
        self.clock = clock
        self.counters = CacheStats()

    def _storage_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _namespace_keys(self) -> List[str]:
        return self.store.keys(self.prefix)

    def _read_record(self, storage_key: str) -> Optional[CacheRecord]:
        try:
            raw = self.store.read(storage_key)
        except UnreadableValueError as e:
            raise CorruptRecordError(str(e)) from e
        if raw is None:
            return None
        return CacheRecord.loads(raw)

    def _load(self, storage_key: str) -> Optional[CacheRecord]:
        """Read a record; corrupt records are removed and read as absent."""
        try:
            return self._read_record(storage_key)
        except CorruptRecordError as e:
            logger.warning(f"Removing corrupt cache entry {storage_key}: {str(e)}")
            self.store.remove(storage_key)
            self.counters.record("corrupt")
            return None

    # ---------------------------
    # Lookup
    # ---------------------------
    def get(self, key: str) -> Optional[Any]:
        storage_key = self._storage_key(key)
        try:
            record = self._load(storage_key)
            if record is None:
                return None
            if record.is_expired(self.clock()):
                self.store.remove(storage_key)
                self.counters.record("expired")
                return None
        except StoreError as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {str(e)}")
            return None
        return record.data

    # ---------------------------
    # Write
    # ---------------------------
    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        storage_key = self._storage_key(key)
        try:
            raw = CacheRecord(data=value, stored_at=self.clock(), ttl_ms=ttl).dumps()
        except (TypeError, ValueError) as e:
            logger.warning(f"Not caching {key}, value is not serializable: {str(e)}")
            self.counters.record("write_failures")
            return

        try:
            if self.store.write(storage_key, raw):
                self.counters.record("writes")
                return

            # Out of space: reclaim expired entries and retry once
            self.sweep_expired()
            if self.store.write(storage_key, raw):
                self.counters.record("writes")
                return
            logger.error(f"Failed to cache data for {key}: store is full")
        except StoreError as e:
            logger.error(f"Failed to cache data for {key}: {str(e)}")
        self.counters.record("write_failures")

    # ---------------------------
    # Maintenance
    # ---------------------------
    def sweep_expired(self) -> int:
        """Delete expired and corrupt records in the namespace. Never raises."""
        removed = 0
        now = self.clock()
        try:
            for storage_key in self._namespace_keys():
                try:
                    record = self._read_record(storage_key)
                except CorruptRecordError:
                    self.counters.record("corrupt")
                    expired = True
                else:
                    if record is None:
                        continue
                    expired = record.is_expired(now)
                if expired:
                    self.store.remove(storage_key)
                    removed += 1
        except StoreError as e:
            logger.warning(f"Cache sweep stopped early after {removed} removals: {str(e)}")

        self.counters.record("swept", removed)
        logger.debug(f"Swept {removed} expired cache entries")
        return removed

    # ---------------------------
    # Invalidation
    # ---------------------------
    def invalidate(self, pattern: str) -> None:
        """Delete every cached entry whose key contains ``pattern``.

        Matching is plain substring containment on the key as the caller built
        it (namespace prefix excluded), so ``invalidate("bills")`` drops
        ``bills_all_{}`` and ``bills_detail_5`` alike.

        An empty pattern would match every entry, so it raises ValueError;
        use ``clear_all`` to drop the whole namespace.
        """
        if not pattern or not isinstance(pattern, str):
            raise ValueError("Invalid pattern")

        try:
            doomed = [
                k for k in self._namespace_keys()
                if pattern in k[len(self.prefix):]
            ]
            for storage_key in doomed:
                self.store.remove(storage_key)
        except StoreError as e:
            logger.error(f"Failed to invalidate cache pattern {pattern}: {str(e)}")
            raise

        self.counters.record("invalidated", len(doomed))
        logger.debug(f"Invalidated {len(doomed)} cache entries matching: {pattern}")

    def clear_all(self) -> None:
        try:
            doomed = self._namespace_keys()
            for storage_key in doomed:
                self.store.remove(storage_key)
        except StoreError as e:
            logger.error(f"Failed to clear cache namespace {self.prefix}: {str(e)}")
            raise

        self.counters.record("cleared", len(doomed))
        logger.info(f"Cleared {len(doomed)} cache entries")

    # ---------------------------
    # Cache Stats
    # ---------------------------
    def size(self) -> int:
        return len(self._namespace_keys())

    def stats(self):
        snapshot = self.counters.snapshot()
        try:
            snapshot["entries"] = self.size()
        except StoreError as e:
            logger.error(f"Failed to count cache entries: {str(e)}")
            snapshot["entries"] = None
        return snapshot
