# repos/memory_store.py
"""
In-process key/value backend with a fixed quota.
- Size is counted in characters of key + value, like browser local storage
- A write that would overflow the quota is rejected and nothing changes
"""

from typing import Dict, List, Optional

from apicache.repos.store import KeyValueBackend, QuotaExceededError

DEFAULT_QUOTA = 5 * 1024 * 1024  # 5M characters


class MemoryStore(KeyValueBackend):
    def __init__(self, quota: int = DEFAULT_QUOTA):
        if quota <= 0:
            raise ValueError("quota must be positive")
        self.quota = quota
        self._store: Dict[str, str] = {}
        self._used = 0

    @staticmethod
    def _cost(key: str, value: str) -> int:
        return len(key) + len(value)

    def used(self) -> int:
        return self._used

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        old = self._store.get(key)
        freed = self._cost(key, old) if old is not None else 0
        needed = self._used - freed + self._cost(key, value)
        if needed > self.quota:
            raise QuotaExceededError(
                f"writing {key!r} needs {needed} of {self.quota} characters"
            )
        self._store[key] = value
        self._used = needed

    def delete(self, key: str) -> None:
        old = self._store.pop(key, None)
        if old is not None:
            self._used -= self._cost(key, old)

    def keys(self, prefix: str = "") -> List[str]:
        return [k for k in self._store.keys() if k.startswith(prefix)]
