# repos/store.py
"""
Persistence adapter for cached API responses.
- The only layer that talks to the raw key/value backend
- Values are opaque serialized strings
- Capacity rejections come back as False, not as exceptions
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base error raised by key/value backends."""


class QuotaExceededError(StoreError):
    """The backend refused a write because its capacity is used up."""


class StoreUnavailableError(StoreError):
    """The backend could not be reached."""


class UnreadableValueError(StoreError):
    """The key exists but its value cannot be read back as a string."""


class KeyValueBackend(ABC):
    """Synchronous string-keyed store with finite capacity."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value. Raises QuotaExceededError when out of space."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        ...


class StoreAdapter:
    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    def read(self, key: str) -> Optional[str]:
        return self.backend.get(key)

    def write(self, key: str, value: str) -> bool:
        try:
            self.backend.set(key, value)
        except QuotaExceededError as e:
            logger.debug(f"Write rejected for {key}: {str(e)}")
            return False
        return True

    def remove(self, key: str) -> None:
        self.backend.delete(key)

    def keys(self, prefix: str = "") -> List[str]:
        return list(self.backend.keys(prefix))
