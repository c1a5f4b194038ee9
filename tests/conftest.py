import pytest

from apicache.repos.memory_store import MemoryStore
from apicache.repos.store import StoreAdapter
from apicache.services.cache_service import ApiCache


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def store(backend):
    return StoreAdapter(backend)


@pytest.fixture
def cache(store, clock):
    return ApiCache(store, clock=clock)
