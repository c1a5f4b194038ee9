# services/cache_decorators.py
import asyncio
import functools
import logging
from typing import Callable, Awaitable, Any, Dict, Optional, Union

from apicache.services.cache_service import ApiCache

logger = logging.getLogger(__name__)

KeyBuilder = Union[str, Callable[..., str]]


def with_cache(
    cache: ApiCache,
    fetch_fn: Callable[..., Awaitable[Any]],
    key_builder: KeyBuilder,
    ttl_ms: Optional[int] = None,
    namespace: Optional[str] = None,
    coalesce: bool = False,
) -> Callable[..., Awaitable[Any]]:
    """
    Wrap an async fetch function with cache-aside lookups.

    Usage:
    get_bills = with_cache(cache, bill_api.get_all, bills_all_key(), ttl_ms=TRANSACTIONAL_TTL_MS)
    bills = await get_bills()

    Concurrent misses for the same key each call fetch_fn unless coalesce=True,
    in which case they share one in-flight fetch.
    """
    namespace = namespace or getattr(fetch_fn, "__name__", "default")
    inflight: Dict[str, "asyncio.Task[Any]"] = {}

    def _key(args, kwargs) -> str:
        if callable(key_builder):
            return key_builder(*args, **kwargs)
        return key_builder

    async def _fetch_and_store(key: str, args, kwargs) -> Any:
        data = await fetch_fn(*args, **kwargs)
        if data is not None:
            cache.set(key, data, ttl_ms)
        return data

    @functools.wraps(fetch_fn)
    async def wrapper(*args, **kwargs):
        key = _key(args, kwargs)

        cached_value = cache.get(key)
        if cached_value is not None:
            cache.counters.hit(namespace)
            return cached_value

        if not coalesce:
            cache.counters.miss(namespace)
            return await _fetch_and_store(key, args, kwargs)

        task = inflight.get(key)
        if task is None:
            cache.counters.miss(namespace)
            task = asyncio.ensure_future(_fetch_and_store(key, args, kwargs))
            inflight[key] = task
            task.add_done_callback(lambda _t, k=key: inflight.pop(k, None))
        else:
            logger.debug(f"Joining in-flight fetch for {key}")
        # one caller being cancelled must not cancel the fetch the others share
        return await asyncio.shield(task)

    return wrapper


def cached(
    cache: ApiCache,
    key_builder: KeyBuilder,
    ttl_ms: Optional[int] = None,
    namespace: Optional[str] = None,
    coalesce: bool = False,
):
    """
    Usage:
    @cached(cache, lambda bill_id: bill_detail_key(bill_id), ttl_ms=120_000, namespace="bills")
    async def get_bill(bill_id: int) -> dict:
        ...
    """
    def decorator(fn: Callable[..., Awaitable[Any]]):
        return with_cache(cache, fn, key_builder, ttl_ms=ttl_ms, namespace=namespace, coalesce=coalesce)
    return decorator
