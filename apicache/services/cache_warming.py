import asyncio
import logging
from typing import Any, Awaitable, Callable, List

from apicache.services.cache_service import ApiCache
from apicache.services.cache_decorators import with_cache
from apicache.services.cache_keys import (
    categories_all_key, payment_methods_all_key, REFERENCE_DATA_TTL_MS
)

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


def reference_loaders(
    cache: ApiCache,
    fetch_categories: Loader,
    fetch_payment_methods: Loader,
) -> List[Loader]:
    """Cache-wrapped loaders for the reference data most pages need after login"""
    return [
        with_cache(cache, fetch_categories, categories_all_key(),
                   ttl_ms=REFERENCE_DATA_TTL_MS, namespace="categories"),
        with_cache(cache, fetch_payment_methods, payment_methods_all_key(),
                   ttl_ms=REFERENCE_DATA_TTL_MS, namespace="payment_methods"),
    ]


async def warm_user_caches(*loaders: Loader) -> int:
    """Run loaders in parallel; failures are logged, never raised"""
    results = await asyncio.gather(
        *(loader() for loader in loaders),
        return_exceptions=True
    )

    warmed = 0
    for loader, result in zip(loaders, results):
        if isinstance(result, Exception):
            name = getattr(loader, "__name__", repr(loader))
            logger.warning(f"Failed to pre-fetch {name}: {result}")
        else:
            warmed += 1

    logger.info(f"Warmed {warmed}/{len(loaders)} user caches")
    return warmed


def clear_user_caches(cache: ApiCache) -> None:
    """Sign-out hook: nothing cached may outlive the session"""
    cache.clear_all()
