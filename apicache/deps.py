from typing import Optional

import redis

from apicache.config import Settings, settings as default_settings
from apicache.repos.memory_store import MemoryStore
from apicache.repos.redis_store import RedisStore
from apicache.repos.store import StoreAdapter
from apicache.services.cache_service import ApiCache


def create_redis_client(url: str) -> redis.Redis:
    # blocking client; cache operations must not suspend
    return redis.Redis.from_url(url, encoding="utf-8", decode_responses=True)

def create_store(settings: Optional[Settings] = None) -> StoreAdapter:
    settings = settings or default_settings
    if settings.CACHE_BACKEND == "redis":
        if not settings.REDIS_URL:
            raise ValueError("REDIS_URL is required when CACHE_BACKEND is redis")
        return StoreAdapter(RedisStore(create_redis_client(settings.REDIS_URL)))
    return StoreAdapter(MemoryStore(quota=settings.CACHE_MEMORY_QUOTA))

def create_cache(settings: Optional[Settings] = None, store: Optional[StoreAdapter] = None) -> ApiCache:
    """Build the session's cache; construct once at the application root and pass it down"""
    settings = settings or default_settings
    return ApiCache(
        store or create_store(settings),
        prefix=settings.CACHE_PREFIX,
        default_ttl_ms=settings.CACHE_DEFAULT_TTL_MS,
    )
