# repos/redis_store.py
import logging
import re
from typing import List, Optional

import redis
from redis.exceptions import OutOfMemoryError, ResponseError

from apicache.repos.store import (
    KeyValueBackend, QuotaExceededError, StoreError, StoreUnavailableError, UnreadableValueError
)

logger = logging.getLogger(__name__)

SCAN_COUNT = 500

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def _glob_escape(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisStore(KeyValueBackend):
    """Key/value backend on a synchronous Redis client (decode_responses=True)."""

    def __init__(self, client: redis.Redis):
        self.redis = client

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis.get(key)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            raise StoreUnavailableError(f"Redis GET failed for {key}: {str(e)}") from e
        except ResponseError as e:
            # WRONGTYPE: a hash/list/set sits under a cache key
            raise UnreadableValueError(f"Redis GET failed for {key}: {str(e)}") from e
        except UnicodeDecodeError as e:
            raise UnreadableValueError(f"Value of {key} is not valid UTF-8: {str(e)}") from e
        except redis.RedisError as e:
            raise StoreError(f"Redis GET failed for {key}: {str(e)}") from e

    def set(self, key: str, value: str) -> None:
        try:
            self.redis.set(key, value)
        except OutOfMemoryError as e:
            raise QuotaExceededError(str(e)) from e
        except ResponseError as e:
            # servers without a dedicated OOM error class still mention maxmemory
            if "maxmemory" in str(e):
                raise QuotaExceededError(str(e)) from e
            raise StoreError(f"Redis SET failed for {key}: {str(e)}") from e
        except (redis.ConnectionError, redis.TimeoutError) as e:
            raise StoreUnavailableError(f"Redis SET failed for {key}: {str(e)}") from e
        except redis.RedisError as e:
            raise StoreError(f"Redis SET failed for {key}: {str(e)}") from e

    def delete(self, key: str) -> None:
        try:
            self.redis.delete(key)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            raise StoreUnavailableError(f"Redis DEL failed for {key}: {str(e)}") from e
        except redis.RedisError as e:
            raise StoreError(f"Redis DEL failed for {key}: {str(e)}") from e

    def keys(self, prefix: str = "") -> List[str]:
        pattern = f"{_glob_escape(prefix)}*"
        try:
            found = list(self.redis.scan_iter(match=pattern, count=SCAN_COUNT))
        except (redis.ConnectionError, redis.TimeoutError) as e:
            raise StoreUnavailableError(f"Redis SCAN failed for {pattern}: {str(e)}") from e
        except UnicodeDecodeError as e:
            raise StoreError(f"Redis SCAN returned an undecodable key for {pattern}: {str(e)}") from e
        except redis.RedisError as e:
            raise StoreError(f"Redis SCAN failed for {pattern}: {str(e)}") from e
        logger.debug(f"Scanned {len(found)} keys matching pattern: {pattern}")
        return found
