"""Read-through cache for public tracking lookups.

Redis is used when ``REDIS_URL`` is configured and reachable; otherwise
entries live in an in-process ``TTLCache``. Redis errors degrade to the
local cache rather than failing the request.
"""
import json
from typing import Any, Optional
from cachetools import TTLCache
import redis
from shared.core import get_logger

logger = get_logger(__name__)

class ResponseCache:
    def __init__(self, redis_url: Optional[str] = None, ttl: int = 30, maxsize: int = 1024):
        self.ttl = ttl
        self.local = TTLCache(maxsize=maxsize, ttl=ttl)
        self.redis_client: Optional[redis.Redis] = None
        if redis_url:
            try:
                client = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=1)
                client.ping()
                self.redis_client = client
            except redis.RedisError as e:
                logger.warning(f"Redis unavailable, using in-process cache: {e}")

    def get(self, key: str) -> Optional[Any]:
        if self.redis_client:
            try:
                val = self.redis_client.get(key)
                if val is not None:
                    return json.loads(val)
            except redis.RedisError as e:
                logger.warning(f"Cache read failed for {key}: {e}")
        return self.local.get(key)

    def set(self, key: str, value: Any) -> None:
        if self.redis_client:
            try:
                self.redis_client.setex(key, self.ttl, json.dumps(value, default=str))
                return
            except redis.RedisError as e:
                logger.warning(f"Cache write failed for {key}: {e}")
        self.local[key] = value

    def delete(self, key: str) -> None:
        self.local.pop(key, None)
        if self.redis_client:
            try:
                self.redis_client.delete(key)
            except redis.RedisError as e:
                logger.warning(f"Cache delete failed for {key}: {e}")

    def clear(self) -> None:
        self.local.clear()

def tracking_key(tracking_id: str) -> str:
    return f"track:{tracking_id}"
