"""
Redis Cache Client - Grant Review Scoring Engine
grant_review/services/redis_cache.py

Thin wrapper storing pydantic views (master results, call progress) as JSON.
"""
from typing import Optional, Type, TypeVar

import redis
from pydantic import BaseModel

from grant_review.config import settings

T = TypeVar("T", bound=BaseModel)


class RedisCache:
    def __init__(self, url: Optional[str] = None):
        self.client = redis.from_url(
            url or settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )

    def get(self, key: str, model: Type[T]) -> Optional[T]:
        """Read a cached view back into its model; None on a miss."""
        data = self.client.get(key)
        if data:
            return model.model_validate_json(data)
        return None

    def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        self.client.setex(key, ttl_seconds, value.model_dump_json())

    def delete(self, *keys: str) -> None:
        """Drop every given key in one round trip."""
        if keys:
            self.client.delete(*keys)
