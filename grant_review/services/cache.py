"""
Cache Service Singleton - Grant Review Scoring Engine
grant_review/services/cache.py

Singleton Redis cache plus the key scheme for derived call views.
Gracefully handles Redis unavailability: every helper degrades to a miss.
"""
import logging
from typing import Optional, Type, TypeVar

import redis
from pydantic import BaseModel

from grant_review.config import settings
from grant_review.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# TTLs (seconds)
TTL_RESULTS = settings.CACHE_TTL_RESULTS
TTL_PROGRESS = settings.CACHE_TTL_PROGRESS

# Singleton instance
_cache: Optional[RedisCache] = None


def results_key(call_id: str) -> str:
    return f"results:{call_id}"


def progress_key(call_id: str) -> str:
    return f"progress:{call_id}"


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if caching is enabled and Redis is reachable, None otherwise.
    """
    global _cache
    if not settings.CACHE_ENABLED:
        return None
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError):
            logger.warning("cache_unavailable", extra={"redis_url": settings.REDIS_URL})
            _cache = None
    return _cache


def reset_cache() -> None:
    """Reset the cache singleton."""
    global _cache
    _cache = None


def cache_get(key: str, model: Type[T]) -> Optional[T]:
    cache = get_cache()
    if not cache:
        return None
    try:
        return cache.get(key, model)
    except redis.RedisError as e:
        logger.warning("cache_read_failed", extra={"key": key, "error": str(e)})
        return None


def cache_set(key: str, value: BaseModel, ttl_seconds: int) -> None:
    cache = get_cache()
    if not cache:
        return
    try:
        cache.set(key, value, ttl_seconds)
    except redis.RedisError as e:
        logger.warning("cache_write_failed", extra={"key": key, "error": str(e)})


def invalidate_call(call_id: str) -> None:
    """Drop every derived view of a call after a write touching it."""
    cache = get_cache()
    if not cache:
        return
    try:
        cache.delete(results_key(call_id), progress_key(call_id))
    except redis.RedisError as e:
        logger.warning("cache_invalidate_failed", extra={"call_id": call_id, "error": str(e)})
