"""
Health Check Router - Grant Review Scoring Engine
grant_review/routers/health.py

Returns health status of the store and the Redis cache.
"""
from datetime import datetime, timezone
from typing import Dict

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from snowflake.connector.errors import Error as SnowflakeError

from grant_review.config import settings
from grant_review.services.snowflake import get_snowflake_connection

router = APIRouter(tags=["Health"])


#  Schemas

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


#  Dependency Health Checks

def _short(e: Exception) -> str:
    msg = str(e)
    return msg[:100] + "..." if len(msg) > 100 else msg


def check_store() -> str:
    """Check the configured store backend."""
    if settings.STORE_BACKEND == "memory":
        return "healthy (in-memory)"
    try:
        conn = get_snowflake_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT CURRENT_USER()")
            result = cursor.fetchone()
            cursor.close()
        finally:
            conn.close()
        return f"healthy (User: {result[0]})"
    except SnowflakeError as e:
        return f"unhealthy: {_short(e)}"


def check_redis() -> str:
    """Check Redis connection health."""
    if not settings.CACHE_ENABLED:
        return "disabled"
    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )
        client.ping()
        client.close()
        return f"healthy (URL: {settings.REDIS_URL})"
    except redis.RedisError as e:
        return f"unhealthy: {_short(e)}"


def _ok(result: str) -> bool:
    return result.startswith("healthy") or result == "disabled"


#  Routes

@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All dependencies healthy"},
        503: {"description": "One or more dependencies unhealthy"},
    },
    summary="Health check",
)
def health_check():
    dependencies = {
        "store": check_store(),
        "redis": check_redis(),
    }
    all_healthy = all(_ok(v) for v in dependencies.values())

    response = HealthResponse(
        status="healthy" if all_healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )

    if all_healthy:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
