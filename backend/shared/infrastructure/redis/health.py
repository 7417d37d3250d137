"""
Redis health checks for the detailed health endpoint and the
super-admin system status.
"""

from __future__ import annotations

from typing import Any

from shared.config.settings import settings
from shared.utils.health import health_check_with_timeout, sync_health_check_with_timeout
from shared.infrastructure.redis.pool import _get_redis_sync_pool, get_redis_pool, get_redis_sync_client


@health_check_with_timeout(timeout=3.0, component="redis_async")
async def check_redis_async_health() -> dict[str, Any]:
    """Ping through the async pool used by the order event listener."""
    pool = await get_redis_pool()
    await pool.ping()
    return {"type": "async", "max_connections": settings.redis_pool_max_connections}


@sync_health_check_with_timeout(timeout=3.0, component="redis_sync")
def check_redis_sync_health() -> dict[str, Any]:
    """Ping through the sync pool used by the token blacklist and event publishing."""
    get_redis_sync_client().ping()
    return {
        "type": "sync_pool",
        "max_connections": _get_redis_sync_pool().max_connections,
    }
