"""
Redis connection pool management.

An async pool for request handlers and the client listener, and a sync
connection pool for the token blacklist and order event publishing.
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING

import redis.asyncio as redis

from shared.config.settings import settings, REDIS_URL
from shared.config.logging import get_logger

if TYPE_CHECKING:
    import redis as redis_sync

logger = get_logger(__name__)


# =============================================================================
# Async Redis Pool
# =============================================================================

_redis_pool: redis.Redis | None = None
_redis_pool_lock: asyncio.Lock | None = None
_pool_lock_init = threading.Lock()


def _get_pool_lock() -> asyncio.Lock:
    """Lazily create the asyncio lock guarding pool creation."""
    global _redis_pool_lock
    if _redis_pool_lock is None:
        with _pool_lock_init:
            if _redis_pool_lock is None:
                _redis_pool_lock = asyncio.Lock()
    return _redis_pool_lock


async def get_redis_pool() -> redis.Redis:
    """
    Get or create the async Redis client singleton.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    async with _get_pool_lock():
        # Another coroutine may have initialized it while we waited
        if _redis_pool is None:
            _redis_pool = redis.from_url(
                REDIS_URL,
                max_connections=settings.redis_pool_max_connections,
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
                health_check_interval=30,
            )
            logger.info(
                "Redis async pool initialized",
                max_connections=settings.redis_pool_max_connections,
                timeout=settings.redis_socket_timeout,
            )
    return _redis_pool


# =============================================================================
# Sync Redis Pool
# =============================================================================

_redis_sync_pool = None
_sync_pool_lock = threading.Lock()


def _get_redis_sync_pool() -> "redis_sync.ConnectionPool":
    import redis as redis_sync
    global _redis_sync_pool
    if _redis_sync_pool is None:
        with _sync_pool_lock:
            if _redis_sync_pool is None:
                _redis_sync_pool = redis_sync.ConnectionPool.from_url(
                    REDIS_URL,
                    max_connections=settings.redis_sync_pool_max_connections,
                    decode_responses=True,
                    socket_connect_timeout=settings.redis_socket_timeout,
                    socket_timeout=settings.redis_socket_timeout,
                    health_check_interval=30,
                )
                logger.info(
                    "Redis sync pool initialized",
                    max_connections=settings.redis_sync_pool_max_connections,
                )
    return _redis_sync_pool


def get_redis_sync_client() -> "redis_sync.Redis":
    """
    Get a Redis client backed by the shared sync connection pool.
    """
    import redis as redis_sync
    return redis_sync.Redis(connection_pool=_get_redis_sync_pool())


# =============================================================================
# Cleanup
# =============================================================================


def close_redis_sync_client() -> None:
    """Disconnect the sync pool on shutdown."""
    global _redis_sync_pool
    with _sync_pool_lock:
        if _redis_sync_pool is not None:
            try:
                _redis_sync_pool.disconnect()
                logger.info("Redis sync pool closed")
            except Exception as e:
                logger.warning("Error closing Redis sync pool", error=str(e))
            finally:
                _redis_sync_pool = None


async def close_redis_pool() -> None:
    """
    Close all Redis connections on application shutdown.
    """
    global _redis_pool, _redis_pool_lock

    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis async pool closed")
    _redis_pool_lock = None

    close_redis_sync_client()
