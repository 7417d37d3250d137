"""
Infrastructure module: Database, Redis and order events.

Provides:
- Database sessions and transactions (db.py)
- Redis pools and pending-order pub/sub (redis/)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    safe_commit,
)
from shared.infrastructure.redis import (
    get_redis_pool,
    get_redis_sync_client,
    close_redis_pool,
    publish_order_event,
)

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
    # Redis
    "get_redis_pool",
    "get_redis_sync_client",
    "close_redis_pool",
    "publish_order_event",
]
