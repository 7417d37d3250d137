"""
Redis pools and pending-order pub/sub.
"""

from shared.infrastructure.redis.pool import (
    get_redis_pool,
    get_redis_sync_client,
    close_redis_pool,
)
from shared.infrastructure.redis.order_events import OrderEvent, publish_order_event
from shared.infrastructure.redis.constants import channel_pending_orders

__all__ = [
    "get_redis_pool",
    "get_redis_sync_client",
    "close_redis_pool",
    "OrderEvent",
    "publish_order_event",
    "channel_pending_orders",
]
