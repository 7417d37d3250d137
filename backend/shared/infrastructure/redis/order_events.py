"""
Pending-order notifications over Redis pub/sub.

The REST API publishes on ``restaurant:{id}:pending-orders`` whenever a QR
order is placed, accepted or rejected. Staff clients subscribe to the same
channel (see pos_client.order_events). Publishing is best effort: a Redis
outage is logged and never fails the request that produced the event.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings
from shared.config.logging import get_logger
from shared.infrastructure.redis.constants import channel_pending_orders
from shared.infrastructure.redis.pool import get_redis_sync_client

logger = get_logger(__name__)


@dataclass
class OrderEvent:
    """Envelope for every message on the pending-orders channel."""

    type: str
    restaurant_id: int
    data: dict[str, Any] = field(default_factory=dict)
    ts: str | None = None

    def __post_init__(self) -> None:
        if not self.type or not isinstance(self.type, str):
            raise ValueError("Event type must be a non-empty string")
        if not isinstance(self.restaurant_id, int) or self.restaurant_id <= 0:
            raise ValueError("Event restaurant_id must be a positive integer")
        if not isinstance(self.data, dict):
            raise ValueError("Event data must be an object")

    def to_json(self) -> str:
        data = asdict(self)
        data["ts"] = data["ts"] or datetime.now(timezone.utc).isoformat()
        return json.dumps(data, ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "OrderEvent":
        payload = json.loads(raw)
        return cls(
            type=payload["type"],
            restaurant_id=int(payload["restaurant_id"]),
            data=payload.get("data") or {},
            ts=payload.get("ts"),
        )


def publish_order_event(restaurant_id: int, event_type: str, payload: dict[str, Any]) -> int:
    """
    Publish an order event. Returns the number of subscribers that received
    it, or 0 when events are disabled or Redis is unavailable.
    """
    if not settings.order_events_enabled:
        return 0

    event = OrderEvent(type=event_type, restaurant_id=restaurant_id, data=payload)
    channel = channel_pending_orders(restaurant_id)
    try:
        receivers = get_redis_sync_client().publish(channel, event.to_json())
    except Exception as e:
        logger.error(
            "Order event publish failed",
            channel=channel,
            event_type=event_type,
            error=str(e),
        )
        return 0

    logger.debug("Order event published", channel=channel, event_type=event_type, receivers=receivers)
    return receivers
