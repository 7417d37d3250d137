"""
Redis listener for pending-order events of one restaurant.

New QR orders become notifications in a QROrderQueue. Accepted or rejected
events remove the notification, so a decision taken on one device clears
the others.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from shared.config.constants import EventType
from shared.config.logging import client_logger as logger
from shared.infrastructure.redis import OrderEvent, channel_pending_orders, get_redis_pool

from .qr_notification import QROrderPayload, QROrderQueue

RECONNECT_DELAY_SECONDS = 1.0
MAX_RECONNECT_DELAY_SECONDS = 30.0


class OrderEventListener:
    """
    Usage:
        listener = OrderEventListener(restaurant_id, queue)
        task = asyncio.create_task(listener.run())
        ...
        task.cancel()
    """

    def __init__(self, restaurant_id: int, queue: QROrderQueue, client: Optional[redis.Redis] = None):
        self.restaurant_id = restaurant_id
        self.queue = queue
        self.channel = channel_pending_orders(restaurant_id)
        self._client = client

    async def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = await get_redis_pool()
        return self._client

    def handle_message(self, raw: str | bytes) -> Optional[OrderEvent]:
        """Apply one pub/sub message to the queue. Returns the parsed event."""
        try:
            event = OrderEvent.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Invalid order event ignored", channel=self.channel, error=str(e))
            return None

        if event.restaurant_id != self.restaurant_id:
            return None

        if event.type == EventType.NEW_QR_ORDER:
            try:
                payload = QROrderPayload.from_dict(event.data)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Invalid QR order payload ignored", error=str(e))
                return None
            self.queue.push(payload)
        elif event.type in (EventType.QR_ORDER_ACCEPTED, EventType.QR_ORDER_REJECTED):
            try:
                order_id = int(event.data["order_id"])
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Invalid order decision ignored", error=str(e))
                return None
            self.queue.remove(order_id)
        return event

    async def run(self) -> None:
        """Listen until cancelled, reconnecting with backoff on connection loss."""
        delay = RECONNECT_DELAY_SECONDS
        while True:
            client = await self._redis()
            pubsub = client.pubsub()
            try:
                await pubsub.subscribe(self.channel)
                logger.info("Order event listener started", channel=self.channel)
                delay = RECONNECT_DELAY_SECONDS
                while True:
                    try:
                        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                    except RedisTimeoutError:
                        continue
                    if message is None or message.get("type") != "message":
                        continue
                    self.handle_message(message["data"])
            except asyncio.CancelledError:
                logger.info("Order event listener cancelled", channel=self.channel)
                raise
            except RedisConnectionError as e:
                logger.warning("Order event listener lost connection", channel=self.channel, error=str(e), retry_in=delay)
                await asyncio.sleep(delay)
                delay = min(delay * 2, MAX_RECONNECT_DELAY_SECONDS)
            finally:
                try:
                    await pubsub.unsubscribe(self.channel)
                    await pubsub.aclose()
                except RedisConnectionError as e:
                    logger.debug("Unsubscribe skipped on closed connection", error=str(e))
