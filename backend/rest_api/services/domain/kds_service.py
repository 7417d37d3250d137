"""
Kitchen Display Service.

Read model of the kitchen queue plus the per-restaurant display settings.
Status changes go through OrderService; the display only reads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Order, Restaurant, utcnow
from rest_api.repositories import OrderRepository
from rest_api.services.audit import log_change, serialize_model
from rest_api.services.base_service import BaseService
from rest_api.services.domain.restaurant_service import RestaurantService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditAction, AuditEntity, EventType, OrderStatus
from shared.config.logging import get_logger
from shared.infrastructure.redis import channel_pending_orders
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import (
    KdsCounts,
    KdsDashboardResponse,
    KdsItemOutput,
    KdsOrderOutput,
    KdsOrdersResponse,
    KdsRealtimeConfig,
    KdsSettingsOutput,
)

logger = get_logger(__name__)


def elapsed_seconds(since: datetime | None, now: datetime) -> int | None:
    if since is None:
        return None
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return max(0, int((now - since).total_seconds()))


def kds_order(order: Order, now: datetime) -> KdsOrderOutput:
    return KdsOrderOutput(
        id=order.id,
        order_number=order.order_number,
        customer_name=order.customer_name,
        table_number=order.table_number,
        notes=order.notes,
        status=order.status,
        source=order.source,
        order_type=order.order_type,
        placed_at=order.placed_at,
        confirmed_at=order.confirmed_at,
        preparing_at=order.preparing_at,
        ready_at=order.ready_at,
        elapsed_since_placed=elapsed_seconds(order.placed_at, now) or 0,
        elapsed_since_preparing=elapsed_seconds(order.preparing_at, now),
        items=[
            KdsItemOutput(
                id=item.id,
                name=item.name_snapshot,
                quantity=item.quantity,
                notes=item.notes,
                status=item.status,
            )
            for item in order.items
        ],
    )


class KdsService(BaseService[Order]):
    """
    Domain service for the kitchen display.

    Business rules:
    - Only PLACED, CONFIRMED, PREPARING and READY orders are on the display
    - PLACED orders come first; within a status the oldest order comes first
    - Elapsed timers are computed against the server clock
    """

    def __init__(self, db: Session):
        super().__init__(db, Order)
        self._orders = OrderRepository(db)
        self._restaurants = RestaurantService(db)

    def dashboard(self, ctx: RestaurantContext, now: datetime | None = None) -> KdsDashboardResponse:
        now = now or utcnow()
        counts = self._orders.kitchen_counts(ctx.tenant_id, ctx.restaurant_id)
        return KdsDashboardResponse(
            orders=self._queue(ctx, now),
            counts=KdsCounts(
                placed=counts[OrderStatus.PLACED],
                confirmed=counts[OrderStatus.CONFIRMED],
                preparing=counts[OrderStatus.PREPARING],
                ready=counts[OrderStatus.READY],
                total_active=sum(counts.values()),
            ),
            settings=self.get_settings(ctx),
            server_time=now,
        )

    def active_orders(
        self,
        ctx: RestaurantContext,
        status: str | None = None,
        now: datetime | None = None,
    ) -> KdsOrdersResponse:
        now = now or utcnow()
        return KdsOrdersResponse(orders=self._queue(ctx, now, status), server_time=now)

    def get_order(self, order_id: int, ctx: RestaurantContext, now: datetime | None = None) -> KdsOrderOutput:
        """Any order of the restaurant, including ones no longer on the display."""
        order = self._orders.find_by_id(order_id, ctx.tenant_id, ctx.restaurant_id, include_inactive=True)
        if order is None:
            raise NotFoundError("Order", order_id, restaurant_id=ctx.restaurant_id)
        return kds_order(order, now or utcnow())

    def get_settings(self, ctx: RestaurantContext) -> KdsSettingsOutput:
        return self._settings_output(self._restaurants.get_restaurant(ctx))

    def update_settings(self, data: dict[str, Any], ctx: RestaurantContext) -> KdsSettingsOutput:
        """Apply the fields that were sent; null leaves a setting unchanged."""
        restaurant = self._restaurants.get_restaurant(ctx)
        old_values = serialize_model(restaurant)

        if data.get("sound_enabled") is not None:
            restaurant.kds_sound_enabled = data["sound_enabled"]
        if data.get("auto_clear_completed_after_seconds") is not None:
            restaurant.kds_auto_clear_seconds = data["auto_clear_completed_after_seconds"]
        restaurant.set_updated_by(ctx.user_id, ctx.email)

        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.RESTAURANT,
            entity_id=restaurant.id,
            action=AuditAction.UPDATE,
            old_values=old_values,
            new_values=serialize_model(restaurant),
        )
        self._commit("update kds settings", restaurant_id=ctx.restaurant_id)
        logger.info("KDS settings updated", restaurant_id=ctx.restaurant_id, user_id=ctx.user_id)
        return self._settings_output(restaurant)

    @staticmethod
    def realtime_config(ctx: RestaurantContext) -> KdsRealtimeConfig:
        return KdsRealtimeConfig(
            channel=channel_pending_orders(ctx.restaurant_id),
            events=[EventType.NEW_QR_ORDER, EventType.QR_ORDER_ACCEPTED, EventType.QR_ORDER_REJECTED],
        )

    def _queue(self, ctx: RestaurantContext, now: datetime, status: str | None = None) -> list[KdsOrderOutput]:
        orders = self._orders.kitchen_queue(ctx.tenant_id, ctx.restaurant_id, status)
        return [kds_order(order, now) for order in orders]

    @staticmethod
    def _settings_output(restaurant: Restaurant) -> KdsSettingsOutput:
        return KdsSettingsOutput(
            sound_enabled=restaurant.kds_sound_enabled,
            auto_clear_completed_after_seconds=restaurant.kds_auto_clear_seconds,
        )
