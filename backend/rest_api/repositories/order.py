"""
Order Repository - Data access for orders and their items.
Items are always eager-loaded; every order response renders them.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence

from sqlalchemy import Select, case, func, select
from sqlalchemy.orm import selectinload

from rest_api.models import Order, OrderItem
from shared.config.constants import (
    KDS_ACTIVE_STATUSES,
    OPEN_ORDER_STATUSES,
    OrderSource,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from .base import RepositoryFilters, RestaurantRepository


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC [start, end) datetimes covering a calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    status: str | None = None
    from_date: date | None = None
    to_date: date | None = None


class OrderRepository(RestaurantRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of:
    - items
    """

    def __init__(self, session):
        super().__init__(Order, session)

    def _base_query(self) -> Select:
        return select(Order).options(selectinload(Order.items))

    def _apply_date_range(self, query: Select, column, from_date: date | None, to_date: date | None) -> Select:
        if from_date:
            query = query.where(column >= day_bounds(from_date)[0])
        if to_date:
            query = query.where(column < day_bounds(to_date)[1])
        return query

    def find_page(
        self,
        tenant_id: int,
        restaurant_id: int,
        filters: OrderFilters,
    ) -> tuple[Sequence[Order], int]:
        """Newest orders first, with the total matching count."""
        query = self._restaurant_query(tenant_id, restaurant_id)
        if filters.status:
            query = query.where(Order.status == filters.status)
        query = self._apply_date_range(query, Order.placed_at, filters.from_date, filters.to_date)

        total = self._session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        ) or 0
        orders = self._session.scalars(
            query.order_by(Order.placed_at.desc(), Order.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        ).all()
        return orders, total

    def number_exists(self, restaurant_id: int, order_number: str) -> bool:
        return (
            self._session.scalar(
                select(func.count())
                .select_from(Order)
                .where(Order.restaurant_id == restaurant_id, Order.order_number == order_number)
            )
            or 0
        ) > 0

    def find_open_for_table(self, tenant_id: int, restaurant_id: int, table_id: int) -> Order | None:
        """Newest open order seated at the table."""
        return self._session.scalar(
            self._restaurant_query(tenant_id, restaurant_id)
            .where(Order.table_id == table_id, Order.status.in_(OPEN_ORDER_STATUSES))
            .order_by(Order.placed_at.desc(), Order.id.desc())
            .limit(1)
        )

    def kitchen_queue(self, tenant_id: int, restaurant_id: int, status: str | None = None) -> Sequence[Order]:
        """Orders on the kitchen display: PLACED first, oldest first within a status."""
        statuses = [status] if status else list(KDS_ACTIVE_STATUSES)
        rank = case(
            {value: index for index, value in enumerate(KDS_ACTIVE_STATUSES)},
            value=Order.status,
        )
        return self._session.scalars(
            self._restaurant_query(tenant_id, restaurant_id)
            .where(Order.status.in_(statuses))
            .order_by(rank, Order.placed_at, Order.id)
        ).all()

    def kitchen_counts(self, tenant_id: int, restaurant_id: int) -> dict[str, int]:
        """Kitchen display orders grouped by status, every status present."""
        rows = self._session.execute(
            select(Order.status, func.count())
            .where(
                Order.tenant_id == tenant_id,
                Order.restaurant_id == restaurant_id,
                Order.status.in_(KDS_ACTIVE_STATUSES),
            )
            .group_by(Order.status)
        ).all()
        counts = dict.fromkeys(KDS_ACTIVE_STATUSES, 0)
        counts.update({status: count for status, count in rows})
        return counts

    def open_table_ids(self, restaurant_id: int) -> set[int]:
        rows = self._session.scalars(
            select(Order.table_id).where(
                Order.restaurant_id == restaurant_id,
                Order.table_id.is_not(None),
                Order.status.in_(OPEN_ORDER_STATUSES),
            )
        ).all()
        return set(rows)

    def completed_between(
        self,
        tenant_id: int,
        restaurant_id: int,
        from_date: date | None,
        to_date: date | None,
    ) -> Sequence[Order]:
        """Completed orders by completion day, oldest first."""
        query = self._restaurant_query(tenant_id, restaurant_id).where(
            Order.status == OrderStatus.COMPLETED
        )
        query = self._apply_date_range(query, Order.completed_at, from_date, to_date)
        return self._session.scalars(query.order_by(Order.completed_at, Order.id)).all()

    def count_by_status(self, restaurant_id: int, day: date) -> dict[str, int]:
        """Orders placed on the day, grouped by status."""
        start, end = day_bounds(day)
        rows = self._session.execute(
            select(Order.status, func.count())
            .where(
                Order.restaurant_id == restaurant_id,
                Order.placed_at >= start,
                Order.placed_at < end,
            )
            .group_by(Order.status)
        ).all()
        return {status: count for status, count in rows}

    def revenue_for_day(self, restaurant_id: int, day: date) -> int:
        """Sum of totals of orders completed on the day."""
        start, end = day_bounds(day)
        return self._session.scalar(
            select(func.coalesce(func.sum(Order.total_cents), 0)).where(
                Order.restaurant_id == restaurant_id,
                Order.status == OrderStatus.COMPLETED,
                Order.completed_at >= start,
                Order.completed_at < end,
            )
        ) or 0

    def pending_qr_count(self, restaurant_id: int) -> int:
        return self._session.scalar(
            select(func.count())
            .select_from(Order)
            .where(
                Order.restaurant_id == restaurant_id,
                Order.source == OrderSource.QR,
                Order.status == OrderStatus.PLACED,
            )
        ) or 0

    def pending_credit_orders(self, restaurant_id: int, customer_id: int) -> Sequence[Order]:
        """Unpaid credit (udhaar) orders of a customer, oldest first."""
        return self._session.scalars(
            select(Order)
            .where(
                Order.restaurant_id == restaurant_id,
                Order.customer_id == customer_id,
                Order.payment_method == PaymentMethod.CREDIT,
                Order.payment_status == PaymentStatus.PENDING,
            )
            .order_by(Order.placed_at, Order.id)
        ).all()

    def find_for_customer(
        self,
        tenant_id: int,
        restaurant_id: int,
        *,
        customer_id: int | None = None,
        phone: str | None = None,
        limit: int = 20,
    ) -> Sequence[Order]:
        query = self._restaurant_query(tenant_id, restaurant_id)
        if customer_id is not None:
            query = query.where(Order.customer_id == customer_id)
        if phone is not None:
            query = query.where(Order.customer_phone == phone)
        return self._session.scalars(
            query.order_by(Order.placed_at.desc(), Order.id.desc()).limit(limit)
        ).all()


def get_order_repository(db) -> OrderRepository:
    """Factory function for dependency injection."""
    return OrderRepository(db)
