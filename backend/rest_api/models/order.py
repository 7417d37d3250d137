"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderItemStatus, OrderSource, OrderStatus, OrderType, PaymentStatus
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .customer import Customer
    from .table import RestaurantTable


class Order(AuditMixin, Base):
    """
    A customer order. Totals are always recomputed from the item snapshots.

    Lifecycle: PLACED -> CONFIRMED -> PREPARING -> READY -> SERVED -> COMPLETED,
    or CANCELLED. Each status stamps its own timestamp column.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    table_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant_table.id", ondelete="SET NULL"), index=True
    )
    hall_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("hall.id", ondelete="SET NULL")
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("customer.id", ondelete="SET NULL"), index=True
    )

    order_number: Mapped[str] = mapped_column(String(20), nullable=False)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    table_number: Mapped[Optional[str]] = mapped_column(String(20))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    total_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    source: Mapped[str] = mapped_column(Text, default=OrderSource.MANUAL, nullable=False)
    order_type: Mapped[str] = mapped_column(Text, default=OrderType.DINE_IN, nullable=False)
    status: Mapped[str] = mapped_column(Text, default=OrderStatus.PLACED, nullable=False, index=True)

    payment_method: Mapped[Optional[str]] = mapped_column(Text)
    payment_status: Mapped[str] = mapped_column(Text, default=PaymentStatus.PENDING, nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    placed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    preparing_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    served_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    cancel_reason: Mapped[Optional[str]] = mapped_column(Text)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    customer: Mapped[Optional["Customer"]] = relationship()
    table: Mapped[Optional["RestaurantTable"]] = relationship()

    __table_args__ = (
        Index("ix_order_restaurant_status", "restaurant_id", "status"),
        Index("ix_order_restaurant_number", "restaurant_id", "order_number"),
        CheckConstraint("total_cents >= 0", name="chk_order_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(AuditMixin, Base):
    """
    One order line. Name, price and cost are snapshots taken when the line
    was added, so later menu edits never change an existing bill.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("product.id", ondelete="SET NULL")
    )
    name_snapshot: Mapped[str] = mapped_column(Text, nullable=False)
    price_snapshot_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_snapshot_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default=OrderItemStatus.PENDING, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_qty_positive"),
        CheckConstraint("price_snapshot_cents >= 0", name="chk_order_item_price_non_negative"),
    )

    @property
    def line_total_cents(self) -> int:
        return self.price_snapshot_cents * self.quantity

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, name='{self.name_snapshot}', qty={self.quantity})>"
