"""
Customer Model.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK


class Customer(AuditMixin, Base):
    """
    A restaurant's customer, identified by phone within the restaurant.
    Orders upsert customers by phone. ``credit_balance_cents`` is the
    outstanding udhaar (pay-later) amount.
    """

    __tablename__ = "customer"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Aggregates maintained when orders complete
    total_orders: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_spent_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_order_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    credit_balance_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "phone", name="uq_customer_restaurant_phone"),
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}', restaurant_id={self.restaurant_id})>"
