"""
Floor Models: Hall, RestaurantTable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .tenant import Restaurant


class Hall(AuditMixin, Base):
    """
    A dining area grouping tables (e.g. "Rooftop", "AC Hall").
    """

    __tablename__ = "hall"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_ac: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="halls")
    tables: Mapped[list["RestaurantTable"]] = relationship(back_populates="hall")

    def __repr__(self) -> str:
        return f"<Hall(id={self.id}, name='{self.name}', restaurant_id={self.restaurant_id})>"


class RestaurantTable(AuditMixin, Base):
    """
    A physical table. ``table_number`` is unique among the restaurant's
    tables (enforced by the table service) and is what the QR link and the
    kitchen slip show. ``is_active`` disables ordering at the table.
    """

    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    hall_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("hall.id", ondelete="SET NULL"), index=True
    )
    table_number: Mapped[str] = mapped_column(String(20), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, default=4, nullable=False)

    restaurant: Mapped["Restaurant"] = relationship(back_populates="tables")
    hall: Mapped[Optional["Hall"]] = relationship(back_populates="tables")

    def __repr__(self) -> str:
        return f"<RestaurantTable(id={self.id}, table_number='{self.table_number}', restaurant_id={self.restaurant_id})>"
