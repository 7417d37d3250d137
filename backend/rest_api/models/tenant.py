"""
Multi-Tenancy Models: Tenant and Restaurant.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import DEFAULT_THEME_PRESET, KDS_DEFAULT_AUTO_CLEAR_SECONDS
from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .user import User
    from .table import Hall, RestaurantTable


class Tenant(AuditMixin, Base):
    """
    Top-level account boundary. A tenant owns one or more restaurants and
    their staff. Suspended tenants cannot log in.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "tenant"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    contact_email: Mapped[Optional[str]] = mapped_column(Text)
    contact_phone: Mapped[Optional[str]] = mapped_column(Text)
    plan: Mapped[str] = mapped_column(Text, default="STANDARD", nullable=False)
    is_suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    suspended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    suspension_reason: Mapped[Optional[str]] = mapped_column(Text)

    restaurants: Mapped[list["Restaurant"]] = relationship(back_populates="tenant")
    users: Mapped[list["User"]] = relationship(back_populates="tenant")

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', suspended={self.is_suspended})>"


class Restaurant(AuditMixin, Base):
    """
    A single eatery belonging to a tenant, with its own menu, staff,
    halls and tables. The slug addresses its public menu.
    """

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Profile
    phone: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    address: Mapped[Optional[str]] = mapped_column(Text)
    gst_number: Mapped[Optional[str]] = mapped_column(String(50))
    tagline: Mapped[Optional[str]] = mapped_column(Text)
    restaurant_type: Mapped[Optional[str]] = mapped_column(Text)
    opening_time: Mapped[Optional[str]] = mapped_column(Text)  # "09:00"
    closing_time: Mapped[Optional[str]] = mapped_column(Text)  # "23:00"

    # Settings
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    tax_included: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    opening_hours: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)

    # Kitchen display
    kds_sound_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    kds_auto_clear_seconds: Mapped[int] = mapped_column(
        Integer, default=KDS_DEFAULT_AUTO_CLEAR_SECONDS, nullable=False
    )

    # Theme (stored for the ordering site, never rendered here)
    theme_preset: Mapped[str] = mapped_column(Text, default=DEFAULT_THEME_PRESET, nullable=False)
    theme_colors: Mapped[Optional[dict[str, str]]] = mapped_column(JSON)

    tenant: Mapped["Tenant"] = relationship(back_populates="restaurants")
    halls: Mapped[list["Hall"]] = relationship(back_populates="restaurant")
    tables: Mapped[list["RestaurantTable"]] = relationship(back_populates="restaurant")

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}', slug='{self.slug}', tenant_id={self.tenant_id})>"
