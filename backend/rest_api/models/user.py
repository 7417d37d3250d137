"""
User and Authentication Models.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .tenant import Tenant, Restaurant


class User(AuditMixin, Base):
    """
    A tenant staff member. ``role`` is the tenant-level role: an OWNER
    manages every restaurant of the tenant, MANAGER and WAITER work in the
    restaurants listed in their RestaurantUser assignments.
    Staff without a password (most waiters) exist only as records and
    cannot log in.
    Inherits: is_active, created_at, updated_at, deleted_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    # Login identifier; unique across tenants since login carries no tenant
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    password: Mapped[Optional[str]] = mapped_column(Text)  # bcrypt hash
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)  # OWNER, MANAGER, WAITER
    address: Mapped[Optional[str]] = mapped_column(Text)

    tenant: Mapped["Tenant"] = relationship(back_populates="users")
    restaurant_roles: Mapped[list["RestaurantUser"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


class RestaurantUser(AuditMixin, Base):
    """
    Assigns a user to a restaurant with a role in that restaurant.
    """

    __tablename__ = "restaurant_user"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(Text, nullable=False)  # MANAGER, WAITER

    user: Mapped["User"] = relationship(back_populates="restaurant_roles")
    restaurant: Mapped["Restaurant"] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_restaurant_user"),
    )

    def __repr__(self) -> str:
        return f"<RestaurantUser(user_id={self.user_id}, restaurant_id={self.restaurant_id}, role='{self.role}')>"


class SuperAdmin(AuditMixin, Base):
    """
    Platform operator. Lives outside every tenant and authenticates
    through the super-admin portal only.
    """

    __tablename__ = "super_admin"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<SuperAdmin(id={self.id}, email='{self.email}')>"
