"""
Audit Log Model.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK


class AuditLog(AuditMixin, Base):
    """
    Records significant changes: who did what to which entity, with the
    before/after state as JSON text.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    tenant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tenant.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)

    # Who made the change (staff user or super admin)
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)
    user_email: Mapped[Optional[str]] = mapped_column(Text)

    # What was changed
    entity_type: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    entity_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    action: Mapped[str] = mapped_column(Text, nullable=False)

    # Change details (JSON)
    old_values: Mapped[Optional[str]] = mapped_column(Text)
    new_values: Mapped[Optional[str]] = mapped_column(Text)
    # "metadata" is reserved on declarative classes
    extra_metadata: Mapped[Optional[str]] = mapped_column("metadata", Text)

    ip_address: Mapped[Optional[str]] = mapped_column(Text)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_audit_log_tenant_entity_type", "tenant_id", "entity_type"),
        Index("ix_audit_log_tenant_entity_id", "tenant_id", "entity_id"),
    )
