"""
Audit logging service.
Records significant entity changes for compliance and debugging.
Entries join the caller's transaction; nothing is committed here.
"""

import json
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from rest_api.models import AuditLog
from rest_api.services.permissions import RestaurantContext


def _dumps(value: Optional[dict]) -> Optional[str]:
    return json.dumps(value, default=str) if value else None


def log_change(
    db: Session,
    *,
    tenant_id: int,
    user_id: Optional[int],
    user_email: Optional[str],
    entity_type: str,
    entity_id: int,
    action: str,
    restaurant_id: Optional[int] = None,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    metadata: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """
    Log a change to an entity.

    Args:
        db: Database session
        tenant_id: Tenant ID
        user_id: User who made the change
        user_email: Email of user who made the change
        entity_type: AuditEntity value (e.g. "RESTAURANT_TABLE")
        entity_id: ID of the entity
        action: AuditAction value (CREATE, UPDATE, DELETE, ...)
        restaurant_id: Restaurant the entity belongs to, if any
        old_values: Previous state of the entity (for UPDATE/DELETE)
        new_values: New state of the entity (for CREATE/UPDATE)
        metadata: Free-form details (e.g. settlement amounts)

    Returns:
        Created AuditLog entry
    """
    audit_entry = AuditLog(
        tenant_id=tenant_id,
        restaurant_id=restaurant_id,
        user_id=user_id,
        user_email=user_email,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        old_values=_dumps(old_values),
        new_values=_dumps(new_values),
        extra_metadata=_dumps(metadata),
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    # Don't commit here - let the caller handle the transaction
    return audit_entry


def serialize_model(obj: Any, exclude: list[str] = None) -> dict:
    """
    Serialize a SQLAlchemy model to a dictionary for audit logging.
    Password hashes are never serialized.
    """
    exclude = set(exclude or []) | {"password"}

    result = {}
    for column in obj.__table__.columns:
        if column.name in exclude:
            continue
        value = getattr(obj, column.key)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        result[column.name] = value

    return result


# Convenience functions for restaurant-scoped changes


def log_create(db: Session, ctx: RestaurantContext, entity_type: str, entity: Any) -> AuditLog:
    """Log entity creation."""
    return log_change(
        db,
        tenant_id=ctx.tenant_id,
        restaurant_id=ctx.restaurant_id,
        user_id=ctx.user_id,
        user_email=ctx.email,
        entity_type=entity_type,
        entity_id=entity.id,
        action="CREATE",
        new_values=serialize_model(entity),
    )


def log_update(
    db: Session,
    ctx: RestaurantContext,
    entity_type: str,
    entity: Any,
    old_values: dict,
) -> AuditLog:
    """Log entity update."""
    return log_change(
        db,
        tenant_id=ctx.tenant_id,
        restaurant_id=ctx.restaurant_id,
        user_id=ctx.user_id,
        user_email=ctx.email,
        entity_type=entity_type,
        entity_id=entity.id,
        action="UPDATE",
        old_values=old_values,
        new_values=serialize_model(entity),
    )


def log_delete(db: Session, ctx: RestaurantContext, entity_type: str, entity: Any) -> AuditLog:
    """Log entity deletion."""
    return log_change(
        db,
        tenant_id=ctx.tenant_id,
        restaurant_id=ctx.restaurant_id,
        user_id=ctx.user_id,
        user_email=ctx.email,
        entity_type=entity_type,
        entity_id=entity.id,
        action="DELETE",
        old_values=serialize_model(entity),
    )
