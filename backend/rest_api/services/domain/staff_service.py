"""
Staff Service - restaurant employees.

Handles all staff-related business logic including:
- User CRUD with password hashing
- Restaurant assignment (RestaurantUser)
- Role-based restrictions (MANAGER cannot manage other managers)

Usage:
    from rest_api.services.domain import StaffService

    service = StaffService(db)
    staff = service.list_for_restaurant(ctx)
    member = service.create(body, ctx)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import RestaurantUser, User
from rest_api.services.audit import log_change, serialize_model
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditAction, AuditEntity, Roles
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password
from shared.utils.admin_schemas import StaffCreate, StaffOutput, StaffUpdate
from shared.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shared.utils.validators import validate_phone

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


class StaffService:
    """
    Service for staff (user) management within a restaurant.

    Business rules:
    - Staff are users of the tenant assigned to the restaurant
    - MANAGER requires email, phone and a password
    - Emails are unique platform-wide; phones are unique among staff who can log in
    - Only an OWNER may create or change MANAGER accounts
    - Soft delete preserves audit trail
    """

    def __init__(self, db: Session):
        self._db = db
        self._entity_name = "Staff member"

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_for_restaurant(self, ctx: RestaurantContext) -> list[StaffOutput]:
        """Staff assigned to the restaurant, newest first (disabled included)."""
        rows = self._db.execute(
            select(User, RestaurantUser)
            .join(RestaurantUser, RestaurantUser.user_id == User.id)
            .where(
                RestaurantUser.restaurant_id == ctx.restaurant_id,
                RestaurantUser.deleted_at.is_(None),
                User.tenant_id == ctx.tenant_id,
                User.deleted_at.is_(None),
            )
            .order_by(User.created_at.desc(), User.id.desc())
        ).all()
        return [self._to_output(user, assignment) for user, assignment in rows]

    def get_by_id(self, staff_id: int, ctx: RestaurantContext) -> StaffOutput:
        user, assignment = self._get_member(staff_id, ctx)
        return self._to_output(user, assignment)

    # =========================================================================
    # Write Methods
    # =========================================================================

    def create(self, body: StaffCreate, ctx: RestaurantContext) -> StaffOutput:
        """
        Create a staff member and assign them to the active restaurant.

        Raises:
            ValidationError: Missing manager credentials or bad phone.
            ForbiddenError: A manager creating another manager.
            ConflictError: Email or phone already in use.
        """
        self._check_can_manage_role(body.role, ctx)

        email = body.email.lower() if body.email else None
        phone = self._normalize_phone(body.phone)
        self._validate_credentials(body.role, email, phone, body.password)
        self._check_unique(email, phone if body.password else None)

        user = User(
            tenant_id=ctx.tenant_id,
            name=body.name.strip(),
            email=email,
            phone=phone,
            password=hash_password(body.password) if body.password else None,
            role=body.role,
            address=body.address,
        )
        user.set_created_by(ctx.user_id, ctx.email)
        self._db.add(user)
        self._db.flush()

        assignment = RestaurantUser(
            tenant_id=ctx.tenant_id,
            user_id=user.id,
            restaurant_id=ctx.restaurant_id,
            role=body.role,
        )
        assignment.set_created_by(ctx.user_id, ctx.email)
        self._db.add(assignment)
        self._db.flush()

        self._audit(ctx, user, AuditAction.CREATE, new_values=serialize_model(user))
        safe_commit(self._db)

        logger.info(
            "Staff member created",
            staff_id=user.id,
            role=user.role,
            email=mask_email(email),
            restaurant_id=ctx.restaurant_id,
        )
        return self._to_output(user, assignment)

    def update(self, staff_id: int, body: StaffUpdate, ctx: RestaurantContext) -> StaffOutput:
        user, assignment = self._get_member(staff_id, ctx)
        self._check_can_manage_role(user.role, ctx)

        data: dict[str, Any] = body.model_dump(exclude_unset=True)
        new_role = data.get("role") or user.role
        self._check_can_manage_role(new_role, ctx)

        email = user.email
        if "email" in data:
            email = data["email"].lower() if data["email"] else None
        phone = user.phone
        if "phone" in data:
            phone = self._normalize_phone(data["phone"])
        password = data.get("password")

        self._validate_credentials(
            new_role,
            email,
            phone,
            password,
            has_password=user.password is not None,
        )
        will_login = bool(password) or user.password is not None
        self._check_unique(
            email if email != user.email else None,
            phone if will_login and phone != user.phone else None,
            exclude_user_id=user.id,
        )

        old_values = serialize_model(user)
        if data.get("name"):
            user.name = data["name"].strip()
        user.email = email
        user.phone = phone
        if "address" in data:
            user.address = data["address"]
        if password:
            user.password = hash_password(password)
        if data.get("is_active") is not None:
            user.is_active = data["is_active"]
            assignment.is_active = data["is_active"]
        user.role = new_role
        assignment.role = new_role
        user.set_updated_by(ctx.user_id, ctx.email)

        self._audit(ctx, user, AuditAction.UPDATE, old_values=old_values, new_values=serialize_model(user))
        safe_commit(self._db)
        return self._to_output(user, assignment)

    def toggle_active(self, staff_id: int, ctx: RestaurantContext) -> StaffOutput:
        """Enable or disable a staff member's access."""
        user, assignment = self._get_member(staff_id, ctx)
        self._check_can_manage_role(user.role, ctx)
        if user.id == ctx.user_id:
            raise ValidationError("You cannot disable your own account")

        user.is_active = not user.is_active
        assignment.is_active = user.is_active
        user.set_updated_by(ctx.user_id, ctx.email)

        self._audit(ctx, user, AuditAction.UPDATE, new_values={"is_active": user.is_active})
        safe_commit(self._db)
        return self._to_output(user, assignment)

    def delete(self, staff_id: int, ctx: RestaurantContext) -> None:
        user, assignment = self._get_member(staff_id, ctx)
        self._check_can_manage_role(user.role, ctx)
        if user.id == ctx.user_id:
            raise ValidationError("You cannot delete your own account")

        self._audit(ctx, user, AuditAction.DELETE, old_values=serialize_model(user))
        assignment.soft_delete(ctx.user_id, ctx.email)
        user.soft_delete(ctx.user_id, ctx.email)
        safe_commit(self._db)

        logger.info("Staff member deleted", staff_id=staff_id, restaurant_id=ctx.restaurant_id)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _get_member(self, staff_id: int, ctx: RestaurantContext) -> tuple[User, RestaurantUser]:
        row = self._db.execute(
            select(User, RestaurantUser)
            .join(RestaurantUser, RestaurantUser.user_id == User.id)
            .where(
                User.id == staff_id,
                User.tenant_id == ctx.tenant_id,
                User.deleted_at.is_(None),
                RestaurantUser.restaurant_id == ctx.restaurant_id,
                RestaurantUser.deleted_at.is_(None),
            )
        ).first()
        if row is None:
            raise NotFoundError(self._entity_name, staff_id, restaurant_id=ctx.restaurant_id)
        return row[0], row[1]

    def _check_can_manage_role(self, role: str, ctx: RestaurantContext) -> None:
        if role == Roles.OWNER:
            raise ForbiddenError("manage owner accounts")
        if role == Roles.MANAGER and not ctx.is_owner:
            raise ForbiddenError("manage managers (requires role: OWNER)")

    def _normalize_phone(self, phone: str | None) -> str | None:
        if not phone:
            return None
        try:
            return validate_phone(phone)
        except ValueError as e:
            raise ValidationError(str(e), field="phone")

    def _validate_credentials(
        self,
        role: str,
        email: str | None,
        phone: str | None,
        password: str | None,
        *,
        has_password: bool = False,
    ) -> None:
        if password is not None and len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if role == Roles.MANAGER:
            if not email or not phone:
                raise ValidationError("Email and phone are required for managers")
            if not password and not has_password:
                raise ValidationError(f"Managers need a password of at least {MIN_PASSWORD_LENGTH} characters")

    def _check_unique(
        self,
        email: str | None,
        login_phone: str | None,
        exclude_user_id: int | None = None,
    ) -> None:
        if email:
            query = select(func.count()).select_from(User).where(func.lower(User.email) == email)
            if exclude_user_id is not None:
                query = query.where(User.id != exclude_user_id)
            if self._db.scalar(query):
                raise ConflictError("Email already in use", email=mask_email(email))
        if login_phone:
            query = (
                select(func.count())
                .select_from(User)
                .where(
                    User.phone == login_phone,
                    User.password.is_not(None),
                    User.deleted_at.is_(None),
                )
            )
            if exclude_user_id is not None:
                query = query.where(User.id != exclude_user_id)
            if self._db.scalar(query):
                raise ConflictError("Phone already used by another staff login")

    def _audit(self, ctx: RestaurantContext, user: User, action: str, **values: Any) -> None:
        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.STAFF,
            entity_id=user.id,
            action=action,
            **values,
        )

    def _to_output(self, user: User, assignment: RestaurantUser) -> StaffOutput:
        return StaffOutput(
            id=user.id,
            name=user.name,
            role=assignment.role,
            email=user.email,
            phone=user.phone,
            address=user.address,
            is_active=user.is_active and assignment.is_active,
            can_login=user.password is not None,
            created_at=user.created_at,
        )
