"""
Super Admin Service - platform operator portal.

Handles:
- Super-admin login (separate table, ``super_admin`` token scope)
- Platform overview counts
- Tenant lifecycle: create (with its OWNER user), update, suspend, activate
- Cross-tenant restaurant listing and audit log browsing
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from rest_api.models import AuditLog, Order, Restaurant, SuperAdmin, Tenant, User, utcnow
from rest_api.repositories import day_bounds
from rest_api.services.audit import log_change, serialize_model
from rest_api.services.base_service import BaseService
from shared.config.constants import SUPER_ADMIN_SCOPE, AuditAction, AuditEntity, ErrorMessages, Roles
from shared.config.logging import audit_auth_event, get_logger, mask_email
from shared.config.settings import settings
from shared.security.auth import sign_jwt
from shared.security.password import hash_password, verify_password
from shared.utils.admin_schemas import (
    AuditLogListResponse,
    AuditLogOutput,
    PlatformOverview,
    RestaurantOutput,
    SuperAdminInfo,
    SuperAdminLoginResponse,
    TenantCreate,
    TenantListResponse,
    TenantOutput,
)
from shared.utils.exceptions import ConflictError, InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from shared.utils.schemas import PageInfo
from shared.utils.validators import escape_like_pattern, slugify, validate_phone, validate_slug

logger = get_logger(__name__)

# Super-admin tokens live outside every tenant
PLATFORM_TENANT_ID = 0


def _page_info(page: int, limit: int, total: int) -> PageInfo:
    return PageInfo(page=page, limit=limit, total=total, total_pages=(total + limit - 1) // limit)


def _json_or_none(value: str | None) -> dict[str, Any] | None:
    if not value:
        return None
    try:
        loaded = json.loads(value)
    except json.JSONDecodeError:
        return {"raw": value}
    return loaded if isinstance(loaded, dict) else {"value": loaded}


class SuperAdminService(BaseService[Tenant]):
    """
    Service for the super-admin portal.

    Business rules:
    - Tenant slugs are unique platform-wide
    - Creating a tenant creates its OWNER user in the same transaction
    - Suspended tenants cannot log in or refresh tokens
    """

    def __init__(self, db: Session):
        super().__init__(db, Tenant)

    # =========================================================================
    # Auth
    # =========================================================================

    def login(self, email: str, password: str, ip_address: str | None = None) -> SuperAdminLoginResponse:
        admin = self._db.scalar(
            select(SuperAdmin).where(
                func.lower(SuperAdmin.email) == email.strip().lower(),
                SuperAdmin.is_active.is_(True),
                SuperAdmin.deleted_at.is_(None),
            )
        )
        if admin is None or not verify_password(password, admin.password):
            audit_auth_event("SUPER_ADMIN_LOGIN", email=email, success=False, ip_address=ip_address)
            raise UnauthorizedError(ErrorMessages.INVALID_CREDENTIALS)

        token = sign_jwt({
            "sub": str(admin.id),
            "tenant_id": PLATFORM_TENANT_ID,
            "scope": SUPER_ADMIN_SCOPE,
            "email": admin.email,
            "name": admin.name,
        })
        audit_auth_event("SUPER_ADMIN_LOGIN", user_id=admin.id, email=admin.email, success=True, ip_address=ip_address)
        return SuperAdminLoginResponse(
            access_token=token,
            expires_in=settings.jwt_access_token_expire_minutes * 60,
            admin=SuperAdminInfo.model_validate(admin),
        )

    def me(self, admin_id: int) -> SuperAdminInfo:
        admin = self._db.get(SuperAdmin, admin_id)
        if admin is None or not admin.is_active or admin.deleted_at is not None:
            raise UnauthorizedError("Super admin not found or inactive")
        return SuperAdminInfo.model_validate(admin)

    # =========================================================================
    # Overview
    # =========================================================================

    def overview(self) -> PlatformOverview:
        def count(model, *conditions) -> int:
            return self._db.scalar(select(func.count()).select_from(model).where(*conditions)) or 0

        start, end = day_bounds(utcnow().date())
        return PlatformOverview(
            tenants=count(Tenant, Tenant.deleted_at.is_(None)),
            active_tenants=count(Tenant, Tenant.deleted_at.is_(None), Tenant.is_suspended.is_(False)),
            suspended_tenants=count(Tenant, Tenant.deleted_at.is_(None), Tenant.is_suspended.is_(True)),
            restaurants=count(Restaurant, Restaurant.deleted_at.is_(None)),
            users=count(User, User.deleted_at.is_(None)),
            orders=count(Order),
            orders_today=count(Order, Order.placed_at >= start, Order.placed_at < end),
        )

    # =========================================================================
    # Tenants
    # =========================================================================

    def list_tenants(self, search: str | None, page: int, limit: int) -> TenantListResponse:
        query = select(Tenant).where(Tenant.deleted_at.is_(None))
        if search:
            pattern = f"%{escape_like_pattern(search.strip())}%"
            query = query.where(
                or_(
                    Tenant.name.ilike(pattern, escape="\\"),
                    Tenant.slug.ilike(pattern, escape="\\"),
                    Tenant.contact_email.ilike(pattern, escape="\\"),
                )
            )

        total = self._db.scalar(select(func.count()).select_from(query.subquery())) or 0
        tenants = self._db.scalars(
            query.order_by(Tenant.created_at.desc(), Tenant.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return TenantListResponse(
            tenants=[self._tenant_output(t) for t in tenants],
            pagination=_page_info(page, limit, total),
        )

    def get_tenant(self, tenant_id: int) -> TenantOutput:
        return self._tenant_output(self._get_tenant(tenant_id))

    def create_tenant(self, body: TenantCreate, admin_id: int, admin_email: str | None) -> TenantOutput:
        """
        Create a tenant and its OWNER user.

        Raises:
            ValidationError: Malformed or taken slug, bad phone.
            ConflictError: Owner email already in use.
        """
        if body.slug:
            slug = body.slug.strip()
            try:
                validate_slug(slug)
            except ValueError as e:
                raise ValidationError(str(e), field="slug")
            if self._tenant_slug_taken(slug):
                raise ValidationError("Slug is already taken", field="slug", slug=slug)
        else:
            slug = self._unique_tenant_slug(body.name)

        owner_email = body.owner_email.lower()
        if self._db.scalar(select(func.count()).select_from(User).where(func.lower(User.email) == owner_email)):
            raise ConflictError("Email already in use", email=mask_email(owner_email))

        phone = None
        if body.contact_phone:
            try:
                phone = validate_phone(body.contact_phone)
            except ValueError as e:
                raise ValidationError(str(e), field="contact_phone")

        tenant = Tenant(
            name=body.name.strip(),
            slug=slug,
            contact_email=body.contact_email.lower() if body.contact_email else None,
            contact_phone=phone,
            plan=body.plan,
        )
        tenant.set_created_by(admin_id, admin_email)
        self._db.add(tenant)
        self._db.flush()

        owner = User(
            tenant_id=tenant.id,
            name=body.owner_name.strip(),
            email=owner_email,
            password=hash_password(body.owner_password),
            role=Roles.OWNER,
        )
        owner.set_created_by(admin_id, admin_email)
        self._db.add(owner)
        self._db.flush()

        self._audit(
            tenant,
            AuditAction.CREATE,
            admin_id,
            admin_email,
            new_values=serialize_model(tenant),
            metadata={"owner_user_id": owner.id},
        )
        self._commit("create tenant", slug=slug)
        self._db.refresh(tenant)

        logger.info("Tenant created", tenant_id=tenant.id, slug=slug, owner_email=mask_email(owner_email))
        return self._tenant_output(tenant)

    def update_tenant(self, tenant_id: int, data: dict[str, Any], admin_id: int, admin_email: str | None) -> TenantOutput:
        tenant = self._get_tenant(tenant_id)
        if data.get("contact_phone"):
            try:
                data["contact_phone"] = validate_phone(data["contact_phone"])
            except ValueError as e:
                raise ValidationError(str(e), field="contact_phone")
        if data.get("contact_email"):
            data["contact_email"] = data["contact_email"].lower()

        old_values = serialize_model(tenant)
        for key, value in data.items():
            if value is None and key in ("name", "plan"):
                continue
            setattr(tenant, key, value)
        tenant.set_updated_by(admin_id, admin_email)

        self._audit(
            tenant,
            AuditAction.UPDATE,
            admin_id,
            admin_email,
            old_values=old_values,
            new_values=serialize_model(tenant),
        )
        self._commit("update tenant", tenant_id=tenant_id)
        self._db.refresh(tenant)
        return self._tenant_output(tenant)

    def suspend_tenant(self, tenant_id: int, reason: str | None, admin_id: int, admin_email: str | None) -> TenantOutput:
        tenant = self._get_tenant(tenant_id)
        if tenant.is_suspended:
            raise InvalidStateError("Tenant", "SUSPENDED", detail="Tenant is already suspended")

        tenant.is_suspended = True
        tenant.suspended_at = utcnow()
        tenant.suspension_reason = reason
        tenant.set_updated_by(admin_id, admin_email)

        self._audit(tenant, AuditAction.SUSPEND, admin_id, admin_email, metadata={"reason": reason})
        self._commit("suspend tenant", tenant_id=tenant_id)
        self._db.refresh(tenant)

        logger.warning("Tenant suspended", tenant_id=tenant_id, reason=reason)
        return self._tenant_output(tenant)

    def activate_tenant(self, tenant_id: int, admin_id: int, admin_email: str | None) -> TenantOutput:
        tenant = self._get_tenant(tenant_id)
        if not tenant.is_suspended and tenant.is_active:
            raise InvalidStateError("Tenant", "ACTIVE", detail="Tenant is already active")

        tenant.is_suspended = False
        tenant.is_active = True
        tenant.suspended_at = None
        tenant.suspension_reason = None
        tenant.set_updated_by(admin_id, admin_email)

        self._audit(tenant, AuditAction.ACTIVATE, admin_id, admin_email)
        self._commit("activate tenant", tenant_id=tenant_id)
        self._db.refresh(tenant)

        logger.info("Tenant activated", tenant_id=tenant_id)
        return self._tenant_output(tenant)

    # =========================================================================
    # Restaurants & Audit
    # =========================================================================

    def list_restaurants(
        self,
        tenant_id: int | None,
        search: str | None,
        page: int,
        limit: int,
    ) -> list[RestaurantOutput]:
        query = select(Restaurant).where(Restaurant.deleted_at.is_(None))
        if tenant_id is not None:
            query = query.where(Restaurant.tenant_id == tenant_id)
        if search:
            pattern = f"%{escape_like_pattern(search.strip())}%"
            query = query.where(
                or_(Restaurant.name.ilike(pattern, escape="\\"), Restaurant.slug.ilike(pattern, escape="\\"))
            )
        restaurants = self._db.scalars(
            query.order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return [RestaurantOutput.model_validate(r) for r in restaurants]

    def audit_logs(
        self,
        *,
        tenant_id: int | None,
        entity_type: str | None,
        action: str | None,
        page: int,
        limit: int,
    ) -> AuditLogListResponse:
        query = select(AuditLog)
        if tenant_id is not None:
            query = query.where(AuditLog.tenant_id == tenant_id)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type.upper())
        if action:
            query = query.where(AuditLog.action == action.upper())

        total = self._db.scalar(select(func.count()).select_from(query.subquery())) or 0
        logs = self._db.scalars(
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return AuditLogListResponse(
            logs=[
                AuditLogOutput(
                    id=log.id,
                    tenant_id=log.tenant_id,
                    restaurant_id=log.restaurant_id,
                    user_id=log.user_id,
                    user_email=log.user_email,
                    entity_type=log.entity_type,
                    entity_id=log.entity_id,
                    action=log.action,
                    old_values=_json_or_none(log.old_values),
                    new_values=_json_or_none(log.new_values),
                    metadata=_json_or_none(log.extra_metadata),
                    created_at=log.created_at,
                )
                for log in logs
            ],
            pagination=_page_info(page, limit, total),
        )

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _get_tenant(self, tenant_id: int) -> Tenant:
        tenant = self._db.get(Tenant, tenant_id)
        if tenant is None or tenant.deleted_at is not None:
            raise NotFoundError("Tenant", tenant_id)
        return tenant

    def _tenant_output(self, tenant: Tenant) -> TenantOutput:
        restaurants = self._db.scalar(
            select(func.count()).select_from(Restaurant).where(
                Restaurant.tenant_id == tenant.id, Restaurant.deleted_at.is_(None)
            )
        ) or 0
        users = self._db.scalar(
            select(func.count()).select_from(User).where(
                User.tenant_id == tenant.id, User.deleted_at.is_(None)
            )
        ) or 0
        return TenantOutput(
            id=tenant.id,
            name=tenant.name,
            slug=tenant.slug,
            contact_email=tenant.contact_email,
            contact_phone=tenant.contact_phone,
            plan=tenant.plan,
            is_active=tenant.is_active,
            is_suspended=tenant.is_suspended,
            suspended_at=tenant.suspended_at,
            suspension_reason=tenant.suspension_reason,
            created_at=tenant.created_at,
            restaurants_count=restaurants,
            users_count=users,
        )

    def _tenant_slug_taken(self, slug: str) -> bool:
        return (self._db.scalar(select(func.count()).select_from(Tenant).where(Tenant.slug == slug)) or 0) > 0

    def _unique_tenant_slug(self, name: str) -> str:
        base = slugify(name)[:90] or "tenant"
        slug = base
        n = 2
        while self._tenant_slug_taken(slug):
            slug = f"{base}-{n}"
            n += 1
        return slug

    def _audit(
        self,
        tenant: Tenant,
        action: str,
        admin_id: int,
        admin_email: str | None,
        **values: Any,
    ) -> None:
        log_change(
            self._db,
            tenant_id=tenant.id,
            user_id=admin_id,
            user_email=admin_email,
            entity_type=AuditEntity.TENANT,
            entity_id=tenant.id,
            action=action,
            **values,
        )
