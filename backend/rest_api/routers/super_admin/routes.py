"""
Super-admin endpoints: login, platform overview, tenants, restaurants,
audit logs and system health.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rest_api.routers._common import Pagination, client_ip, get_pagination
from rest_api.services.domain import SuperAdminService
from rest_api.services.health import system_health
from shared.infrastructure.db import get_db
from shared.security.auth import current_super_admin_context
from shared.security.rate_limit import LOGIN_LIMIT_RULE, check_email_rate_limit, limiter, set_rate_limit_email
from shared.utils.admin_schemas import (
    AuditLogListResponse,
    PlatformOverview,
    RestaurantOutput,
    SuperAdminInfo,
    SuperAdminLoginResponse,
    TenantCreate,
    TenantListResponse,
    TenantOutput,
    TenantSuspend,
    TenantUpdate,
)
from shared.utils.health import HealthStatus
from shared.utils.schemas import LoginRequest

router = APIRouter(prefix="/api/super-admin", tags=["super-admin"])


def _admin_id(admin: dict) -> int:
    return int(admin["sub"])


# =============================================================================
# Auth
# =============================================================================


@router.post("/auth/login", response_model=SuperAdminLoginResponse)
@limiter.limit(LOGIN_LIMIT_RULE)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> SuperAdminLoginResponse:
    check_email_rate_limit(body.email)
    set_rate_limit_email(request, body.email)
    return SuperAdminService(db).login(body.email, body.password, ip_address=client_ip(request))


@router.get("/auth/me", response_model=SuperAdminInfo)
def me(db: Session = Depends(get_db), admin: dict = Depends(current_super_admin_context)) -> SuperAdminInfo:
    return SuperAdminService(db).me(_admin_id(admin))


# =============================================================================
# Platform
# =============================================================================


@router.get("/dashboard/overview", response_model=PlatformOverview)
def overview(db: Session = Depends(get_db), admin: dict = Depends(current_super_admin_context)) -> PlatformOverview:
    """Tenant, restaurant, user and order counts across the platform."""
    return SuperAdminService(db).overview()


@router.get("/tenants", response_model=TenantListResponse)
def list_tenants(
    search: str | None = Query(default=None, max_length=100),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantListResponse:
    return SuperAdminService(db).list_tenants(search, pagination.page, pagination.limit)


@router.post("/tenants", response_model=TenantOutput, status_code=status.HTTP_201_CREATED)
def create_tenant(
    body: TenantCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantOutput:
    """Create a tenant together with its OWNER user."""
    return SuperAdminService(db).create_tenant(body, _admin_id(admin), admin.get("email"))


@router.get("/tenants/{tenant_id}", response_model=TenantOutput)
def get_tenant(
    tenant_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantOutput:
    return SuperAdminService(db).get_tenant(tenant_id)


@router.patch("/tenants/{tenant_id}", response_model=TenantOutput)
def update_tenant(
    tenant_id: int,
    body: TenantUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantOutput:
    return SuperAdminService(db).update_tenant(
        tenant_id, body.model_dump(exclude_unset=True), _admin_id(admin), admin.get("email")
    )


@router.post("/tenants/{tenant_id}/suspend", response_model=TenantOutput)
def suspend_tenant(
    tenant_id: int,
    body: TenantSuspend | None = None,
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantOutput:
    """Suspended tenants' users can no longer log in or refresh tokens."""
    reason = body.reason if body else None
    return SuperAdminService(db).suspend_tenant(tenant_id, reason, _admin_id(admin), admin.get("email"))


@router.post("/tenants/{tenant_id}/activate", response_model=TenantOutput)
def activate_tenant(
    tenant_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> TenantOutput:
    return SuperAdminService(db).activate_tenant(tenant_id, _admin_id(admin), admin.get("email"))


@router.get("/restaurants", response_model=list[RestaurantOutput])
def list_restaurants(
    tenant_id: int | None = None,
    search: str | None = Query(default=None, max_length=100),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> list[RestaurantOutput]:
    return SuperAdminService(db).list_restaurants(tenant_id, search, pagination.page, pagination.limit)


@router.get("/audit-logs", response_model=AuditLogListResponse)
def audit_logs(
    tenant_id: int | None = None,
    entity_type: str | None = None,
    action: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    admin: dict = Depends(current_super_admin_context),
) -> AuditLogListResponse:
    return SuperAdminService(db).audit_logs(
        tenant_id=tenant_id,
        entity_type=entity_type,
        action=action,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/system/health")
async def system_health_check(admin: dict = Depends(current_super_admin_context)):
    """Database and Redis reachability; 503 when degraded."""
    checks = await system_health()
    if checks["status"] != HealthStatus.HEALTHY.value:
        return JSONResponse(content=checks, status_code=503)
    return checks
