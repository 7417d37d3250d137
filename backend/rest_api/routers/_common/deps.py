"""
Request-scoped dependencies: the acting user, the active restaurant and
role guards.

Usage:
    @router.get("/customers")
    def list_customers(ctx: RestaurantContext = Depends(require_owner_or_manager), ...):
        ...
"""

from typing import Any

from fastapi import Depends, Header, Request

from rest_api.services.permissions import RestaurantContext
from shared.config.constants import MANAGEMENT_ROLES, STAFF_ROLES, ErrorMessages, Roles
from shared.security.auth import current_user_context
from shared.utils.exceptions import ForbiddenError, InsufficientRoleError, RestaurantAccessError, ValidationError

RESTAURANT_HEADER = "x-restaurant-id"


def restaurant_context(
    user: dict[str, Any] = Depends(current_user_context),
    x_restaurant_id: str | None = Header(default=None, alias=RESTAURANT_HEADER),
) -> RestaurantContext:
    """
    Resolve the active restaurant of a staff request.

    With the header, the restaurant must be one the token allows. Without
    it, owners and managers fall back to their first allowed restaurant.
    """
    allowed: list[int] = user.get("allowed_restaurant_ids") or []
    roles: dict[str, str] = user.get("restaurant_roles") or {}
    tenant_role = user.get("role")

    if x_restaurant_id is not None:
        try:
            restaurant_id = int(x_restaurant_id)
        except ValueError:
            raise ValidationError(f"Invalid {RESTAURANT_HEADER} header", value=x_restaurant_id)
        if restaurant_id not in allowed:
            raise RestaurantAccessError(restaurant_id, user_id=user.get("sub"))
    elif tenant_role in MANAGEMENT_ROLES and allowed:
        restaurant_id = allowed[0]
    else:
        raise ForbiddenError(detail=ErrorMessages.RESTAURANT_CONTEXT_REQUIRED, user_id=user.get("sub"))

    role = roles.get(str(restaurant_id)) or (Roles.OWNER if tenant_role == Roles.OWNER else None)
    if role is None:
        raise ForbiddenError(detail=ErrorMessages.RESTAURANT_ROLE_MISSING, restaurant_id=restaurant_id)
    return RestaurantContext.from_claims(user, restaurant_id, role)


def require_owner_or_manager(ctx: RestaurantContext = Depends(restaurant_context)) -> RestaurantContext:
    if ctx.role not in MANAGEMENT_ROLES:
        raise InsufficientRoleError(sorted(MANAGEMENT_ROLES), user_id=ctx.user_id)
    return ctx


def require_staff(ctx: RestaurantContext = Depends(restaurant_context)) -> RestaurantContext:
    if ctx.role not in STAFF_ROLES:
        raise InsufficientRoleError(sorted(STAFF_ROLES), user_id=ctx.user_id)
    return ctx


def require_tenant_owner(user: dict[str, Any] = Depends(current_user_context)) -> dict[str, Any]:
    """Tenant-level OWNER; no restaurant context needed (restaurant setup)."""
    if user.get("role") != Roles.OWNER:
        raise InsufficientRoleError([Roles.OWNER], user_id=user.get("sub"))
    return user


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
