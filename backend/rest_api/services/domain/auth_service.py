"""
Auth Service - staff authentication and token issuing.

Handles:
- Credential checks (email, or email/phone for the staff portals)
- Tenant suspension gating
- Restaurant access resolution for token claims
- Refresh token rotation with reuse detection

The router owns cookies and rate limiting; this service owns the rules.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Restaurant, RestaurantUser, Tenant, User
from shared.config.constants import SUPER_ADMIN_SCOPE, ErrorMessages, Roles
from shared.config.logging import audit_auth_event, auth_logger as logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.auth import sign_jwt, sign_refresh_token, verify_refresh_token
from shared.security.password import hash_password, needs_rehash, verify_password
from shared.security.token_blacklist import (
    blacklist_token_sync,
    is_token_blacklisted_sync,
    is_token_revoked_by_user_sync,
    revoke_all_user_tokens_sync,
)
from shared.utils.exceptions import ForbiddenError, UnauthorizedError
from shared.utils.schemas import LoginResponse, UserInfo
from shared.utils.validators import validate_phone


class AuthService:
    """Authenticates staff users and issues their tokens."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Login
    # =========================================================================

    def login(self, email: str, password: str, ip_address: str | None = None) -> LoginResponse:
        """
        Email + password login.

        Raises:
            UnauthorizedError: Unknown user, no password or wrong password.
            ForbiddenError: Suspended tenant or no restaurant access.
        """
        user = self._active_user(func.lower(User.email) == email.strip().lower())
        return self._login(user, password, email, ip_address)

    def staff_login(self, identifier: str, password: str, ip_address: str | None = None) -> LoginResponse:
        """Login for the head/waiter portals: the identifier is an email or a phone."""
        identifier = identifier.strip()
        if "@" in identifier:
            user = self._active_user(func.lower(User.email) == identifier.lower())
        else:
            try:
                phone = validate_phone(identifier)
            except ValueError:
                phone = None
            user = (
                self._active_user(User.phone == phone, User.password.is_not(None))
                if phone
                else None
            )
        return self._login(user, password, identifier, ip_address)

    def _login(self, user: User | None, password: str, identifier: str, ip_address: str | None) -> LoginResponse:
        if user is None or not user.password or not verify_password(password, user.password):
            reason = "user_not_found" if user is None else "invalid_password"
            audit_auth_event(
                "LOGIN",
                user_id=user.id if user else None,
                email=identifier if "@" in identifier else None,
                success=False,
                reason=reason,
                ip_address=ip_address,
            )
            raise UnauthorizedError(ErrorMessages.INVALID_CREDENTIALS)

        self._check_tenant(user)

        if needs_rehash(user.password):
            user.password = hash_password(password)
            safe_commit(self._db)

        response = self.issue_tokens(user)
        audit_auth_event(
            "LOGIN",
            user_id=user.id,
            email=user.email,
            success=True,
            ip_address=ip_address,
            restaurant_count=len(response.user.allowed_restaurant_ids),
        )
        return response

    # =========================================================================
    # Refresh & Logout
    # =========================================================================

    def refresh(self, token: str) -> LoginResponse:
        """
        Rotate a refresh token.

        A refresh token that was already used means it leaked: every token
        of the user is revoked and the request is rejected.
        """
        payload = verify_refresh_token(token)
        if payload.get("scope") == SUPER_ADMIN_SCOPE:
            raise UnauthorizedError(ErrorMessages.INVALID_TOKEN)

        user_id = int(payload["sub"])
        token_jti = payload.get("jti")

        if token_jti and is_token_blacklisted_sync(token_jti):
            logger.error("SECURITY: Refresh token reuse detected - revoking all user tokens", user_id=user_id)
            revoke_all_user_tokens_sync(user_id)
            audit_auth_event("TOKEN_REUSE", user_id=user_id, success=False, reason="refresh_token_reused")
            raise UnauthorizedError("Refresh token has been revoked. Please login again.")

        issued_at = payload.get("iat")
        if issued_at and is_token_revoked_by_user_sync(user_id, datetime.fromtimestamp(issued_at, tz=timezone.utc)):
            raise UnauthorizedError(ErrorMessages.TOKEN_REVOKED)

        user = self._active_user(User.id == user_id)
        if user is None:
            raise UnauthorizedError("User not found or inactive")
        self._check_tenant(user)

        if token_jti and payload.get("exp"):
            blacklist_token_sync(token_jti, datetime.fromtimestamp(payload["exp"], tz=timezone.utc))

        audit_auth_event("TOKEN_REFRESH", user_id=user.id, email=user.email, success=True)
        return self.issue_tokens(user)

    def logout(self, user_id: int, email: str | None) -> bool:
        """Revoke every token of the user. Returns False when revocation failed."""
        revoked = revoke_all_user_tokens_sync(user_id)
        audit_auth_event("LOGOUT", user_id=user_id, email=email, success=revoked)
        return revoked

    # =========================================================================
    # Tokens & Claims
    # =========================================================================

    def restaurant_access(self, user: User) -> tuple[list[int], dict[str, str]]:
        """
        Restaurants the user may act on and the role in each.

        OWNER: every active restaurant of the tenant. Other roles: their
        active assignments to active restaurants.
        """
        if user.role == Roles.OWNER:
            ids = self._db.scalars(
                select(Restaurant.id)
                .where(
                    Restaurant.tenant_id == user.tenant_id,
                    Restaurant.is_active.is_(True),
                    Restaurant.deleted_at.is_(None),
                )
                .order_by(Restaurant.id)
            ).all()
            return list(ids), {str(rid): Roles.OWNER for rid in ids}

        rows = self._db.execute(
            select(RestaurantUser.restaurant_id, RestaurantUser.role)
            .join(Restaurant, Restaurant.id == RestaurantUser.restaurant_id)
            .where(
                RestaurantUser.user_id == user.id,
                RestaurantUser.is_active.is_(True),
                RestaurantUser.deleted_at.is_(None),
                Restaurant.tenant_id == user.tenant_id,
                Restaurant.is_active.is_(True),
                Restaurant.deleted_at.is_(None),
            )
            .order_by(RestaurantUser.restaurant_id)
        ).all()
        return [rid for rid, _ in rows], {str(rid): role for rid, role in rows}

    def issue_tokens(self, user: User) -> LoginResponse:
        allowed_ids, restaurant_roles = self.restaurant_access(user)
        if not allowed_ids and user.role != Roles.OWNER:
            logger.warning("LOGIN_FAILED: No restaurant assignments", email=mask_email(user.email), user_id=user.id)
            raise ForbiddenError(detail="User has no restaurant assignments")

        claims: dict[str, Any] = {
            "sub": str(user.id),
            "tenant_id": user.tenant_id,
            "email": user.email,
            "name": user.name,
            "role": user.role,
            "allowed_restaurant_ids": allowed_ids,
            "restaurant_roles": restaurant_roles,
        }
        return LoginResponse(
            access_token=sign_jwt(claims),
            refresh_token=sign_refresh_token(user.id, user.tenant_id),
            expires_in=settings.jwt_access_token_expire_minutes * 60,
            user=UserInfo(
                id=user.id,
                email=user.email,
                name=user.name,
                tenant_id=user.tenant_id,
                role=user.role,
                allowed_restaurant_ids=allowed_ids,
                restaurant_roles=restaurant_roles,
            ),
        )

    @staticmethod
    def user_info_from_claims(claims: dict[str, Any]) -> UserInfo:
        return UserInfo(
            id=int(claims["sub"]),
            email=claims.get("email"),
            name=claims.get("name") or "",
            tenant_id=claims["tenant_id"],
            role=claims["role"],
            allowed_restaurant_ids=claims.get("allowed_restaurant_ids", []),
            restaurant_roles=claims.get("restaurant_roles", {}),
        )

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _active_user(self, *conditions) -> User | None:
        return self._db.scalar(
            select(User).where(
                *conditions,
                User.is_active.is_(True),
                User.deleted_at.is_(None),
            )
        )

    def _check_tenant(self, user: User) -> None:
        tenant = self._db.get(Tenant, user.tenant_id)
        if tenant is None or tenant.is_suspended or not tenant.is_active or tenant.deleted_at is not None:
            audit_auth_event("LOGIN", user_id=user.id, email=user.email, success=False, reason="tenant_suspended")
            raise ForbiddenError(detail=ErrorMessages.TENANT_SUSPENDED, tenant_id=user.tenant_id)
