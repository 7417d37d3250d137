"""
Authentication and authorization utilities.
JWT access/refresh tokens for restaurant staff and platform super-admins.

Access tokens travel either in the Authorization header or in the
``pos_access`` HttpOnly cookie. Refresh tokens carry minimal claims and a
``jti`` so they can be blacklisted when rotated.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Any

import jwt
from fastapi import Cookie, HTTPException, Header, status

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.constants import SUPER_ADMIN_SCOPE, ErrorMessages
from shared.config.logging import get_logger, mask_jti
from shared.infrastructure.redis.constants import (
    PREFIX_AUTH_SUPER_ADMIN_REVOKE,
    PREFIX_AUTH_USER_REVOKE,
)

logger = get_logger(__name__)

ACCESS_COOKIE_NAME = "pos_access"
REFRESH_COOKIE_NAME = "pos_refresh"


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
    token_type: str = "access",
) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include (sub, tenant_id, role, allowed_restaurant_ids...)
        ttl_seconds: Token lifetime in seconds. Defaults by token type.
        token_type: "access" or "refresh".

    Returns:
        Signed JWT token string with iss/aud/iat/exp/type/jti added.
    """
    if ttl_seconds is None:
        if token_type == "refresh":
            ttl_seconds = settings.jwt_refresh_token_expire_days * 24 * 60 * 60
        else:
            ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_refresh_token(user_id: int, tenant_id: int, scope: str | None = None) -> str:
    """
    Create a refresh token. It carries only the identity; roles and
    restaurant access are reloaded from the database on refresh.
    """
    payload: dict[str, Any] = {"sub": str(user_id), "tenant_id": tenant_id}
    if scope:
        payload["scope"] = scope
    return sign_jwt(payload, token_type="refresh")


def verify_refresh_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a refresh token.

    The blacklist is not consulted here: the refresh endpoint does it
    itself so that a reused token can trigger revocation.
    """
    payload = verify_jwt(token, check_blacklist=False)
    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type. Expected refresh token.",
        )
    return payload


def verify_jwt(token: str, check_blacklist: bool = True) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Validates signature, expiry, issuer and audience, then the required
    claims: ``sub`` (integer string), ``tenant_id`` (int) and ``type``.

    Raises:
        HTTPException: 401 if the token is invalid, expired or revoked.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.TOKEN_EXPIRED,
        )
    except jwt.InvalidTokenError as e:
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.INVALID_TOKEN,
        )

    if "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing subject claim",
        )

    if "tenant_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing tenant_id claim",
        )

    if payload.get("type") not in ("access", "refresh"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: invalid type claim",
        )

    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed subject claim",
        )

    if not isinstance(payload["tenant_id"], int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed tenant_id claim",
        )

    if check_blacklist and settings.token_blacklist_enabled:
        _check_token_blacklist(payload)

    return payload


def _check_token_blacklist(payload: dict[str, Any]) -> None:
    """
    Reject individually blacklisted tokens and tokens issued before a
    user-level revocation.
    """
    from shared.security.token_blacklist import (
        is_token_blacklisted_sync,
        is_token_revoked_by_user_sync,
    )

    token_jti = payload.get("jti")
    if token_jti and is_token_blacklisted_sync(token_jti):
        logger.warning("Blacklisted token used", jti=mask_jti(token_jti))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.TOKEN_REVOKED,
        )

    token_iat = payload.get("iat")
    if token_iat:
        prefix = (
            PREFIX_AUTH_SUPER_ADMIN_REVOKE
            if payload.get("scope") == SUPER_ADMIN_SCOPE
            else PREFIX_AUTH_USER_REVOKE
        )
        issued_at = datetime.fromtimestamp(token_iat, tz=timezone.utc)
        if is_token_revoked_by_user_sync(int(payload["sub"]), issued_at, prefix=prefix):
            logger.warning("User-revoked token used", user_id=payload["sub"])
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=ErrorMessages.TOKEN_REVOKED,
            )


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        HTTPException: If header is missing or malformed.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format. Expected: Bearer <token>",
        )
    return authorization.split(" ", 1)[1].strip()


def _access_token_from_request(authorization: str | None, access_cookie: str | None) -> str:
    # Header wins; the cookie is the browser session fallback
    if authorization:
        return get_bearer_token(authorization)
    if access_cookie:
        return access_cookie
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=ErrorMessages.NOT_AUTHENTICATED,
    )


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
    access_cookie: str | None = Cookie(default=None, alias=ACCESS_COOKIE_NAME),
) -> dict[str, Any]:
    """
    FastAPI dependency returning the claims of a staff access token.

    Usage:
        @router.get("/protected")
        def protected_endpoint(ctx: dict = Depends(current_user_context)):
            user_id = int(ctx["sub"])
            tenant_id = ctx["tenant_id"]

    Returns:
        Dict with: sub, tenant_id, email, role, allowed_restaurant_ids,
        restaurant_roles
    """
    payload = verify_jwt(_access_token_from_request(authorization, access_cookie))
    if payload.get("type") != "access" or payload.get("scope") == SUPER_ADMIN_SCOPE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.INVALID_TOKEN,
        )
    return payload


def current_super_admin_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
    access_cookie: str | None = Cookie(default=None, alias=ACCESS_COOKIE_NAME),
) -> dict[str, Any]:
    """
    FastAPI dependency for the platform operator portal. Only access
    tokens carrying the super-admin scope are accepted.
    """
    payload = verify_jwt(_access_token_from_request(authorization, access_cookie))
    if payload.get("type") != "access" or payload.get("scope") != SUPER_ADMIN_SCOPE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return payload


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the user's tenant role is one of the allowed roles.

    Raises:
        HTTPException: 403 if the role is not permitted.
    """
    if ctx.get("role") not in set(allowed):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{ErrorMessages.INSUFFICIENT_PERMISSIONS}. Required role: one of {sorted(allowed)}",
        )

