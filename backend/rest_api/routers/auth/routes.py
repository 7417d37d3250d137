"""
Authentication router.
Handles login, token refresh, user info and logout for restaurant staff.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from sqlalchemy.orm import Session

from rest_api.routers._common import client_ip
from rest_api.services.domain import AuthService
from shared.config.logging import auth_logger as logger, mask_email
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME, current_user_context
from shared.security.rate_limit import LOGIN_LIMIT_RULE, check_email_rate_limit, limiter, set_rate_limit_email
from shared.utils.exceptions import UnauthorizedError
from shared.utils.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RefreshTokenRequest,
    StaffLoginRequest,
    UserInfo,
)


router = APIRouter(prefix="/api/auth", tags=["auth"])

REFRESH_COOKIE_PATH = "/api/auth"


# =============================================================================
# HttpOnly Cookie Helpers
# =============================================================================


def set_auth_cookies(response: Response, tokens: LoginResponse) -> None:
    """
    Set both tokens as HttpOnly cookies.

    - pos_access: sent on every API call (path /)
    - pos_refresh: only sent to /api/auth endpoints
    """
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=tokens.access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=tokens.expires_in,
        path="/",
        domain=settings.cookie_domain or None,
    )
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.jwt_refresh_token_expire_days * 24 * 60 * 60,
        path=REFRESH_COOKIE_PATH,
        domain=settings.cookie_domain or None,
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(key=ACCESS_COOKIE_NAME, path="/", domain=settings.cookie_domain or None)
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path=REFRESH_COOKIE_PATH, domain=settings.cookie_domain or None)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT_RULE)
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Authenticate a staff member and return access + refresh tokens.

    The access token carries sub, tenant_id, email, role,
    allowed_restaurant_ids and restaurant_roles. Rate limited by client IP
    and by email.
    """
    check_email_rate_limit(body.email)
    set_rate_limit_email(request, body.email)

    tokens = AuthService(db).login(body.email, body.password, ip_address=client_ip(request))
    set_auth_cookies(response, tokens)
    logger.info("LOGIN_SUCCESS", email=mask_email(tokens.user.email), user_id=tokens.user.id)
    return tokens


def _staff_login(request: Request, response: Response, body: StaffLoginRequest, db: Session) -> LoginResponse:
    check_email_rate_limit(body.identifier)
    set_rate_limit_email(request, body.identifier)

    tokens = AuthService(db).staff_login(body.identifier, body.password, ip_address=client_ip(request))
    set_auth_cookies(response, tokens)
    return tokens


@router.post("/staff/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT_RULE)
def staff_login(
    request: Request,
    response: Response,
    body: StaffLoginRequest,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """Head portal login with an email or phone number."""
    return _staff_login(request, response, body, db)


@router.post("/waiter/login", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT_RULE)
def waiter_login(
    request: Request,
    response: Response,
    body: StaffLoginRequest,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """Waiter portal login with an email or phone number."""
    return _staff_login(request, response, body, db)


@router.post("/refresh", response_model=LoginResponse)
@limiter.limit(LOGIN_LIMIT_RULE)
def refresh_token(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_COOKIE_NAME),
    db: Session = Depends(get_db),
) -> LoginResponse:
    """
    Exchange a refresh token for new access + refresh tokens.

    Reads the pos_refresh cookie first and falls back to the body. The old
    refresh token is blacklisted; reusing it revokes every session of the
    user.
    """
    token_value = refresh_cookie
    if not token_value and body and body.refresh_token:
        token_value = body.refresh_token
    if not token_value:
        raise UnauthorizedError("Refresh token not provided")

    tokens = AuthService(db).refresh(token_value)
    set_auth_cookies(response, tokens)
    return tokens


@router.get("/me", response_model=UserInfo)
def get_current_user(ctx: dict = Depends(current_user_context)) -> UserInfo:
    """Current authenticated user, as carried by the access token."""
    return AuthService.user_info_from_claims(ctx)


@router.post("/logout", response_model=LogoutResponse)
@limiter.limit("10/minute")
def logout(
    request: Request,
    response: Response,
    ctx: dict = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> LogoutResponse:
    """
    Logout: clear the cookies and revoke every token of the user.

    Reports whether the revocation was stored.
    """
    revoked = AuthService(db).logout(int(ctx["sub"]), ctx.get("email"))
    clear_auth_cookies(response)

    if revoked:
        return LogoutResponse(
            success=True,
            message="Logged out successfully. All sessions have been invalidated.",
            tokens_revoked=True,
        )
    logger.warning("LOGOUT_PARTIAL: Token revocation may have failed", user_id=ctx["sub"])
    return LogoutResponse(
        success=False,
        message="Logout completed but token revocation may be delayed.",
        tokens_revoked=False,
    )
