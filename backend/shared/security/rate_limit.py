"""
Rate limiting: slowapi per client IP on public endpoints, plus a Redis
counter per email on login to slow down credential stuffing.

Usage:
    from shared.security.rate_limit import limiter

    @router.post("/login")
    @limiter.limit("5/minute")
    def login(request: Request, ...):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse

from shared.config.settings import settings
from shared.config.constants import ErrorMessages
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.redis.pool import get_redis_sync_client

logger = get_logger(__name__)

# Client IP keyed limiter; switched off by RATE_LIMIT_ENABLED=false
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

LOGIN_RATE_LIMIT = settings.login_rate_limit
LOGIN_RATE_WINDOW = settings.login_rate_window
LOGIN_LIMIT_RULE = f"{LOGIN_RATE_LIMIT}/minute"
PUBLIC_ORDER_LIMIT_RULE = settings.public_order_rate_limit

PREFIX_RATELIMIT_LOGIN = "ratelimit:login:"

# INCR and EXPIRE in one round-trip so a key never lives without a TTL
RATE_LIMIT_LUA_SCRIPT = """
local key = KEYS[1]
local window = tonumber(ARGV[1])

local count = redis.call('INCR', key)
if count == 1 then
    redis.call('EXPIRE', key, window)
end

local ttl = redis.call('TTL', key)
if ttl == -1 then
    redis.call('EXPIRE', key, window)
    ttl = window
end

return {count, ttl}
"""


def set_rate_limit_email(request: Request, email: str) -> None:
    """Remember the email on the request for the 429 log line."""
    request.state.rate_limit_email = email


def _format_retry_time(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds} seconds"
    minutes, remaining_seconds = divmod(seconds, 60)
    if remaining_seconds == 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''}"
    return f"{minutes}m {remaining_seconds}s"


def check_email_rate_limit(email: str, fail_closed: bool = True) -> None:
    """
    Count a login attempt for the email and raise 429 past the limit.

    Redis errors deny the attempt (503) unless fail_closed is False.
    No-op when rate limiting is disabled.
    """
    if not settings.rate_limit_enabled:
        return

    key = f"{PREFIX_RATELIMIT_LOGIN}{email.lower()}"
    try:
        count, ttl = get_redis_sync_client().eval(RATE_LIMIT_LUA_SCRIPT, 1, key, LOGIN_RATE_WINDOW)
    except Exception as e:
        logger.error(
            "Rate limit check failed",
            email=mask_email(email),
            error=str(e),
            fail_closed=fail_closed,
        )
        if fail_closed:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Verification failed. Please try again in a few seconds.",
                headers={"Retry-After": "5"},
            )
        return

    if count > LOGIN_RATE_LIMIT:
        logger.warning(
            "Rate limit exceeded for email",
            email=mask_email(email),
            count=count,
            limit=LOGIN_RATE_LIMIT,
            ttl=ttl,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many login attempts. Try again in {_format_retry_time(ttl)}.",
            headers={"Retry-After": str(ttl)},
        )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    JSON 429 for slowapi limits, in the API error envelope.
    """
    email = getattr(request.state, "rate_limit_email", None)
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        limit=str(exc.detail),
        email=mask_email(email) if email else None,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": ErrorMessages.RATE_LIMIT_EXCEEDED,
            "error": {"code": "RATE_LIMITED", "message": ErrorMessages.RATE_LIMIT_EXCEEDED},
            "retry_after": exc.detail,
        },
        headers={"Retry-After": "60"},
    )
