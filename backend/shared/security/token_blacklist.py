"""
Token blacklist backed by Redis.

Refresh tokens are rotated on every use and the old jti is stored here with
a TTL equal to its remaining lifetime. Logout and refresh-token reuse store
a per-user revocation timestamp instead: every token issued before it is
rejected.

Disabled (every check passes, every write is a no-op) when
``settings.token_blacklist_enabled`` is False. When enabled, checks fail
closed on Redis errors.
"""

from datetime import datetime, timezone

from shared.infrastructure.redis.pool import get_redis_pool, get_redis_sync_client
from shared.infrastructure.redis.constants import (
    PREFIX_AUTH_BLACKLIST,
    PREFIX_AUTH_USER_REVOKE,
    USER_REVOKE_TTL,
)
from shared.config.settings import settings
from shared.config.logging import get_logger, mask_jti

logger = get_logger(__name__)


def _ttl_until(expires_at: datetime) -> int:
    return int((expires_at - datetime.now(timezone.utc)).total_seconds())


# =============================================================================
# Async API
# =============================================================================


async def blacklist_token(token_jti: str, expires_at: datetime) -> bool:
    """
    Add a token to the blacklist until it expires.

    Returns True if stored (or nothing to store), False on Redis errors.
    """
    if not settings.token_blacklist_enabled:
        return True

    ttl_seconds = _ttl_until(expires_at)
    if ttl_seconds <= 0:
        return True

    try:
        redis = await get_redis_pool()
        await redis.setex(f"{PREFIX_AUTH_BLACKLIST}{token_jti}", ttl_seconds, "1")
    except Exception as e:
        logger.error("Failed to blacklist token", jti=mask_jti(token_jti), error=str(e), sync=False)
        return False

    logger.info("Token blacklisted", jti=mask_jti(token_jti), ttl_seconds=ttl_seconds, sync=False)
    return True


async def is_token_blacklisted(token_jti: str) -> bool:
    """True if the token was blacklisted. Fails closed."""
    if not settings.token_blacklist_enabled:
        return False

    try:
        redis = await get_redis_pool()
        return await redis.exists(f"{PREFIX_AUTH_BLACKLIST}{token_jti}") > 0
    except Exception as e:
        logger.error(
            "Failed to check token blacklist - failing closed",
            jti=mask_jti(token_jti),
            error=str(e),
            sync=False,
        )
        return True


async def revoke_all_user_tokens(user_id: int, prefix: str = PREFIX_AUTH_USER_REVOKE) -> bool:
    """
    Revoke every token issued to the user before now.

    Used by logout and by refresh-token reuse detection.
    """
    if not settings.token_blacklist_enabled:
        return True

    try:
        redis = await get_redis_pool()
        now = datetime.now(timezone.utc)
        await redis.setex(f"{prefix}{user_id}", USER_REVOKE_TTL, now.isoformat())
    except Exception as e:
        logger.error("Failed to revoke user tokens", user_id=user_id, error=str(e), sync=False)
        return False

    logger.info("All tokens revoked for user", user_id=user_id, sync=False)
    return True


# =============================================================================
# Sync API (request handlers run in the threadpool)
# =============================================================================


def blacklist_token_sync(token_jti: str, expires_at: datetime) -> bool:
    """Synchronous counterpart of blacklist_token."""
    if not settings.token_blacklist_enabled:
        return True

    ttl_seconds = _ttl_until(expires_at)
    if ttl_seconds <= 0:
        return True

    try:
        get_redis_sync_client().setex(f"{PREFIX_AUTH_BLACKLIST}{token_jti}", ttl_seconds, "1")
    except Exception as e:
        logger.error("Failed to blacklist token", jti=mask_jti(token_jti), error=str(e), sync=True)
        return False

    logger.info("Token blacklisted", jti=mask_jti(token_jti), ttl_seconds=ttl_seconds, sync=True)
    return True


def is_token_blacklisted_sync(token_jti: str) -> bool:
    """Synchronous counterpart of is_token_blacklisted. Fails closed."""
    if not settings.token_blacklist_enabled:
        return False

    try:
        return get_redis_sync_client().exists(f"{PREFIX_AUTH_BLACKLIST}{token_jti}") > 0
    except Exception as e:
        logger.error(
            "Failed to check token blacklist - failing closed",
            jti=mask_jti(token_jti),
            error=str(e),
            sync=True,
        )
        return True


def revoke_all_user_tokens_sync(user_id: int, prefix: str = PREFIX_AUTH_USER_REVOKE) -> bool:
    """Synchronous counterpart of revoke_all_user_tokens."""
    if not settings.token_blacklist_enabled:
        return True

    try:
        now = datetime.now(timezone.utc)
        get_redis_sync_client().setex(f"{prefix}{user_id}", USER_REVOKE_TTL, now.isoformat())
    except Exception as e:
        logger.error("Failed to revoke user tokens", user_id=user_id, error=str(e), sync=True)
        return False

    logger.info("All tokens revoked for user", user_id=user_id, sync=True)
    return True


def is_token_revoked_by_user_sync(
    user_id: int,
    token_iat: datetime,
    prefix: str = PREFIX_AUTH_USER_REVOKE,
) -> bool:
    """True if the token was issued before the user's revocation marker. Fails closed."""
    if not settings.token_blacklist_enabled:
        return False

    try:
        revoke_time_str = get_redis_sync_client().get(f"{prefix}{user_id}")
    except Exception as e:
        logger.error(
            "Failed to check user token revocation - failing closed",
            user_id=user_id,
            error=str(e),
            sync=True,
        )
        return True

    if not revoke_time_str:
        return False
    return token_iat < datetime.fromisoformat(revoke_time_str)
