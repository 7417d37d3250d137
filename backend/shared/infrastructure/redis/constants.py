"""
Redis constants.
Centralizes TTLs, key prefixes and channel names.
"""

# =============================================================================
# TTL (Time To Live) Constants (in seconds)
# =============================================================================

# Per-user revocation markers outlive the longest refresh token
USER_REVOKE_TTL = 86400 * 7

# =============================================================================
# Key Prefixes
# =============================================================================

PREFIX_AUTH_BLACKLIST = "auth:token:blacklist:"
PREFIX_AUTH_USER_REVOKE = "auth:user:revoked:"
PREFIX_AUTH_SUPER_ADMIN_REVOKE = "auth:super_admin:revoked:"

# =============================================================================
# Pub/Sub Channels
# =============================================================================

CHANNEL_PENDING_ORDERS_TEMPLATE = "restaurant:{restaurant_id}:pending-orders"


def channel_pending_orders(restaurant_id: int) -> str:
    """Channel staff clients subscribe to for new and resolved QR orders."""
    if not isinstance(restaurant_id, int) or restaurant_id <= 0:
        raise ValueError(f"restaurant_id must be a positive integer, got {restaurant_id}")
    return CHANNEL_PENDING_ORDERS_TEMPLATE.format(restaurant_id=restaurant_id)
