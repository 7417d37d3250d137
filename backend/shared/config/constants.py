"""
Centralized constants for the backend application.
Avoids magic strings for roles, statuses and limits.

Usage:
    from shared.config.constants import Roles, MANAGEMENT_ROLES, OrderStatus

    if role in MANAGEMENT_ROLES:
        ...

    if order.status == OrderStatus.PLACED:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """Restaurant staff role constants."""

    OWNER: Final[str] = "OWNER"
    MANAGER: Final[str] = "MANAGER"
    WAITER: Final[str] = "WAITER"

    ALL: Final[list[str]] = [OWNER, MANAGER, WAITER]


# Role groups for common access patterns
MANAGEMENT_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.MANAGER})
STAFF_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.MANAGER, Roles.WAITER})

# Token scope claim carried by platform operator tokens
SUPER_ADMIN_SCOPE: Final[str] = "super_admin"


# =============================================================================
# Order Status Constants
# =============================================================================


class OrderStatus:
    """Order lifecycle: PLACED -> CONFIRMED -> PREPARING -> READY -> SERVED -> COMPLETED."""

    PLACED: Final[str] = "PLACED"  # Pending state for QR orders
    CONFIRMED: Final[str] = "CONFIRMED"
    PREPARING: Final[str] = "PREPARING"
    READY: Final[str] = "READY"
    SERVED: Final[str] = "SERVED"
    COMPLETED: Final[str] = "COMPLETED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PLACED, CONFIRMED, PREPARING, READY, SERVED, COMPLETED, CANCELLED]


OPEN_ORDER_STATUSES: Final[frozenset[str]] = frozenset({
    OrderStatus.PLACED,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.SERVED,
})
FINAL_ORDER_STATUSES: Final[frozenset[str]] = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
})

# Orders shown on the kitchen display, in display order
KDS_ACTIVE_STATUSES: Final[tuple[str, ...]] = (
    OrderStatus.PLACED,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
)
KDS_DEFAULT_AUTO_CLEAR_SECONDS: Final[int] = 300
KDS_MIN_AUTO_CLEAR_SECONDS: Final[int] = 30
KDS_MAX_AUTO_CLEAR_SECONDS: Final[int] = 3600

# Column stamped when an order enters each status
ORDER_STATUS_TIMESTAMPS: Final[dict[str, str]] = {
    OrderStatus.PLACED: "placed_at",
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.SERVED: "served_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


class OrderItemStatus:
    """Order line status constants."""

    PENDING: Final[str] = "PENDING"
    REORDER: Final[str] = "REORDER"  # Added to an order already in progress
    SERVED: Final[str] = "SERVED"

    ALL: Final[list[str]] = [PENDING, REORDER, SERVED]


class PaymentMethod:
    """Payment method constants."""

    CASH: Final[str] = "CASH"
    CARD: Final[str] = "CARD"
    UPI: Final[str] = "UPI"
    CREDIT: Final[str] = "CREDIT"  # Udhaar: customer pays later
    OTHER: Final[str] = "OTHER"

    ALL: Final[list[str]] = [CASH, CARD, UPI, CREDIT, OTHER]


class PaymentStatus:
    """Payment status constants."""

    PENDING: Final[str] = "PENDING"
    PAID: Final[str] = "PAID"

    ALL: Final[list[str]] = [PENDING, PAID]


class OrderSource:
    """Where an order was placed."""

    QR: Final[str] = "QR"
    WEB: Final[str] = "WEB"
    MANUAL: Final[str] = "MANUAL"


class OrderType:
    """Order service type constants."""

    DINE_IN: Final[str] = "DINE_IN"
    TAKEAWAY: Final[str] = "TAKEAWAY"
    DELIVERY: Final[str] = "DELIVERY"

    ALL: Final[list[str]] = [DINE_IN, TAKEAWAY, DELIVERY]


# =============================================================================
# Audit Log
# =============================================================================


class AuditAction:
    """Audit log action constants."""

    CREATE: Final[str] = "CREATE"
    UPDATE: Final[str] = "UPDATE"
    DELETE: Final[str] = "DELETE"
    STATUS_CHANGE: Final[str] = "STATUS_CHANGE"
    CREDIT_SETTLEMENT: Final[str] = "CREDIT_SETTLEMENT"
    SUSPEND: Final[str] = "SUSPEND"
    ACTIVATE: Final[str] = "ACTIVATE"


class AuditEntity:
    """Audit log entity type constants."""

    TENANT: Final[str] = "TENANT"
    RESTAURANT: Final[str] = "RESTAURANT"
    RESTAURANT_HALL: Final[str] = "RESTAURANT_HALL"
    RESTAURANT_TABLE: Final[str] = "RESTAURANT_TABLE"
    STAFF: Final[str] = "STAFF"
    CATEGORY: Final[str] = "CATEGORY"
    PRODUCT: Final[str] = "PRODUCT"
    CUSTOMER: Final[str] = "CUSTOMER"
    ORDER: Final[str] = "ORDER"


# =============================================================================
# Theme presets
# =============================================================================


THEME_PRESETS: Final[dict[str, dict[str, str]]] = {
    "classic": {"primary": "#B45309", "secondary": "#FDE68A", "background": "#FFFBEB", "text": "#1F2937"},
    "modern": {"primary": "#2563EB", "secondary": "#93C5FD", "background": "#FFFFFF", "text": "#111827"},
    "minimal": {"primary": "#111827", "secondary": "#E5E7EB", "background": "#FFFFFF", "text": "#111827"},
    "grid": {"primary": "#059669", "secondary": "#A7F3D0", "background": "#F9FAFB", "text": "#1F2937"},
    "dark": {"primary": "#F59E0B", "secondary": "#374151", "background": "#111827", "text": "#F9FAFB"},
    "slider": {"primary": "#DB2777", "secondary": "#FBCFE8", "background": "#FFF7FB", "text": "#1F2937"},
}
DEFAULT_THEME_PRESET: Final[str] = "classic"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits per order line
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 100

    # Lines per public order
    MIN_ORDER_ITEMS: Final[int] = 1
    MAX_ORDER_ITEMS: Final[int] = 50

    # Price limits (in cents/paise)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100
    MAX_NOTES_LENGTH: Final[int] = 500
    MAX_ITEM_NOTES_LENGTH: Final[int] = 200

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100

    # Bulk table creation
    MAX_BULK_TABLES: Final[int] = 100

    # Order number generation attempts
    ORDER_NUMBER_ATTEMPTS: Final[int] = 10

    # Credit customers listed in analytics
    TOP_CREDIT_CUSTOMERS: Final[int] = 20


# =============================================================================
# Event Types (Redis pub/sub)
# =============================================================================


class EventType:
    """Order notification event type constants."""

    NEW_QR_ORDER: Final[str] = "new_qr_order"
    QR_ORDER_ACCEPTED: Final[str] = "qr_order_accepted"
    QR_ORDER_REJECTED: Final[str] = "qr_order_rejected"


# =============================================================================
# Error Messages
# =============================================================================


class ErrorMessages:
    """Standardized error messages."""

    INVALID_CREDENTIALS: Final[str] = "Invalid email or password"
    NOT_AUTHENTICATED: Final[str] = "Not authenticated"
    INVALID_TOKEN: Final[str] = "Invalid token"
    TOKEN_EXPIRED: Final[str] = "Token expired"
    TOKEN_REVOKED: Final[str] = "Token revoked"
    INSUFFICIENT_PERMISSIONS: Final[str] = "Insufficient permissions"
    TENANT_SUSPENDED: Final[str] = "Tenant account is suspended"

    RESTAURANT_ROLE_MISSING: Final[str] = "Restaurant role not assigned"
    RESTAURANT_CONTEXT_REQUIRED: Final[str] = "Restaurant context required"

    NO_OPEN_ORDER: Final[str] = "No open order for this table"
    ORDER_NOT_PENDING: Final[str] = "Order is not in pending state"
    ITEM_SERVED_LOCKED: Final[str] = "This item is already served and locked."

    RATE_LIMIT_EXCEEDED: Final[str] = "Too many requests. Please try again later."
