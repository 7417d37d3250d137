"""
Shared Pydantic schemas used across the application.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from shared.config.constants import (
    KDS_MAX_AUTO_CLEAR_SECONDS,
    KDS_MIN_AUTO_CLEAR_SECONDS,
    Limits,
)


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["OWNER", "MANAGER", "WAITER"]
StaffRole = Literal["MANAGER", "WAITER"]
OrderStatusValue = Literal["PLACED", "CONFIRMED", "PREPARING", "READY", "SERVED", "COMPLETED", "CANCELLED"]
OrderItemStatusValue = Literal["PENDING", "REORDER", "SERVED"]
PaymentMethodValue = Literal["CASH", "CARD", "UPI", "CREDIT", "OTHER"]
PaymentStatusValue = Literal["PENDING", "PAID"]
KdsStatusValue = Literal["PLACED", "CONFIRMED", "PREPARING", "READY"]
OrderSourceValue = Literal["QR", "WEB", "MANUAL"]
OrderTypeValue = Literal["DINE_IN", "TAKEAWAY", "DELIVERY"]


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str
    error: ErrorDetail


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str


class StaffLoginRequest(BaseModel):
    """Head/waiter portal login: the identifier is an email or a phone number."""

    identifier: str = Field(min_length=3, max_length=255)
    password: str


class UserInfo(BaseModel):
    """Basic user information included in auth responses."""

    id: int
    email: str | None = None
    name: str
    tenant_id: int
    role: Role
    allowed_restaurant_ids: list[int]
    # Keys are restaurant ids as strings (JSON object keys)
    restaurant_roles: dict[str, str]


class LoginResponse(BaseModel):
    """Login response with JWT tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserInfo


class RefreshTokenRequest(BaseModel):
    """Refresh token request body. The pos_refresh cookie takes precedence."""

    refresh_token: str | None = None


class LogoutResponse(BaseModel):
    success: bool = True
    message: str
    tokens_revoked: bool


# =============================================================================
# Pagination
# =============================================================================


class PageInfo(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """One requested order line. Prices always come from the catalog."""

    product_id: int
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_ITEM_NOTES_LENGTH)


class PublicOrderCreate(BaseModel):
    """Order placed by a customer from the public menu or a table QR code."""

    customer_name: str = Field(min_length=1, max_length=100)
    customer_phone: str = Field(min_length=7, max_length=20)
    table_id: int | None = None
    table_number: str | None = Field(default=None, max_length=20)
    source: Literal["QR", "WEB"] = "QR"
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    items: list[OrderItemInput] = Field(
        min_length=Limits.MIN_ORDER_ITEMS, max_length=Limits.MAX_ORDER_ITEMS
    )


class PublicOrderItemOutput(BaseModel):
    name: str
    quantity: int
    price_cents: int


class PublicOrderOutput(BaseModel):
    id: int
    order_number: str
    status: str
    total_cents: int
    placed_at: datetime
    items: list[PublicOrderItemOutput]


class InternalOrderCreate(BaseModel):
    """Order entered by staff at the counter or a table."""

    order_type: OrderTypeValue = "DINE_IN"
    table_id: int | None = None
    customer_name: str | None = Field(default=None, max_length=100)
    customer_phone: str | None = Field(default=None, max_length=20)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    items: list[OrderItemInput] = Field(
        min_length=Limits.MIN_ORDER_ITEMS, max_length=Limits.MAX_ORDER_ITEMS
    )


class OrderItemOutput(BaseModel):
    id: int
    product_id: int | None = None
    name_snapshot: str
    price_snapshot_cents: int
    cost_snapshot_cents: int
    quantity: int
    notes: str | None = None
    status: str
    line_total_cents: int

    class Config:
        from_attributes = True


class OrderOutput(BaseModel):
    id: int
    restaurant_id: int
    order_number: str
    table_id: int | None = None
    hall_id: int | None = None
    table_number: str | None = None
    customer_id: int | None = None
    customer_name: str
    customer_phone: str
    notes: str | None = None
    total_cents: int
    source: str
    order_type: str
    status: str
    payment_method: str | None = None
    payment_status: str
    paid_at: datetime | None = None
    placed_at: datetime
    confirmed_at: datetime | None = None
    preparing_at: datetime | None = None
    ready_at: datetime | None = None
    served_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    items: list[OrderItemOutput]

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    orders: list[OrderOutput]
    pagination: PageInfo


class OrderStatusUpdate(BaseModel):
    status: OrderStatusValue
    cancel_reason: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class OrderItemsAdd(BaseModel):
    items: list[OrderItemInput] = Field(
        min_length=Limits.MIN_ORDER_ITEMS, max_length=Limits.MAX_ORDER_ITEMS
    )


class OrderItemUpdate(BaseModel):
    quantity: int | None = Field(default=None, ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_ITEM_NOTES_LENGTH)
    status: OrderItemStatusValue | None = None


class QROrderRejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class PaymentUpdate(BaseModel):
    payment_method: PaymentMethodValue
    payment_status: PaymentStatusValue = "PAID"


class DailyBillsResponse(BaseModel):
    date: date
    total_cents: int
    count: int
    bills: list[OrderOutput]


class OrderStatsResponse(BaseModel):
    date: date
    total_orders: int
    by_status: dict[str, int]
    total_cents: int


class RevenueResponse(BaseModel):
    from_date: date | None = None
    to_date: date | None = None
    orders_count: int
    revenue_cents: int
    cost_cents: int
    profit_cents: int


class CreditCustomerOutput(BaseModel):
    id: int
    name: str
    phone: str
    credit_balance_cents: int
    last_order_at: datetime | None = None

    class Config:
        from_attributes = True


class CreditSettleRequest(BaseModel):
    customer_id: int
    amount_cents: int


class CreditSettleResponse(BaseModel):
    customer_id: int
    settled_cents: int
    orders_count: int
    remaining_balance_cents: int


# =============================================================================
# Kitchen Display Schemas
# =============================================================================


class KdsItemOutput(BaseModel):
    id: int
    name: str
    quantity: int
    notes: str | None = None
    status: str


class KdsOrderOutput(BaseModel):
    """An order as the kitchen sees it. Elapsed times are in seconds."""

    id: int
    order_number: str
    customer_name: str
    table_number: str | None = None
    notes: str | None = None
    status: str
    source: str
    order_type: str
    placed_at: datetime
    confirmed_at: datetime | None = None
    preparing_at: datetime | None = None
    ready_at: datetime | None = None
    elapsed_since_placed: int
    elapsed_since_preparing: int | None = None
    items: list[KdsItemOutput]


class KdsCounts(BaseModel):
    placed: int = 0
    confirmed: int = 0
    preparing: int = 0
    ready: int = 0
    total_active: int = 0


class KdsSettingsOutput(BaseModel):
    sound_enabled: bool
    auto_clear_completed_after_seconds: int


class KdsSettingsUpdate(BaseModel):
    sound_enabled: bool | None = None
    auto_clear_completed_after_seconds: int | None = Field(
        default=None, ge=KDS_MIN_AUTO_CLEAR_SECONDS, le=KDS_MAX_AUTO_CLEAR_SECONDS
    )


class KdsOrdersResponse(BaseModel):
    orders: list[KdsOrderOutput]
    server_time: datetime


class KdsDashboardResponse(BaseModel):
    orders: list[KdsOrderOutput]
    counts: KdsCounts
    settings: KdsSettingsOutput
    server_time: datetime


class KdsRealtimeConfig(BaseModel):
    """Where a kitchen display listens for order changes."""

    channel: str
    events: list[str]


# =============================================================================
# Public Menu Schemas
# =============================================================================


class PublicRestaurantOutput(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: str | None = None
    tagline: str | None = None
    address: str | None = None
    phone: str | None = None
    currency: str
    opening_time: str | None = None
    closing_time: str | None = None
    theme_preset: str
    theme_colors: dict[str, str] | None = None

    class Config:
        from_attributes = True


class PublicProductOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    image_url: str | None = None
    price_cents: int
    discount_percent: int
    discounted_price_cents: int
    is_veg: bool
    preparation_time_minutes: int | None = None


class PublicCategoryOutput(BaseModel):
    id: int | None = None
    name: str
    description: str | None = None
    image_url: str | None = None
    products: list[PublicProductOutput]


class PublicMenuResponse(BaseModel):
    restaurant: PublicRestaurantOutput
    categories: list[PublicCategoryOutput]
