"""
Pydantic schemas for restaurant management and super-admin endpoints.
Kept outside the routers so services can import them without cycles.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field

from shared.config.constants import Limits
from shared.utils.schemas import PageInfo, StaffRole


ThemePreset = Literal["classic", "modern", "minimal", "grid", "dark", "slider"]


# =============================================================================
# Restaurant Schemas
# =============================================================================


class RestaurantOutput(BaseModel):
    id: int
    tenant_id: int
    name: str
    slug: str
    phone: str | None = None
    email: str | None = None
    logo_url: str | None = None
    address: str | None = None
    gst_number: str | None = None
    tagline: str | None = None
    restaurant_type: str | None = None
    opening_time: str | None = None
    closing_time: str | None = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RestaurantSetup(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    slug: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    address: str | None = Field(default=None, max_length=500)
    restaurant_type: str | None = Field(default=None, max_length=50)


class RestaurantProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    logo_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    address: str | None = Field(default=None, max_length=500)
    gst_number: str | None = Field(default=None, max_length=50)
    tagline: str | None = Field(default=None, max_length=200)
    restaurant_type: str | None = Field(default=None, max_length=50)
    opening_time: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    closing_time: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class SlugUpdate(BaseModel):
    slug: str = Field(max_length=200)


class RestaurantSettingsOutput(BaseModel):
    currency: str
    tax_included: bool
    opening_hours: dict[str, Any] | None = None

    class Config:
        from_attributes = True


class RestaurantSettingsUpdate(BaseModel):
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    tax_included: bool | None = None
    opening_hours: dict[str, Any] | None = None


class ThemeColors(BaseModel):
    primary: str | None = None
    secondary: str | None = None
    background: str | None = None
    text: str | None = None


class ThemeOutput(BaseModel):
    preset: str
    colors: dict[str, str]
    presets: list[str]


class ThemeUpdate(BaseModel):
    preset: ThemePreset | None = None
    colors: ThemeColors | None = None


class DashboardOutput(BaseModel):
    restaurant_id: int
    orders_today: int
    orders_by_status: dict[str, int]
    revenue_today_cents: int
    active_tables: int
    occupied_tables: int
    pending_qr_orders: int


# =============================================================================
# Staff Schemas
# =============================================================================


class StaffOutput(BaseModel):
    id: int
    name: str
    role: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    is_active: bool
    can_login: bool
    created_at: datetime


class StaffCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    role: StaffRole
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    password: str | None = Field(default=None, max_length=128)
    address: str | None = Field(default=None, max_length=500)


class StaffUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    role: StaffRole | None = None
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    password: str | None = Field(default=None, max_length=128)
    address: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None


# =============================================================================
# Hall & Table Schemas
# =============================================================================


class HallOutput(BaseModel):
    id: int
    restaurant_id: int
    name: str
    is_ac: bool
    created_at: datetime

    class Config:
        from_attributes = True


class HallCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    is_ac: bool = False


class HallUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    is_ac: bool | None = None


class TableOutput(BaseModel):
    id: int
    restaurant_id: int
    hall_id: int | None = None
    table_number: str
    seats: int
    is_active: bool
    has_open_order: bool = False


class TableCreate(BaseModel):
    hall_id: int | None = None
    table_number: str = Field(min_length=1, max_length=20)
    seats: int = Field(default=4, ge=1, le=50)
    is_active: bool = True


class TableBulkCreate(BaseModel):
    count: int = Field(ge=1, le=Limits.MAX_BULK_TABLES)
    prefix: str = Field(default="T", max_length=10)
    seats: int = Field(default=4, ge=1, le=50)
    hall_id: int | None = None


class TableUpdate(BaseModel):
    hall_id: int | None = None
    table_number: str | None = Field(default=None, min_length=1, max_length=20)
    seats: int | None = Field(default=None, ge=1, le=50)
    is_active: bool | None = None


class TableQRCodeOutput(BaseModel):
    table_id: int
    table_number: str
    url: str


# =============================================================================
# Category & Product Schemas
# =============================================================================


class CategoryOutput(BaseModel):
    id: int
    restaurant_id: int
    name: str
    description: str | None = None
    image_url: str | None = None
    sort_order: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=125)
    image_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    sort_order: int | None = None
    is_active: bool = True


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=125)
    image_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    sort_order: int | None = None
    is_active: bool | None = None


class CategoryReorderItem(BaseModel):
    id: int
    sort_order: int = Field(ge=0)


class ProductOutput(BaseModel):
    id: int
    restaurant_id: int
    category_id: int | None = None
    name: str
    description: str | None = None
    image_url: str | None = None
    price_cents: int
    cost_price_cents: int
    discount_percent: int
    is_available: bool
    is_veg: bool
    preparation_time_minutes: int | None = None
    sort_order: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=2, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    image_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    cost_price_cents: int = Field(default=0, ge=0, le=Limits.MAX_PRICE_CENTS)
    category_id: int | None = None
    is_available: bool = True
    is_veg: bool = True
    preparation_time_minutes: int | None = Field(default=None, ge=0, le=600)
    discount_percent: int = Field(default=0, ge=0, le=100)
    sort_order: int = 0


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    image_url: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    cost_price_cents: int | None = Field(default=None, ge=0, le=Limits.MAX_PRICE_CENTS)
    category_id: int | None = None
    is_available: bool | None = None
    is_veg: bool | None = None
    preparation_time_minutes: int | None = Field(default=None, ge=0, le=600)
    discount_percent: int | None = Field(default=None, ge=0, le=100)
    sort_order: int | None = None
    is_active: bool | None = None


# =============================================================================
# Customer Schemas
# =============================================================================


class CustomerOutput(BaseModel):
    id: int
    restaurant_id: int
    name: str
    phone: str
    email: str | None = None
    tags: list[str]
    notes: str | None = None
    total_orders: int
    total_spent_cents: int
    last_order_at: datetime | None = None
    credit_balance_cents: int
    created_at: datetime

    class Config:
        from_attributes = True


class CustomerCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    phone: str = Field(max_length=20)
    email: EmailStr | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class CustomerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class CustomerTagsUpdate(BaseModel):
    tags: list[str] = Field(max_length=20)


class CustomerListResponse(BaseModel):
    customers: list[CustomerOutput]
    pagination: PageInfo


# =============================================================================
# Super-admin Schemas
# =============================================================================


class SuperAdminInfo(BaseModel):
    id: int
    email: str
    name: str

    class Config:
        from_attributes = True


class SuperAdminLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    admin: SuperAdminInfo


class TenantOutput(BaseModel):
    id: int
    name: str
    slug: str
    contact_email: str | None = None
    contact_phone: str | None = None
    plan: str
    is_active: bool
    is_suspended: bool
    suspended_at: datetime | None = None
    suspension_reason: str | None = None
    created_at: datetime
    restaurants_count: int = 0
    users_count: int = 0


class TenantCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    slug: str | None = Field(default=None, max_length=100)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(default=None, max_length=20)
    plan: str = Field(default="STANDARD", max_length=50)
    owner_name: str = Field(min_length=2, max_length=100)
    owner_email: EmailStr
    owner_password: str = Field(min_length=8, max_length=128)


class TenantUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(default=None, max_length=20)
    plan: str | None = Field(default=None, max_length=50)


class TenantSuspend(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class TenantListResponse(BaseModel):
    tenants: list[TenantOutput]
    pagination: PageInfo


class PlatformOverview(BaseModel):
    tenants: int
    active_tenants: int
    suspended_tenants: int
    restaurants: int
    users: int
    orders: int
    orders_today: int


class AuditLogOutput(BaseModel):
    id: int
    tenant_id: int
    restaurant_id: int | None = None
    user_id: int | None = None
    user_email: str | None = None
    entity_type: str
    entity_id: int
    action: str
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    logs: list[AuditLogOutput]
    pagination: PageInfo
