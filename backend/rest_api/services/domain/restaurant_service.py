"""
Restaurant Service - profile, public slug, settings, theme and dashboard.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Restaurant, RestaurantTable, Tenant, utcnow
from rest_api.repositories import OrderRepository
from rest_api.services.audit import log_change, serialize_model
from rest_api.services.base_service import BaseService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import (
    DEFAULT_THEME_PRESET,
    THEME_PRESETS,
    AuditAction,
    AuditEntity,
    OrderStatus,
)
from shared.config.logging import get_logger
from shared.utils.admin_schemas import (
    DashboardOutput,
    RestaurantOutput,
    RestaurantSettingsOutput,
    RestaurantSetup,
    ThemeOutput,
    ThemeUpdate,
)
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.validators import slugify, validate_hex_color, validate_image_url, validate_phone, validate_slug

logger = get_logger(__name__)


class RestaurantService(BaseService[Restaurant]):
    """
    Service for the active restaurant's own configuration.

    Business rules:
    - Slugs are unique across all restaurants on the platform
    - Theme settings are stored for the ordering site, never rendered here
    """

    def __init__(self, db: Session):
        super().__init__(db, Restaurant)

    # =========================================================================
    # Profile
    # =========================================================================

    def get_restaurant(self, ctx: RestaurantContext) -> Restaurant:
        restaurant = self._db.scalar(
            select(Restaurant).where(
                Restaurant.id == ctx.restaurant_id,
                Restaurant.tenant_id == ctx.tenant_id,
                Restaurant.deleted_at.is_(None),
            )
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", ctx.restaurant_id)
        return restaurant

    def get_profile(self, ctx: RestaurantContext) -> RestaurantOutput:
        return RestaurantOutput.model_validate(self.get_restaurant(ctx))

    def update_profile(self, data: dict[str, Any], ctx: RestaurantContext) -> RestaurantOutput:
        restaurant = self.get_restaurant(ctx)

        if data.get("logo_url"):
            try:
                data["logo_url"] = validate_image_url(data["logo_url"])
            except ValueError as e:
                raise ValidationError(str(e), field="logo_url")
        if data.get("phone"):
            try:
                data["phone"] = validate_phone(data["phone"])
            except ValueError as e:
                raise ValidationError(str(e), field="phone")
        if data.get("name") is None:
            data.pop("name", None)
        if data.get("email"):
            data["email"] = data["email"].lower()

        return self._apply_changes(restaurant, data, ctx, "update restaurant profile")

    def update_slug(self, slug: str, ctx: RestaurantContext) -> RestaurantOutput:
        """
        Change the public menu slug.

        Raises:
            ValidationError: Malformed or already taken slug.
        """
        restaurant = self.get_restaurant(ctx)
        slug = slug.strip()
        try:
            validate_slug(slug)
        except ValueError as e:
            raise ValidationError(str(e), field="slug")

        if slug != restaurant.slug and self._slug_taken(slug):
            raise ValidationError("Slug is already taken", field="slug", slug=slug)

        return self._apply_changes(restaurant, {"slug": slug}, ctx, "update restaurant slug")

    # =========================================================================
    # Settings & Theme
    # =========================================================================

    def get_settings(self, ctx: RestaurantContext) -> RestaurantSettingsOutput:
        return RestaurantSettingsOutput.model_validate(self.get_restaurant(ctx))

    def update_settings(self, data: dict[str, Any], ctx: RestaurantContext) -> RestaurantSettingsOutput:
        restaurant = self.get_restaurant(ctx)
        if data.get("currency"):
            data["currency"] = data["currency"].upper()
        for required in ("currency", "tax_included"):
            if required in data and data[required] is None:
                data.pop(required)
        self._apply_changes(restaurant, data, ctx, "update restaurant settings")
        return RestaurantSettingsOutput.model_validate(restaurant)

    def get_theme(self, ctx: RestaurantContext) -> ThemeOutput:
        return self._theme_output(self.get_restaurant(ctx))

    def update_theme(self, body: ThemeUpdate, ctx: RestaurantContext) -> ThemeOutput:
        """
        Switch preset and/or override individual colours. Choosing a new
        preset without colours resets the overrides.
        """
        restaurant = self.get_restaurant(ctx)
        data: dict[str, Any] = {}

        if body.preset is not None:
            data["theme_preset"] = body.preset
            if body.colors is None:
                data["theme_colors"] = None

        if body.colors is not None:
            overrides = dict(restaurant.theme_colors or {})
            for key, value in body.colors.model_dump(exclude_unset=True).items():
                try:
                    color = validate_hex_color(value)
                except ValueError as e:
                    raise ValidationError(str(e), field=f"colors.{key}")
                if color is None:
                    overrides.pop(key, None)
                else:
                    overrides[key] = color
            data["theme_colors"] = overrides or None

        self._apply_changes(restaurant, data, ctx, "update restaurant theme")
        return self._theme_output(restaurant)

    # =========================================================================
    # Setup & Dashboard
    # =========================================================================

    def setup(self, body: RestaurantSetup, tenant_id: int, user_id: int, user_email: str | None) -> RestaurantOutput:
        """Create a new restaurant in the owner's tenant."""
        tenant = self._db.get(Tenant, tenant_id)
        if tenant is None or tenant.deleted_at is not None:
            raise NotFoundError("Tenant", tenant_id)

        if body.slug:
            slug = body.slug.strip()
            try:
                validate_slug(slug)
            except ValueError as e:
                raise ValidationError(str(e), field="slug")
            if self._slug_taken(slug):
                raise ValidationError("Slug is already taken", field="slug", slug=slug)
        else:
            slug = self.unique_slug(body.name)

        phone = None
        if body.phone:
            try:
                phone = validate_phone(body.phone)
            except ValueError as e:
                raise ValidationError(str(e), field="phone")

        restaurant = Restaurant(
            tenant_id=tenant_id,
            name=body.name.strip(),
            slug=slug,
            phone=phone,
            email=body.email.lower() if body.email else None,
            address=body.address,
            restaurant_type=body.restaurant_type,
            theme_preset=DEFAULT_THEME_PRESET,
        )
        restaurant.set_created_by(user_id, user_email)
        self._db.add(restaurant)
        self._db.flush()

        log_change(
            self._db,
            tenant_id=tenant_id,
            restaurant_id=restaurant.id,
            user_id=user_id,
            user_email=user_email,
            entity_type=AuditEntity.RESTAURANT,
            entity_id=restaurant.id,
            action=AuditAction.CREATE,
            new_values=serialize_model(restaurant),
        )
        self._commit("create restaurant", tenant_id=tenant_id)
        self._db.refresh(restaurant)

        logger.info("Restaurant created", restaurant_id=restaurant.id, tenant_id=tenant_id, slug=slug)
        return RestaurantOutput.model_validate(restaurant)

    def dashboard(self, ctx: RestaurantContext, day: date | None = None) -> DashboardOutput:
        """Today's order counts, revenue and table occupancy."""
        day = day or utcnow().date()
        orders = OrderRepository(self._db)
        by_status = orders.count_by_status(ctx.restaurant_id, day)

        active_tables = self._db.scalar(
            select(func.count())
            .select_from(RestaurantTable)
            .where(
                RestaurantTable.restaurant_id == ctx.restaurant_id,
                RestaurantTable.is_active.is_(True),
            )
        ) or 0

        return DashboardOutput(
            restaurant_id=ctx.restaurant_id,
            orders_today=sum(by_status.values()),
            orders_by_status={status: by_status.get(status, 0) for status in OrderStatus.ALL},
            revenue_today_cents=orders.revenue_for_day(ctx.restaurant_id, day),
            active_tables=active_tables,
            occupied_tables=len(orders.open_table_ids(ctx.restaurant_id)),
            pending_qr_orders=orders.pending_qr_count(ctx.restaurant_id),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def unique_slug(self, name: str) -> str:
        """Slug derived from a name, suffixed until unused."""
        base = slugify(name)[:90]
        if len(base) < 3:
            base = f"{base}-restaurant".strip("-")
        slug = base
        n = 2
        while self._slug_taken(slug):
            slug = f"{base}-{n}"
            n += 1
        return slug

    def _slug_taken(self, slug: str) -> bool:
        return (
            self._db.scalar(select(func.count()).select_from(Restaurant).where(Restaurant.slug == slug))
            or 0
        ) > 0

    def _apply_changes(
        self,
        restaurant: Restaurant,
        data: dict[str, Any],
        ctx: RestaurantContext,
        operation: str,
    ) -> RestaurantOutput:
        old_values = serialize_model(restaurant)
        for key, value in data.items():
            setattr(restaurant, key, value)
        restaurant.set_updated_by(ctx.user_id, ctx.email)

        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.RESTAURANT,
            entity_id=restaurant.id,
            action=AuditAction.UPDATE,
            old_values=old_values,
            new_values=serialize_model(restaurant),
        )
        self._commit(operation, restaurant_id=ctx.restaurant_id)
        self._db.refresh(restaurant)
        return RestaurantOutput.model_validate(restaurant)

    def _theme_output(self, restaurant: Restaurant) -> ThemeOutput:
        preset = restaurant.theme_preset if restaurant.theme_preset in THEME_PRESETS else DEFAULT_THEME_PRESET
        colors = {**THEME_PRESETS[preset], **(restaurant.theme_colors or {})}
        return ThemeOutput(preset=preset, colors=colors, presets=list(THEME_PRESETS))
