"""
Restaurant profile, slug, settings, theme, dashboard and setup endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager, require_staff, require_tenant_owner
from rest_api.services.domain import RestaurantService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    DashboardOutput,
    RestaurantOutput,
    RestaurantProfileUpdate,
    RestaurantSettingsOutput,
    RestaurantSettingsUpdate,
    RestaurantSetup,
    SlugUpdate,
    ThemeOutput,
    ThemeUpdate,
)

router = APIRouter(tags=["restaurant"])


@router.get("/dashboard", response_model=DashboardOutput)
def get_dashboard(
    day: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> DashboardOutput:
    """Today's (UTC) order counts, revenue, table occupancy and pending QR orders."""
    return RestaurantService(db).dashboard(ctx, day)


@router.post("/setup", response_model=RestaurantOutput, status_code=status.HTTP_201_CREATED)
def setup_restaurant(
    body: RestaurantSetup,
    db: Session = Depends(get_db),
    user: dict = Depends(require_tenant_owner),
) -> RestaurantOutput:
    """
    Create a restaurant in the owner's tenant. No x-restaurant-id needed.
    The new restaurant appears in the token claims after the next refresh.
    """
    return RestaurantService(db).setup(body, user["tenant_id"], int(user["sub"]), user.get("email"))


@router.get("/profile", response_model=RestaurantOutput)
def get_profile(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> RestaurantOutput:
    return RestaurantService(db).get_profile(ctx)


@router.patch("/profile", response_model=RestaurantOutput)
def update_profile(
    body: RestaurantProfileUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> RestaurantOutput:
    return RestaurantService(db).update_profile(body.model_dump(exclude_unset=True), ctx)


@router.patch("/slug", response_model=RestaurantOutput)
def update_slug(
    body: SlugUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> RestaurantOutput:
    """Change the public menu slug (^[a-z0-9-]+$, 3-100 characters, unique)."""
    return RestaurantService(db).update_slug(body.slug, ctx)


@router.get("/settings", response_model=RestaurantSettingsOutput)
def get_settings(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> RestaurantSettingsOutput:
    return RestaurantService(db).get_settings(ctx)


@router.patch("/settings", response_model=RestaurantSettingsOutput)
def update_settings(
    body: RestaurantSettingsUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> RestaurantSettingsOutput:
    return RestaurantService(db).update_settings(body.model_dump(exclude_unset=True), ctx)


@router.get("/theme", response_model=ThemeOutput)
def get_theme(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> ThemeOutput:
    return RestaurantService(db).get_theme(ctx)


@router.patch("/theme", response_model=ThemeOutput)
def update_theme(
    body: ThemeUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> ThemeOutput:
    return RestaurantService(db).update_theme(body, ctx)
