"""
Kitchen display router.
Queue of orders for the kitchen screen and its per-restaurant settings.
Any staff member can read; only owners and managers change settings.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager, require_staff
from rest_api.services.domain import KdsService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    KdsDashboardResponse,
    KdsOrderOutput,
    KdsOrdersResponse,
    KdsRealtimeConfig,
    KdsSettingsOutput,
    KdsSettingsUpdate,
    KdsStatusValue,
)

router = APIRouter(prefix="/api/kds", tags=["kds"])


@router.get("/dashboard", response_model=KdsDashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> KdsDashboardResponse:
    """Initial load: active orders, counts per status, settings and server time."""
    return KdsService(db).dashboard(ctx)


@router.get("/orders", response_model=KdsOrdersResponse)
def list_orders(
    status: KdsStatusValue | None = Query(default=None),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> KdsOrdersResponse:
    return KdsService(db).active_orders(ctx, status=status)


@router.get("/orders/{order_id}", response_model=KdsOrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> KdsOrderOutput:
    return KdsService(db).get_order(order_id, ctx)


@router.get("/settings", response_model=KdsSettingsOutput)
def get_settings(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> KdsSettingsOutput:
    return KdsService(db).get_settings(ctx)


@router.patch("/settings", response_model=KdsSettingsOutput)
def update_settings(
    body: KdsSettingsUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> KdsSettingsOutput:
    return KdsService(db).update_settings(body.model_dump(exclude_unset=True), ctx)


@router.get("/realtime-config", response_model=KdsRealtimeConfig)
def get_realtime_config(ctx: RestaurantContext = Depends(require_staff)) -> KdsRealtimeConfig:
    """Pub/sub channel and event types a kitchen screen subscribes to."""
    return KdsService.realtime_config(ctx)
