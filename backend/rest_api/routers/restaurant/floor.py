"""
Hall and table management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.models import Hall
from rest_api.routers._common import require_owner_or_manager, require_staff
from rest_api.services.domain import HallService, TableService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    HallCreate,
    HallOutput,
    HallUpdate,
    TableBulkCreate,
    TableCreate,
    TableOutput,
    TableQRCodeOutput,
    TableUpdate,
)

router = APIRouter(tags=["restaurant-floor"])


# =============================================================================
# Halls
# =============================================================================


@router.get("/halls", response_model=list[HallOutput])
def list_halls(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> list[HallOutput]:
    return HallService(db).list_all(ctx, order_by=Hall.name)


@router.post("/halls", response_model=HallOutput, status_code=status.HTTP_201_CREATED)
def create_hall(
    body: HallCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> HallOutput:
    return HallService(db).create(body.model_dump(), ctx)


@router.patch("/halls/{hall_id}", response_model=HallOutput)
def update_hall(
    hall_id: int,
    body: HallUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> HallOutput:
    return HallService(db).update(hall_id, body.model_dump(exclude_unset=True), ctx)


@router.delete("/halls/{hall_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_hall(
    hall_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    """Delete a hall. Its tables stay, without a hall."""
    HallService(db).delete(hall_id, ctx)


# =============================================================================
# Tables
# =============================================================================


@router.get("/tables", response_model=list[TableOutput])
def list_tables(
    hall_id: int | None = None,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> list[TableOutput]:
    """Tables in natural number order, flagged when an order is open on them."""
    return TableService(db).list_with_status(ctx, hall_id)


@router.post("/tables", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> TableOutput:
    return TableService(db).create(body.model_dump(), ctx)


@router.post("/tables/bulk", response_model=list[TableOutput], status_code=status.HTTP_201_CREATED)
def bulk_create_tables(
    body: TableBulkCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> list[TableOutput]:
    """Create `count` tables named prefix+N, skipping numbers already taken."""
    return TableService(db).bulk_create(body, ctx)


@router.patch("/tables/{table_id}", response_model=TableOutput)
def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> TableOutput:
    return TableService(db).update(table_id, body.model_dump(exclude_unset=True), ctx)


@router.delete("/tables/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    TableService(db).delete(table_id, ctx)


@router.get("/tables/{table_id}/qrcode", response_model=TableQRCodeOutput)
def table_qrcode(
    table_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> TableQRCodeOutput:
    """Public ordering URL to print as the table's QR code."""
    return TableService(db).qr_code(table_id, ctx)
