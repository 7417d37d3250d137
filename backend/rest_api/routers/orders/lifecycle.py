"""
Order lifecycle endpoints: placement, status, items, QR accept/reject,
payment and deletion.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.repositories import OrderFilters
from rest_api.routers._common import Pagination, get_pagination, require_owner_or_manager, require_staff
from rest_api.services.domain import OrderService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    InternalOrderCreate,
    OrderItemsAdd,
    OrderItemUpdate,
    OrderListResponse,
    OrderOutput,
    OrderStatusUpdate,
    PaymentUpdate,
    QROrderRejectRequest,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: str | None = Query(default=None, alias="status"),
    from_date: date | None = None,
    to_date: date | None = None,
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderListResponse:
    """Orders of the active restaurant, newest first."""
    filters = OrderFilters(
        page=pagination.page,
        limit=pagination.limit,
        status=status_filter.upper() if status_filter else None,
        from_date=from_date,
        to_date=to_date,
    )
    return OrderService(db).list_orders(ctx, filters)


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: InternalOrderCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Staff-entered order. DINE_IN needs a table of this restaurant."""
    return OrderService(db).create_internal_order(body, ctx)


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    return OrderService(db).get_order(order_id, ctx)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """
    Move an order to another status.

    COMPLETED and CANCELLED orders are final. CANCELLED needs a
    cancel_reason; COMPLETED needs every item served.
    """
    return OrderService(db).update_status(order_id, body, ctx)


@router.post("/{order_id}/items", response_model=OrderOutput)
def add_order_items(
    order_id: int,
    body: OrderItemsAdd,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Add a reorder round to an open, unpaid order."""
    return OrderService(db).add_items(order_id, body, ctx)


@router.patch("/{order_id}/items/{item_id}", response_model=OrderOutput)
def update_order_item(
    order_id: int,
    item_id: int,
    body: OrderItemUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    return OrderService(db).update_item(order_id, item_id, body, ctx)


@router.delete("/{order_id}/items/{item_id}", response_model=OrderOutput)
def remove_order_item(
    order_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    return OrderService(db).remove_item(order_id, item_id, ctx)


@router.post("/{order_id}/accept", response_model=OrderOutput)
def accept_qr_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Confirm a pending QR order."""
    return OrderService(db).accept_qr_order(order_id, ctx)


@router.post("/{order_id}/reject", response_model=OrderOutput)
def reject_qr_order(
    order_id: int,
    body: QROrderRejectRequest | None = None,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Cancel a pending QR order."""
    return OrderService(db).reject_qr_order(order_id, body.reason if body else None, ctx)


@router.patch("/{order_id}/payment", response_model=OrderOutput)
def update_payment(
    order_id: int,
    body: PaymentUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Record payment. Paid or credit orders complete; credit balances follow."""
    return OrderService(db).update_payment(order_id, body, ctx)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    OrderService(db).delete_order(order_id, ctx)
