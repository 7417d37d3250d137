"""
Bills, daily stats, revenue and credit (udhaar) endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager, require_staff
from rest_api.services.domain import BillingService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    CreditCustomerOutput,
    CreditSettleRequest,
    CreditSettleResponse,
    DailyBillsResponse,
    OrderOutput,
    OrderStatsResponse,
    RevenueResponse,
)

router = APIRouter(prefix="/api/orders", tags=["billing"])


@router.get("/bills/table/{table_id}", response_model=OrderOutput)
def table_bill(
    table_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderOutput:
    """Newest open order of the table."""
    return BillingService(db).table_bill(table_id, ctx)


@router.get("/bills/today", response_model=DailyBillsResponse)
def daily_bills(
    day: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> DailyBillsResponse:
    """Orders completed on the given UTC day (default today)."""
    return BillingService(db).daily_bills(ctx, day)


@router.get("/stats", response_model=OrderStatsResponse)
def order_stats(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> OrderStatsResponse:
    return BillingService(db).stats(ctx)


@router.get("/revenue", response_model=RevenueResponse)
def revenue(
    from_date: date | None = None,
    to_date: date | None = None,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> RevenueResponse:
    return BillingService(db).revenue(ctx, from_date, to_date)


@router.get("/analytics/udhaar", response_model=list[CreditCustomerOutput])
def credit_customers(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> list[CreditCustomerOutput]:
    """Customers with outstanding credit, highest balance first."""
    return BillingService(db).credit_customers(ctx)


@router.post("/analytics/settle", response_model=CreditSettleResponse)
def settle_credit(
    body: CreditSettleRequest,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CreditSettleResponse:
    return BillingService(db).settle_credit(body.customer_id, body.amount_cents, ctx)
