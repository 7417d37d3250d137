"""
Billing Domain Service.

Bills, daily reports and customer credit (udhaar) settlement.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from rest_api.models import Customer, utcnow
from rest_api.repositories import CustomerRepository, OrderRepository
from rest_api.services.audit import log_change
from rest_api.services.base_service import BaseService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import (
    AuditAction,
    AuditEntity,
    ErrorMessages,
    Limits,
    OrderStatus,
    PaymentStatus,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError
from shared.utils.schemas import (
    CreditCustomerOutput,
    CreditSettleResponse,
    DailyBillsResponse,
    OrderOutput,
    OrderStatsResponse,
    RevenueResponse,
)

logger = get_logger(__name__)


class BillingService(BaseService[Customer]):
    """
    Domain service for bills and credit.

    All report days are UTC days.
    """

    def __init__(self, db: Session):
        super().__init__(db, Customer)
        self._orders = OrderRepository(db)
        self._customers = CustomerRepository(db)

    def table_bill(self, table_id: int, ctx: RestaurantContext) -> OrderOutput:
        """Newest open order of a table."""
        order = self._orders.find_open_for_table(ctx.tenant_id, ctx.restaurant_id, table_id)
        if order is None:
            raise NotFoundError("Order", detail=ErrorMessages.NO_OPEN_ORDER, table_id=table_id)
        return OrderOutput.model_validate(order)

    def daily_bills(self, ctx: RestaurantContext, day: date | None = None) -> DailyBillsResponse:
        """Orders completed on the day."""
        day = day or utcnow().date()
        orders = self._orders.completed_between(ctx.tenant_id, ctx.restaurant_id, day, day)
        return DailyBillsResponse(
            date=day,
            total_cents=sum(o.total_cents for o in orders),
            count=len(orders),
            bills=[OrderOutput.model_validate(o) for o in orders],
        )

    def stats(self, ctx: RestaurantContext, day: date | None = None) -> OrderStatsResponse:
        day = day or utcnow().date()
        by_status = self._orders.count_by_status(ctx.restaurant_id, day)
        return OrderStatsResponse(
            date=day,
            total_orders=sum(by_status.values()),
            by_status={status: by_status.get(status, 0) for status in OrderStatus.ALL},
            total_cents=self._orders.revenue_for_day(ctx.restaurant_id, day),
        )

    def revenue(
        self,
        ctx: RestaurantContext,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> RevenueResponse:
        """Revenue, cost and profit from the snapshots of completed orders."""
        if from_date and to_date and from_date > to_date:
            raise ValidationError("from_date must not be after to_date")

        orders = self._orders.completed_between(ctx.tenant_id, ctx.restaurant_id, from_date, to_date)
        revenue = sum(o.total_cents for o in orders)
        cost = sum(item.cost_snapshot_cents * item.quantity for o in orders for item in o.items)
        return RevenueResponse(
            from_date=from_date,
            to_date=to_date,
            orders_count=len(orders),
            revenue_cents=revenue,
            cost_cents=cost,
            profit_cents=revenue - cost,
        )

    def credit_customers(self, ctx: RestaurantContext) -> list[CreditCustomerOutput]:
        customers = self._customers.top_credit(ctx.tenant_id, ctx.restaurant_id, Limits.TOP_CREDIT_CUSTOMERS)
        return [CreditCustomerOutput.model_validate(c) for c in customers]

    def settle_credit(self, customer_id: int, amount_cents: int, ctx: RestaurantContext) -> CreditSettleResponse:
        """
        Record a credit repayment.

        The amount is capped at the customer's balance. Oldest pending
        credit orders are marked PAID while the remaining amount covers
        each of them in full.

        Raises:
            ValidationError: Non-positive amount. A customer who owes
                nothing is returned unchanged.
            NotFoundError: Unknown customer.
        """
        if amount_cents <= 0:
            raise ValidationError("amount_cents must be greater than 0", field="amount_cents")

        customer = self._customers.find_by_id(
            customer_id, ctx.tenant_id, ctx.restaurant_id, include_inactive=True
        )
        if customer is None:
            raise NotFoundError("Customer", customer_id, restaurant_id=ctx.restaurant_id)
        if customer.credit_balance_cents <= 0:
            return CreditSettleResponse(
                customer_id=customer.id,
                settled_cents=0,
                orders_count=0,
                remaining_balance_cents=customer.credit_balance_cents,
            )

        settled = min(amount_cents, customer.credit_balance_cents)
        remaining = settled
        paid_orders = 0
        now = utcnow()
        for order in self._orders.pending_credit_orders(ctx.restaurant_id, customer.id):
            if order.total_cents > remaining:
                break
            order.payment_status = PaymentStatus.PAID
            order.paid_at = now
            order.set_updated_by(ctx.user_id, ctx.email)
            remaining -= order.total_cents
            paid_orders += 1

        customer.credit_balance_cents -= settled
        customer.set_updated_by(ctx.user_id, ctx.email)

        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.CUSTOMER,
            entity_id=customer.id,
            action=AuditAction.CREDIT_SETTLEMENT,
            new_values={"amount_cents": settled, "orders_count": paid_orders},
        )
        self._commit("settle credit", customer_id=customer.id)

        logger.info(
            "Credit settled",
            customer_id=customer.id,
            settled_cents=settled,
            orders_count=paid_orders,
            restaurant_id=ctx.restaurant_id,
        )
        return CreditSettleResponse(
            customer_id=customer.id,
            settled_cents=settled,
            orders_count=paid_orders,
            remaining_balance_cents=customer.credit_balance_cents,
        )
