"""
Order Service - order placement and the order lifecycle.

Handles:
- Public (QR/web) and staff order placement with server-side pricing
- Status transitions with per-status timestamps
- Item additions, edits and removals on open orders
- QR order accept/reject with realtime notifications
- Payment updates and customer credit (udhaar) balance sync

Usage:
    from rest_api.services.domain import OrderService

    service = OrderService(db)
    order = service.create_internal_order(body, ctx)
    service.update_status(order.id, OrderStatusUpdate(status="CONFIRMED"), ctx)
"""

from __future__ import annotations

import secrets
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import Customer, Order, OrderItem, Product, Restaurant, RestaurantTable, utcnow
from rest_api.repositories import OrderFilters, OrderRepository, RestaurantRepository
from rest_api.services.audit import log_change
from rest_api.services.base_service import BaseService
from rest_api.services.domain.customer_service import upsert_customer
from rest_api.services.domain.product_service import discounted_price_cents
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import (
    FINAL_ORDER_STATUSES,
    ORDER_STATUS_TIMESTAMPS,
    AuditAction,
    AuditEntity,
    ErrorMessages,
    EventType,
    Limits,
    OrderItemStatus,
    OrderSource,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
)
from shared.config.logging import get_logger, mask_phone
from shared.infrastructure.redis import publish_order_event
from shared.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import (
    InternalOrderCreate,
    OrderItemInput,
    OrderItemsAdd,
    OrderItemUpdate,
    OrderListResponse,
    OrderOutput,
    OrderStatusUpdate,
    PageInfo,
    PaymentUpdate,
    PublicOrderCreate,
    PublicOrderItemOutput,
    PublicOrderOutput,
)
from shared.utils.validators import validate_phone

logger = get_logger(__name__)

ORDER_NUMBER_PREFIX = "#ORD-"
ORDER_NUMBER_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_CUSTOMER_NAME = "Guest"
NO_PHONE = "N/A"
DEFAULT_REJECT_REASON = "Rejected by restaurant"


def make_order_number() -> str:
    """``#ORD-`` + two characters + one digit repeated twice, e.g. ``#ORD-K733``."""
    letters = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(2))
    digit = str(secrets.randbelow(10))
    return f"{ORDER_NUMBER_PREFIX}{letters}{digit}{digit}"


def order_total_cents(items: list[OrderItem]) -> int:
    """Order total recomputed from line snapshots."""
    return sum(item.price_snapshot_cents * item.quantity for item in items)


class OrderService(BaseService[Order]):
    """
    Service for orders.

    Business rules:
    - Prices are snapshotted from the catalog; client totals are never trusted
    - COMPLETED and CANCELLED orders are immutable
    - An order completes only when every item is served
    - Events are published after the transaction commits
    """

    def __init__(self, db: Session):
        super().__init__(db, Order)
        self._orders = OrderRepository(db)
        self._products = RestaurantRepository(Product, db)

    # =========================================================================
    # Placement
    # =========================================================================

    def place_public_order(self, slug: str, body: PublicOrderCreate) -> PublicOrderOutput:
        """
        Place an order from the public menu or a table QR code.

        Raises:
            NotFoundError: Unknown restaurant slug.
            ValidationError: Bad phone, table or unavailable products.
        """
        restaurant = self._restaurant_by_slug(slug)

        try:
            phone = validate_phone(body.customer_phone, public=True)
        except ValueError as e:
            raise ValidationError(str(e), field="customer_phone")

        items = self._build_items(restaurant.tenant_id, restaurant.id, body.items)
        table = self._resolve_public_table(restaurant, body.table_id, body.table_number)

        order_type = (
            OrderType.DINE_IN
            if body.source == OrderSource.QR or table is not None
            else OrderType.TAKEAWAY
        )
        customer = upsert_customer(
            self._db,
            tenant_id=restaurant.tenant_id,
            restaurant_id=restaurant.id,
            name=body.customer_name.strip(),
            phone=phone,
        )

        order = self._new_order(
            tenant_id=restaurant.tenant_id,
            restaurant_id=restaurant.id,
            items=items,
            table=table,
            customer=customer,
            customer_name=body.customer_name.strip(),
            customer_phone=phone,
            source=body.source,
            order_type=order_type,
            notes=body.notes,
        )
        self._commit("place order", restaurant_id=restaurant.id)
        self._db.refresh(order)

        logger.info(
            "Public order placed",
            order_id=order.id,
            order_number=order.order_number,
            restaurant_id=restaurant.id,
            source=order.source,
            phone=mask_phone(phone),
        )
        publish_order_event(
            restaurant.id,
            EventType.NEW_QR_ORDER,
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "table_number": order.table_number,
                "customer_name": order.customer_name,
                "total_amount": order.total_cents / 100,
                "total_cents": order.total_cents,
                "items_count": len(order.items),
                "timestamp": order.placed_at.isoformat(),
            },
        )
        return self.to_public_output(order)

    def create_internal_order(self, body: InternalOrderCreate, ctx: RestaurantContext) -> OrderOutput:
        """
        Create an order entered by staff.

        Raises:
            ValidationError: Dine-in without a valid table, bad phone or products.
        """
        table = None
        if body.table_id is not None:
            table = self._find_table(body.table_id, ctx)
        if body.order_type == OrderType.DINE_IN and (table is None or not table.is_active):
            raise ValidationError("A valid table is required for dine-in orders", field="table_id")

        items = self._build_items(ctx.tenant_id, ctx.restaurant_id, body.items)

        name = (body.customer_name or "").strip() or DEFAULT_CUSTOMER_NAME
        phone = NO_PHONE
        customer = None
        if body.customer_phone and body.customer_phone.strip() and body.customer_phone.strip() != NO_PHONE:
            try:
                phone = validate_phone(body.customer_phone)
            except ValueError as e:
                raise ValidationError(str(e), field="customer_phone")
            customer = upsert_customer(
                self._db,
                tenant_id=ctx.tenant_id,
                restaurant_id=ctx.restaurant_id,
                name=name,
                phone=phone,
            )

        order = self._new_order(
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            items=items,
            table=table,
            customer=customer,
            customer_name=name,
            customer_phone=phone,
            source=OrderSource.MANUAL,
            order_type=body.order_type,
            notes=body.notes,
        )
        order.set_created_by(ctx.user_id, ctx.email)
        self._audit(ctx, order, AuditAction.CREATE, new_values={
            "order_number": order.order_number,
            "total_cents": order.total_cents,
            "items": len(items),
        })
        self._commit("create order", restaurant_id=ctx.restaurant_id)
        self._db.refresh(order)

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
        )
        return self.to_output(order)

    # =========================================================================
    # Queries
    # =========================================================================

    def list_orders(self, ctx: RestaurantContext, filters: OrderFilters) -> OrderListResponse:
        if filters.status and filters.status not in OrderStatus.ALL:
            raise ValidationError(f"Invalid status: {filters.status}", field="status")
        if filters.from_date and filters.to_date and filters.from_date > filters.to_date:
            raise ValidationError("from_date must not be after to_date")

        orders, total = self._orders.find_page(ctx.tenant_id, ctx.restaurant_id, filters)
        return OrderListResponse(
            orders=[self.to_output(o) for o in orders],
            pagination=PageInfo(
                page=filters.page,
                limit=filters.limit,
                total=total,
                total_pages=(total + filters.limit - 1) // filters.limit,
            ),
        )

    def get_order(self, order_id: int, ctx: RestaurantContext) -> OrderOutput:
        return self.to_output(self.get_entity(order_id, ctx))

    def get_entity(self, order_id: int, ctx: RestaurantContext) -> Order:
        """
        Load an order of the tenant.

        Raises:
            OrderNotFoundError: Missing or another tenant's order.
            ForbiddenError: The order belongs to another restaurant.
        """
        order = self._orders.find_by_id(order_id, ctx.tenant_id, ctx.restaurant_id, include_inactive=True)
        if order is not None:
            return order

        other = self._db.scalar(
            select(Order.restaurant_id).where(Order.id == order_id, Order.tenant_id == ctx.tenant_id)
        )
        if other is not None:
            raise ForbiddenError(detail="Order belongs to another restaurant", order_id=order_id)
        raise OrderNotFoundError(order_id, restaurant_id=ctx.restaurant_id)

    def public_orders_by_phone(self, slug: str, phone: str, limit: int = 10) -> list[PublicOrderOutput]:
        """A customer's recent orders at the restaurant."""
        restaurant = self._restaurant_by_slug(slug)
        try:
            phone = validate_phone(phone)
        except ValueError as e:
            raise ValidationError(str(e), field="phone")
        orders = self._orders.find_for_customer(
            restaurant.tenant_id, restaurant.id, phone=phone, limit=limit
        )
        return [self.to_public_output(o) for o in orders]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def update_status(self, order_id: int, body: OrderStatusUpdate, ctx: RestaurantContext) -> OrderOutput:
        """
        Move an order to a new status.

        Raises:
            InvalidStateError: The order is already COMPLETED or CANCELLED.
            ValidationError: Missing cancel reason or unserved items on completion.
        """
        order = self.get_entity(order_id, ctx)
        self._ensure_mutable(order)
        old_status = order.status

        if body.status == OrderStatus.CANCELLED:
            reason = (body.cancel_reason or "").strip()
            if not reason:
                raise ValidationError("cancel_reason is required to cancel an order", field="cancel_reason")
            self._cancel(order, reason)
        elif body.status == OrderStatus.COMPLETED:
            unserved = [i.name_snapshot for i in order.items if i.status != OrderItemStatus.SERVED]
            if unserved:
                raise ValidationError(
                    f"Cannot complete order: items not served: {', '.join(unserved)}",
                    order_id=order_id,
                )
            self._complete(order)
        else:
            if body.status == OrderStatus.SERVED:
                for item in order.items:
                    item.status = OrderItemStatus.SERVED
            self._set_status(order, body.status)

        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(
            ctx,
            order,
            AuditAction.STATUS_CHANGE,
            old_values={"status": old_status},
            new_values={"status": order.status, "cancel_reason": order.cancel_reason},
        )
        self._commit("update order status", order_id=order_id)
        self._db.refresh(order)

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=old_status,
            to_status=order.status,
            restaurant_id=ctx.restaurant_id,
        )
        return self.to_output(order)

    def accept_qr_order(self, order_id: int, ctx: RestaurantContext) -> OrderOutput:
        order = self._pending_qr_order(order_id, ctx, "accepted")
        self._set_status(order, OrderStatus.CONFIRMED)
        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(
            ctx,
            order,
            AuditAction.STATUS_CHANGE,
            old_values={"status": OrderStatus.PLACED},
            new_values={"status": OrderStatus.CONFIRMED},
        )
        self._commit("accept order", order_id=order_id)
        self._db.refresh(order)

        publish_order_event(
            ctx.restaurant_id,
            EventType.QR_ORDER_ACCEPTED,
            {"order_id": order.id, "order_number": order.order_number, "status": order.status},
        )
        return self.to_output(order)

    def reject_qr_order(self, order_id: int, reason: str | None, ctx: RestaurantContext) -> OrderOutput:
        order = self._pending_qr_order(order_id, ctx, "rejected")
        self._cancel(order, (reason or "").strip() or DEFAULT_REJECT_REASON)
        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(
            ctx,
            order,
            AuditAction.STATUS_CHANGE,
            old_values={"status": OrderStatus.PLACED},
            new_values={"status": OrderStatus.CANCELLED, "cancel_reason": order.cancel_reason},
        )
        self._commit("reject order", order_id=order_id)
        self._db.refresh(order)

        publish_order_event(
            ctx.restaurant_id,
            EventType.QR_ORDER_REJECTED,
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "status": order.status,
                "reason": order.cancel_reason,
            },
        )
        return self.to_output(order)

    # =========================================================================
    # Items
    # =========================================================================

    def add_items(self, order_id: int, body: OrderItemsAdd, ctx: RestaurantContext) -> OrderOutput:
        """
        Append items to an open, unpaid order. New lines are REORDER items
        and a READY or SERVED order goes back to PREPARING.
        """
        order = self.get_entity(order_id, ctx)
        self._ensure_mutable(order)
        if order.payment_status == PaymentStatus.PAID:
            raise InvalidStateError("Order", order.status, detail="Cannot add items to a paid order")

        new_items = self._build_items(ctx.tenant_id, ctx.restaurant_id, body.items)
        for item in new_items:
            item.status = OrderItemStatus.REORDER
            order.items.append(item)

        if order.status in (OrderStatus.READY, OrderStatus.SERVED):
            self._set_status(order, OrderStatus.PREPARING)

        order.total_cents = order_total_cents(order.items)
        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(ctx, order, AuditAction.UPDATE, new_values={
            "added_items": [{"product_id": i.product_id, "quantity": i.quantity} for i in new_items],
            "total_cents": order.total_cents,
        })
        self._commit("add order items", order_id=order_id)
        self._db.refresh(order)
        return self.to_output(order)

    def update_item(
        self,
        order_id: int,
        item_id: int,
        body: OrderItemUpdate,
        ctx: RestaurantContext,
    ) -> OrderOutput:
        order = self.get_entity(order_id, ctx)
        self._ensure_mutable(order)
        item = self._get_item(order, item_id)

        data = body.model_dump(exclude_unset=True)
        new_status = data.get("status")
        if new_status and item.status == OrderItemStatus.SERVED and new_status != OrderItemStatus.SERVED:
            raise ValidationError(ErrorMessages.ITEM_SERVED_LOCKED, item_id=item_id)

        if data.get("quantity") is not None:
            item.quantity = data["quantity"]
        if "notes" in data:
            item.notes = data["notes"]
        if new_status:
            item.status = new_status

        order.total_cents = order_total_cents(order.items)
        order.set_updated_by(ctx.user_id, ctx.email)
        self._commit("update order item", order_id=order_id, item_id=item_id)
        self._db.refresh(order)
        return self.to_output(order)

    def remove_item(self, order_id: int, item_id: int, ctx: RestaurantContext) -> OrderOutput:
        order = self.get_entity(order_id, ctx)
        self._ensure_mutable(order)
        item = self._get_item(order, item_id)
        if len(order.items) == 1:
            raise ValidationError("An order must keep at least one item; cancel the order instead")

        order.items.remove(item)
        order.total_cents = order_total_cents(order.items)
        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(ctx, order, AuditAction.UPDATE, new_values={
            "removed_item": {"id": item_id, "name": item.name_snapshot, "quantity": item.quantity},
            "total_cents": order.total_cents,
        })
        self._commit("remove order item", order_id=order_id, item_id=item_id)
        self._db.refresh(order)
        return self.to_output(order)

    # =========================================================================
    # Payment & Deletion
    # =========================================================================

    def update_payment(self, order_id: int, body: PaymentUpdate, ctx: RestaurantContext) -> OrderOutput:
        """
        Record how an order is paid. Paying (or putting it on credit)
        completes the order. Pending credit is mirrored on the customer's
        credit balance.
        """
        order = self.get_entity(order_id, ctx)
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("Order", order.status, detail="Cannot take payment for a cancelled order")

        was_credit = _is_pending_credit(order.payment_method, order.payment_status)
        is_credit = _is_pending_credit(body.payment_method, body.payment_status)

        customer = self._db.get(Customer, order.customer_id) if order.customer_id else None
        if is_credit and customer is None:
            raise ValidationError("Credit orders need a customer with a phone number")

        old_values = {"payment_method": order.payment_method, "payment_status": order.payment_status}
        if customer is not None:
            if is_credit and not was_credit:
                customer.credit_balance_cents += order.total_cents
            elif was_credit and not is_credit:
                customer.credit_balance_cents = max(0, customer.credit_balance_cents - order.total_cents)

        order.payment_method = body.payment_method
        order.payment_status = body.payment_status
        order.paid_at = utcnow() if body.payment_status == PaymentStatus.PAID else None

        if (
            body.payment_status == PaymentStatus.PAID or body.payment_method == PaymentMethod.CREDIT
        ) and order.status != OrderStatus.COMPLETED:
            for item in order.items:
                item.status = OrderItemStatus.SERVED
            self._complete(order)

        order.set_updated_by(ctx.user_id, ctx.email)
        self._audit(ctx, order, AuditAction.UPDATE, old_values=old_values, new_values={
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
            "status": order.status,
        })
        self._commit("update payment", order_id=order_id)
        self._db.refresh(order)

        logger.info(
            "Order payment updated",
            order_id=order.id,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            restaurant_id=ctx.restaurant_id,
        )
        return self.to_output(order)

    def delete_order(self, order_id: int, ctx: RestaurantContext) -> None:
        """Hard delete. Pending credit leaves the customer's balance."""
        order = self.get_entity(order_id, ctx)

        if order.customer_id and _is_pending_credit(order.payment_method, order.payment_status):
            customer = self._db.get(Customer, order.customer_id)
            if customer is not None:
                customer.credit_balance_cents = max(0, customer.credit_balance_cents - order.total_cents)

        self._audit(ctx, order, AuditAction.DELETE, old_values={
            "order_number": order.order_number,
            "status": order.status,
            "total_cents": order.total_cents,
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
        })
        self._db.delete(order)
        self._commit("delete order", order_id=order_id)
        logger.info("Order deleted", order_id=order_id, restaurant_id=ctx.restaurant_id)

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, order: Order) -> OrderOutput:
        return OrderOutput.model_validate(order)

    def to_public_output(self, order: Order) -> PublicOrderOutput:
        return PublicOrderOutput(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            total_cents=order.total_cents,
            placed_at=order.placed_at,
            items=[
                PublicOrderItemOutput(
                    name=item.name_snapshot,
                    quantity=item.quantity,
                    price_cents=item.price_snapshot_cents,
                )
                for item in order.items
            ],
        )

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _restaurant_by_slug(self, slug: str) -> Restaurant:
        restaurant = self._db.scalar(
            select(Restaurant).where(
                Restaurant.slug == slug,
                Restaurant.is_active.is_(True),
                Restaurant.deleted_at.is_(None),
            )
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", slug)
        return restaurant

    def _find_table(self, table_id: int, ctx: RestaurantContext) -> RestaurantTable | None:
        return self._db.scalar(
            select(RestaurantTable).where(
                RestaurantTable.id == table_id,
                RestaurantTable.tenant_id == ctx.tenant_id,
                RestaurantTable.restaurant_id == ctx.restaurant_id,
            )
        )

    def _resolve_public_table(
        self,
        restaurant: Restaurant,
        table_id: int | None,
        table_number: str | None,
    ) -> RestaurantTable | None:
        """Table by id, else by number (case-insensitive)."""
        query = select(RestaurantTable).where(RestaurantTable.restaurant_id == restaurant.id)
        if table_id is not None:
            table = self._db.scalar(query.where(RestaurantTable.id == table_id))
        elif table_number and table_number.strip():
            table = self._db.scalar(
                query.where(func.lower(RestaurantTable.table_number) == table_number.strip().lower())
            )
        else:
            return None

        if table is None:
            raise ValidationError("Table not found", field="table_id")
        if not table.is_active:
            raise ValidationError("This table is not accepting orders", table_id=table.id)
        return table

    def _build_items(self, tenant_id: int, restaurant_id: int, inputs: list[OrderItemInput]) -> list[OrderItem]:
        """
        Snapshot catalog prices into new order lines.

        Raises:
            ValidationError: Any product missing, disabled or unavailable.
        """
        if not inputs:
            raise ValidationError("At least one item is required")
        if len(inputs) > Limits.MAX_ORDER_ITEMS:
            raise ValidationError(f"At most {Limits.MAX_ORDER_ITEMS} items per order")

        ids = list({i.product_id for i in inputs})
        products = {
            p.id: p
            for p in self._products.find_by_ids(ids, tenant_id, restaurant_id, include_inactive=True)
        }
        unavailable = []
        for product_id in ids:
            product = products.get(product_id)
            if product is None:
                unavailable.append(f"#{product_id}")
            elif not product.is_active or not product.is_available:
                unavailable.append(product.name)
        if unavailable:
            raise ValidationError(f"Products not available: {', '.join(sorted(unavailable))}")

        items = []
        for line in inputs:
            product = products[line.product_id]
            items.append(
                OrderItem(
                    product_id=product.id,
                    name_snapshot=product.name,
                    price_snapshot_cents=discounted_price_cents(product.price_cents, product.discount_percent),
                    cost_snapshot_cents=product.cost_price_cents or 0,
                    quantity=line.quantity,
                    notes=line.notes,
                    status=OrderItemStatus.PENDING,
                )
            )
        return items

    def _allocate_order_number(self, restaurant_id: int) -> str:
        for _ in range(Limits.ORDER_NUMBER_ATTEMPTS):
            number = make_order_number()
            if not self._orders.number_exists(restaurant_id, number):
                return number
        raise ConflictError("Could not allocate a unique order number", restaurant_id=restaurant_id)

    def _new_order(
        self,
        *,
        tenant_id: int,
        restaurant_id: int,
        items: list[OrderItem],
        table: RestaurantTable | None,
        customer: Customer | None,
        customer_name: str,
        customer_phone: str,
        source: str,
        order_type: str,
        notes: str | None,
    ) -> Order:
        order = Order(
            tenant_id=tenant_id,
            restaurant_id=restaurant_id,
            order_number=self._allocate_order_number(restaurant_id),
            table_id=table.id if table else None,
            hall_id=table.hall_id if table else None,
            table_number=table.table_number if table else None,
            customer_id=customer.id if customer else None,
            customer_name=customer_name,
            customer_phone=customer_phone,
            notes=notes,
            source=source,
            order_type=order_type,
            status=OrderStatus.PLACED,
            payment_status=PaymentStatus.PENDING,
            placed_at=utcnow(),
            items=items,
            total_cents=order_total_cents(items),
        )
        self._db.add(order)
        self._db.flush()
        return order

    def _ensure_mutable(self, order: Order) -> None:
        if order.status in FINAL_ORDER_STATUSES:
            raise InvalidStateError(
                "Order",
                order.status,
                detail=f"Order is {order.status.lower()} and can no longer be changed",
                order_id=order.id,
            )

    def _pending_qr_order(self, order_id: int, ctx: RestaurantContext, verb: str) -> Order:
        order = self.get_entity(order_id, ctx)
        if order.source != OrderSource.QR:
            raise ValidationError(f"Only QR orders can be {verb}", order_id=order_id)
        if order.status != OrderStatus.PLACED:
            raise ValidationError(ErrorMessages.ORDER_NOT_PENDING, order_id=order_id, status=order.status)
        return order

    def _get_item(self, order: Order, item_id: int) -> OrderItem:
        for item in order.items:
            if item.id == item_id:
                return item
        raise NotFoundError("Order item", item_id, order_id=order.id)

    def _set_status(self, order: Order, status: str) -> None:
        order.status = status
        setattr(order, ORDER_STATUS_TIMESTAMPS[status], utcnow())

    def _cancel(self, order: Order, reason: str) -> None:
        self._set_status(order, OrderStatus.CANCELLED)
        order.cancel_reason = reason

    def _complete(self, order: Order) -> None:
        """Complete the order and roll it into the customer's stats."""
        self._set_status(order, OrderStatus.COMPLETED)
        if order.customer_id:
            customer = self._db.get(Customer, order.customer_id)
            if customer is not None:
                customer.total_orders += 1
                customer.total_spent_cents += order.total_cents
                customer.last_order_at = order.completed_at

    def _audit(self, ctx: RestaurantContext, order: Order, action: str, **values: Any) -> None:
        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.ORDER,
            entity_id=order.id,
            action=action,
            **values,
        )


def _is_pending_credit(method: str | None, status: str | None) -> bool:
    return method == PaymentMethod.CREDIT and status == PaymentStatus.PENDING
