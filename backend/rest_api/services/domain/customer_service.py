"""
Customer Service - restaurant customers identified by phone.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Customer
from rest_api.repositories import CustomerFilters, CustomerRepository, OrderRepository
from rest_api.services.audit import log_change, serialize_model
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditAction, AuditEntity
from shared.utils.admin_schemas import CustomerListResponse, CustomerOutput
from shared.utils.exceptions import DuplicateEntityError, ValidationError
from shared.utils.schemas import OrderOutput, PageInfo
from shared.utils.validators import validate_phone

MAX_TAG_LENGTH = 30


def normalize_tags(tags: list[str]) -> list[str]:
    """Trimmed, de-duplicated (case-insensitive) tags in input order."""
    seen: set[str] = set()
    result = []
    for tag in tags:
        tag = tag.strip()[:MAX_TAG_LENGTH]
        if tag and tag.lower() not in seen:
            seen.add(tag.lower())
            result.append(tag)
    return result


def upsert_customer(
    db: Session,
    *,
    tenant_id: int,
    restaurant_id: int,
    name: str,
    phone: str,
) -> Customer:
    """
    Find the restaurant's customer with this phone or create one.
    A soft-deleted customer placing an order is restored. Not committed.
    """
    repo = CustomerRepository(db)
    customer = repo.find_by_phone(tenant_id, restaurant_id, phone, include_deleted=True)
    if customer is None:
        customer = Customer(
            tenant_id=tenant_id,
            restaurant_id=restaurant_id,
            name=name,
            phone=phone,
            tags=[],
        )
        db.add(customer)
        db.flush()
        return customer

    if customer.deleted_at is not None:
        customer.restore(None, None)
    elif not customer.is_active:
        customer.is_active = True
    if name and name != "Guest":
        customer.name = name
    return customer


class CustomerService(BaseCRUDService[Customer, CustomerOutput]):
    """
    Service for customer management.

    Business rules:
    - Phone is unique per restaurant
    - Re-creating a deleted customer's phone restores that record
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Customer,
            output_schema=CustomerOutput,
            entity_name="Customer",
            audit_entity=AuditEntity.CUSTOMER,
            image_url_fields=set(),
        )
        self._customers = CustomerRepository(db)

    def list_page(self, ctx: RestaurantContext, filters: CustomerFilters) -> CustomerListResponse:
        customers, total = self._customers.find_page(ctx.tenant_id, ctx.restaurant_id, filters)
        return CustomerListResponse(
            customers=[self.to_output(c) for c in customers],
            pagination=PageInfo(
                page=filters.page,
                limit=filters.limit,
                total=total,
                total_pages=(total + filters.limit - 1) // filters.limit,
            ),
        )

    def create(self, data: dict[str, Any], ctx: RestaurantContext) -> CustomerOutput:
        phone = self._validate_phone(data["phone"])
        existing = self._customers.find_by_phone(
            ctx.tenant_id, ctx.restaurant_id, phone, include_deleted=True
        )
        if existing is None:
            data["phone"] = phone
            return super().create(data, ctx)

        if existing.deleted_at is None:
            raise DuplicateEntityError("Customer with phone", phone)

        # Bring the deleted record back with the new details
        existing.restore(ctx.user_id, ctx.email)
        existing.name = data["name"]
        existing.email = data.get("email")
        existing.notes = data.get("notes")
        existing.tags = normalize_tags(data.get("tags") or [])
        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.CUSTOMER,
            entity_id=existing.id,
            action=AuditAction.CREATE,
            new_values=serialize_model(existing),
            metadata={"restored": True},
        )
        self._commit("restore customer", customer_id=existing.id)
        self._db.refresh(existing)
        return self.to_output(existing)

    def update_tags(self, customer_id: int, tags: list[str], ctx: RestaurantContext) -> CustomerOutput:
        return self.update(customer_id, {"tags": tags}, ctx)

    def orders(self, customer_id: int, ctx: RestaurantContext, limit: int = 50) -> list[OrderOutput]:
        customer = self.get_entity(customer_id, ctx)
        orders = OrderRepository(self._db).find_for_customer(
            ctx.tenant_id, ctx.restaurant_id, customer_id=customer.id, limit=limit
        )
        return [OrderOutput.model_validate(o) for o in orders]

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _validate_phone(self, phone: str) -> str:
        try:
            return validate_phone(phone)
        except ValueError as e:
            raise ValidationError(str(e), field="phone")

    def _validate_create(self, data: dict[str, Any], ctx: RestaurantContext) -> None:
        data["name"] = data["name"].strip()
        data["tags"] = normalize_tags(data.get("tags") or [])
        if data.get("email"):
            data["email"] = data["email"].lower()

    def _validate_update(self, entity: Customer, data: dict[str, Any], ctx: RestaurantContext) -> None:
        if data.get("phone"):
            phone = self._validate_phone(data["phone"])
            if phone != entity.phone:
                other = self._customers.find_by_phone(
                    ctx.tenant_id, ctx.restaurant_id, phone, include_deleted=True
                )
                if other is not None:
                    raise DuplicateEntityError("Customer with phone", phone)
            data["phone"] = phone
        if "tags" in data:
            data["tags"] = normalize_tags(data["tags"] or [])
        if data.get("name"):
            data["name"] = data["name"].strip()
        if data.get("email"):
            data["email"] = data["email"].lower()
