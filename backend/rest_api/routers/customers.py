"""
Customer management endpoints (OWNER/MANAGER).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.repositories import CustomerFilters
from rest_api.routers._common import Pagination, get_pagination, require_owner_or_manager
from rest_api.services.domain import CustomerService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    CustomerCreate,
    CustomerListResponse,
    CustomerOutput,
    CustomerTagsUpdate,
    CustomerUpdate,
)
from shared.utils.schemas import OrderOutput

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=CustomerListResponse)
def list_customers(
    search: str | None = Query(default=None, max_length=100, description="Name or phone"),
    tag: str | None = Query(default=None, max_length=30),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CustomerListResponse:
    filters = CustomerFilters(page=pagination.page, limit=pagination.limit, search=search, tag=tag)
    return CustomerService(db).list_page(ctx, filters)


@router.post("", response_model=CustomerOutput, status_code=status.HTTP_201_CREATED)
def create_customer(
    body: CustomerCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CustomerOutput:
    return CustomerService(db).create(body.model_dump(), ctx)


@router.get("/{customer_id}", response_model=CustomerOutput)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CustomerOutput:
    return CustomerService(db).get_by_id(customer_id, ctx)


@router.patch("/{customer_id}", response_model=CustomerOutput)
def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CustomerOutput:
    return CustomerService(db).update(customer_id, body.model_dump(exclude_unset=True), ctx)


@router.patch("/{customer_id}/tags", response_model=CustomerOutput)
def update_customer_tags(
    customer_id: int,
    body: CustomerTagsUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CustomerOutput:
    """Replace the customer's tags."""
    return CustomerService(db).update_tags(customer_id, body.tags, ctx)


@router.get("/{customer_id}/orders", response_model=list[OrderOutput])
def customer_orders(
    customer_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> list[OrderOutput]:
    return CustomerService(db).orders(customer_id, ctx)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    CustomerService(db).delete(customer_id, ctx)
