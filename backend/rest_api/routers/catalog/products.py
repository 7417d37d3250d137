"""
Product management endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager, require_staff
from rest_api.services.domain import ProductService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import ProductCreate, ProductOutput, ProductUpdate

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=list[ProductOutput])
def list_products(
    category_id: int | None = None,
    is_available: bool | None = None,
    search: str | None = Query(default=None, max_length=100),
    include_inactive: bool = True,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> list[ProductOutput]:
    return ProductService(db).list_filtered(
        ctx,
        category_id=category_id,
        is_available=is_available,
        search=search,
        include_inactive=include_inactive,
    )


@router.post("", response_model=ProductOutput, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> ProductOutput:
    return ProductService(db).create(body.model_dump(), ctx)


@router.get("/{product_id}", response_model=ProductOutput)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> ProductOutput:
    return ProductService(db).get_by_id(product_id, ctx)


@router.patch("/{product_id}", response_model=ProductOutput)
def update_product(
    product_id: int,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> ProductOutput:
    return ProductService(db).update(product_id, body.model_dump(exclude_unset=True), ctx)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    ProductService(db).delete(product_id, ctx)
