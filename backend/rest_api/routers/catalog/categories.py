"""
Category management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager, require_staff
from rest_api.services.domain import CategoryService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import (
    CategoryCreate,
    CategoryOutput,
    CategoryReorderItem,
    CategoryUpdate,
)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOutput])
def list_categories(
    include_inactive: bool = True,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> list[CategoryOutput]:
    """Categories of the active restaurant by sort order."""
    return CategoryService(db).list_ordered(ctx, include_inactive=include_inactive)


@router.post("", response_model=CategoryOutput, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CategoryOutput:
    return CategoryService(db).create(body.model_dump(), ctx)


@router.patch("/reorder", response_model=list[CategoryOutput])
def reorder_categories(
    body: list[CategoryReorderItem],
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> list[CategoryOutput]:
    """Apply [{id, sort_order}] in one transaction."""
    return CategoryService(db).reorder(body, ctx)


@router.get("/{category_id}", response_model=CategoryOutput)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_staff),
) -> CategoryOutput:
    return CategoryService(db).get_by_id(category_id, ctx)


@router.patch("/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> CategoryOutput:
    return CategoryService(db).update(category_id, body.model_dump(exclude_unset=True), ctx)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    """Soft delete a category. Its products become uncategorized."""
    CategoryService(db).delete(category_id, ctx)
