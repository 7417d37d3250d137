"""
Product Service - menu items and their pricing.

Usage:
    from rest_api.services.domain import ProductService

    service = ProductService(db)
    products = service.list_filtered(ctx, category_id=3, search="paneer")
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditEntity
from shared.utils.admin_schemas import ProductOutput
from shared.utils.exceptions import ValidationError
from shared.utils.validators import escape_like_pattern, sanitize_search_term


def discounted_price_cents(price_cents: int, discount_percent: int | None) -> int:
    """
    Price after a percentage discount, rounded half up to the cent.

    >>> discounted_price_cents(999, 10)
    899
    """
    discount = min(max(discount_percent or 0, 0), 100)
    return (price_cents * (100 - discount) + 50) // 100


class ProductService(BaseCRUDService[Product, ProductOutput]):
    """
    Service for product management.

    Business rules:
    - A product's category must belong to the same restaurant
    - Soft delete keeps historical order lines readable
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Product,
            output_schema=ProductOutput,
            entity_name="Product",
            audit_entity=AuditEntity.PRODUCT,
        )

    def list_filtered(
        self,
        ctx: RestaurantContext,
        *,
        category_id: int | None = None,
        is_available: bool | None = None,
        search: str | None = None,
        include_inactive: bool = True,
    ) -> list[ProductOutput]:
        query = self._repo._restaurant_query(ctx.tenant_id, ctx.restaurant_id)
        query = self._repo._apply_active_filter(query, include_inactive)

        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if is_available is not None:
            query = query.where(Product.is_available.is_(is_available))
        term = sanitize_search_term(search or "")
        if term:
            query = query.where(Product.name.ilike(f"%{escape_like_pattern(term)}%", escape="\\"))

        entities = self._db.scalars(query.order_by(Product.sort_order, Product.name, Product.id)).all()
        return [self.to_output(e) for e in entities]

    def _validate_category(self, category_id: int | None, ctx: RestaurantContext) -> None:
        if category_id is None:
            return
        category = self._db.scalar(
            select(Category).where(
                Category.id == category_id,
                Category.restaurant_id == ctx.restaurant_id,
                Category.deleted_at.is_(None),
            )
        )
        if category is None:
            raise ValidationError("Invalid category_id", field="category_id", category_id=category_id)

    def _validate_create(self, data: dict[str, Any], ctx: RestaurantContext) -> None:
        self._validate_category(data.get("category_id"), ctx)

    def _validate_update(self, entity: Product, data: dict[str, Any], ctx: RestaurantContext) -> None:
        if "category_id" in data:
            self._validate_category(data["category_id"], ctx)
