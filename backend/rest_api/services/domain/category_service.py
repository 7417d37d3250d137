"""
Category Service - menu sections of a restaurant.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.services.audit import log_change
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditAction, AuditEntity
from shared.utils.admin_schemas import CategoryOutput, CategoryReorderItem
from shared.utils.exceptions import NotFoundError, ValidationError


class CategoryService(BaseCRUDService[Category, CategoryOutput]):
    """
    Service for category management.

    Business rules:
    - New categories go to the end unless a sort_order is given
    - Deleting a category leaves its products uncategorized
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Category",
            audit_entity=AuditEntity.CATEGORY,
        )

    def list_ordered(self, ctx: RestaurantContext, *, include_inactive: bool = True) -> list[CategoryOutput]:
        entities = self._repo.find_all(
            ctx.tenant_id,
            ctx.restaurant_id,
            include_inactive=include_inactive,
            order_by=Category.sort_order,
        )
        return [self.to_output(e) for e in entities]

    def reorder(self, items: list[CategoryReorderItem], ctx: RestaurantContext) -> list[CategoryOutput]:
        """Apply a batch of sort_order changes in one transaction."""
        if not items:
            raise ValidationError("No categories to reorder")

        ids = [item.id for item in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("Duplicate category ids in reorder request")

        categories = {
            c.id: c
            for c in self._repo.find_by_ids(ids, ctx.tenant_id, ctx.restaurant_id, include_inactive=True)
        }
        missing = [i for i in ids if i not in categories]
        if missing:
            raise NotFoundError("Category", missing[0], restaurant_id=ctx.restaurant_id)

        for item in items:
            category = categories[item.id]
            category.sort_order = item.sort_order
            category.set_updated_by(ctx.user_id, ctx.email)

        log_change(
            self._db,
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            user_id=ctx.user_id,
            user_email=ctx.email,
            entity_type=AuditEntity.CATEGORY,
            entity_id=ids[0],
            action=AuditAction.UPDATE,
            metadata={"reorder": [item.model_dump() for item in items]},
        )
        self._commit("reorder categories", restaurant_id=ctx.restaurant_id)
        return self.list_ordered(ctx)

    def _validate_create(self, data: dict[str, Any], ctx: RestaurantContext) -> None:
        if data.get("sort_order") is None:
            max_order = self._db.scalar(
                select(func.max(Category.sort_order)).where(
                    Category.restaurant_id == ctx.restaurant_id,
                    Category.deleted_at.is_(None),
                )
            )
            data["sort_order"] = (max_order or 0) + 1

    def _validate_delete(self, entity: Category, ctx: RestaurantContext) -> None:
        self._db.execute(
            update(Product)
            .where(Product.category_id == entity.id)
            .values(category_id=None)
        )
