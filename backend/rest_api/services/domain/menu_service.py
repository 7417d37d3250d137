"""
Menu Service - the public menu served by restaurant slug.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Category, Product, Restaurant
from rest_api.services.domain.product_service import discounted_price_cents
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import (
    PublicCategoryOutput,
    PublicMenuResponse,
    PublicProductOutput,
    PublicRestaurantOutput,
)

UNCATEGORIZED_NAME = "Other"


class MenuService:
    """
    Read-only public menu.

    Only active categories are listed, and within them only active,
    available products. Products without a category are grouped last.
    """

    def __init__(self, db: Session):
        self._db = db

    def get_restaurant(self, slug: str) -> Restaurant:
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

    def public_menu(self, slug: str) -> PublicMenuResponse:
        restaurant = self.get_restaurant(slug)

        categories = self._db.scalars(
            select(Category)
            .where(
                Category.restaurant_id == restaurant.id,
                Category.is_active.is_(True),
                Category.deleted_at.is_(None),
            )
            .order_by(Category.sort_order, Category.id)
        ).all()
        products = self._db.scalars(
            select(Product)
            .where(
                Product.restaurant_id == restaurant.id,
                Product.is_active.is_(True),
                Product.is_available.is_(True),
                Product.deleted_at.is_(None),
            )
            .order_by(Product.sort_order, Product.name, Product.id)
        ).all()

        by_category: dict[int | None, list[PublicProductOutput]] = {}
        for product in products:
            by_category.setdefault(product.category_id, []).append(self._product_output(product))

        sections = [
            PublicCategoryOutput(
                id=category.id,
                name=category.name,
                description=category.description,
                image_url=category.image_url,
                products=by_category.get(category.id, []),
            )
            for category in categories
            if by_category.get(category.id)
        ]
        listed = {category.id for category in categories}
        # Products whose category is missing or hidden are shown under "Other"
        orphans = [p for cid, items in by_category.items() if cid not in listed for p in items]
        if orphans:
            sections.append(PublicCategoryOutput(id=None, name=UNCATEGORIZED_NAME, products=orphans))

        return PublicMenuResponse(
            restaurant=PublicRestaurantOutput.model_validate(restaurant),
            categories=sections,
        )

    def _product_output(self, product: Product) -> PublicProductOutput:
        return PublicProductOutput(
            id=product.id,
            name=product.name,
            description=product.description,
            image_url=product.image_url,
            price_cents=product.price_cents,
            discount_percent=product.discount_percent,
            discounted_price_cents=discounted_price_cents(product.price_cents, product.discount_percent),
            is_veg=product.is_veg,
            preparation_time_minutes=product.preparation_time_minutes,
        )
