"""
Customer Repository - Data access for restaurant customers.
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import String, cast, func, or_, select

from rest_api.models import Customer
from shared.utils.validators import escape_like_pattern
from .base import RepositoryFilters, RestaurantRepository


@dataclass
class CustomerFilters(RepositoryFilters):
    """Filters specific to customers."""

    tag: str | None = None


class CustomerRepository(RestaurantRepository[Customer]):
    """Repository for Customer entities."""

    def __init__(self, session):
        super().__init__(Customer, session)

    def find_by_phone(
        self,
        tenant_id: int,
        restaurant_id: int,
        phone: str,
        *,
        include_deleted: bool = False,
    ) -> Customer | None:
        """Phone is unique per restaurant, deleted rows included."""
        query = self._restaurant_query(tenant_id, restaurant_id).where(Customer.phone == phone)
        query = self._apply_active_filter(query, include_inactive=True, include_deleted=include_deleted)
        return self._session.scalar(query)

    def find_page(
        self,
        tenant_id: int,
        restaurant_id: int,
        filters: CustomerFilters,
    ) -> tuple[Sequence[Customer], int]:
        query = self._apply_active_filter(
            self._restaurant_query(tenant_id, restaurant_id), include_inactive=True
        )
        if filters.search:
            pattern = f"%{escape_like_pattern(filters.search)}%"
            query = query.where(
                or_(
                    Customer.name.ilike(pattern, escape="\\"),
                    Customer.phone.like(pattern, escape="\\"),
                )
            )
        if filters.tag:
            # tags is a JSON array; match the quoted element in its text form
            tag_pattern = f'%"{escape_like_pattern(filters.tag)}"%'
            query = query.where(cast(Customer.tags, String).like(tag_pattern, escape="\\"))

        total = self._session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        ) or 0
        customers = self._session.scalars(
            query.order_by(Customer.created_at.desc(), Customer.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        ).all()
        return customers, total

    def top_credit(self, tenant_id: int, restaurant_id: int, limit: int) -> Sequence[Customer]:
        """Customers owing money, highest balance first."""
        query = self._apply_active_filter(
            self._restaurant_query(tenant_id, restaurant_id), include_inactive=True
        )
        return self._session.scalars(
            query.where(Customer.credit_balance_cents > 0)
            .order_by(Customer.credit_balance_cents.desc(), Customer.id)
            .limit(limit)
        ).all()


def get_customer_repository(db) -> CustomerRepository:
    """Factory function for dependency injection."""
    return CustomerRepository(db)
