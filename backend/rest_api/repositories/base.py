"""
Repository Pattern for database access.

Provides a clean abstraction layer between business logic and data access,
with built-in multi-tenant and per-restaurant isolation.

Usage:
    from rest_api.repositories import TenantRepository, RestaurantRepository

    tenant_repo = TenantRepository(Restaurant, db)
    restaurants = tenant_repo.find_all(tenant_id=1)

    product_repo = RestaurantRepository(Product, db)
    products = product_repo.find_all(tenant_id=1, restaurant_id=5)
    product = product_repo.find_by_id(42, tenant_id=1, restaurant_id=5)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import exists as sql_exists, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from rest_api.models import Base
from shared.config.constants import Limits

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class RepositoryFilters:
    """Base filters for paginated repository queries."""

    page: int = 1
    limit: int = Limits.DEFAULT_PAGE_SIZE
    search: str | None = None

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.page = max(1, self.page)
        if self.search:
            self.search = self.search.strip()[:Limits.MAX_SEARCH_TERM_LENGTH] or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common database operations.

    Soft-deleted rows (``deleted_at`` set) are always hidden unless
    ``include_deleted`` is passed; disabled rows (``is_active`` False) are
    hidden unless ``include_inactive`` is passed.
    """

    def __init__(self, model: type[ModelT], session: Session):
        self._model = model
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        """The SQLAlchemy model class."""
        return self._model

    @property
    def session(self) -> Session:
        """The database session."""
        return self._session

    def _base_query(self) -> Select:
        """Create base select query."""
        return select(self._model)

    def _apply_active_filter(
        self,
        query: Select,
        include_inactive: bool,
        include_deleted: bool = False,
    ) -> Select:
        """Hide soft-deleted and, unless asked, disabled rows."""
        if not include_deleted and hasattr(self._model, "deleted_at"):
            query = query.where(self._model.deleted_at.is_(None))
        if not include_inactive and hasattr(self._model, "is_active"):
            query = query.where(self._model.is_active.is_(True))
        return query

    def _apply_options(self, query: Select, options: list[Any] | None) -> Select:
        """Apply eager loading options."""
        if options:
            query = query.options(*options)
        return query

    def _apply_window(
        self,
        query: Select,
        limit: int | None,
        offset: int | None,
        order_by: Any | None,
    ) -> Select:
        if order_by is not None:
            query = query.order_by(order_by)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query

    def find_by_id(
        self,
        entity_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """
        Find entity by primary key.

        Args:
            entity_id: The primary key value.
            options: SQLAlchemy loader options (selectinload, joinedload).
            include_inactive: Include disabled entities.

        Returns:
            Entity or None if not found.
        """
        query = self._base_query().where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """Find all entities."""
        query = self._base_query()
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, limit, offset, order_by)
        return self._session.scalars(query).all()

    def count(self, *, include_inactive: bool = False) -> int:
        """Count all entities."""
        query = self._apply_active_filter(
            select(func.count()).select_from(self._model), include_inactive
        )
        return self._session.scalar(query) or 0

    def add(self, entity: ModelT) -> ModelT:
        """Add entity to session (not committed)."""
        self._session.add(entity)
        return entity

    def add_all(self, entities: Sequence[ModelT]) -> Sequence[ModelT]:
        """Add multiple entities to session (not committed)."""
        self._session.add_all(entities)
        return entities

    def delete(self, entity: ModelT) -> None:
        """Delete entity from session (not committed)."""
        self._session.delete(entity)

    def refresh(self, entity: ModelT) -> ModelT:
        """Refresh entity from database."""
        self._session.refresh(entity)
        return entity


class TenantRepository(BaseRepository[ModelT]):
    """
    Repository with automatic multi-tenant isolation.

    All queries are filtered by tenant_id to ensure data isolation.
    The model must have a `tenant_id` column.

    Usage:
        repo = TenantRepository(Restaurant, db)
        restaurants = repo.find_all(tenant_id=1)
    """

    def _tenant_query(self, tenant_id: int) -> Select:
        """Create tenant-filtered base query."""
        if not hasattr(self._model, "tenant_id"):
            raise AttributeError(
                f"Model {self._model.__name__} does not have tenant_id column. "
                "Use BaseRepository instead."
            )
        return self._base_query().where(self._model.tenant_id == tenant_id)

    def find_by_id(
        self,
        entity_id: int,
        tenant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """
        Find entity by ID within tenant scope.

        Returns:
            Entity or None if not found or wrong tenant.
        """
        query = self._tenant_query(tenant_id).where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        tenant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """Find all entities within tenant scope."""
        query = self._tenant_query(tenant_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, limit, offset, order_by)
        return self._session.scalars(query).all()

    def count(self, tenant_id: int, *, include_inactive: bool = False) -> int:
        """Count entities within tenant scope."""
        query = (
            select(func.count())
            .select_from(self._model)
            .where(self._model.tenant_id == tenant_id)
        )
        query = self._apply_active_filter(query, include_inactive)
        return self._session.scalar(query) or 0

    def exists(self, entity_id: int, tenant_id: int) -> bool:
        """Check if entity exists within tenant scope."""
        query = select(
            sql_exists().where(
                self._model.id == entity_id,
                self._model.tenant_id == tenant_id,
            )
        )
        return self._session.scalar(query) or False


class RestaurantRepository(TenantRepository[ModelT]):
    """
    Repository for restaurant-scoped entities.

    Extends TenantRepository with restaurant filtering.
    The model must have both `tenant_id` and `restaurant_id` columns.

    Usage:
        repo = RestaurantRepository(RestaurantTable, db)
        tables = repo.find_all(tenant_id=1, restaurant_id=5)
    """

    def _restaurant_query(self, tenant_id: int, restaurant_id: int) -> Select:
        """Create restaurant-filtered query."""
        if not hasattr(self._model, "restaurant_id"):
            raise AttributeError(
                f"Model {self._model.__name__} does not have restaurant_id column. "
                "Use TenantRepository instead."
            )
        return self._tenant_query(tenant_id).where(self._model.restaurant_id == restaurant_id)

    def find_by_id(
        self,
        entity_id: int,
        tenant_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """Find entity by ID within restaurant scope."""
        query = self._restaurant_query(tenant_id, restaurant_id).where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        tenant_id: int,
        restaurant_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        offset: int | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities within restaurant scope.

        Args:
            tenant_id: The tenant ID for isolation.
            restaurant_id: The restaurant ID for filtering.
            options: SQLAlchemy loader options.
            include_inactive: Include disabled entities.
            limit: Maximum results.
            offset: Skip count.
            order_by: Order expression.
        """
        query = self._restaurant_query(tenant_id, restaurant_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        query = self._apply_window(query, limit, offset, order_by)
        return self._session.scalars(query).all()

    def find_by_ids(
        self,
        entity_ids: Sequence[int],
        tenant_id: int,
        restaurant_id: int,
        *,
        include_inactive: bool = False,
    ) -> Sequence[ModelT]:
        """Find multiple entities by IDs (may return fewer than requested)."""
        if not entity_ids:
            return []
        query = self._restaurant_query(tenant_id, restaurant_id).where(
            self._model.id.in_(entity_ids)
        )
        query = self._apply_active_filter(query, include_inactive)
        return self._session.scalars(query).all()

    def count(
        self,
        tenant_id: int,
        restaurant_id: int,
        *,
        include_inactive: bool = False,
    ) -> int:
        """Count entities within restaurant scope."""
        query = (
            select(func.count())
            .select_from(self._model)
            .where(
                self._model.tenant_id == tenant_id,
                self._model.restaurant_id == restaurant_id,
            )
        )
        query = self._apply_active_filter(query, include_inactive)
        return self._session.scalar(query) or 0
