"""
Base Service Classes for Clean Architecture.

Provides abstract base classes for application services that:
- Use Repository for data access (not direct queries)
- Transform entities into output DTOs
- Handle business logic and orchestration
- Integrate with audit logging

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Usage:
    from rest_api.services.base_service import BaseCRUDService

    class CategoryService(BaseCRUDService[Category, CategoryOutput]):
        def __init__(self, db: Session):
            super().__init__(
                db=db,
                model=Category,
                output_schema=CategoryOutput,
                entity_name="Category",
                audit_entity=AuditEntity.CATEGORY,
            )
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Base
from rest_api.repositories import RestaurantRepository
from rest_api.services.audit import log_create, log_delete, log_update, serialize_model
from rest_api.services.permissions import RestaurantContext
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DatabaseError, NotFoundError, ValidationError
from shared.utils.validators import validate_image_url

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseService(ABC, Generic[ModelT]):
    """
    Abstract base service for domain operations.

    Subclasses implement specific business logic while this class
    provides common infrastructure (repository access, commits).
    """

    def __init__(self, db: Session, model: Type[ModelT]):
        self._db = db
        self._model = model
        self._repo = RestaurantRepository(model, db)

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @property
    def repo(self) -> RestaurantRepository[ModelT]:
        """Repository for data access."""
        return self._repo

    def _commit(self, operation: str, **log_context: Any) -> None:
        """Commit the unit of work, turning driver failures into DatabaseError."""
        try:
            safe_commit(self._db)
        except SQLAlchemyError as e:
            logger.error(f"Failed to {operation}", error=str(e), **log_context)
            raise DatabaseError(operation) from e


class BaseCRUDService(BaseService[ModelT], Generic[ModelT, OutputT]):
    """
    Base service for restaurant-scoped entities with CRUD operations.

    Provides standard CRUD methods that can be overridden for
    custom business logic. Uses Repository for all data access.

    Responsibilities:
    - Data access via Repository (not direct queries)
    - DTO transformation via output schema
    - Audit trail for mutations (same transaction as the change)
    - Business rule validation hooks
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        audit_entity: str | None = None,
        supports_soft_delete: bool = True,
        image_url_fields: set[str] | None = None,
    ):
        super().__init__(db, model)
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._audit_entity = audit_entity
        self._supports_soft_delete = supports_soft_delete
        self._image_url_fields = image_url_fields if image_url_fields is not None else {"image_url"}

    @property
    def entity_name(self) -> str:
        """Human-readable entity name for messages."""
        return self._entity_name

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_entity(self, entity_id: int, ctx: RestaurantContext) -> ModelT:
        """
        Get raw entity (disabled rows included, soft-deleted rows hidden).

        Raises:
            NotFoundError: If entity not found in the restaurant.
        """
        entity = self._repo.find_by_id(
            entity_id, ctx.tenant_id, ctx.restaurant_id, include_inactive=True
        )
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, restaurant_id=ctx.restaurant_id)
        return entity

    def get_by_id(self, entity_id: int, ctx: RestaurantContext) -> OutputT:
        """Get entity by ID as output DTO."""
        return self.to_output(self.get_entity(entity_id, ctx))

    def list_all(
        self,
        ctx: RestaurantContext,
        *,
        include_inactive: bool = True,
        order_by: Any | None = None,
    ) -> list[OutputT]:
        """List entities of the active restaurant."""
        entities = self._repo.find_all(
            ctx.tenant_id,
            ctx.restaurant_id,
            include_inactive=include_inactive,
            order_by=order_by,
        )
        return [self.to_output(e) for e in entities]

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, data: dict[str, Any], ctx: RestaurantContext) -> OutputT:
        """
        Create new entity in the active restaurant.

        Raises:
            ValidationError: If data is invalid.
            DatabaseError: If creation fails.
        """
        self._validate_create(data, ctx)
        data = self._validate_image_urls(data)

        data["tenant_id"] = ctx.tenant_id
        data["restaurant_id"] = ctx.restaurant_id

        entity = self._model(**data)
        entity.set_created_by(ctx.user_id, ctx.email)
        self._db.add(entity)
        self._db.flush()

        if self._audit_entity:
            log_create(self._db, ctx, self._audit_entity, entity)

        self._commit(f"create {self._entity_name.lower()}", restaurant_id=ctx.restaurant_id)
        self._db.refresh(entity)

        self._after_create(entity, ctx)
        return self.to_output(entity)

    def update(self, entity_id: int, data: dict[str, Any], ctx: RestaurantContext) -> OutputT:
        """
        Update existing entity.

        Raises:
            NotFoundError: If entity not found.
            ValidationError: If data is invalid.
            DatabaseError: If update fails.
        """
        entity = self.get_entity(entity_id, ctx)

        self._validate_update(entity, data, ctx)
        data = self._validate_image_urls(data)

        old_values = serialize_model(entity)

        columns = self._model.__table__.columns
        for field_name, value in data.items():
            if not hasattr(entity, field_name):
                continue
            # Explicit nulls on required columns are ignored
            if value is None and field_name in columns and not columns[field_name].nullable:
                continue
            setattr(entity, field_name, value)

        entity.set_updated_by(ctx.user_id, ctx.email)

        if self._audit_entity:
            log_update(self._db, ctx, self._audit_entity, entity, old_values)

        self._commit(f"update {self._entity_name.lower()}", entity_id=entity_id)
        self._db.refresh(entity)

        self._after_update(entity, old_values, ctx)
        return self.to_output(entity)

    def delete(self, entity_id: int, ctx: RestaurantContext) -> None:
        """
        Delete entity (soft delete if supported).

        Raises:
            NotFoundError: If entity not found.
        """
        entity = self.get_entity(entity_id, ctx)

        self._validate_delete(entity, ctx)

        if self._audit_entity:
            log_delete(self._db, ctx, self._audit_entity, entity)

        if self._supports_soft_delete:
            entity.soft_delete(ctx.user_id, ctx.email)
        else:
            self._db.delete(entity)

        self._commit(f"delete {self._entity_name.lower()}", entity_id=entity_id)
        logger.info(
            f"{self._entity_name} deleted",
            entity_id=entity_id,
            restaurant_id=ctx.restaurant_id,
            soft=self._supports_soft_delete,
        )

    # =========================================================================
    # Transformation
    # =========================================================================

    def to_output(self, entity: ModelT) -> OutputT:
        """
        Convert entity to output DTO.

        Override this method for custom transformation logic.
        """
        return self._output_schema.model_validate(entity)

    # =========================================================================
    # Validation Hooks (override in subclasses)
    # =========================================================================

    def _validate_create(self, data: dict[str, Any], ctx: RestaurantContext) -> None:
        """
        Validate data before create.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any], ctx: RestaurantContext) -> None:
        """
        Validate data before update.

        Raises:
            ValidationError: If validation fails.
        """
        pass

    def _validate_delete(self, entity: ModelT, ctx: RestaurantContext) -> None:
        """Validate before delete."""
        pass

    # =========================================================================
    # Lifecycle Hooks (override in subclasses)
    # =========================================================================

    def _after_create(self, entity: ModelT, ctx: RestaurantContext) -> None:
        """Hook called after entity creation."""
        pass

    def _after_update(self, entity: ModelT, old_values: dict[str, Any], ctx: RestaurantContext) -> None:
        """Hook called after entity update."""
        pass

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _validate_image_urls(self, data: dict[str, Any]) -> dict[str, Any]:
        """Validate and sanitize image URL fields."""
        for field_name in self._image_url_fields:
            if field_name in data and data[field_name]:
                try:
                    data[field_name] = validate_image_url(data[field_name])
                except ValueError as e:
                    raise ValidationError(str(e), field=field_name)
        return data
