"""
Hall and Table Services - restaurant floor layout.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from rest_api.models import Hall, Order, Restaurant, RestaurantTable
from rest_api.repositories import OrderRepository
from rest_api.services.audit import log_create
from rest_api.services.base_service import BaseCRUDService
from rest_api.services.permissions import RestaurantContext
from shared.config.constants import AuditEntity
from shared.config.settings import settings
from shared.utils.admin_schemas import HallOutput, TableBulkCreate, TableOutput, TableQRCodeOutput
from shared.utils.exceptions import DuplicateEntityError, ValidationError


class HallService(BaseCRUDService[Hall, HallOutput]):
    """Service for dining halls. Halls are hard-deleted; their tables stay, unassigned."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Hall,
            output_schema=HallOutput,
            entity_name="Hall",
            audit_entity=AuditEntity.RESTAURANT_HALL,
            supports_soft_delete=False,
            image_url_fields=set(),
        )

    def _validate_delete(self, entity: Hall, ctx: RestaurantContext) -> None:
        self._db.execute(
            update(RestaurantTable).where(RestaurantTable.hall_id == entity.id).values(hall_id=None)
        )
        self._db.execute(update(Order).where(Order.hall_id == entity.id).values(hall_id=None))


class TableService(BaseCRUDService[RestaurantTable, TableOutput]):
    """
    Service for table management.

    Business rules:
    - table_number is unique among the restaurant's tables
    - hall_id must reference a hall of the same restaurant
    - Deleting a table keeps its orders, detached from the table
    """

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=RestaurantTable,
            output_schema=TableOutput,
            entity_name="Table",
            audit_entity=AuditEntity.RESTAURANT_TABLE,
            supports_soft_delete=False,
            image_url_fields=set(),
        )
        self._orders = OrderRepository(db)
        self._open_table_ids: set[int] | None = None

    # =========================================================================
    # Query Methods
    # =========================================================================

    def list_with_status(self, ctx: RestaurantContext, hall_id: int | None = None) -> list[TableOutput]:
        """All tables with their open-order flag, ordered by table number."""
        entities = self._repo.find_all(ctx.tenant_id, ctx.restaurant_id, include_inactive=True)
        if hall_id is not None:
            entities = [e for e in entities if e.hall_id == hall_id]
        self._open_table_ids = self._orders.open_table_ids(ctx.restaurant_id)
        try:
            return [self.to_output(e) for e in sorted(entities, key=_table_sort_key)]
        finally:
            self._open_table_ids = None

    def to_output(self, entity: RestaurantTable) -> TableOutput:
        open_ids = self._open_table_ids
        if open_ids is None:
            open_ids = self._orders.open_table_ids(entity.restaurant_id)
        return TableOutput(
            id=entity.id,
            restaurant_id=entity.restaurant_id,
            hall_id=entity.hall_id,
            table_number=entity.table_number,
            seats=entity.seats,
            is_active=entity.is_active,
            has_open_order=entity.id in open_ids,
        )

    def qr_code(self, table_id: int, ctx: RestaurantContext) -> TableQRCodeOutput:
        """Public ordering link encoded in the table's QR code."""
        table = self.get_entity(table_id, ctx)
        restaurant = self._db.get(Restaurant, ctx.restaurant_id)
        base_url = settings.public_menu_base_url.rstrip("/")
        return TableQRCodeOutput(
            table_id=table.id,
            table_number=table.table_number,
            url=f"{base_url}/{restaurant.slug}?table={table.id}",
        )

    # =========================================================================
    # Write Methods
    # =========================================================================

    def bulk_create(self, body: TableBulkCreate, ctx: RestaurantContext) -> list[TableOutput]:
        """
        Create ``count`` tables named ``{prefix}{n}``, skipping numbers that
        already exist.
        """
        if body.hall_id is not None:
            self._validate_hall(body.hall_id, ctx)

        existing = self._existing_numbers(ctx)
        created: list[RestaurantTable] = []
        n = 1
        while len(created) < body.count:
            number = f"{body.prefix}{n}"
            n += 1
            if number.lower() in existing:
                continue
            table = RestaurantTable(
                tenant_id=ctx.tenant_id,
                restaurant_id=ctx.restaurant_id,
                hall_id=body.hall_id,
                table_number=number,
                seats=body.seats,
            )
            table.set_created_by(ctx.user_id, ctx.email)
            self._db.add(table)
            created.append(table)

        self._db.flush()
        for table in created:
            log_create(self._db, ctx, AuditEntity.RESTAURANT_TABLE, table)
        self._commit("bulk create tables", restaurant_id=ctx.restaurant_id, count=len(created))
        return [self.to_output(t) for t in created]

    # =========================================================================
    # Validation Hooks
    # =========================================================================

    def _existing_numbers(self, ctx: RestaurantContext, exclude_id: int | None = None) -> set[str]:
        rows = self._db.execute(
            select(RestaurantTable.id, RestaurantTable.table_number).where(
                RestaurantTable.restaurant_id == ctx.restaurant_id
            )
        ).all()
        return {number.lower() for table_id, number in rows if table_id != exclude_id}

    def _validate_hall(self, hall_id: int, ctx: RestaurantContext) -> None:
        hall = self._db.scalar(
            select(Hall).where(Hall.id == hall_id, Hall.restaurant_id == ctx.restaurant_id)
        )
        if hall is None:
            raise ValidationError("Invalid hall_id", field="hall_id", hall_id=hall_id)

    def _validate_create(self, data: dict[str, Any], ctx: RestaurantContext) -> None:
        data["table_number"] = data["table_number"].strip()
        if data["table_number"].lower() in self._existing_numbers(ctx):
            raise DuplicateEntityError("Table number", data["table_number"])
        if data.get("hall_id") is not None:
            self._validate_hall(data["hall_id"], ctx)

    def _validate_update(self, entity: RestaurantTable, data: dict[str, Any], ctx: RestaurantContext) -> None:
        if data.get("table_number") is not None:
            data["table_number"] = data["table_number"].strip()
            if data["table_number"].lower() in self._existing_numbers(ctx, exclude_id=entity.id):
                raise DuplicateEntityError("Table number", data["table_number"])
        elif "table_number" in data:
            data.pop("table_number")
        if data.get("hall_id") is not None:
            self._validate_hall(data["hall_id"], ctx)

    def _validate_delete(self, entity: RestaurantTable, ctx: RestaurantContext) -> None:
        self._db.execute(update(Order).where(Order.table_id == entity.id).values(table_id=None))


def _table_sort_key(table: RestaurantTable) -> tuple:
    # "T2" before "T10"
    digits = "".join(ch for ch in table.table_number if ch.isdigit())
    prefix = table.table_number.rstrip("0123456789")
    return (table.hall_id or 0, prefix.lower(), int(digits) if digits else 0, table.table_number)
