"""
Staff management endpoints (OWNER/MANAGER).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rest_api.routers._common import require_owner_or_manager
from rest_api.services.domain import StaffService
from rest_api.services.permissions import RestaurantContext
from shared.infrastructure.db import get_db
from shared.utils.admin_schemas import StaffCreate, StaffOutput, StaffUpdate

router = APIRouter(prefix="/staff", tags=["restaurant-staff"])


@router.get("", response_model=list[StaffOutput])
def list_staff(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> list[StaffOutput]:
    return StaffService(db).list_for_restaurant(ctx)


@router.post("", response_model=StaffOutput, status_code=status.HTTP_201_CREATED)
def create_staff(
    body: StaffCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> StaffOutput:
    """Create a MANAGER (owner only) or WAITER in the active restaurant."""
    return StaffService(db).create(body, ctx)


@router.get("/{staff_id}", response_model=StaffOutput)
def get_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> StaffOutput:
    return StaffService(db).get_by_id(staff_id, ctx)


@router.patch("/{staff_id}", response_model=StaffOutput)
def update_staff(
    staff_id: int,
    body: StaffUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> StaffOutput:
    return StaffService(db).update(staff_id, body, ctx)


@router.patch("/{staff_id}/toggle", response_model=StaffOutput)
def toggle_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> StaffOutput:
    """Enable or disable a staff member."""
    return StaffService(db).toggle_active(staff_id, ctx)


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff(
    staff_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(require_owner_or_manager),
) -> None:
    """Soft delete a staff member."""
    StaffService(db).delete(staff_id, ctx)
