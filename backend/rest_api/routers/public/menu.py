"""
Public menu and customer ordering endpoints.
The restaurant is addressed by its slug; no staff token is involved.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from rest_api.services.domain import MenuService, OrderService
from shared.infrastructure.db import get_db
from shared.security.rate_limit import PUBLIC_ORDER_LIMIT_RULE, limiter
from shared.utils.schemas import PublicMenuResponse, PublicOrderCreate, PublicOrderOutput

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/{slug}/menu", response_model=PublicMenuResponse)
def get_menu(slug: str, db: Session = Depends(get_db)) -> PublicMenuResponse:
    """
    Restaurant summary plus active categories with their available products.

    Products without an active category are listed under "Other".
    """
    return MenuService(db).public_menu(slug)


@router.post("/{slug}/orders", response_model=PublicOrderOutput, status_code=status.HTTP_201_CREATED)
@limiter.limit(PUBLIC_ORDER_LIMIT_RULE)
def place_order(
    request: Request,
    slug: str,
    body: PublicOrderCreate,
    db: Session = Depends(get_db),
) -> PublicOrderOutput:
    """
    Place an order from the public menu or a table QR code.

    Prices come from the catalog. The restaurant is notified in real time.
    """
    return OrderService(db).place_public_order(slug, body)


@router.get("/{slug}/orders", response_model=list[PublicOrderOutput])
def orders_by_phone(
    slug: str,
    phone: str = Query(min_length=7, max_length=20),
    db: Session = Depends(get_db),
) -> list[PublicOrderOutput]:
    """Recent orders placed with this phone number."""
    return OrderService(db).public_orders_by_phone(slug, phone)
