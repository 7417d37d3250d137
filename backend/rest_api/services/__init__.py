"""
Services module for business logic.

Layout:
- domain/: Application services (business logic) used by the routers
- permissions/: RestaurantContext passed into every restaurant-scoped call
- audit.py: Audit log entries written in the caller's transaction
- base_service.py: Base classes for restaurant-scoped CRUD services
- health.py: Dependency checks for the health endpoints

Usage:
    from rest_api.services.domain import ProductService
    service = ProductService(db)
    products = service.list_filtered(ctx, category_id=3)
"""

from .permissions import RestaurantContext
from .audit import log_change, serialize_model
from .base_service import BaseService, BaseCRUDService

__all__ = [
    "RestaurantContext",
    "log_change",
    "serialize_model",
    "BaseService",
    "BaseCRUDService",
]
