"""
Repository Pattern implementation.
Centralizes data access with tenant and restaurant isolation.

Usage:
    from rest_api.repositories import OrderRepository, OrderFilters

    repo = OrderRepository(db)
    orders, total = repo.find_page(tenant_id=1, restaurant_id=5, filters=OrderFilters(status="PLACED"))
    order = repo.find_by_id(123, tenant_id=1, restaurant_id=5)
"""

from .base import BaseRepository, TenantRepository, RestaurantRepository, RepositoryFilters
from .order import OrderRepository, OrderFilters, get_order_repository, day_bounds
from .customer import CustomerRepository, CustomerFilters, get_customer_repository

__all__ = [
    # Base
    "BaseRepository",
    "TenantRepository",
    "RestaurantRepository",
    "RepositoryFilters",
    # Order
    "OrderRepository",
    "OrderFilters",
    "get_order_repository",
    "day_bounds",
    # Customer
    "CustomerRepository",
    "CustomerFilters",
    "get_customer_repository",
]
