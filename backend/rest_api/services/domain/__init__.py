"""
Domain Services - application layer.

Services contain business logic and orchestrate operations. They use
Repositories for data access and write audit entries in the same
transaction as the change.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db)
    orders = service.list_orders(ctx, filters)
"""

from .auth_service import AuthService
from .restaurant_service import RestaurantService
from .staff_service import StaffService
from .table_service import HallService, TableService
from .category_service import CategoryService
from .product_service import ProductService, discounted_price_cents
from .customer_service import CustomerService, upsert_customer
from .order_service import OrderService
from .billing_service import BillingService
from .kds_service import KdsService
from .menu_service import MenuService
from .super_admin_service import SuperAdminService

__all__ = [
    "AuthService",
    "RestaurantService",
    "StaffService",
    "HallService",
    "TableService",
    "CategoryService",
    "ProductService",
    "discounted_price_cents",
    "CustomerService",
    "upsert_customer",
    "OrderService",
    "BillingService",
    "KdsService",
    "MenuService",
    "SuperAdminService",
]
