"""
SQLAlchemy ORM Models Package.

- base: Base class and AuditMixin
- tenant: Tenant, Restaurant
- user: User, RestaurantUser, SuperAdmin
- table: Hall, RestaurantTable
- catalog: Category, Product
- customer: Customer
- order: Order, OrderItem
- audit: AuditLog
"""

from .base import Base, AuditMixin, utcnow

from .tenant import Tenant, Restaurant
from .user import User, RestaurantUser, SuperAdmin
from .table import Hall, RestaurantTable
from .catalog import Category, Product
from .customer import Customer
from .order import Order, OrderItem
from .audit import AuditLog

__all__ = [
    "Base",
    "AuditMixin",
    "utcnow",
    "Tenant",
    "Restaurant",
    "User",
    "RestaurantUser",
    "SuperAdmin",
    "Hall",
    "RestaurantTable",
    "Category",
    "Product",
    "Customer",
    "Order",
    "OrderItem",
    "AuditLog",
]
