"""
Common utilities shared across routers.
"""

from .deps import (
    client_ip,
    require_owner_or_manager,
    require_staff,
    require_tenant_owner,
    restaurant_context,
)
from .pagination import Pagination, get_pagination

__all__ = [
    # Dependencies
    "restaurant_context",
    "require_owner_or_manager",
    "require_staff",
    "require_tenant_owner",
    "client_ip",
    # Pagination
    "Pagination",
    "get_pagination",
]
