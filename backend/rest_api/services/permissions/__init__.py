"""
Request permission context.

Usage:
    from rest_api.services.permissions import RestaurantContext

    ctx = RestaurantContext.from_claims(user, restaurant_id=5, role="MANAGER")
    if not ctx.is_management:
        raise ForbiddenError("delete orders")
"""

from .context import RestaurantContext

__all__ = ["RestaurantContext"]
