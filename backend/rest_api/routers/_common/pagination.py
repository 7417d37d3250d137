"""
Standardized page/limit pagination for list endpoints.

Usage:
    from rest_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/customers")
    def list_customers(pagination: Pagination = Depends(get_pagination), ...):
        filters = CustomerFilters(page=pagination.page, limit=pagination.limit)
"""

from dataclasses import dataclass
from typing import Any

from fastapi import Query

from shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        page: 1-indexed page number
        limit: Items per page (1 to max_limit)
        max_limit: Maximum allowed limit
    """

    page: int
    limit: int
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        self.page = max(1, self.page)
        self.limit = min(max(1, self.limit), self.max_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self, total: int) -> dict[str, Any]:
        """Pagination block of a list response."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "total_pages": (total + self.limit - 1) // self.limit,
        }


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of items to return",
    ),
) -> Pagination:
    """FastAPI dependency for pagination."""
    return Pagination(page=page, limit=limit)
