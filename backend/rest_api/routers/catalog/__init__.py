"""
Catalog routers - /api/categories and /api/products.
Reads are open to every staff role; writes need OWNER or MANAGER.
"""

from .categories import router as categories_router
from .products import router as products_router

__all__ = ["categories_router", "products_router"]
