"""
Order routers - /api/orders/*
Order lifecycle for staff, plus bills and analytics.
"""

from fastapi import APIRouter

from .billing import router as billing_router
from .lifecycle import router as lifecycle_router

router = APIRouter()
# Static paths first so they never shadow /{order_id}
router.include_router(billing_router)
router.include_router(lifecycle_router)

__all__ = ["router"]
