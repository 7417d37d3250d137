"""
Restaurant routers - /api/restaurant/*
Profile, settings, theme, dashboard, staff, halls and tables of the
active restaurant.
"""

from fastapi import APIRouter

from .profile import router as profile_router
from .staff import router as staff_router
from .floor import router as floor_router

router = APIRouter(prefix="/api/restaurant")
router.include_router(profile_router)
router.include_router(staff_router)
router.include_router(floor_router)

__all__ = ["router"]
