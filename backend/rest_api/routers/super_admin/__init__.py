"""
Platform operator routers - /api/super-admin/*
Only tokens with the super-admin scope are accepted.
"""

from .routes import router

__all__ = ["router"]
