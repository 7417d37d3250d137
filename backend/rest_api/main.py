"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from rest_api.core import configure_cors, lifespan, register_exception_handlers, register_middlewares
from rest_api.routers.auth import router as auth_router
from rest_api.routers.catalog import categories_router, products_router
from rest_api.routers.customers import router as customers_router
from rest_api.routers.kds import router as kds_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.public import health_router, menu_router
from rest_api.routers.restaurant import router as restaurant_router
from rest_api.routers.super_admin import router as super_admin_router
from shared.config.settings import settings
from shared.security.rate_limit import limiter


app = FastAPI(
    title="Restaurant POS API",
    description="Multi-tenant restaurant ordering, billing and QR menu API",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter

register_exception_handlers(app)
register_middlewares(app)
# CORS last so it wraps every other middleware, including error responses
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(restaurant_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(customers_router)
app.include_router(orders_router)
app.include_router(kds_router)
app.include_router(menu_router)
app.include_router(super_admin_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
