"""
Dependency health for /api/health/detailed and the super-admin portal.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.infrastructure.redis.health import check_redis_async_health, check_redis_sync_health
from shared.utils.health import HealthStatus, aggregate_health_checks, health_check_with_timeout


@health_check_with_timeout(timeout=3.0, component="database")
async def check_database_health() -> dict[str, Any]:
    """Run a trivial query on a fresh session."""
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
    return {"type": "sqlite" if settings.is_sqlite else "postgresql"}


async def system_health() -> dict[str, Any]:
    """
    Database and Redis reachability.

    ``status`` is "healthy" only when every dependency answered.
    """
    results = await aggregate_health_checks([
        check_database_health(),
        check_redis_async_health(),
    ])
    dependencies = results["components"]
    dependencies["redis_sync"] = check_redis_sync_health().to_dict()

    all_healthy = all(
        component.get("status") == HealthStatus.HEALTHY.value
        for component in dependencies.values()
    )
    return {
        "service": "rest-api",
        "environment": settings.environment,
        "status": HealthStatus.HEALTHY.value if all_healthy else HealthStatus.DEGRADED.value,
        "dependencies": dependencies,
    }
