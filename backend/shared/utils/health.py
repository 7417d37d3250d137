"""
Health check helpers.

Each dependency check is a small function wrapped by one of the decorators
below; the wrapper times it, enforces a timeout and turns any failure into
an UNHEALTHY result instead of raising.

    @health_check_with_timeout(timeout=3.0, component="database")
    async def check_database_health():
        ...
        return {"type": "postgresql"}
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Coroutine

from shared.config.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class HealthCheckResult:
    """Outcome of one dependency check."""
    status: HealthStatus
    component: str
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.latency_ms is not None:
            data["latency_ms"] = round(self.latency_ms, 2)
        if self.error:
            data["error"] = self.error
        data.update(self.details)
        return data


def _component_name(func: Callable, component: str | None) -> str:
    return component or func.__name__.removeprefix("check_").removesuffix("_health")


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _failed(component: str, started: float, error: str) -> HealthCheckResult:
    latency_ms = _elapsed_ms(started)
    logger.warning("Health check failed", component=component, error=error, latency_ms=round(latency_ms, 2))
    return HealthCheckResult(HealthStatus.UNHEALTHY, component, latency_ms=latency_ms, error=error)


def health_check_with_timeout(timeout: float = 5.0, component: str | None = None):
    """
    Wrap an async check. The check returns optional details (a dict) and
    signals failure by raising.
    """
    def decorator(
        func: Callable[..., Coroutine[Any, Any, dict[str, Any] | None]]
    ) -> Callable[..., Coroutine[Any, Any, HealthCheckResult]]:
        name = _component_name(func, component)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> HealthCheckResult:
            started = time.perf_counter()
            try:
                details = await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
            except asyncio.TimeoutError:
                return _failed(name, started, f"timeout after {timeout}s")
            except Exception as e:
                return _failed(name, started, str(e))
            return HealthCheckResult(
                HealthStatus.HEALTHY,
                name,
                latency_ms=_elapsed_ms(started),
                details=details if isinstance(details, dict) else {},
            )

        return wrapper
    return decorator


def sync_health_check_with_timeout(timeout: float = 5.0, component: str | None = None):
    """Same as health_check_with_timeout for blocking checks (run in a worker thread)."""
    def decorator(func: Callable[..., dict[str, Any] | None]) -> Callable[..., HealthCheckResult]:
        name = _component_name(func, component)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> HealthCheckResult:
            started = time.perf_counter()
            executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
            try:
                details = executor.submit(func, *args, **kwargs).result(timeout=timeout)
            except concurrent.futures.TimeoutError:
                return _failed(name, started, f"timeout after {timeout}s")
            except Exception as e:
                return _failed(name, started, str(e))
            finally:
                executor.shutdown(wait=False)
            return HealthCheckResult(
                HealthStatus.HEALTHY,
                name,
                latency_ms=_elapsed_ms(started),
                details=details if isinstance(details, dict) else {},
            )

        return wrapper
    return decorator


async def aggregate_health_checks(
    checks: list[Coroutine[Any, Any, HealthCheckResult]],
) -> dict[str, Any]:
    """
    Run checks concurrently.

    Returns {"status": "healthy" | "degraded", "components": {name: result}}.
    """
    results = await asyncio.gather(*checks, return_exceptions=True)

    components: dict[str, dict[str, Any]] = {}
    for result in results:
        if isinstance(result, HealthCheckResult):
            components[result.component] = result.to_dict()
        else:
            components["unknown"] = {"status": HealthStatus.UNHEALTHY.value, "error": str(result)}

    healthy = all(c["status"] == HealthStatus.HEALTHY.value for c in components.values())
    return {
        "status": HealthStatus.HEALTHY.value if healthy else HealthStatus.DEGRADED.value,
        "components": components,
    }
