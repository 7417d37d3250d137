"""
Async API client used by the head and waiter portals.

Requests are scoped to the active restaurant with the ``x-restaurant-id``
header. Auth rides on the HttpOnly cookies set by /auth/login, with an
optional staff bearer token. A 401 triggers one shared token refresh and a
single retry. Errors are returned, never raised:

    async with ApiClient() as api:
        result = await api.get("/orders", params={"status": "PLACED"})
        if result.error:
            print(result.error.code, result.error.message)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from shared.config.logging import client_logger as logger
from shared.config.settings import settings

PUBLIC_PREFIX = "/public/"

AUTH_RECOVERY_PREFIXES = (
    "/auth/login",
    "/auth/register",
    "/auth/forgot-password",
    "/auth/verify-",
    "/auth/resend-",
    "/auth/reset-password",
)

# A 401 from these means "not logged in", not "token expired"
NO_REFRESH_ENDPOINTS = ("/auth/login", "/auth/refresh", "/auth/me")


@dataclass(frozen=True)
class ApiError:
    code: str
    message: str


@dataclass
class ApiResponse:
    data: Any = None
    error: ApiError | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TokenRefreshError(Exception):
    """The refresh endpoint rejected the session."""


def is_public_endpoint(endpoint: str) -> bool:
    return endpoint.startswith(PUBLIC_PREFIX)


def skips_restaurant_header(endpoint: str) -> bool:
    """Endpoints that work without a restaurant context."""
    return (
        endpoint.startswith(PUBLIC_PREFIX)
        or endpoint.startswith("/auth/")
        or endpoint == "/restaurant/setup"
    )


def is_auth_recovery_endpoint(endpoint: str) -> bool:
    return endpoint.startswith(AUTH_RECOVERY_PREFIXES)


class ApiClient:
    """
    Client for the /api endpoints.

    State:
        restaurant_id: sent as x-restaurant-id on restaurant-scoped calls
        tenant_id: tenant of the logged-in user
        staff_token: bearer token used when no Authorization header is given
        auth_failed: set once a refresh failed; blocks everything except
            the auth recovery endpoints until reset_auth_state()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        restaurant_id: int | None = None,
        tenant_id: int | None = None,
        staff_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.pos_api_url).rstrip("/")
        self.restaurant_id = restaurant_id
        self.tenant_id = tenant_id
        self.staff_token = staff_token
        self.auth_failed = False
        self._refresh_task: asyncio.Task | None = None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.pos_request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # Auth State
    # =========================================================================

    def clear_auth(self) -> None:
        """Forget restaurant, tenant and token. Server cookies are cleared by /auth/logout."""
        self.restaurant_id = None
        self.tenant_id = None
        self.staff_token = None
        self.auth_failed = False

    def reset_auth_state(self) -> None:
        """Allow requests again after a successful login."""
        self.auth_failed = False

    def _apply_user(self, user: dict[str, Any] | None) -> None:
        if not user:
            return
        allowed = user.get("allowed_restaurant_ids") or []
        if allowed:
            self.restaurant_id = allowed[0]
        if user.get("tenant_id") is not None:
            self.tenant_id = user["tenant_id"]

    async def refresh_access_token(self) -> None:
        """
        Refresh the session. Concurrent callers await the same request, and
        cancelling one caller leaves the request running for the others.

        Raises:
            TokenRefreshError: The refresh failed; auth state is cleared
                and auth_failed is set.
        """
        task = self._refresh_task
        if task is None:
            task = self._refresh_task = asyncio.create_task(self._refresh())
        try:
            await asyncio.shield(task)
        finally:
            if self._refresh_task is task and task.done():
                self._refresh_task = None

    async def _refresh(self) -> None:
        try:
            response = await self._client.post(
                "/auth/refresh",
                headers={"Content-Type": "application/json"},
            )
            if not response.is_success:
                raise TokenRefreshError(f"Token refresh failed with status {response.status_code}")
            data = response.json()
        except (httpx.HTTPError, ValueError, TokenRefreshError) as e:
            logger.warning("Token refresh failed", error=str(e))
            self.clear_auth()
            self.auth_failed = True
            if isinstance(e, TokenRefreshError):
                raise
            raise TokenRefreshError(str(e)) from e

        if self.staff_token and data.get("access_token"):
            self.staff_token = data["access_token"]
        self._apply_user(data.get("user"))
        logger.info("Token refreshed", restaurant_id=self.restaurant_id)

    # =========================================================================
    # Requests
    # =========================================================================

    def _headers(self, endpoint: str, extra: dict[str, str] | None) -> httpx.Headers:
        headers = httpx.Headers(extra or {})
        headers["Content-Type"] = "application/json"

        if not skips_restaurant_header(endpoint):
            if self.restaurant_id is not None:
                headers["x-restaurant-id"] = str(self.restaurant_id)
            else:
                logger.warning("Missing restaurant id for endpoint", endpoint=endpoint)

        if self.staff_token and "Authorization" not in headers:
            headers["Authorization"] = f"Bearer {self.staff_token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        if self.auth_failed and not is_auth_recovery_endpoint(endpoint):
            return ApiResponse(error=ApiError("AUTH_FAILED", "Authentication failed. Redirecting to login..."))

        public = is_public_endpoint(endpoint)

        async def send() -> httpx.Response:
            return await self._client.request(
                method,
                endpoint,
                json=json,
                params=params,
                headers=self._headers(endpoint, headers),
            )

        try:
            response = await send()

            if (
                response.status_code == 401
                and not public
                and not any(path in endpoint for path in NO_REFRESH_ENDPOINTS)
            ):
                try:
                    await self.refresh_access_token()
                except TokenRefreshError:
                    return ApiResponse(
                        error=ApiError("UNAUTHORIZED", "Session expired. Please log in again."),
                        status_code=401,
                    )
                response = await send()

            data: Any = {}
            content_type = response.headers.get("content-type", "")
            if response.status_code != 204 and "application/json" in content_type:
                data = response.json()

            if not response.is_success:
                error = data.get("error") if isinstance(data, dict) else None
                if isinstance(error, dict) and error.get("code"):
                    api_error = ApiError(error["code"], error.get("message") or "")
                else:
                    api_error = ApiError("UNKNOWN_ERROR", "An error occurred")
                return ApiResponse(error=api_error, status_code=response.status_code)

            return ApiResponse(data=data, status_code=response.status_code)

        except (httpx.HTTPError, ValueError) as e:
            logger.error("API request error", endpoint=endpoint, method=method, error=str(e))
            return ApiResponse(error=ApiError("NETWORK_ERROR", str(e) or "Network error occurred"))

    async def get(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", endpoint, json=body, **kwargs)

    async def patch(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", endpoint, json=body, **kwargs)

    async def put(self, endpoint: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", endpoint, json=body, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", endpoint, **kwargs)

    # =========================================================================
    # Convenience
    # =========================================================================

    async def login(self, email: str, password: str) -> ApiResponse:
        """Owner/manager login. Cookies are stored by the underlying client."""
        result = await self.post("/auth/login", {"email": email, "password": password})
        if result.ok:
            self.reset_auth_state()
            self._apply_user(result.data.get("user"))
        return result

    async def staff_login(self, identifier: str, password: str, *, waiter: bool = False) -> ApiResponse:
        """Head/waiter portal login by email or phone. Keeps the access token as staff token."""
        endpoint = "/auth/waiter/login" if waiter else "/auth/staff/login"
        result = await self.post(endpoint, {"identifier": identifier, "password": password})
        if result.ok:
            self.reset_auth_state()
            self.staff_token = result.data.get("access_token")
            self._apply_user(result.data.get("user"))
        return result
