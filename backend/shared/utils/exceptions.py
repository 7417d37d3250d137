"""
Centralized HTTP exceptions for consistent error handling.

Every exception logs itself on construction and carries a machine-readable
``code`` that the API renders as ``{"error": {"code", "message"}}``.

Usage:
    from shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Product", product_id)
    raise ForbiddenError("delete products")
    raise ValidationError("Only QR orders can be accepted")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging and an error code.
    """

    code: str = "HTTP_ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        code: str | None = None,
        **log_context: Any,
    ):
        if code is not None:
            self.code = code

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, error_code=self.code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Product", 123)
        raise NotFoundError("Restaurant", restaurant_id, tenant_id=tenant_id)
        raise NotFoundError("Order", detail="No open order for this table")
    """

    code = "NOT_FOUND"

    def __init__(
        self,
        entity: str,
        entity_id: int | str | None = None,
        detail: str | None = None,
        **log_context: Any,
    ):
        if detail is None and entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        elif detail is None:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


# =============================================================================
# 401 / 403 Errors
# =============================================================================


class UnauthorizedError(AppException):
    """
    Authentication error (401).

    Usage:
        raise UnauthorizedError("Invalid email or password")
    """

    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Not authenticated", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("delete orders")
        raise ForbiddenError(detail="Restaurant access denied")
    """

    code = "FORBIDDEN"

    def __init__(self, action: str | None = None, detail: str | None = None, **log_context: Any):
        if detail is None:
            detail = f"Not authorized to {action}" if action else "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class RestaurantAccessError(ForbiddenError):
    """User doesn't have access to the restaurant."""

    def __init__(self, restaurant_id: int | None = None, **log_context: Any):
        super().__init__(
            detail="Restaurant access denied",
            restaurant_id=restaurant_id,
            **log_context,
        )


class InsufficientRoleError(ForbiddenError):
    """User doesn't have the required role."""

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(required_roles)
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Cancel reason is required")
        raise ValidationError("Invalid slug", field="slug", value=slug)
    """

    code = "VALIDATION_ERROR"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidStateError(ValidationError):
    """Entity is in an invalid state for the operation."""

    code = "INVALID_STATE"

    def __init__(
        self,
        entity: str,
        current_state: str,
        expected_states: list[str] | None = None,
        detail: str | None = None,
        **log_context: Any,
    ):
        if detail is None:
            if expected_states:
                states_str = ", ".join(expected_states)
                detail = f"{entity} is in state '{current_state}', expected: {states_str}"
            else:
                detail = f"{entity} cannot be modified in state '{current_state}'"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class DuplicateEntityError(ValidationError):
    """Entity already exists."""

    code = "DUPLICATE"

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Could not allocate a unique order number")
    """

    code = "CONFLICT"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to settle credit", customer_id=12)
    """

    code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    code = "DATABASE_ERROR"

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
