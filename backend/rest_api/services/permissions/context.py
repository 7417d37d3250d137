"""
Restaurant Context - who is acting, in which tenant and restaurant.
"""

from dataclasses import dataclass
from typing import Any

from shared.config.constants import MANAGEMENT_ROLES, Roles


@dataclass(frozen=True)
class RestaurantContext:
    """
    Resolved scope of a staff request.

    ``role`` is the user's role in the active restaurant; ``tenant_role`` is
    the role carried by the token (an OWNER is OWNER everywhere).
    """

    tenant_id: int
    restaurant_id: int
    user_id: int
    email: str | None
    role: str
    tenant_role: str

    @classmethod
    def from_claims(cls, user: dict[str, Any], restaurant_id: int, role: str) -> "RestaurantContext":
        return cls(
            tenant_id=user["tenant_id"],
            restaurant_id=restaurant_id,
            user_id=int(user["sub"]),
            email=user.get("email"),
            role=role,
            tenant_role=user.get("role", role),
        )

    @property
    def is_owner(self) -> bool:
        return self.role == Roles.OWNER

    @property
    def is_management(self) -> bool:
        """Owner or manager of the active restaurant."""
        return self.role in MANAGEMENT_ROLES
