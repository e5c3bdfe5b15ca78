"""
Route authorization strategies.

RoleNameAllowList is the default gate: the user passes when one of its role
names matches the route's allow-list (case-insensitively). ActionCapability
checks the actions linked to the user's roles instead. Both let the super-role
through unconditionally.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from civreg.core.errors import ForbiddenError
from civreg.schemas.auth import CurrentUser


def is_role_allowed(role_names: Iterable[str], allowed: Iterable[str], super_role: str) -> bool:
    """True when any role is the super-role (exact match) or is in `allowed` (case-insensitive)."""
    names = list(role_names)
    if super_role in names:
        return True
    wanted = {name.lower() for name in allowed}
    return any(name.lower() in wanted for name in names)


class AuthorizationStrategy(ABC):
    """Decides whether an authenticated user may call a route. Raises ForbiddenError when not."""

    def __init__(self, super_role: str) -> None:
        self.super_role = super_role

    def authorize(self, user: CurrentUser) -> None:
        if not user.roles:
            raise ForbiddenError("Access denied: user has no role assigned")
        if self.super_role in user.role_names:
            return
        self.check(user)

    @abstractmethod
    def check(self, user: CurrentUser) -> None:
        ...


class RoleNameAllowList(AuthorizationStrategy):
    def __init__(self, allowed: Iterable[str], super_role: str) -> None:
        super().__init__(super_role)
        self.allowed = tuple(allowed)

    def check(self, user: CurrentUser) -> None:
        if not is_role_allowed(user.role_names, self.allowed, self.super_role):
            raise ForbiddenError(
                f"Access denied: requires one of the roles {', '.join(self.allowed)}",
                error={"requiredRoles": list(self.allowed)},
            )


class ActionCapability(AuthorizationStrategy):
    """Grants access when a role of the user is linked to the named action."""

    def __init__(self, action: str, super_role: str) -> None:
        super().__init__(super_role)
        self.action = action

    def check(self, user: CurrentUser) -> None:
        if self.action not in user.action_names:
            raise ForbiddenError(
                f"Access denied: requires permission {self.action}",
                error={"requiredAction": self.action},
            )
