"""Request/response schemas for auth endpoints."""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from civreg.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, USERNAME_MAX_LEN
from civreg.schemas.common import LETTERS_AND_SPACES, LETTERS_AND_UNDERSCORES, CamelModel

Username = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True,
        min_length=1,
        max_length=USERNAME_MAX_LEN,
        pattern=LETTERS_AND_UNDERSCORES,
    ),
]
Password = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN),
]
FullName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=50, pattern=LETTERS_AND_SPACES),
]


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterRequest(CamelModel):
    """New account; roleId holds role ids."""

    username: Username
    password: Password
    full_name: FullName
    role_id: list[int] = Field(default_factory=list)
    branch_id: int | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: Password


class AdminResetPasswordRequest(CamelModel):
    user_id: int = Field(..., ge=1, description="User whose password is reset")
    new_password: Password


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class RoleSummary(CamelModel):
    """Role attached to the authenticated user, with the names of its actions."""

    id: int
    name: str
    actions: list[str] = Field(default_factory=list)


class CurrentUser(CamelModel):
    """Authenticated user for dependency injection (no password hash, no version column)."""

    id: int
    username: str
    full_name: str
    is_active: bool
    branch_id: int | None = None
    user_info_id: int | None = None
    roles: list[RoleSummary] = Field(default_factory=list)

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]

    @property
    def action_names(self) -> set[str]:
        return {action for role in self.roles for action in role.actions}
