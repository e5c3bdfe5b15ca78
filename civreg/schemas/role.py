"""Request/response schemas for roles."""

from datetime import datetime

from pydantic import Field

from civreg.schemas.common import CamelModel, NonEmptyStr


class RoleCreate(CamelModel):
    name: NonEmptyStr = Field(..., max_length=100)
    description: str | None = None
    actions: list[int] = Field(default_factory=list, description="Action ids")


class RoleUpdate(CamelModel):
    name: NonEmptyStr | None = Field(default=None, max_length=100)
    description: str | None = None
    actions: list[int] | None = None
    is_active: bool | None = None


class RoleRead(CamelModel):
    id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
