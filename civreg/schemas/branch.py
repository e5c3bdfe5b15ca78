"""Request/response schemas for branches."""

from datetime import datetime

from pydantic import AliasChoices, Field

from civreg.schemas.common import CamelModel, NonEmptyStr, TrimmedStr


class BranchCreate(CamelModel):
    name: NonEmptyStr = Field(..., max_length=255)
    address: TrimmedStr = ""
    city: TrimmedStr = ""
    phone: TrimmedStr = ""
    manager_id: int | None = Field(default=None, validation_alias=AliasChoices("managerId", "manager"))


class BranchUpdate(CamelModel):
    name: NonEmptyStr | None = Field(default=None, max_length=255)
    address: TrimmedStr | None = None
    city: TrimmedStr | None = None
    phone: TrimmedStr | None = None
    manager_id: int | None = Field(default=None, validation_alias=AliasChoices("managerId", "manager"))
    is_active: bool | None = None


class BranchRead(CamelModel):
    id: int
    name: str
    address: str
    city: str
    phone: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
