"""Request/response schemas for permission actions."""

from datetime import datetime
from typing import Annotated

from pydantic import StringConstraints

from civreg.schemas.common import LETTERS_AND_UNDERSCORES, CamelModel

ActionName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100, pattern=LETTERS_AND_UNDERSCORES),
]
Description = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class ActionCreate(CamelModel):
    name: ActionName
    description: Description | None = None


class ActionUpdate(CamelModel):
    name: ActionName | None = None
    description: Description | None = None
    is_active: bool | None = None


class ActionRead(CamelModel):
    id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
