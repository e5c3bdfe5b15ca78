"""Request/response schemas for content pages."""

from datetime import datetime

from pydantic import Field

from civreg.schemas.common import Attachment, CamelModel, NonEmptyStr, TrimmedStr


class ContentDetailIn(CamelModel):
    statement: NonEmptyStr
    items: list[str] = Field(default_factory=list, alias="list")


class ContentCreate(CamelModel):
    """Form fields of a content upload; `details` arrives as a JSON-encoded array."""

    title: NonEmptyStr = Field(..., max_length=255)
    description: TrimmedStr = ""
    sort: int = 1
    details: list[ContentDetailIn] = Field(..., min_length=1)


class ContentUpdate(CamelModel):
    title: NonEmptyStr | None = Field(default=None, max_length=255)
    description: TrimmedStr | None = None
    sort: int | None = None


class ContentImageRead(Attachment):
    id: int


class ContentDetailRead(CamelModel):
    id: int
    statement: str
    items: list[str] = Field(default_factory=list, alias="list")
    images: list[ContentImageRead] = Field(default_factory=list)


class ContentRead(CamelModel):
    id: int
    title: str
    description: str
    sort: int
    details: list[ContentDetailRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
