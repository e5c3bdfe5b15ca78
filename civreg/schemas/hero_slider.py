"""Request/response schemas for hero-slider entries."""

from datetime import datetime

from pydantic import Field

from civreg.schemas.common import Attachment, CamelModel, NonEmptyStr, TrimmedStr


class HeroSliderCreate(CamelModel):
    """Form fields sent alongside the uploaded image."""

    title: NonEmptyStr = Field(..., max_length=255)
    subtitle: TrimmedStr = ""
    link: TrimmedStr = ""
    sort: int = 1


class HeroSliderRead(CamelModel):
    id: int
    title: str
    subtitle: str
    link: str
    sort: int
    is_active: bool
    image: Attachment | None = None
    created_at: datetime
    updated_at: datetime
