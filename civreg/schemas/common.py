"""Shared schema base classes and field types."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

# Letters and spaces only (names, occupation).
LETTERS_AND_SPACES = r"^[A-Za-z\s]+$"
# Letters and underscores only (usernames, action names).
LETTERS_AND_UNDERSCORES = r"^[A-Za-z_]+$"
# e.g. 012-345-678, 0123456789, (+855) 12-345-678, +1 (555) 123-4567
PHONE_PATTERN = r"^(\+?\d{1,3}\s?)?(\(?\+?\d{2,3}\)?[\s-]?)?\d{3}[\s-]?\d{3,4}$"
HHMM_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"

TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Attachment(CamelModel):
    """Metadata of a file kept in the object store."""

    filename: str
    original_name: str
    path: str
    mime_type: str
    encoding: str = "7bit"
    bucket: str
