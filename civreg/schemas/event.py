"""Request/response schemas for events."""

from datetime import date, datetime
from typing import Annotated

from pydantic import EmailStr, Field, StringConstraints, field_validator, model_validator

from civreg.schemas.common import HHMM_PATTERN, CamelModel, NonEmptyStr, TrimmedStr

HHMM = Annotated[str, StringConstraints(strip_whitespace=True, pattern=HHMM_PATTERN)]


def check_date_range(date_from: date | None, date_to: date | None) -> None:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValueError("dateFrom must be earlier than dateTo")


def check_time_range(time_from: str | None, time_to: str | None) -> None:
    # Zero-padded HH:mm strings compare in time order.
    if time_from is not None and time_to is not None and time_from >= time_to:
        raise ValueError("timeFrom must be earlier than timeTo")


class ContactPerson(CamelModel):
    name: NonEmptyStr
    phone: NonEmptyStr
    email: EmailStr | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ContactPersonUpdate(CamelModel):
    name: NonEmptyStr | None = None
    phone: NonEmptyStr | None = None
    email: EmailStr | None = None


class EventCreate(CamelModel):
    title: NonEmptyStr = Field(..., max_length=255)
    date_from: date
    date_to: date
    time_from: HHMM
    time_to: HHMM
    description: TrimmedStr = ""
    map: TrimmedStr = ""
    url_image: TrimmedStr = ""
    contact_person: ContactPerson

    @model_validator(mode="after")
    def check_ranges(self) -> "EventCreate":
        check_date_range(self.date_from, self.date_to)
        check_time_range(self.time_from, self.time_to)
        return self


class EventUpdate(CamelModel):
    """Partial update; ranges are checked again against the stored values."""

    title: NonEmptyStr | None = Field(default=None, max_length=255)
    date_from: date | None = None
    date_to: date | None = None
    time_from: HHMM | None = None
    time_to: HHMM | None = None
    description: TrimmedStr | None = None
    map: TrimmedStr | None = None
    url_image: TrimmedStr | None = None
    contact_person: ContactPersonUpdate | None = None
    is_canceled: bool | None = None

    @model_validator(mode="after")
    def check_ranges(self) -> "EventUpdate":
        check_date_range(self.date_from, self.date_to)
        check_time_range(self.time_from, self.time_to)
        return self


class ContactPersonRead(CamelModel):
    name: str
    phone: str
    email: str | None = None


class EventRead(CamelModel):
    id: int
    title: str
    date_from: date
    date_to: date
    time_from: str
    time_to: str
    description: str
    map: str
    url_image: str
    contact_person: ContactPersonRead
    is_canceled: bool
    created_at: datetime
    updated_at: datetime
