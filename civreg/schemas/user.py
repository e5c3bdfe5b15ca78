"""Request/response schemas for users and their personal information (UserInfo)."""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import EmailStr, Field, StringConstraints, field_validator

from civreg.schemas.auth import FullName, Password, RegisterRequest
from civreg.schemas.common import LETTERS_AND_SPACES, PHONE_PATTERN, CamelModel, TrimmedStr

Gender = Literal["M", "F", "Other"]
MaritalStatus = Literal["Single", "Married", "Divorced", "Widowed", "Other"]

PersonName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255, pattern=LETTERS_AND_SPACES)
]
Occupation = Annotated[
    str, StringConstraints(strip_whitespace=True, max_length=255, pattern=r"^[A-Za-z\s]*$")
]
PhoneNumber = Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
CardField = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=128)]


class IdentificationIn(CamelModel):
    card_type: CardField
    card_code: CardField


class IdentificationRead(CamelModel):
    card_type: str
    card_code: str


def _empty_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _unique_pairs(value: list[IdentificationIn] | None) -> list[IdentificationIn] | None:
    if not value:
        return value
    seen: set[tuple[str, str]] = set()
    for item in value:
        pair = (item.card_type, item.card_code)
        if pair in seen:
            raise ValueError(
                "Duplicate identifications are not allowed (same cardType and cardCode)."
            )
        seen.add(pair)
    return value


class UserInfoCreate(CamelModel):
    first_name: PersonName
    last_name: PersonName
    gender: Gender
    date_of_birth: date
    marital_status: MaritalStatus
    occupation: Occupation = ""
    address: TrimmedStr = ""
    phone_number: PhoneNumber | None = None
    email: EmailStr | None = None
    identifications: list[IdentificationIn] = Field(default_factory=list)

    @field_validator("email", "phone_number", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        return _empty_to_none(value)

    @field_validator("identifications")
    @classmethod
    def identifications_unique(cls, value: list[IdentificationIn] | None) -> list[IdentificationIn] | None:
        return _unique_pairs(value)


class UserInfoUpdate(CamelModel):
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    gender: Gender | None = None
    date_of_birth: date | None = None
    marital_status: MaritalStatus | None = None
    occupation: Occupation | None = None
    address: TrimmedStr | None = None
    phone_number: PhoneNumber | None = None
    email: EmailStr | None = None
    identifications: list[IdentificationIn] | None = None

    @field_validator("email", "phone_number", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        return _empty_to_none(value)

    @field_validator("identifications")
    @classmethod
    def identifications_unique(cls, value: list[IdentificationIn] | None) -> list[IdentificationIn] | None:
        return _unique_pairs(value)


class UserInfoRead(CamelModel):
    id: int
    first_name: str
    last_name: str
    gender: str
    date_of_birth: date
    age: int | None = None
    marital_status: str
    occupation: str
    address: str
    phone_number: str
    email: str | None = None
    identifications: list[IdentificationRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class UserCreateWithInfo(RegisterRequest):
    """Account plus inline personal information, created together."""

    user_info: UserInfoCreate


class UserUpdate(CamelModel):
    full_name: FullName | None = None
    role_id: list[int] | None = None
    branch_id: int | None = None
    is_active: bool | None = None
    password: Password | None = None


class UserRead(CamelModel):
    id: int
    username: str
    full_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
