"""Pydantic request/response schemas."""

from civreg.schemas.action import ActionCreate, ActionRead, ActionUpdate
from civreg.schemas.auth import (
    AdminResetPasswordRequest,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    RoleSummary,
)
from civreg.schemas.branch import BranchCreate, BranchRead, BranchUpdate
from civreg.schemas.common import Attachment, CamelModel
from civreg.schemas.content import ContentCreate, ContentDetailIn, ContentRead, ContentUpdate
from civreg.schemas.event import EventCreate, EventRead, EventUpdate
from civreg.schemas.health import HealthResponse
from civreg.schemas.hero_slider import HeroSliderCreate, HeroSliderRead
from civreg.schemas.role import RoleCreate, RoleRead, RoleUpdate
from civreg.schemas.user import (
    IdentificationIn,
    UserCreateWithInfo,
    UserInfoCreate,
    UserInfoRead,
    UserInfoUpdate,
    UserRead,
    UserUpdate,
)

__all__ = [
    "ActionCreate",
    "ActionRead",
    "ActionUpdate",
    "AdminResetPasswordRequest",
    "Attachment",
    "BranchCreate",
    "BranchRead",
    "BranchUpdate",
    "CamelModel",
    "ChangePasswordRequest",
    "ContentCreate",
    "ContentDetailIn",
    "ContentRead",
    "ContentUpdate",
    "CurrentUser",
    "EventCreate",
    "EventRead",
    "EventUpdate",
    "HealthResponse",
    "HeroSliderCreate",
    "HeroSliderRead",
    "IdentificationIn",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "RoleCreate",
    "RoleRead",
    "RoleSummary",
    "RoleUpdate",
    "UserCreateWithInfo",
    "UserInfoCreate",
    "UserInfoRead",
    "UserInfoUpdate",
    "UserRead",
    "UserUpdate",
]
