"""SQLAlchemy ORM models."""

from civreg.models.action import Action
from civreg.models.base import Base
from civreg.models.branch import Branch
from civreg.models.content import Content, ContentDetail, ContentImage
from civreg.models.event import Event
from civreg.models.hero_slider import HeroSlider
from civreg.models.role import Role, role_actions
from civreg.models.user import AccessToken, RefreshToken, User, user_roles
from civreg.models.user_info import GENDERS, MARITAL_STATUSES, Identification, UserInfo

__all__ = [
    "AccessToken",
    "Action",
    "Base",
    "Branch",
    "Content",
    "ContentDetail",
    "ContentImage",
    "Event",
    "GENDERS",
    "HeroSlider",
    "Identification",
    "MARITAL_STATUSES",
    "RefreshToken",
    "Role",
    "User",
    "UserInfo",
    "role_actions",
    "user_roles",
]
