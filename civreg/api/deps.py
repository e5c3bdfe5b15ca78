"""Request dependencies: authentication, role gates and service wiring.

Routes are gated by role name through `require_roles`. `require_action` is the
opt-in alternative that checks the actions linked to the user's roles instead;
no route uses it by default.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from civreg.core.config import get_settings
from civreg.core.database import get_db
from civreg.core.errors import AuthenticationError
from civreg.core.storage import ObjectStore, get_object_store
from civreg.schemas.auth import CurrentUser
from civreg.services import auth as auth_service
from civreg.services.attachments import AttachmentManager
from civreg.services.authorization import ActionCapability, AuthorizationStrategy, RoleNameAllowList

security = HTTPBearer(auto_error=False)

ADMINS = ("SystemAdmin", "Admin")
EDITORS = ("Admin", "Staff")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require a valid Bearer access token and return the sanitized user."""
    if credentials is None:
        raise AuthenticationError("Access denied, no token provided")
    return auth_service.authenticate_token(db, credentials.credentials)


def _gate(strategy: AuthorizationStrategy) -> Callable[..., CurrentUser]:
    def dependency(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        strategy.authorize(user)
        return user

    return dependency


def require_roles(*allowed: str) -> Callable[..., CurrentUser]:
    """Dependency factory: the user must hold one of `allowed` (or the super-role)."""
    return _gate(RoleNameAllowList(allowed, get_settings().SUPER_ROLE))


def require_action(action: str) -> Callable[..., CurrentUser]:
    """Dependency factory: a role of the user must be linked to `action` (or be the super-role)."""
    return _gate(ActionCapability(action, get_settings().SUPER_ROLE))


def get_attachments(store: Annotated[ObjectStore, Depends(get_object_store)]) -> AttachmentManager:
    return AttachmentManager(store, get_settings())


def query_params(request: Request) -> dict[str, str]:
    return dict(request.query_params)


DbSession = Annotated[Session, Depends(get_db)]
Authenticated = Annotated[CurrentUser, Depends(get_current_user)]
Attachments = Annotated[AttachmentManager, Depends(get_attachments)]
QueryParams = Annotated[dict[str, str], Depends(query_params)]
