"""
Credential checks, token issuance and password changes.

Every login, registration and refresh persists the tokens it issues. Earlier
tokens are never revoked; they stay valid until their own expiry.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from civreg.core.config import Settings, get_settings
from civreg.core.errors import (
    AuthenticationError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    TokenError,
    TokenExpiredError,
    ValidationError,
)
from civreg.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from civreg.models import AccessToken, Branch, RefreshToken, Role, User
from civreg.schemas.auth import CurrentUser, RegisterRequest, RoleSummary
from civreg.schemas.branch import BranchRead
from civreg.schemas.role import RoleRead
from civreg.schemas.user import UserInfoRead, UserRead

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _dump(schema: Any, obj: Any) -> dict[str, Any]:
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def load_user(db: Session, user_id: int) -> User | None:
    """User with its roles and each role's actions loaded."""
    stmt = (
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.roles).selectinload(Role.actions))
    )
    return db.scalars(stmt).first()


def to_current_user(user: User) -> CurrentUser:
    return CurrentUser(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        is_active=user.is_active,
        branch_id=user.branch_id,
        user_info_id=user.user_info_id,
        roles=[
            RoleSummary(id=role.id, name=role.name, actions=[action.name for action in role.actions])
            for role in user.roles
        ],
    )


def authenticate_token(db: Session, token: str) -> CurrentUser:
    """Decode an access token and load its user; 401 if unknown, 403 if inactive."""
    try:
        user_id = decode_token(token, "access")
    except TokenExpiredError as e:
        raise AuthenticationError(
            "Access token expired, request a new one with refresh token"
        ) from e
    except TokenError as e:
        raise AuthenticationError("Access token invalid") from e
    try:
        user = load_user(db, user_id)
    except SQLAlchemyError as e:
        logger.exception("Failed to load user for token")
        raise ServerError("Internal server error with verifying token", error=str(e)) from e
    if user is None:
        raise AuthenticationError("User not found.")
    if not user.is_active:
        raise ForbiddenError("User is inactive.")
    return to_current_user(user)


def issue_tokens(db: Session, user: User, settings: Settings | None = None) -> tuple[str, str]:
    """Create an access/refresh token pair and stage one row for each; the caller commits."""
    settings = settings or get_settings()
    access = create_access_token(user.id, settings)
    refresh = create_refresh_token(user.id, settings)
    db.add(AccessToken(user_id=user.id, token=access))
    db.add(RefreshToken(user_id=user.id, token=refresh))
    return access, refresh


def resolve_roles(db: Session, role_ids: list[int]) -> list[Role]:
    if not role_ids:
        return []
    wanted = set(role_ids)
    roles = list(db.scalars(select(Role).where(Role.id.in_(wanted)).order_by(Role.id)))
    missing = sorted(wanted - {role.id for role in roles})
    if missing:
        raise ValidationError("Unknown role id(s)", error={"roleId": missing})
    return roles


def check_branch(db: Session, branch_id: int | None) -> None:
    if branch_id is not None and db.get(Branch, branch_id) is None:
        raise ValidationError("Unknown branch id", error={"branchId": branch_id})


def username_taken(db: Session, username: str) -> bool:
    return db.scalar(select(User.id).where(User.username == username).limit(1)) is not None


def new_user(db: Session, payload: RegisterRequest, user_info_id: int | None = None) -> User:
    """Validate references and stage a new User; the caller commits."""
    if username_taken(db, payload.username):
        raise DuplicateError("User already exists")
    check_branch(db, payload.branch_id)
    user = User(
        username=payload.username,
        full_name=payload.full_name,
        password_hash=hash_password(payload.password),
        branch_id=payload.branch_id,
        user_info_id=user_info_id,
        is_active=True,
        roles=resolve_roles(db, payload.role_id),
    )
    db.add(user)
    return user


def login(db: Session, username: str, password: str) -> dict[str, Any]:
    user = db.scalars(
        select(User).where(User.username == username).options(selectinload(User.roles))
    ).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login", extra={"username": username})
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise ForbiddenError(INVALID_CREDENTIALS)

    access, refresh = issue_tokens(db, user)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist tokens for user %s", user.id)
        raise ServerError("Failed to login user", error=str(e)) from e
    logger.info("User logged in", extra={"user_id": user.id})
    return {
        "user": {
            "username": user.username,
            "fullName": user.full_name,
            "roleId": [_dump(RoleRead, role) for role in user.roles],
        },
        "token": access,
        "refreshToken": refresh,
    }


def register(db: Session, payload: RegisterRequest, actor_id: int | None = None) -> dict[str, Any]:
    user = new_user(db, payload)
    try:
        db.flush()
        access, _ = issue_tokens(db, user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to register user %s", payload.username)
        raise ServerError("Internal server error", error=str(e)) from e
    logger.info("User registered", extra={"user_id": user.id, "actor_id": actor_id})
    return {"user": {"username": user.username, "fullName": user.full_name}, "token": access}


def refresh_access_token(db: Session, refresh_token: str) -> dict[str, Any]:
    """Exchange a stored, unexpired refresh token for a new access token."""
    try:
        user_id = decode_token(refresh_token, "refresh")
    except TokenExpiredError as e:
        raise AuthenticationError("Refresh token expired, please login again") from e
    except TokenError as e:
        raise AuthenticationError("Refresh token invalid") from e

    stored = db.scalar(
        select(RefreshToken.id)
        .where(RefreshToken.user_id == user_id, RefreshToken.token == refresh_token)
        .limit(1)
    )
    if stored is None:
        raise AuthenticationError("Refresh token invalid")
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found.")
    if not user.is_active:
        raise ForbiddenError("User is inactive.")

    access = create_access_token(user.id)
    db.add(AccessToken(user_id=user.id, token=access))
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist access token for user %s", user.id)
        raise ServerError("Failed to refresh token", error=str(e)) from e
    return {"token": access}


def _set_password(db: Session, user: User, new_password: str, action: str) -> None:
    user.password_hash = hash_password(new_password)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s for user %s", action, user.id)
        raise ServerError("Failed to update password", error=str(e)) from e


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    _set_password(db, user, new_password, "change password")
    logger.info("Password changed", extra={"user_id": user_id})


def admin_reset_password(db: Session, user_id: int, new_password: str, actor_id: int) -> None:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    _set_password(db, user, new_password, "reset password")
    logger.info("Password reset by administrator", extra={"user_id": user_id, "actor_id": actor_id})


def profile(db: Session, user_id: int) -> dict[str, Any]:
    """Sanitized profile with roles, branch and personal information expanded."""
    user = db.scalars(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.roles),
            selectinload(User.branch),
            selectinload(User.user_info),
        )
    ).first()
    if user is None:
        raise NotFoundError("User not found.")
    data = _dump(UserRead, user)
    data["roleId"] = [_dump(RoleRead, role) for role in user.roles]
    data["branchId"] = _dump(BranchRead, user.branch) if user.branch is not None else None
    data["userInfoId"] = _dump(UserInfoRead, user.user_info) if user.user_info is not None else None
    return data
