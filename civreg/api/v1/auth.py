"""Login, registration, profile, token refresh and password endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import ADMINS, Authenticated, DbSession, require_roles
from civreg.core.responses import success_response
from civreg.schemas.auth import (
    AdminResetPasswordRequest,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
)
from civreg.services import auth as auth_service

router = APIRouter()


@router.post("/login")
def login(body: LoginRequest, db: DbSession) -> JSONResponse:
    """
    Authenticate with username and password.

    Returns the access token (send it as `Authorization: Bearer <token>`) and a
    refresh token for `POST /auth/refresh`.
    """
    data = auth_service.login(db, body.username, body.password)
    return success_response(200, "Login successfully", data)


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    db: DbSession,
    admin: Annotated[CurrentUser, Depends(require_roles(*ADMINS))],
) -> JSONResponse:
    """Create an account (SystemAdmin/Admin only) and issue its first tokens."""
    data = auth_service.register(db, body, actor_id=admin.id)
    return success_response(201, "User created successfully.", data)


@router.get("/me")
def me(user: Authenticated, db: DbSession) -> JSONResponse:
    """Profile of the caller with roles, branch and personal information expanded."""
    return success_response(200, "User profile get successfully.", auth_service.profile(db, user.id))


@router.post("/refresh")
def refresh(body: RefreshRequest, db: DbSession) -> JSONResponse:
    data = auth_service.refresh_access_token(db, body.refresh_token)
    return success_response(200, "Token refreshed successfully", data)


@router.patch("/reset/change-password")
def change_password(body: ChangePasswordRequest, user: Authenticated, db: DbSession) -> JSONResponse:
    auth_service.change_password(db, user.id, body.current_password, body.new_password)
    return success_response(200, "Password changed successfully")


@router.patch("/reset/admin")
def reset_password(
    body: AdminResetPasswordRequest,
    db: DbSession,
    admin: Annotated[CurrentUser, Depends(require_roles(*ADMINS))],
) -> JSONResponse:
    """Set a new password for any user (SystemAdmin/Admin only)."""
    auth_service.admin_reset_password(db, body.user_id, body.new_password, actor_id=admin.id)
    return success_response(200, "Password reset successfully")
