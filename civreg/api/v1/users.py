"""User and personal-information (UserInfo) endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import ADMINS, Authenticated, DbSession, QueryParams, require_roles
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser, RegisterRequest
from civreg.schemas.user import UserCreateWithInfo, UserInfoCreate, UserInfoUpdate, UserUpdate
from civreg.services.users import UserInfoService, UserService

router = APIRouter()

Admin = Annotated[CurrentUser, Depends(require_roles(*ADMINS))]


@router.get("")
def list_users(db: DbSession, params: QueryParams, _user: Authenticated) -> JSONResponse:
    """
    Users with their roles, branch and personal information.

    Filters: search (first/last name, phone, email), gender, maritalStatus,
    cardType, cardCode, idSearch, startDate/endDate (createdAt), branchId, isActive.
    """
    service = UserService(db)
    page = service.list(service.build_query(params)).as_dict()
    page["users"] = page.pop("items")
    return success_response(200, "data get successfully", page)


@router.post("/register-with-info", status_code=201)
def register_with_info(body: UserCreateWithInfo, db: DbSession, user: Admin) -> JSONResponse:
    """Create a UserInfo record and the account linked to it in one transaction."""
    data = UserService(db).create_with_info(body, actor_id=user.id)
    return success_response(201, "User created successfully", data)


@router.post("/register", status_code=201)
def register_user(body: RegisterRequest, db: DbSession, user: Admin) -> JSONResponse:
    """Create an account without personal information; no tokens are issued."""
    service = UserService(db)
    created = service.create(body, actor_id=user.id)
    return success_response(201, "User created successfully", service.serialize(created, ("roleId",)))


@router.get("/user-info")
def list_user_infos(db: DbSession, params: QueryParams, _user: Authenticated) -> JSONResponse:
    service = UserInfoService(db)
    page = service.list(service.build_query(params))
    return success_response(200, "User info retrieved successfully", page.as_dict())


@router.post("/user-info", status_code=201)
def create_user_info(body: UserInfoCreate, db: DbSession, user: Admin) -> JSONResponse:
    service = UserInfoService(db)
    info = service.create(body, actor_id=user.id)
    return success_response(201, "User info created successfully", service.serialize(info))


@router.put("/user-info/{user_info_id}")
def update_user_info(
    user_info_id: int, body: UserInfoUpdate, db: DbSession, user: Admin
) -> JSONResponse:
    service = UserInfoService(db)
    info = service.update(user_info_id, body, actor_id=user.id)
    return success_response(200, "User info updated successfully", service.serialize(info))


@router.delete("/user-info/{user_info_id}")
def delete_user_info(user_info_id: int, db: DbSession, user: Admin) -> JSONResponse:
    UserInfoService(db).delete(user_info_id, actor_id=user.id)
    return success_response(200, "User info deleted successfully")


@router.get("/{user_info_id}")
def get_user_info(user_info_id: int, db: DbSession, _user: Authenticated) -> JSONResponse:
    """Personal information by id, with the linked account expanded."""
    service = UserInfoService(db)
    info = service.get(user_info_id)
    return success_response(200, "User info retrieved successfully", service.serialize(info, ("user",)))


@router.put("/{user_id}")
def update_user(user_id: int, body: UserUpdate, db: DbSession, user: Admin) -> JSONResponse:
    service = UserService(db)
    updated = service.update(user_id, body, actor_id=user.id)
    return success_response(200, "User updated successfully", service.serialize(updated))


@router.delete("/{user_id}")
def delete_user(user_id: int, db: DbSession, user: Admin) -> JSONResponse:
    UserService(db).delete(user_id, actor_id=user.id)
    return success_response(200, "User deleted")
