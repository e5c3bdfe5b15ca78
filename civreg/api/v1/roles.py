"""Role endpoints: reads for any authenticated user, writes for SystemAdmin/Admin."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import ADMINS, Authenticated, DbSession, QueryParams, require_roles
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser
from civreg.schemas.role import RoleCreate, RoleUpdate
from civreg.services.roles import RoleService

router = APIRouter()

Admin = Annotated[CurrentUser, Depends(require_roles(*ADMINS))]


@router.post("", status_code=201)
def create_role(body: RoleCreate, db: DbSession, user: Admin) -> JSONResponse:
    service = RoleService(db)
    role = service.create(body, actor_id=user.id)
    return success_response(201, "Role created successfully", service.serialize(role))


@router.get("")
def list_roles(db: DbSession, params: QueryParams, _user: Authenticated) -> JSONResponse:
    service = RoleService(db)
    page = service.list(service.build_query(params))
    return success_response(200, "Roles retrieved successfully", page.as_dict())


@router.get("/{role_id}")
def get_role(role_id: int, db: DbSession, _user: Authenticated) -> JSONResponse:
    service = RoleService(db)
    return success_response(200, "Role retrieved successfully", service.serialize(service.get(role_id)))


@router.put("/{role_id}")
def update_role(role_id: int, body: RoleUpdate, db: DbSession, user: Admin) -> JSONResponse:
    service = RoleService(db)
    role = service.update(role_id, body, actor_id=user.id)
    return success_response(200, "Role updated successfully", service.serialize(role))


@router.delete("/{role_id}")
def delete_role(role_id: int, db: DbSession, user: Admin) -> JSONResponse:
    RoleService(db).delete(role_id, actor_id=user.id)
    return success_response(200, "Role deleted successfully")
