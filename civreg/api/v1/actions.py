"""Permission action endpoints (super-role only)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import DbSession, QueryParams, require_roles
from civreg.core.responses import success_response
from civreg.schemas.action import ActionCreate, ActionUpdate
from civreg.schemas.auth import CurrentUser
from civreg.services.actions import ActionService

router = APIRouter()

SystemAdmin = Annotated[CurrentUser, Depends(require_roles("SystemAdmin"))]


@router.post("", status_code=201)
def create_action(body: ActionCreate, db: DbSession, user: SystemAdmin) -> JSONResponse:
    service = ActionService(db)
    action = service.create(body, actor_id=user.id)
    return success_response(201, "Action created successfully", service.serialize(action))


@router.get("")
def list_actions(db: DbSession, params: QueryParams, _user: SystemAdmin) -> JSONResponse:
    service = ActionService(db)
    page = service.list(service.build_query(params))
    return success_response(200, "Actions retrieved successfully", page.as_dict())


@router.get("/{action_id}")
def get_action(action_id: int, db: DbSession, _user: SystemAdmin) -> JSONResponse:
    service = ActionService(db)
    return success_response(200, "Action retrieved successfully", service.serialize(service.get(action_id)))


@router.put("/{action_id}")
def update_action(action_id: int, body: ActionUpdate, db: DbSession, user: SystemAdmin) -> JSONResponse:
    service = ActionService(db)
    action = service.update(action_id, body, actor_id=user.id)
    return success_response(200, "Action updated successfully", service.serialize(action))


@router.delete("/{action_id}")
def delete_action(action_id: int, db: DbSession, user: SystemAdmin) -> JSONResponse:
    ActionService(db).delete(action_id, actor_id=user.id)
    return success_response(200, "Action deleted successfully")
