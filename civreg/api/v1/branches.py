"""Branch endpoints. The list shows active branches only; delete deactivates."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import ADMINS, Authenticated, DbSession, QueryParams, require_roles
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser
from civreg.schemas.branch import BranchCreate, BranchUpdate
from civreg.services.branches import BranchService

router = APIRouter()

Admin = Annotated[CurrentUser, Depends(require_roles(*ADMINS))]


@router.get("")
def list_branches(db: DbSession, params: QueryParams, _user: Authenticated) -> JSONResponse:
    service = BranchService(db)
    page = service.list(service.build_query(params))
    return success_response(200, "Branches retrieved successfully", page.as_dict())


@router.post("", status_code=201)
def create_branch(body: BranchCreate, db: DbSession, user: Admin) -> JSONResponse:
    service = BranchService(db)
    branch = service.create(body, actor_id=user.id)
    return success_response(201, "Branch created successfully", service.serialize(branch))


@router.get("/{branch_id}")
def get_branch(branch_id: int, db: DbSession, _user: Authenticated) -> JSONResponse:
    service = BranchService(db)
    return success_response(200, "Branch retrieved successfully", service.serialize(service.get(branch_id)))


@router.put("/{branch_id}")
def update_branch(branch_id: int, body: BranchUpdate, db: DbSession, user: Admin) -> JSONResponse:
    service = BranchService(db)
    branch = service.update(branch_id, body, actor_id=user.id)
    return success_response(200, "Branch updated successfully", service.serialize(branch))


@router.delete("/{branch_id}")
def delete_branch(branch_id: int, db: DbSession, user: Admin) -> JSONResponse:
    BranchService(db).delete(branch_id, actor_id=user.id)
    return success_response(200, "Branch deactivated successfully")
