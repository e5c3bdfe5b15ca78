"""Branches. Deleting a branch deactivates it; the default list shows active branches only."""

from typing import Any

from pydantic import BaseModel

from civreg.core.errors import DuplicateError, ValidationError
from civreg.models import Branch, User
from civreg.schemas.user import UserRead
from civreg.schemas.branch import BranchRead
from civreg.services.query_filter import FieldMap
from civreg.services.resource import Relation, ResourceService, SoftDelete


def _dump_manager(user: User) -> dict[str, Any]:
    return UserRead.model_validate(user).model_dump(by_alias=True, mode="json")


class BranchService(ResourceService[Branch]):
    model = Branch
    label = "Branch"
    read_schema = BranchRead
    delete_policy = SoftDelete("is_active", False)
    update_hidden = True
    relations = {"manager": Relation("manager", _dump_manager, id_attr="manager_id")}
    search_fields = ("name", "city", "address", "phone")

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "name": Branch.name,
            "city": Branch.city,
            "address": Branch.address,
            "phone": Branch.phone,
        }

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        name = getattr(payload, "name", None)
        if name and self.exists_where(Branch.name == name, exclude_id=exclude_id):
            raise DuplicateError("Branch name already exists", error={"name": name})
        manager_id = getattr(payload, "manager_id", None)
        if manager_id is not None and self.session.get(User, manager_id) is None:
            raise ValidationError("Unknown manager id", error={"managerId": manager_id})
