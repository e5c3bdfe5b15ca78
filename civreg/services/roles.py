"""Roles and the actions linked to them."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from sqlalchemy import select

from civreg.core.errors import DuplicateError, ValidationError
from civreg.models import Action, Role
from civreg.schemas.action import ActionRead
from civreg.schemas.role import RoleCreate, RoleRead
from civreg.services.query_filter import FieldMap, ListQuery, Related
from civreg.services.resource import HardDelete, Relation, ResourceService


def _dump_action(action: Action) -> dict[str, Any]:
    return ActionRead.model_validate(action).model_dump(by_alias=True, mode="json")


class RoleService(ResourceService[Role]):
    model = Role
    label = "Role"
    read_schema = RoleRead
    delete_policy = HardDelete()
    relations = {"actions": Relation("actions", _dump_action, many=True)}
    default_populate = ("actions",)
    search_fields = ("name", "description")

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "name": Role.name,
            "description": Role.description,
            "isActive": Role.is_active,
            "actions": Related(Role.actions, Action.id, many=True),
        }

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = super().build_query(params)
        return query.with_flag("isActive", query.param("isActive")).with_int(
            "actions", query.param("actionId"), name="actionId"
        )

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        name = getattr(payload, "name", None)
        if name and self.exists_where(Role.name == name, exclude_id=exclude_id):
            raise DuplicateError("Role name already exists", error={"name": name})

    def _actions(self, action_ids: list[int]) -> list[Action]:
        if not action_ids:
            return []
        wanted = set(action_ids)
        with self.store_errors("load"):
            found = list(self.session.scalars(select(Action).where(Action.id.in_(wanted))))
        missing = sorted(wanted - {action.id for action in found})
        if missing:
            raise ValidationError("Unknown action id(s)", error={"actions": missing})
        return found

    def values_for_create(self, payload: RoleCreate, actor_id: int | None) -> dict[str, Any]:
        values = payload.model_dump(exclude={"actions"})
        values["actions"] = self._actions(payload.actions)
        return values

    def apply_patch(self, obj: Role, patch: BaseModel, actor_id: int | None) -> None:
        values = patch.model_dump(exclude_unset=True)
        action_ids = values.pop("actions", None)
        self.assign(obj, values)
        if action_ids is not None:
            obj.actions = self._actions(action_ids)
