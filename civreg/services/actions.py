"""Permission actions."""

from collections.abc import Mapping

from pydantic import BaseModel

from civreg.core.errors import DuplicateError
from civreg.models import Action
from civreg.schemas.action import ActionRead
from civreg.services.query_filter import FieldMap, ListQuery
from civreg.services.resource import HardDelete, ResourceService


class ActionService(ResourceService[Action]):
    model = Action
    label = "Action"
    read_schema = ActionRead
    delete_policy = HardDelete()
    search_fields = ("name", "description")

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "name": Action.name,
            "description": Action.description,
            "isActive": Action.is_active,
        }

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = super().build_query(params)
        return query.with_flag("isActive", query.param("isActive"))

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        name = getattr(payload, "name", None)
        if name and self.exists_where(Action.name == name, exclude_id=exclude_id):
            raise DuplicateError("Action name already exists", error={"name": name})
