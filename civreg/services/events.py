"""Events. Deleting an event cancels it; canceled events stay listable and readable."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from sqlalchemy.sql.elements import ColumnElement

from civreg.core.errors import ValidationError
from civreg.models import Event
from civreg.schemas.event import EventCreate, EventRead, check_date_range, check_time_range
from civreg.services.audit import AUDIT_RELATIONS
from civreg.services.query_filter import FieldMap, ListQuery
from civreg.services.resource import ResourceService, SoftDelete

CONTACT_COLUMNS = {"name": "contact_name", "phone": "contact_phone", "email": "contact_email"}


class EventService(ResourceService[Event]):
    model = Event
    label = "Event"
    read_schema = EventRead
    delete_policy = SoftDelete("is_canceled", True)
    relations = AUDIT_RELATIONS
    default_populate = ("createdBy",)
    search_fields = ("title", "description")

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "title": Event.title,
            "description": Event.description,
            "dateFrom": Event.date_from,
            "dateTo": Event.date_to,
            "timeFrom": Event.time_from,
            "timeTo": Event.time_to,
            "isCanceled": Event.is_canceled,
        }

    def visible(self) -> ColumnElement[bool] | None:
        return None

    def is_hidden(self, obj: Event) -> bool:
        return False

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = super().build_query(params)
        return (
            query.with_date_range(
                "dateFrom", query.param("startDate"), query.param("endDate"), upper_field="dateTo"
            )
            .with_flag("isCanceled", query.param("isCanceled"))
            .with_int("id", query.param("byEventId"), name="byEventId")
        )

    def values_for_create(self, payload: EventCreate, actor_id: int | None) -> dict[str, Any]:
        values = payload.model_dump(exclude={"contact_person"})
        contact = payload.contact_person
        values.update(contact_name=contact.name, contact_phone=contact.phone, contact_email=contact.email)
        if actor_id is not None:
            values["created_by_id"] = actor_id
        return values

    def apply_patch(self, obj: Event, patch: BaseModel, actor_id: int | None) -> None:
        values = patch.model_dump(exclude_unset=True)
        contact = values.pop("contact_person", None) or {}
        self.assign(obj, values)
        for key, value in contact.items():
            if key in CONTACT_COLUMNS and (value is not None or key == "email"):
                setattr(obj, CONTACT_COLUMNS[key], value)
        try:
            check_date_range(obj.date_from, obj.date_to)
            check_time_range(obj.time_from, obj.time_to)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if actor_id is not None:
            obj.updated_by_id = actor_id
