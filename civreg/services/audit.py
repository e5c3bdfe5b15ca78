"""Relations to the users who created and last updated a record."""

from typing import Any

from civreg.models import User
from civreg.services.resource import Relation


def dump_actor(user: User) -> dict[str, Any]:
    return {"id": user.id, "username": user.username, "fullName": user.full_name}


AUDIT_RELATIONS = {
    "createdBy": Relation("created_by", dump_actor, id_attr="created_by_id"),
    "updatedBy": Relation("updated_by", dump_actor, id_attr="updated_by_id"),
}
