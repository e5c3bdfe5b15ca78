"""Event endpoints. Deleting an event cancels it."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from civreg.api.deps import EDITORS, Authenticated, DbSession, QueryParams, require_roles
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser
from civreg.schemas.event import EventCreate, EventUpdate
from civreg.services.events import EventService

router = APIRouter()

Editor = Annotated[CurrentUser, Depends(require_roles(*EDITORS))]


@router.post("", status_code=201)
def create_event(body: EventCreate, db: DbSession, user: Editor) -> JSONResponse:
    service = EventService(db)
    event = service.create(body, actor_id=user.id)
    return success_response(201, "Event created successfully", service.serialize(event))


@router.get("")
def list_events(db: DbSession, params: QueryParams, _user: Editor) -> JSONResponse:
    """
    Events, newest first by default.

    Filters: startDate (dateFrom >=), endDate (dateTo <=), isCanceled, byEventId, search.
    """
    service = EventService(db)
    page = service.list(service.build_query(params))
    return success_response(200, "Events retrieved successfully", page.as_dict())


@router.get("/{event_id}")
def get_event(event_id: int, db: DbSession, _user: Authenticated) -> JSONResponse:
    service = EventService(db)
    return success_response(200, "Event retrieved successfully", service.serialize(service.get(event_id)))


@router.put("/{event_id}")
def update_event(event_id: int, body: EventUpdate, db: DbSession, user: Editor) -> JSONResponse:
    service = EventService(db)
    event = service.update(event_id, body, actor_id=user.id)
    return success_response(200, "Event updated successfully", service.serialize(event, ("createdBy", "updatedBy")))


@router.delete("/{event_id}")
def cancel_event(event_id: int, db: DbSession, user: Editor) -> JSONResponse:
    EventService(db).delete(event_id, actor_id=user.id)
    return success_response(200, "Event canceled successfully")
