"""Content page endpoints; creation takes multipart form data with images."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from civreg.api.deps import EDITORS, Attachments, Authenticated, DbSession, QueryParams, require_roles
from civreg.api.forms import is_upload, parse_json_field, parse_model, read_upload
from civreg.core.errors import ValidationError
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser
from civreg.schemas.content import ContentCreate, ContentUpdate
from civreg.services.attachments import IncomingFile
from civreg.services.contents import ContentService

router = APIRouter()

Editor = Annotated[CurrentUser, Depends(require_roles(*EDITORS))]

IMAGE_FIELD_PREFIX = "images_"


async def _read_images(form) -> dict[int, list[IncomingFile]]:
    """Files under `images_<detailIndex>` grouped by detail index."""
    images: dict[int, list[IncomingFile]] = {}
    for name, value in form.multi_items():
        if not is_upload(value):
            continue
        if not name.startswith(IMAGE_FIELD_PREFIX):
            raise ValidationError(
                f"Unexpected file field: {name}", error={"expected": f"{IMAGE_FIELD_PREFIX}<detailIndex>"}
            )
        index = name[len(IMAGE_FIELD_PREFIX):]
        if not index.isdigit():
            raise ValidationError(f"Invalid file field: {name}")
        images.setdefault(int(index), []).append(await read_upload(value))
    return images


@router.post("", status_code=201)
async def create_content(
    request: Request, db: DbSession, attachments: Attachments, user: Editor
) -> JSONResponse:
    """
    Create a content page.

    Send `multipart/form-data` with `title`, `description`, `sort`, `details`
    (JSON array of `{statement, list}`) and image files named `images_0`,
    `images_1`, ... for the detail block at that index.
    """
    form = await request.form()
    payload = parse_model(
        ContentCreate,
        {
            "title": form.get("title"),
            "description": form.get("description") or "",
            "sort": form.get("sort") or 1,
            "details": parse_json_field(form.get("details"), "details"),
        },
    )
    images = await _read_images(form)
    service = ContentService(db, attachments)
    content = await run_in_threadpool(service.create_with_images, payload, images, user.id)
    data = await run_in_threadpool(service.serialize, content)
    return success_response(201, "Content created successfully", data)


@router.get("")
def list_contents(db: DbSession, attachments: Attachments, params: QueryParams, _user: Authenticated) -> JSONResponse:
    service = ContentService(db, attachments)
    page = service.list(service.build_query(params))
    return success_response(200, "Content list", page.as_dict())


@router.get("/{content_id}")
def get_content(content_id: int, db: DbSession, attachments: Attachments, _user: Authenticated) -> JSONResponse:
    service = ContentService(db, attachments)
    return success_response(200, "Content detail", service.serialize(service.get(content_id)))


@router.put("/{content_id}")
def update_content(
    content_id: int, body: ContentUpdate, db: DbSession, attachments: Attachments, user: Editor
) -> JSONResponse:
    service = ContentService(db, attachments)
    content = service.update(content_id, body, actor_id=user.id)
    return success_response(200, "Content updated successfully", service.serialize(content))


@router.delete("/{content_id}")
def delete_content(content_id: int, db: DbSession, attachments: Attachments, user: Editor) -> JSONResponse:
    """Remove every image object, then mark the page deleted."""
    ContentService(db, attachments).delete(content_id, actor_id=user.id)
    return success_response(200, "Content deleted successfully")


@router.get("/{content_id}/details/{detail_id}/images/{image_id}")
def get_content_image(
    content_id: int, detail_id: int, image_id: int, db: DbSession, attachments: Attachments
) -> StreamingResponse:
    image, stored = ContentService(db, attachments).open_image(content_id, detail_id, image_id)
    return StreamingResponse(
        stored.body,
        media_type=image.mime_type or stored.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{image.original_name}"',
            "Cross-Origin-Resource-Policy": "cross-origin",
        },
    )
