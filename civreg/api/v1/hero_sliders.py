"""Hero-slider endpoints; each slide carries one uploaded image."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from civreg.api.deps import EDITORS, Attachments, Authenticated, DbSession, QueryParams, require_roles
from civreg.api.forms import is_upload, parse_model, read_upload
from civreg.core.responses import success_response
from civreg.schemas.auth import CurrentUser
from civreg.schemas.hero_slider import HeroSliderCreate
from civreg.services.hero_sliders import HeroSliderService

router = APIRouter()

Editor = Annotated[CurrentUser, Depends(require_roles(*EDITORS))]


@router.post("", status_code=201)
async def create_hero_slider(
    request: Request, db: DbSession, attachments: Attachments, user: Editor
) -> JSONResponse:
    """Send `multipart/form-data` with `title`, `subtitle`, `link`, `sort` and the file under `image`."""
    form = await request.form()
    fields = {
        key: form.get(key)
        for key in ("title", "subtitle", "link", "sort")
        if form.get(key) not in (None, "")
    }
    payload = parse_model(HeroSliderCreate, fields)
    upload = form.get("image")
    image = await read_upload(upload) if is_upload(upload) else None
    service = HeroSliderService(db, attachments)
    slider = await run_in_threadpool(service.create_with_image, payload, image, user.id)
    data = await run_in_threadpool(service.serialize, slider)
    return success_response(201, "Hero Slider created successfully", data)


@router.get("")
def list_hero_sliders(
    db: DbSession, attachments: Attachments, params: QueryParams, _user: Authenticated
) -> JSONResponse:
    service = HeroSliderService(db, attachments)
    page = service.list(service.build_query(params))
    return success_response(200, "Data retrieved successfully", page.as_dict())


@router.get("/{slider_id}")
def get_hero_slider_image(
    slider_id: int, db: DbSession, attachments: Attachments, _user: Authenticated
) -> StreamingResponse:
    attachment, stored = HeroSliderService(db, attachments).open_image(slider_id)
    return StreamingResponse(
        stored.body,
        media_type=attachment.mime_type or stored.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{attachment.original_name}"',
            "Cross-Origin-Resource-Policy": "cross-origin",
        },
    )


@router.delete("/{slider_id}")
def delete_hero_slider(
    slider_id: int, db: DbSession, attachments: Attachments, user: Editor
) -> JSONResponse:
    """Remove the image object, then the slide."""
    HeroSliderService(db, attachments).delete(slider_id, actor_id=user.id)
    return success_response(200, "File deleted successfully")
