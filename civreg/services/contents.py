"""
Content pages.

A page is created from multipart form data: scalar fields, `details` as a JSON
array, and image files under `images_<detailIndex>`. Deleting a page removes
its image objects first and only then flags the row as deleted.
"""

import logging
from pydantic import BaseModel
from sqlalchemy.orm import Session

from civreg.core.config import Settings
from civreg.core.errors import DuplicateError, NotFoundError, ValidationError
from civreg.core.storage import StoredObject
from civreg.models import Content, ContentDetail, ContentImage
from civreg.schemas.common import Attachment
from civreg.schemas.content import ContentCreate, ContentRead
from civreg.services.attachments import AttachmentManager, IncomingFile
from civreg.services.audit import AUDIT_RELATIONS
from civreg.services.query_filter import FieldMap
from civreg.services.resource import ResourceService, SoftDelete

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = "content"


class ContentService(ResourceService[Content]):
    model = Content
    label = "Content"
    read_schema = ContentRead
    delete_policy = SoftDelete("deleted", True)
    relations = AUDIT_RELATIONS
    default_populate = ("createdBy", "updatedBy")
    search_fields = ("title", "description")

    def __init__(
        self,
        session: Session,
        attachments: AttachmentManager,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(session, settings)
        self.attachments = attachments

    def fields(self) -> FieldMap:
        return {
            **super().fields(),
            "title": Content.title,
            "description": Content.description,
            "sort": Content.sort,
        }

    def check_unique(self, payload: BaseModel, exclude_id: int | None = None) -> None:
        title = getattr(payload, "title", None)
        if title and self.exists_where(Content.title == title, exclude_id=exclude_id):
            raise DuplicateError("Content title already exists", error={"title": title})

    def create_with_images(
        self,
        payload: ContentCreate,
        images: dict[int, list[IncomingFile]],
        actor_id: int | None = None,
    ) -> Content:
        unknown = sorted(index for index in images if not 0 <= index < len(payload.details))
        if unknown:
            raise ValidationError("Images refer to unknown detail blocks", error={"detailIndex": unknown})
        self.check_unique(payload)

        order = sorted(images)
        flat = [file for index in order for file in images[index]]
        stored = self.attachments.upload(UPLOAD_FOLDER, flat)

        by_detail: dict[int, list[Attachment]] = {}
        cursor = 0
        for index in order:
            count = len(images[index])
            by_detail[index] = stored[cursor:cursor + count]
            cursor += count

        content = Content(
            title=payload.title,
            description=payload.description,
            sort=payload.sort,
            created_by_id=actor_id,
            details=[
                ContentDetail(
                    position=position,
                    statement=detail.statement,
                    items=list(detail.items),
                    images=[ContentImage(**item.model_dump()) for item in by_detail.get(position, [])],
                )
                for position, detail in enumerate(payload.details)
            ],
        )
        try:
            with self.store_errors("create"):
                self.session.add(content)
                self.session.commit()
                self.session.refresh(content)
        except Exception:
            self.attachments.discard(stored)
            raise
        logger.info(
            "Content created",
            extra={"entity_id": content.id, "actor_id": actor_id, "images": len(stored)},
        )
        return content

    def before_delete(self, obj: Content) -> None:
        self.attachments.delete_all(Attachment.model_validate(image) for image in obj.images)

    def find_image(self, content_id: int, detail_id: int, image_id: int) -> ContentImage:
        content = self.get(content_id)
        for detail in content.details:
            if detail.id != detail_id:
                continue
            for image in detail.images:
                if image.id == image_id:
                    return image
        raise NotFoundError("Image not found")

    def open_image(self, content_id: int, detail_id: int, image_id: int) -> tuple[ContentImage, StoredObject]:
        image = self.find_image(content_id, detail_id, image_id)
        return image, self.attachments.open(Attachment.model_validate(image))

