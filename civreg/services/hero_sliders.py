"""Hero-slider entries, each with one stored image."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from civreg.core.config import Settings
from civreg.core.errors import NotFoundError
from civreg.core.storage import StoredObject
from civreg.models import HeroSlider
from civreg.schemas.common import Attachment
from civreg.schemas.hero_slider import HeroSliderCreate, HeroSliderRead
from civreg.services.attachments import AttachmentManager, IncomingFile
from civreg.services.audit import AUDIT_RELATIONS
from civreg.services.query_filter import FieldMap, ListQuery
from civreg.services.resource import HardDelete, ResourceService

logger = logging.getLogger(__name__)

UPLOAD_FOLDER = "hero-slider"


class HeroSliderService(ResourceService[HeroSlider]):
    model = HeroSlider
    label = "Hero slider"
    read_schema = HeroSliderRead
    delete_policy = HardDelete()
    relations = AUDIT_RELATIONS
    default_populate = ("createdBy",)
    search_fields = ("title", "subtitle")

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
            "title": HeroSlider.title,
            "subtitle": HeroSlider.subtitle,
            "sort": HeroSlider.sort,
            "isActive": HeroSlider.is_active,
        }

    def build_query(self, params: Mapping[str, str]) -> ListQuery:
        query = super().build_query(params)
        return query.with_flag("isActive", query.param("isActive"))

    def create_with_image(
        self,
        payload: HeroSliderCreate,
        image: IncomingFile | None,
        actor_id: int | None = None,
    ) -> HeroSlider:
        stored = self.attachments.upload(UPLOAD_FOLDER, [image]) if image is not None else []
        slider = HeroSlider(
            **payload.model_dump(),
            image=stored[0].model_dump() if stored else None,
            created_by_id=actor_id,
        )
        try:
            with self.store_errors("create"):
                self.session.add(slider)
                self.session.commit()
                self.session.refresh(slider)
        except Exception:
            self.attachments.discard(stored)
            raise
        logger.info("Hero slider created", extra={"entity_id": slider.id, "actor_id": actor_id})
        return slider

    def attachment(self, slider: HeroSlider) -> Attachment | None:
        return Attachment.model_validate(slider.image) if slider.image else None

    def before_delete(self, obj: HeroSlider) -> None:
        attachment = self.attachment(obj)
        if attachment is not None:
            self.attachments.delete_all([attachment])

    def open_image(self, slider_id: int) -> tuple[Attachment, StoredObject]:
        attachment = self.attachment(self.get(slider_id))
        if attachment is None:
            raise NotFoundError("File not found")
        return attachment, self.attachments.open(attachment)

    def serialize(self, obj: HeroSlider, populate: tuple[str, ...] | None = None) -> dict[str, Any]:
        data = super().serialize(obj, populate)
        data["imageUrl"] = f"{self.settings.API_PREFIX}/hero-slider/{obj.id}"
        return data
