"""ORM models for content pages: ordered detail blocks with image attachments."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin


class Content(TimestampMixin, Base):
    """Content page; soft-deleted via `deleted` once its attachments are removed."""

    __tablename__ = "contents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False, default="")
    sort = Column(Integer, nullable=False, default=1)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    version_id = Column(Integer, nullable=False)

    details = relationship(
        "ContentDetail",
        back_populates="content",
        cascade="all, delete-orphan",
        order_by="ContentDetail.position",
    )
    created_by = relationship("User", foreign_keys=[created_by_id])
    updated_by = relationship("User", foreign_keys=[updated_by_id])

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def images(self) -> list["ContentImage"]:
        return [image for detail in self.details for image in detail.images]


class ContentDetail(Base):
    """One block of a content page: a statement, a bullet list and images."""

    __tablename__ = "content_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(Integer, ForeignKey("contents.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    statement = Column(Text, nullable=False)
    items = Column(JSON, nullable=False, default=list)

    content = relationship("Content", back_populates="details")
    images = relationship(
        "ContentImage",
        back_populates="detail",
        cascade="all, delete-orphan",
        order_by="ContentImage.id",
    )


class ContentImage(Base):
    """Attachment metadata; the bytes live in the object store under bucket/path."""

    __tablename__ = "content_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    detail_id = Column(Integer, ForeignKey("content_details.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(1024), nullable=False)
    original_name = Column(String(1024), nullable=False)
    path = Column(String(1024), nullable=False)
    mime_type = Column(String(128), nullable=False)
    encoding = Column(String(64), nullable=False, default="7bit")
    bucket = Column(String(255), nullable=False)

    detail = relationship("ContentDetail", back_populates="images")
