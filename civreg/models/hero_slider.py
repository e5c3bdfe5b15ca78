"""ORM model for hero-slider entries with a single image attachment."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin


class HeroSlider(TimestampMixin, Base):
    """
    Slide shown on the landing page.

    image holds attachment metadata: filename, original_name, path, mime_type,
    encoding, bucket. Deleting a slide removes the object, then the row.
    """

    __tablename__ = "hero_sliders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(1024), nullable=False, default="")
    link = Column(String(2048), nullable=False, default="")
    sort = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    image = Column(JSON, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    version_id = Column(Integer, nullable=False)

    created_by = relationship("User", foreign_keys=[created_by_id])
    updated_by = relationship("User", foreign_keys=[updated_by_id])

    __mapper_args__ = {"version_id_col": version_id}
