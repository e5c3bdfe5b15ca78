"""ORM model for events. Deleting an event cancels it (isCanceled)."""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin


class Event(TimestampMixin, Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    date_from = Column(Date, nullable=False, index=True)
    date_to = Column(Date, nullable=False, index=True)
    # HH:mm strings; zero-padded so string order equals time order
    time_from = Column(String(5), nullable=False)
    time_to = Column(String(5), nullable=False)
    description = Column(Text, nullable=False, default="")
    map = Column(String(2048), nullable=False, default="")
    url_image = Column(String(2048), nullable=False, default="")
    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(64), nullable=False)
    contact_email = Column(String(255), nullable=True)
    is_canceled = Column(Boolean, nullable=False, default=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    version_id = Column(Integer, nullable=False)

    created_by = relationship("User", foreign_keys=[created_by_id])
    updated_by = relationship("User", foreign_keys=[updated_by_id])

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def contact_person(self) -> dict[str, str | None]:
        return {"name": self.contact_name, "phone": self.contact_phone, "email": self.contact_email}
