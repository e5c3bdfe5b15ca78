"""ORM models for personal information records and their identification documents."""

from datetime import UTC, date, datetime

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin

GENDERS = ("M", "F", "Other")
MARITAL_STATUSES = ("Single", "Married", "Divorced", "Widowed", "Other")


class UserInfo(TimestampMixin, Base):
    """
    Civil-registry record for a person, optionally linked to one User.

    Soft-deleted via `deleted`. Email is unique when present (NULL otherwise).
    """

    __tablename__ = "user_infos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False, index=True)
    last_name = Column(String(255), nullable=False, index=True)
    gender = Column(String(16), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    marital_status = Column(String(16), nullable=False, index=True)
    occupation = Column(String(255), nullable=False, default="")
    address = Column(String(1024), nullable=False, default="")
    phone_number = Column(String(64), nullable=False, default="")
    email = Column(String(255), nullable=True, unique=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    version_id = Column(Integer, nullable=False)

    identifications = relationship(
        "Identification",
        back_populates="user_info",
        cascade="all, delete-orphan",
        order_by="Identification.id",
    )
    user = relationship("User", back_populates="user_info", uselist=False)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def age(self) -> int | None:
        if self.date_of_birth is None:
            return None
        born: date = self.date_of_birth
        today = datetime.now(UTC).date()
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


class Identification(Base):
    """An identity document; (card_type, card_code) is unique across all records."""

    __tablename__ = "user_info_identifications"
    __table_args__ = (
        UniqueConstraint("card_type", "card_code", name="uq_identification_card"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_info_id = Column(
        Integer, ForeignKey("user_infos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    card_type = Column(String(64), nullable=False)
    card_code = Column(String(128), nullable=False)

    user_info = relationship("UserInfo", back_populates="identifications")
