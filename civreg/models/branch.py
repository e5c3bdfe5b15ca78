"""ORM model for branches (offices). Deleting a branch only deactivates it."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin


class Branch(TimestampMixin, Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    address = Column(String(1024), nullable=False, default="")
    city = Column(String(255), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    # users.branch_id points back here; the cycle is broken with ALTER on create.
    manager_id = Column(
        Integer,
        ForeignKey("users.id", use_alter=True, name="fk_branches_manager_id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    version_id = Column(Integer, nullable=False)

    manager = relationship("User", foreign_keys=[manager_id])

    __mapper_args__ = {"version_id_col": version_id}
