"""ORM model for roles and the role <-> action association."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin

role_actions = Table(
    "role_actions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("action_id", Integer, ForeignKey("actions.id", ondelete="CASCADE"), primary_key=True),
)


class Role(TimestampMixin, Base):
    """Named role. Route access is granted by role name; see services.authorization."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    version_id = Column(Integer, nullable=False)

    actions = relationship("Action", secondary=role_actions, order_by="Action.id")

    __mapper_args__ = {"version_id_col": version_id}
