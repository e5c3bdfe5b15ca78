"""ORM model for permission actions (capabilities linked to roles)."""

from sqlalchemy import Boolean, Column, Integer, String, Text

from civreg.models.base import Base, TimestampMixin


class Action(TimestampMixin, Base):
    """
    Named capability (letters and underscores only, e.g. manage_users).

    Roles reference actions; the action-capability authorization strategy
    checks the names of the actions linked to the caller's roles.
    """

    __tablename__ = "actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}
