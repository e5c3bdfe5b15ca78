"""ORM models for user accounts, their role assignments and issued tokens."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from civreg.models.base import Base, TimestampMixin

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(TimestampMixin, Base):
    """
    Account used for JWT authentication and role-based access control.

    password_hash and version_id are internal and never serialized.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True)
    user_info_id = Column(
        Integer,
        ForeignKey("user_infos.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    version_id = Column(Integer, nullable=False)

    roles = relationship("Role", secondary=user_roles, order_by="Role.id")
    branch = relationship("Branch", foreign_keys=[branch_id])
    user_info = relationship("UserInfo", back_populates="user", foreign_keys=[user_info_id])
    access_tokens = relationship(
        "AccessToken", cascade="all, delete-orphan", passive_deletes=True
    )
    refresh_tokens = relationship(
        "RefreshToken", cascade="all, delete-orphan", passive_deletes=True
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]


class AccessToken(TimestampMixin, Base):
    """Issued access token. A row is added on every login/registration; none are revoked."""

    __tablename__ = "personal_access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(Text, nullable=False)


class RefreshToken(TimestampMixin, Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(Text, nullable=False)
