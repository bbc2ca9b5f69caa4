"""User model."""

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from usergate.database import Base
from usergate.models.enums import Role
from usergate.models.mixins import IdMixin, TimestampMixin


class User(Base, IdMixin, TimestampMixin):
    """User account. ``password_hash`` is never serialized."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),)

    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # None = no local credential
    role = Column(String(20), nullable=False, default=Role.USER.value, server_default="user")

    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )
