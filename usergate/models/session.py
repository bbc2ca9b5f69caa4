"""Login session model."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from usergate.database import Base
from usergate.models.mixins import IdMixin, TimestampMixin


class UserSession(Base, IdMixin, TimestampMixin):
    """An active sign-in. Expired rows are ignored and count as inactive."""

    __tablename__ = "sessions"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
