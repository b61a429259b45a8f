"""Plan tier per user. A missing row means free."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from flipdeck.database import Base, UUIDPrimaryKeyMixin


class UserRole(UUIDPrimaryKeyMixin, Base):
    """Plan tier of a user, upserted by payment verification."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False, server_default="free")
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role={self.role!r})>"
