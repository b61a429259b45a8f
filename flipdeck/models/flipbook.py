"""Flipbook model — one user's converted PDF and its presentation styling."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from flipdeck.database import Base, UUIDPrimaryKeyMixin

DEFAULT_BACKGROUND_COLOR = "#FFFFFF"


class Flipbook(UUIDPrimaryKeyMixin, Base):
    """A PDF presented as an interactive flipbook."""

    __tablename__ = "flipbooks"
    __table_args__ = (
        CheckConstraint("view_count >= 0", name="ck_flipbooks_view_count_non_negative"),
        CheckConstraint("status IN ('processing', 'ready')", name="ck_flipbooks_status"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # Records are written "ready"; "processing" is kept for a future async pipeline
    status: Mapped[str] = mapped_column(String(50), nullable=False, server_default="ready")

    # Asset Store paths (bucket-relative)
    pdf_storage_path: Mapped[str] = mapped_column(String(512), nullable=False)
    thumbnail_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    background_image_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    logo_image_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    background_color: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=DEFAULT_BACKGROUND_COLOR
    )
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    @property
    def is_ready(self) -> bool:
        return self.status == "ready"

    def __repr__(self) -> str:
        return f"<Flipbook(id={self.id}, title={self.title!r}, status={self.status!r})>"
