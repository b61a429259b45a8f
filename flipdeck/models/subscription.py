"""Subscription model — one Razorpay payment attempt."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from flipdeck.database import Base, UUIDPrimaryKeyMixin


class Subscription(UUIDPrimaryKeyMixin, Base):
    """Tracks a gateway order from creation (pending) to verification (active)."""

    __tablename__ = "subscriptions"

    # Not unique: every order creation inserts a new pending row
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Razorpay identifiers
    razorpay_order_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    razorpay_payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    plan_type: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, server_default="pending")

    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, order={self.razorpay_order_id!r}, "
            f"status={self.status})>"
        )
