"""Record Store operations on the flipbooks table."""

import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.models.flipbook import Flipbook

logger = logging.getLogger(__name__)


async def count_flipbooks(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Number of flipbooks owned by ``user_id``."""
    result = await db.execute(
        select(func.count()).select_from(Flipbook).where(Flipbook.user_id == user_id)
    )
    return result.scalar_one()


async def list_flipbooks(db: AsyncSession, user_id: uuid.UUID) -> list[Flipbook]:
    """Owner's flipbooks, newest first."""
    result = await db.execute(
        select(Flipbook)
        .where(Flipbook.user_id == user_id)
        .order_by(Flipbook.created_at.desc())
    )
    return list(result.scalars().all())


async def get_flipbook(db: AsyncSession, flipbook_id: uuid.UUID) -> Flipbook | None:
    result = await db.execute(select(Flipbook).where(Flipbook.id == flipbook_id))
    return result.scalar_one_or_none()


async def create_flipbook(db: AsyncSession, user_id: uuid.UUID, **fields) -> Flipbook:
    """Insert a flipbook record owned by ``user_id``."""
    flipbook = Flipbook(user_id=user_id, **fields)
    db.add(flipbook)
    await db.flush()
    await db.refresh(flipbook)
    logger.info("Created flipbook %s for user %s", flipbook.id, user_id)
    return flipbook


async def update_flipbook(db: AsyncSession, flipbook: Flipbook, changes: dict) -> Flipbook:
    """Apply a partial update. No version check; the last write wins."""
    for field, value in changes.items():
        setattr(flipbook, field, value)
    db.add(flipbook)
    await db.flush()
    await db.refresh(flipbook)
    return flipbook


async def delete_flipbook(db: AsyncSession, flipbook: Flipbook) -> None:
    """Delete the record. Its storage objects are left behind."""
    await db.delete(flipbook)
    await db.flush()
    logger.info(
        "Deleted flipbook %s (pdf %s left in storage)",
        flipbook.id,
        flipbook.pdf_storage_path,
    )


async def increment_view_count(db: AsyncSession, flipbook: Flipbook) -> int:
    """Add one view and return the new count."""
    await db.execute(
        update(Flipbook)
        .where(Flipbook.id == flipbook.id)
        .values(view_count=Flipbook.view_count + 1)
    )
    await db.flush()
    await db.refresh(flipbook)
    return flipbook.view_count
