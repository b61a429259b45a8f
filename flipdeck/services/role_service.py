"""Role lookups and upgrades for the plan tiers."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.billing.plans import VALID_ROLES
from flipdeck.models.user_role import UserRole

logger = logging.getLogger(__name__)


async def get_user_role(db: AsyncSession, user_id: uuid.UUID) -> str:
    """Return the user's role, defaulting to ``free`` when no row exists."""
    result = await db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
    role = result.scalar_one_or_none()
    if role not in VALID_ROLES:
        return "free"
    return role


async def set_user_role(db: AsyncSession, user_id: uuid.UUID, role: str) -> UserRole:
    """Upsert the user's role row."""
    if role not in VALID_ROLES:
        raise ValueError(f"Unknown role: {role}")

    result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
    user_role = result.scalar_one_or_none()

    if user_role is None:
        user_role = UserRole(user_id=user_id, role=role)
        db.add(user_role)
    else:
        user_role.role = role
    await db.flush()
    await db.refresh(user_role)

    logger.info("Set role of user %s to %s", user_id, role)
    return user_role
