"""Plan gating dependencies — re-check tier limits where writes are accepted."""

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.auth.dependencies import get_current_active_user
from flipdeck.billing.plans import (
    PlanLimits,
    exceeds_file_size,
    file_size_message,
    flipbook_limit_message,
    flipbook_quota_reached,
    get_plan,
)
from flipdeck.config import settings
from flipdeck.database import get_db
from flipdeck.models.user import User
from flipdeck.services.flipbook_service import count_flipbooks
from flipdeck.services.role_service import get_user_role

logger = logging.getLogger(__name__)

UPGRADE_URL = "/pricing"


async def get_plan_limits(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_active_user),
) -> PlanLimits:
    """Resolve the caller's role and return its plan limits."""
    return get_plan(await get_user_role(db, user.id))


async def check_flipbook_limit(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_active_user),
    plan: PlanLimits = Depends(get_plan_limits),
) -> None:
    """Raise 402 if the user already owns as many flipbooks as the plan allows."""
    if not settings.enforce_plan_limits or plan.max_flipbooks is None:
        return

    current_count = await count_flipbooks(db, user.id)
    if flipbook_quota_reached(plan, current_count):
        logger.info("User %s blocked at flipbook limit (%d)", user.id, current_count)
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "message": flipbook_limit_message(plan),
                "limit": plan.max_flipbooks,
                "current": current_count,
                "plan": plan.name,
                "upgrade_url": UPGRADE_URL,
            },
        )


def check_upload_size(plan: PlanLimits, size_bytes: int) -> None:
    """Raise 402 if a PDF upload is larger than the plan allows."""
    if not settings.enforce_plan_limits or not exceeds_file_size(plan, size_bytes):
        return
    raise HTTPException(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        detail={
            "message": file_size_message(plan),
            "limit": plan.max_file_size_bytes,
            "current": size_bytes,
            "plan": plan.name,
            "upgrade_url": UPGRADE_URL,
        },
    )
