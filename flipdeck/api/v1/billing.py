"""Billing API endpoints — plan catalogue, the caller's tier and usage."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.api.deps import get_current_active_user, get_db
from flipdeck.billing.plans import PLANS, PlanLimits, get_plan
from flipdeck.models.user import User
from flipdeck.schemas.billing import (
    MyPlanResponse,
    PlanResponse,
    PlansListResponse,
    RoleResponse,
)
from flipdeck.services.flipbook_service import count_flipbooks
from flipdeck.services.role_service import get_user_role

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


def _plan_response(plan: PlanLimits) -> PlanResponse:
    return PlanResponse(
        name=plan.name,
        display_name=plan.display_name,
        max_file_size_mb=plan.max_file_size_mb,
        max_flipbooks=plan.max_flipbooks,
        price=plan.price,
        currency=plan.currency,
    )


@router.get("/plans", response_model=PlansListResponse)
async def list_plans() -> PlansListResponse:
    """List available plans. Public, no auth required."""
    return PlansListResponse(plans=[_plan_response(p) for p in PLANS.values()])


@router.get("/role", response_model=RoleResponse)
async def get_role(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> RoleResponse:
    """The caller's role; ``free`` when no role row exists."""
    return RoleResponse(role=await get_user_role(db, current_user.id))


@router.get("/me", response_model=MyPlanResponse)
async def get_my_plan(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MyPlanResponse:
    """Role, limits and flipbook count, everything the creation dialog needs."""
    role = await get_user_role(db, current_user.id)
    return MyPlanResponse(
        role=role,
        plan=_plan_response(get_plan(role)),
        flipbooks_used=await count_flipbooks(db, current_user.id),
    )
