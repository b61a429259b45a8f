"""Plan tiers and their upload and flipbook limits."""

from dataclasses import dataclass

MEGABYTE = 1024 * 1024


@dataclass(frozen=True)
class PlanLimits:
    """Usage limits for a plan tier."""

    name: str
    display_name: str
    max_file_size_mb: int
    max_flipbooks: int | None  # None = unlimited
    price: int  # one-time, in major currency units (999 = ₹999)
    currency: str

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * MEGABYTE


PLANS: dict[str, PlanLimits] = {
    "free": PlanLimits(
        name="free",
        display_name="Free",
        max_file_size_mb=10,
        max_flipbooks=3,
        price=0,
        currency="INR",
    ),
    "pro": PlanLimits(
        name="pro",
        display_name="Pro",
        max_file_size_mb=50,
        max_flipbooks=None,
        price=999,
        currency="INR",
    ),
}

VALID_ROLES: set[str] = set(PLANS.keys())


def get_plan(role: str | None) -> PlanLimits:
    """Get plan limits by role name. Unknown or missing roles are free."""
    return PLANS.get(role or "free", PLANS["free"])


def file_size_message(plan: PlanLimits) -> str:
    """User-facing rejection for an oversized upload."""
    suffix = "" if plan.name == "pro" else f" (upgrade to Pro for {PLANS['pro'].max_file_size_mb}MB)"
    return f"File size must be less than {plan.max_file_size_mb}MB{suffix}"


def flipbook_limit_message(plan: PlanLimits) -> str:
    """User-facing rejection once the flipbook quota is used up."""
    return (
        f"{plan.display_name} plan limit reached ({plan.max_flipbooks} flipbooks). "
        "Upgrade to Pro for unlimited flipbooks."
    )


def exceeds_file_size(plan: PlanLimits, size_bytes: int) -> bool:
    return size_bytes > plan.max_file_size_bytes


def flipbook_quota_reached(plan: PlanLimits, current_count: int) -> bool:
    if plan.max_flipbooks is None:
        return False
    return current_count >= plan.max_flipbooks
