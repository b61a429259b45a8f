"""Per-flipbook view statistics for owners."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from flipdeck.api.v1.flipbooks import get_owned_flipbook
from flipdeck.models.flipbook import Flipbook
from flipdeck.schemas.flipbook import FlipbookAnalyticsResponse

router = APIRouter(prefix="/api/v1/flipbooks", tags=["analytics"])


def days_since(created_at: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``created_at`` (naive values are UTC)."""
    now = now or datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max((now - created_at).days, 0)


@router.get("/{flipbook_id}/analytics", response_model=FlipbookAnalyticsResponse)
async def get_flipbook_analytics(
    flipbook: Flipbook = Depends(get_owned_flipbook),
) -> FlipbookAnalyticsResponse:
    """Total views and age of a flipbook. Only the owner may read them."""
    return FlipbookAnalyticsResponse(
        id=flipbook.id,
        title=flipbook.title,
        view_count=flipbook.view_count,
        created_at=flipbook.created_at,
        days_since_created=days_since(flipbook.created_at),
    )
