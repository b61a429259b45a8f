"""Flipbooks API routes — owner-scoped writes, public reads of ready flipbooks."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.api.deps import (
    check_flipbook_limit,
    get_current_active_user,
    get_db,
    get_optional_user,
)
from flipdeck.models.flipbook import Flipbook
from flipdeck.models.user import User
from flipdeck.schemas.flipbook import (
    FlipbookCreate,
    FlipbookListResponse,
    FlipbookResponse,
    FlipbookUpdate,
    MessageResponse,
    ViewCountResponse,
)
from flipdeck.services import flipbook_service

router = APIRouter(prefix="/api/v1/flipbooks", tags=["flipbooks"])

_PATH_FIELDS = ("pdf_storage_path", "thumbnail_path", "background_image_path", "logo_image_path")


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Flipbook not found",
    )


def _check_path_ownership(user: User, values: dict) -> None:
    """Storage paths must live under the caller's own user-id prefix."""
    prefix = f"{user.id}/"
    for field in _PATH_FIELDS:
        value = values.get(field)
        if value is not None and not value.startswith(prefix):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{field} must be inside your own storage folder",
            )


async def get_owned_flipbook(
    flipbook_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Flipbook:
    """Load a flipbook the caller owns. 404 if missing or owned by someone else."""
    flipbook = await flipbook_service.get_flipbook(db, flipbook_id)
    if flipbook is None or flipbook.user_id != current_user.id:
        raise _not_found()
    return flipbook


@router.post(
    "",
    response_model=FlipbookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a flipbook record",
)
async def create_flipbook(
    body: FlipbookCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    _limit_check: None = Depends(check_flipbook_limit),  # Plan gating
) -> FlipbookResponse:
    """Insert the record for an already-uploaded PDF."""
    values = body.model_dump()
    _check_path_ownership(current_user, values)
    flipbook = await flipbook_service.create_flipbook(db, current_user.id, **values)
    return FlipbookResponse.model_validate(flipbook)


@router.get(
    "",
    response_model=FlipbookListResponse,
    summary="List flipbooks owned by the current user",
)
async def list_flipbooks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FlipbookListResponse:
    items = await flipbook_service.list_flipbooks(db, current_user.id)
    return FlipbookListResponse(
        items=[FlipbookResponse.model_validate(f) for f in items],
        total=len(items),
    )


@router.get(
    "/{flipbook_id}",
    response_model=FlipbookResponse,
    summary="Get a flipbook by ID",
)
async def get_flipbook(
    flipbook_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> FlipbookResponse:
    """Anyone with the link can read a ready flipbook; owners can read any of theirs."""
    flipbook = await flipbook_service.get_flipbook(db, flipbook_id)
    if flipbook is None:
        raise _not_found()

    is_owner = current_user is not None and flipbook.user_id == current_user.id
    if not flipbook.is_ready and not is_owner:
        raise _not_found()

    return FlipbookResponse.model_validate(flipbook)


@router.put(
    "/{flipbook_id}",
    response_model=FlipbookResponse,
    summary="Update title and styling",
)
async def update_flipbook(
    body: FlipbookUpdate,
    flipbook: Flipbook = Depends(get_owned_flipbook),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FlipbookResponse:
    """Partially update a flipbook. Only explicitly set fields are changed."""
    changes = body.model_dump(exclude_unset=True)
    _check_path_ownership(current_user, changes)
    flipbook = await flipbook_service.update_flipbook(db, flipbook, changes)
    return FlipbookResponse.model_validate(flipbook)


@router.delete(
    "/{flipbook_id}",
    response_model=MessageResponse,
    summary="Delete a flipbook",
)
async def delete_flipbook(
    flipbook: Flipbook = Depends(get_owned_flipbook),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await flipbook_service.delete_flipbook(db, flipbook)
    return MessageResponse(message="Flipbook deleted")


@router.post(
    "/{flipbook_id}/views",
    response_model=ViewCountResponse,
    summary="Record one view",
)
async def record_view(
    flipbook_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ViewCountResponse:
    """Increment the view count. Called once per view-page load, no per-viewer dedup."""
    flipbook = await flipbook_service.get_flipbook(db, flipbook_id)
    if flipbook is None or not flipbook.is_ready:
        raise _not_found()

    view_count = await flipbook_service.increment_view_count(db, flipbook)
    return ViewCountResponse(view_count=view_count)
