"""Asset Store API routes — owner-prefixed uploads and deletes, public downloads."""

import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from flipdeck.api.deps import get_asset_store, get_current_active_user, get_plan_limits
from flipdeck.billing.dependencies import check_upload_size
from flipdeck.billing.plans import PlanLimits
from flipdeck.models.user import User
from flipdeck.schemas.storage import DeleteResponse, UploadResponse
from flipdeck.storage.asset_store import AssetStore, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/storage", tags=["storage"])
public_router = APIRouter(prefix="/storage", tags=["storage"])


def _require_own_prefix(user: User, path: str) -> None:
    if not path.startswith(f"{user.id}/"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Objects must be stored under your own user folder",
        )


@router.put(
    "/{bucket}/{path:path}",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_object(
    bucket: str,
    path: str,
    request: Request,
    store: AssetStore = Depends(get_asset_store),
    current_user: User = Depends(get_current_active_user),
    plan: PlanLimits = Depends(get_plan_limits),
) -> UploadResponse:
    """Store the raw request body at ``bucket/path``."""
    _require_own_prefix(current_user, path)
    data = await request.body()
    if bucket == "pdfs":
        check_upload_size(plan, len(data))

    try:
        await store.upload(bucket, path, data)
        public_url = store.get_public_url(bucket, path)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return UploadResponse(bucket=bucket, path=path, public_url=public_url)


@router.delete("/{bucket}/{path:path}", response_model=DeleteResponse)
async def delete_object(
    bucket: str,
    path: str,
    store: AssetStore = Depends(get_asset_store),
    current_user: User = Depends(get_current_active_user),
) -> DeleteResponse:
    _require_own_prefix(current_user, path)
    try:
        removed = await store.delete(bucket, [path])
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return DeleteResponse(removed=removed)


@public_router.get("/{bucket}/{path:path}")
async def download_object(
    bucket: str,
    path: str,
    store: AssetStore = Depends(get_asset_store),
) -> FileResponse:
    """Public URL target for every stored object."""
    try:
        target = store.local_path(bucket, path)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found") from None

    media_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
    return FileResponse(target, media_type=media_type)
