"""Pydantic v2 request/response schemas for flipbook endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"
STORAGE_PATH = r"^[^/.][^\\]*$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class FlipbookCreate(BaseModel):
    """Record written at the end of the creation workflow."""

    title: str = Field(..., min_length=1, max_length=255)
    pdf_storage_path: str = Field(..., min_length=1, max_length=512, pattern=STORAGE_PATH)
    thumbnail_path: str | None = Field(None, max_length=512, pattern=STORAGE_PATH)
    status: str = Field("ready", pattern="^(processing|ready)$")


class FlipbookUpdate(BaseModel):
    """Partial update from the edit workflow. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    background_color: str | None = Field(None, pattern=HEX_COLOR)
    background_image_path: str | None = Field(None, max_length=512, pattern=STORAGE_PATH)
    logo_image_path: str | None = Field(None, max_length=512, pattern=STORAGE_PATH)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class FlipbookResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    status: str
    pdf_storage_path: str
    thumbnail_path: str | None = None
    background_color: str
    background_image_path: str | None = None
    logo_image_path: str | None = None
    view_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FlipbookListResponse(BaseModel):
    items: list[FlipbookResponse]
    total: int


class ViewCountResponse(BaseModel):
    view_count: int


class FlipbookAnalyticsResponse(BaseModel):
    """Owner-only view statistics for one flipbook."""

    id: uuid.UUID
    title: str
    view_count: int
    created_at: datetime
    days_since_created: int


class MessageResponse(BaseModel):
    message: str
