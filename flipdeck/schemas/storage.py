"""Pydantic v2 schemas for the Asset Store endpoints."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    bucket: str
    path: str
    public_url: str


class DeleteResponse(BaseModel):
    removed: list[str]
