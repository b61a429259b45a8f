"""Restyle, retitle or delete a flipbook the caller owns."""

import logging
import time

from flipdeck.client.api import FlipdeckAPIError, FlipdeckClient, LocalFile

logger = logging.getLogger(__name__)


class EditFailed(Exception):
    """Loading, saving or deleting a flipbook failed."""


def _timestamped_path(user_id: str, file: LocalFile) -> str:
    return f"{user_id}/{int(time.time() * 1000)}_{file.name}"


async def load_for_edit(client: FlipdeckClient, flipbook_id: str) -> dict:
    """Fetch a flipbook and make sure the caller owns it."""
    try:
        user = await client.get_me()
        flipbook = await client.get_flipbook(flipbook_id)
    except FlipdeckAPIError as e:
        raise EditFailed("Failed to load flipbook") from e

    if flipbook["user_id"] != user["id"]:
        raise EditFailed("You don't have permission to edit this flipbook")
    return flipbook


async def save_flipbook(
    client: FlipdeckClient,
    flipbook: dict,
    title: str,
    background_color: str,
    background_image: LocalFile | None = None,
    logo_image: LocalFile | None = None,
) -> dict:
    """Upload any new images, then write all fields in one update.

    Images that were not replaced keep their current paths.
    """
    background_image_path = flipbook.get("background_image_path")
    logo_image_path = flipbook.get("logo_image_path")

    try:
        user = await client.get_me()

        if background_image is not None:
            background_image_path = _timestamped_path(user["id"], background_image)
            await client.upload(
                "backgrounds", background_image_path, background_image.data, background_image.content_type
            )

        if logo_image is not None:
            logo_image_path = _timestamped_path(user["id"], logo_image)
            await client.upload("logos", logo_image_path, logo_image.data, logo_image.content_type)

        updated = await client.update_flipbook(
            flipbook["id"],
            title=title,
            background_color=background_color,
            background_image_path=background_image_path,
            logo_image_path=logo_image_path,
        )
    except FlipdeckAPIError as e:
        logger.error("Failed to update flipbook %s: %s", flipbook["id"], e.message)
        raise EditFailed("Failed to update flipbook") from e

    logger.info("Flipbook %s updated", flipbook["id"])
    return updated


async def delete_flipbook(client: FlipdeckClient, flipbook_id: str) -> None:
    """Delete the record. Uploaded files stay in storage."""
    try:
        await client.delete_flipbook(flipbook_id)
    except FlipdeckAPIError as e:
        raise EditFailed("Failed to delete flipbook") from e
