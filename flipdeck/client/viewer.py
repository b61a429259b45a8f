"""Viewer pipeline — record, URLs, view count, full-deck render, assembler."""

import logging
from dataclasses import dataclass

from flipdeck.client.api import FlipdeckAPIError, FlipdeckClient
from flipdeck.config import settings
from flipdeck.rendering.assembler import FlipbookAssembler
from flipdeck.rendering.rasterizer import CancelToken, PdfSource, RenderError, render_deck

logger = logging.getLogger(__name__)


class ViewerError(Exception):
    """The flipbook record could not be loaded."""


@dataclass
class FlipbookView:
    flipbook: dict
    pdf_url: str
    share_url: str
    is_owner: bool
    view_count: int
    assembler: FlipbookAssembler | None = None
    error: str | None = None

    @property
    def loaded(self) -> bool:
        return self.assembler is not None


class FlipbookViewer:
    """Opens one flipbook for viewing. ``close()`` stops an in-flight render."""

    def __init__(self, client: FlipdeckClient, frontend_url: str | None = None) -> None:
        self.client = client
        self.frontend_url = (frontend_url or settings.frontend_url).rstrip("/")
        self._cancel_token: CancelToken | None = None

    def share_url(self, flipbook_id: str) -> str:
        return f"{self.frontend_url}/flipbook/{flipbook_id}"

    async def _current_user_id(self) -> str | None:
        if not self.client.is_authenticated:
            return None
        try:
            return (await self.client.get_me())["id"]
        except FlipdeckAPIError:
            return None

    async def open(self, flipbook_id: str) -> FlipbookView:
        """Load, count the view, and render the deck.

        A render failure is not raised: the view comes back with ``error`` set
        and no assembler.
        """
        try:
            flipbook = await self.client.get_flipbook(flipbook_id)
            view_count = await self.client.record_view(flipbook_id)
        except FlipdeckAPIError as e:
            logger.error("Failed to load flipbook %s: %s", flipbook_id, e.message)
            raise ViewerError("Failed to load flipbook") from e

        user_id = await self._current_user_id()
        view = FlipbookView(
            flipbook=flipbook,
            pdf_url=self.client.public_url("pdfs", flipbook["pdf_storage_path"]),
            share_url=self.share_url(flipbook_id),
            is_owner=user_id == flipbook["user_id"],
            view_count=view_count,
        )

        background_image_url = None
        if flipbook.get("background_image_path"):
            background_image_url = self.client.public_url("backgrounds", flipbook["background_image_path"])
        logo_image_url = None
        if flipbook.get("logo_image_path"):
            logo_image_url = self.client.public_url("logos", flipbook["logo_image_path"])

        self._cancel_token = CancelToken()
        try:
            deck = await render_deck(
                PdfSource.from_url(view.pdf_url),
                cancel_token=self._cancel_token,
                http_client=self.client.http,
            )
        except RenderError as e:
            logger.error("Error loading PDF for flipbook %s: %s", flipbook_id, e)
            view.error = str(e)
            return view

        view.assembler = FlipbookAssembler(
            deck.pages,
            deck.display_size,
            background_color=flipbook["background_color"],
            background_image_url=background_image_url,
            logo_image_url=logo_image_url,
        )
        return view

    def close(self) -> None:
        """Cancel rendering when the view is navigated away from."""
        if self._cancel_token is not None:
            self._cancel_token.cancel()
