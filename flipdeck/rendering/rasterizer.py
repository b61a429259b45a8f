"""PDF rasterizer — decode a PDF and render its pages to JPEG images.

Used two ways: the viewer renders the whole deck at 2x, and the creation
workflow renders page 1 at 0.5x for a thumbnail. Decoding and rendering run
on the render worker (``flipdeck.rendering.worker``); pages are rendered one
at a time, in order.
"""

import logging
import math
from collections.abc import AsyncIterator
from dataclasses import dataclass

import fitz  # PyMuPDF
import httpx

from flipdeck.rendering.worker import run_on_worker

logger = logging.getLogger(__name__)

# Viewer deck: oversampled for sharp display
DECK_SCALE = 2.0
DECK_JPEG_QUALITY = 90

# Creation-time thumbnail
THUMBNAIL_SCALE = 0.5
THUMBNAIL_JPEG_QUALITY = 80

# Display box: landscape pages get a fixed width, portrait pages a fixed height
LANDSCAPE_DISPLAY_WIDTH = 800
PORTRAIT_DISPLAY_HEIGHT = 733

JPEG_MIME = "image/jpeg"


class RenderError(Exception):
    """The document could not be decoded or a page could not be rendered."""


class CancelToken:
    """Cooperative cancellation flag checked between page renders."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class PdfSource:
    """Where the PDF bytes come from: a remote URL or an in-memory buffer."""

    url: str | None = None
    data: bytes | None = None

    def __post_init__(self) -> None:
        if (self.url is None) == (self.data is None):
            raise ValueError("PdfSource needs exactly one of url or data")

    @classmethod
    def from_url(cls, url: str) -> "PdfSource":
        return cls(url=url)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PdfSource":
        return cls(data=data)

    async def read(self, http_client: httpx.AsyncClient | None = None) -> bytes:
        """Return the PDF bytes, downloading them if this is a URL source."""
        if self.data is not None:
            return self.data

        try:
            if http_client is not None:
                response = await http_client.get(self.url)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RenderError(f"Could not fetch PDF from {self.url}: {e}") from e
        return response.content


@dataclass(frozen=True)
class DisplaySize:
    width: int
    height: int

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width


@dataclass(frozen=True)
class RenderedPage:
    """One rasterized page. ``page_number`` is 1-based."""

    page_number: int
    image: bytes
    width: int
    height: int
    mime_type: str = JPEG_MIME


@dataclass(frozen=True)
class RenderedDeck:
    pages: list[RenderedPage]
    display_size: DisplaySize

    @property
    def page_count(self) -> int:
        return len(self.pages)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_display_size(width: float, height: float) -> DisplaySize:
    """Pick the on-screen page box from the first page's unit-scale size."""
    if width <= 0 or height <= 0:
        raise RenderError(f"Invalid page size {width}x{height}")

    aspect_ratio = width / height
    if aspect_ratio > 1:
        return DisplaySize(
            width=LANDSCAPE_DISPLAY_WIDTH,
            height=_round_half_up(LANDSCAPE_DISPLAY_WIDTH / aspect_ratio),
        )
    return DisplaySize(
        width=_round_half_up(PORTRAIT_DISPLAY_HEIGHT * aspect_ratio),
        height=PORTRAIT_DISPLAY_HEIGHT,
    )


def _decode(data: bytes) -> fitz.Document:
    try:
        document = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise RenderError(f"Could not decode PDF: {e}") from e
    if document.needs_pass:
        document.close()
        raise RenderError("PDF is password protected")
    if document.page_count == 0:
        document.close()
        raise RenderError("PDF has no pages")
    return document


def _page_size(document: fitz.Document, index: int) -> tuple[float, float]:
    rect = document.load_page(index).rect
    return rect.width, rect.height


def _render(document: fitz.Document, index: int, scale: float, quality: int) -> RenderedPage:
    try:
        page = document.load_page(index)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        if pix.width == 0 or pix.height == 0:
            raise RenderError(f"Page {index + 1} has no drawable surface")
        image = pix.tobytes("jpeg", jpg_quality=quality)
    except (RuntimeError, ValueError) as e:
        raise RenderError(f"Could not render page {index + 1}: {e}") from e

    return RenderedPage(
        page_number=index + 1,
        image=image,
        width=pix.width,
        height=pix.height,
    )


class PdfDocument:
    """A decoded PDF bound to the render worker."""

    def __init__(self, document: fitz.Document) -> None:
        self._document = document
        self.page_count = document.page_count

    async def page_size(self, page_number: int) -> tuple[float, float]:
        """Unit-scale (points) width and height of a 1-based page."""
        return await run_on_worker(_page_size, self._document, page_number - 1)

    async def render_page(self, page_number: int, scale: float, quality: int) -> RenderedPage:
        if not 1 <= page_number <= self.page_count:
            raise RenderError(f"Page {page_number} out of range 1..{self.page_count}")
        return await run_on_worker(_render, self._document, page_number - 1, scale, quality)

    async def close(self) -> None:
        await run_on_worker(self._document.close)

    async def __aenter__(self) -> "PdfDocument":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


async def open_document(
    source: PdfSource,
    http_client: httpx.AsyncClient | None = None,
) -> PdfDocument:
    """Fetch and decode ``source`` on the render worker."""
    data = await source.read(http_client)
    document = await run_on_worker(_decode, data)
    logger.debug("Decoded PDF with %d pages", document.page_count)
    return PdfDocument(document)


async def render_pages(
    source: PdfSource,
    scale: float = DECK_SCALE,
    quality: int = DECK_JPEG_QUALITY,
    cancel_token: CancelToken | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncIterator[RenderedPage]:
    """Yield every page in order, starting page N+1 only after page N is done.

    Stops early, without error, once ``cancel_token`` is cancelled.
    """
    async with await open_document(source, http_client) as document:
        for page_number in range(1, document.page_count + 1):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info("Rendering cancelled before page %d", page_number)
                return
            yield await document.render_page(page_number, scale, quality)


async def render_deck(
    source: PdfSource,
    scale: float = DECK_SCALE,
    quality: int = DECK_JPEG_QUALITY,
    cancel_token: CancelToken | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RenderedDeck:
    """Render the whole document plus the display box derived from page 1."""
    pages: list[RenderedPage] = []
    async with await open_document(source, http_client) as document:
        display_size = compute_display_size(*await document.page_size(1))
        for page_number in range(1, document.page_count + 1):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info("Rendering cancelled after %d of %d pages", len(pages), document.page_count)
                break
            pages.append(await document.render_page(page_number, scale, quality))

    return RenderedDeck(pages=pages, display_size=display_size)


async def render_thumbnail(
    source: PdfSource,
    scale: float = THUMBNAIL_SCALE,
    quality: int = THUMBNAIL_JPEG_QUALITY,
    http_client: httpx.AsyncClient | None = None,
) -> RenderedPage:
    """Render page 1 only."""
    async with await open_document(source, http_client) as document:
        return await document.render_page(1, scale, quality)
