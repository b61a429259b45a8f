"""Flipbook assembler — page-flip model over a rendered deck.

The assembler owns viewer state only: which leaves exist, how the page-flip
widget is configured, and the current page. The widget itself sits behind
``PageFlipController``; it performs the flip animation and reports back
through ``on_flip`` once a flip completes, which is the only place the
current page changes.
"""

import base64
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from flipdeck.rendering.rasterizer import DisplaySize, RenderedPage

logger = logging.getLogger(__name__)

MIN_SIZE_FACTOR = 0.5
MAX_SIZE_FACTOR = 2
FLIPPING_TIME_MS = 1000
MAX_SHADOW_OPACITY = 0.5
SWIPE_DISTANCE = 30


class PageFlipController(Protocol):
    """The page-flip widget's imperative API."""

    def flip_next(self) -> None: ...

    def flip_prev(self) -> None: ...


@dataclass(frozen=True)
class Leaf:
    """One page of the flip widget. Hard leaves are covers and do not bend."""

    page_number: int
    image: bytes
    mime_type: str
    hard: bool

    @property
    def show_page_number(self) -> bool:
        # Interior leaves carry a footer with their page number
        return not self.hard

    def data_url(self) -> str:
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class FlipWidgetConfig:
    width: int
    height: int
    min_width: int
    max_width: int
    min_height: int
    max_height: int
    show_cover: bool = True
    use_portrait: bool = False
    start_page: int = 0
    flipping_time: int = FLIPPING_TIME_MS
    max_shadow_opacity: float = MAX_SHADOW_OPACITY
    draw_shadow: bool = True
    mobile_scroll_support: bool = True
    swipe_distance: int = SWIPE_DISTANCE
    show_page_corners: bool = True
    size: str = "stretch"


def build_leaves(pages: list[RenderedPage]) -> list[Leaf]:
    """First and last pages become hard covers; the rest are normal leaves."""
    last_index = len(pages) - 1
    return [
        Leaf(
            page_number=page.page_number,
            image=page.image,
            mime_type=page.mime_type,
            hard=index in (0, last_index),
        )
        for index, page in enumerate(pages)
    ]


def build_widget_config(display_size: DisplaySize) -> FlipWidgetConfig:
    """Widget bounds for responsive resizing around the base display size."""
    width, height = display_size.width, display_size.height
    return FlipWidgetConfig(
        width=width,
        height=height,
        min_width=math.floor(width * MIN_SIZE_FACTOR),
        max_width=math.floor(width * MAX_SIZE_FACTOR),
        min_height=math.floor(height * MIN_SIZE_FACTOR),
        max_height=math.floor(height * MAX_SIZE_FACTOR),
        use_portrait=display_size.is_portrait,
    )


class FlipbookAssembler:
    """Viewer state for one flipbook: leaves, widget config, styling, current page."""

    def __init__(
        self,
        pages: list[RenderedPage],
        display_size: DisplaySize,
        background_color: str = "#FFFFFF",
        background_image_url: str | None = None,
        logo_image_url: str | None = None,
    ) -> None:
        self.leaves = build_leaves(pages)
        self.display_size = display_size
        self.widget_config = build_widget_config(display_size)
        self.background_color = background_color
        self.background_image_url = background_image_url
        self.logo_image_url = logo_image_url
        self._current_index = 0
        self._controller: PageFlipController | None = None

    @property
    def page_count(self) -> int:
        return len(self.leaves)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def can_go_previous(self) -> bool:
        return self._current_index > 0

    @property
    def can_go_next(self) -> bool:
        return self._current_index < self.page_count - 1

    def attach(self, controller: PageFlipController) -> None:
        """Bind the mounted page-flip widget."""
        self._controller = controller

    def detach(self) -> None:
        self._controller = None

    def on_flip(self, index: int) -> None:
        """Flip-completion callback: fired for button, click and swipe flips alike."""
        if not 0 <= index < self.page_count:
            logger.warning("Ignoring flip to index %d of %d pages", index, self.page_count)
            return
        self._current_index = index

    def next_page(self) -> bool:
        """Ask the widget to flip forward. Returns False when disabled."""
        if not self.can_go_next or self._controller is None:
            return False
        self._controller.flip_next()
        return True

    def previous_page(self) -> bool:
        """Ask the widget to flip back. Returns False when disabled."""
        if not self.can_go_previous or self._controller is None:
            return False
        self._controller.flip_prev()
        return True

    def page_label(self) -> str:
        return f"Page {self._current_index + 1} of {self.page_count}"

    def background_style(self) -> dict[str, str]:
        """CSS for the area behind the widget."""
        style = {"background-color": self.background_color}
        if self.background_image_url:
            style["background-image"] = f"url({self.background_image_url})"
            style["background-size"] = "cover"
            style["background-position"] = "center"
        return style
