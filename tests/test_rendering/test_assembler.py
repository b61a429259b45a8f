"""Unit tests for the flipbook assembler (leaves, widget config, navigation)."""

import base64

import pytest

from flipdeck.rendering.assembler import (
    FlipbookAssembler,
    Leaf,
    build_leaves,
    build_widget_config,
)
from flipdeck.rendering.rasterizer import DisplaySize, RenderedPage


def _pages(count: int) -> list[RenderedPage]:
    return [
        RenderedPage(page_number=n, image=f"page-{n}".encode(), width=100, height=140)
        for n in range(1, count + 1)
    ]


class FakeController:
    """Records flip requests without completing them."""

    def __init__(self):
        self.calls: list[str] = []

    def flip_next(self) -> None:
        self.calls.append("next")

    def flip_prev(self) -> None:
        self.calls.append("prev")


class TestBuildLeaves:
    def test_first_and_last_are_hard(self):
        leaves = build_leaves(_pages(5))
        assert [leaf.hard for leaf in leaves] == [True, False, False, False, True]

    def test_single_page_is_hard(self):
        assert [leaf.hard for leaf in build_leaves(_pages(1))] == [True]

    def test_two_pages_both_covers(self):
        assert [leaf.hard for leaf in build_leaves(_pages(2))] == [True, True]

    def test_keeps_page_order(self):
        assert [leaf.page_number for leaf in build_leaves(_pages(4))] == [1, 2, 3, 4]

    def test_only_interior_leaves_show_page_number(self):
        leaves = build_leaves(_pages(3))
        assert [leaf.show_page_number for leaf in leaves] == [False, True, False]

    def test_data_url(self):
        leaf = Leaf(page_number=1, image=b"\xff\xd8abc", mime_type="image/jpeg", hard=True)
        encoded = base64.b64encode(b"\xff\xd8abc").decode()
        assert leaf.data_url() == f"data:image/jpeg;base64,{encoded}"


class TestBuildWidgetConfig:
    def test_landscape_bounds(self):
        config = build_widget_config(DisplaySize(width=800, height=565))
        assert (config.width, config.height) == (800, 565)
        assert (config.min_width, config.max_width) == (400, 1600)
        assert (config.min_height, config.max_height) == (282, 1130)
        assert config.use_portrait is False

    def test_portrait_flag(self):
        config = build_widget_config(DisplaySize(width=518, height=733))
        assert config.use_portrait is True
        assert config.min_height == 366

    def test_widget_defaults(self):
        config = build_widget_config(DisplaySize(width=800, height=600))
        assert config.show_cover is True
        assert config.start_page == 0
        assert config.flipping_time == 1000
        assert config.size == "stretch"


class TestNavigation:
    """Current page changes only through the widget's flip callback."""

    def _assembler(self, count: int = 3) -> tuple[FlipbookAssembler, FakeController]:
        assembler = FlipbookAssembler(_pages(count), DisplaySize(width=518, height=733))
        controller = FakeController()
        assembler.attach(controller)
        return assembler, controller

    def test_starts_on_first_page(self):
        assembler, _ = self._assembler()
        assert assembler.current_index == 0
        assert assembler.page_label() == "Page 1 of 3"

    def test_previous_disabled_on_first_page(self):
        assembler, controller = self._assembler()
        assert assembler.can_go_previous is False
        assert assembler.previous_page() is False
        assert controller.calls == []

    def test_next_requests_flip_without_moving(self):
        assembler, controller = self._assembler()
        assert assembler.next_page() is True
        assert controller.calls == ["next"]
        assert assembler.current_index == 0

    def test_on_flip_moves_current_page(self):
        assembler, _ = self._assembler()
        assembler.on_flip(1)
        assert assembler.current_index == 1
        assert assembler.page_label() == "Page 2 of 3"
        assert assembler.can_go_previous is True
        assert assembler.can_go_next is True

    def test_next_disabled_on_last_page(self):
        assembler, controller = self._assembler()
        assembler.on_flip(2)
        assert assembler.can_go_next is False
        assert assembler.next_page() is False
        assert controller.calls == []

    def test_previous_requests_flip(self):
        assembler, controller = self._assembler()
        assembler.on_flip(2)
        assert assembler.previous_page() is True
        assert controller.calls == ["prev"]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range_flip_ignored(self, index):
        assembler, _ = self._assembler()
        assembler.on_flip(1)
        assembler.on_flip(index)
        assert assembler.current_index == 1

    def test_no_controller_no_flip(self):
        assembler = FlipbookAssembler(_pages(3), DisplaySize(width=518, height=733))
        assert assembler.next_page() is False

    def test_detach(self):
        assembler, controller = self._assembler()
        assembler.detach()
        assert assembler.next_page() is False
        assert controller.calls == []

    def test_single_page_has_no_navigation(self):
        assembler, _ = self._assembler(count=1)
        assert assembler.can_go_next is False
        assert assembler.can_go_previous is False


class TestBackgroundStyle:
    def test_color_only(self):
        assembler = FlipbookAssembler(_pages(1), DisplaySize(800, 600), background_color="#112233")
        assert assembler.background_style() == {"background-color": "#112233"}

    def test_with_image(self):
        assembler = FlipbookAssembler(
            _pages(1),
            DisplaySize(800, 600),
            background_image_url="http://testserver/storage/backgrounds/u/bg.png",
        )
        style = assembler.background_style()
        assert style["background-color"] == "#FFFFFF"
        assert style["background-image"] == "url(http://testserver/storage/backgrounds/u/bg.png)"
        assert style["background-size"] == "cover"
