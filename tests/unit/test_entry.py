"""
Tests for entry policies (where new items start from).
"""

import pytest

from tilepanel.animation import AppearInPlace, Entry, EntryPolicy, SlideFadeFromLeft
from tilepanel.geometry import Point, Rect, Size, Vector


BOUNDS = Rect(100, 50, 50, 40)


class TestAppearInPlace:
    """Default policy."""

    @pytest.mark.parametrize("arranged_once", [False, True])
    def test_starts_at_cell(self, arranged_once):
        entry = AppearInPlace().enter("a", BOUNDS, arranged_once)
        assert entry == Entry(Point(100, 50), 0)

    def test_base_policy_is_in_place(self):
        assert EntryPolicy().enter("a", BOUNDS, True).start == Point(100, 50)


class TestSlideFadeFromLeft:
    """Slide-and-fade entrance for items added after the first layout."""

    def test_first_layout_appears_in_place(self):
        entry = SlideFadeFromLeft().enter("a", BOUNDS, arranged_once=False)
        assert entry.start == Point(100, 50)
        assert entry.fade_frames == 0

    def test_later_items_start_one_cell_left(self):
        entry = SlideFadeFromLeft(fade_frames=12).enter("a", BOUNDS, arranged_once=True)
        assert entry.start == Point(50, 50)
        assert entry.fade_frames == 12

    def test_negative_fade_rejected(self):
        with pytest.raises(ValueError):
            SlideFadeFromLeft(fade_frames=-1)


class TestSlidingPanel:
    """Entry policy wired into the panel."""

    def test_initial_items_do_not_slide(self, sliding_panel, ten_items):
        sliding_panel.update_layout(ten_items, 220)
        for item in ten_items:
            assert sliding_panel.offset(item) == Vector(0, 0)
            assert sliding_panel.opacity(item) == 1.0

    def test_added_item_slides_and_fades_in(self, sliding_panel, tick_source, ten_items):
        sliding_panel.update_layout(ten_items, 220)
        tick_source.run_until_idle(10000)

        items = ten_items + ["tile-10"]
        sliding_panel.update_layout(items, 220)

        assert sliding_panel.offset("tile-10") == Vector(-50, 0)
        assert sliding_panel.opacity("tile-10") == 0.0

        tick_source.advance(5)
        assert 0.0 < sliding_panel.opacity("tile-10") < 1.0

        tick_source.run_until_idle(10000)
        assert sliding_panel.opacity("tile-10") == 1.0
        assert sliding_panel.offset("tile-10") == Vector(0, 0)

    def test_fade_keeps_panel_animating(self, default_config, tick_source):
        from tilepanel.animation import AnimatingPanel

        panel = AnimatingPanel(default_config, tick_source,
                               entry_policy=SlideFadeFromLeft(fade_frames=500),
                               jitter=lambda item: 0.5)
        panel.update_layout(["a"], 220)
        tick_source.run_until_idle(10)

        panel.update_layout(["a", "b"], 220)
        frames = tick_source.run_until_idle(10000)

        # Position settles long before the fade ends
        assert frames == 500
        assert panel.opacity("b") == 1.0

    def test_cell_size_comes_from_placement(self, tick_source):
        from tilepanel.animation import AnimatingPanel
        from tilepanel.config import PanelConfig

        panel = AnimatingPanel(PanelConfig(item_width=80, item_height=30), tick_source,
                               entry_policy=SlideFadeFromLeft(), jitter=lambda item: 0.5)
        panel.update_layout(["a"], 400)
        panel.update_layout(["a", "b"], 400)
        assert panel.state("b").current == Point(0, 0)
        assert panel.state("b").target == Point(80, 0)
        assert Size(80, 30) == panel.placement.cell_size
