"""
Shared test fixtures for TilePanel tests.

Provides configurations, tick sources, and panels wired to a manual
tick source so tests control every frame.
"""

import pytest
from typing import List

from tilepanel.config import PanelConfig
from tilepanel.animation import (
    AnimatingPanel,
    ManualTickSource,
    SlideFadeFromLeft,
    deterministic_jitter,
)


@pytest.fixture
def default_config() -> PanelConfig:
    """Default panel configuration (50x50 cells)."""
    return PanelConfig()


@pytest.fixture
def tick_source() -> ManualTickSource:
    """A tick source advanced explicitly by the test."""
    return ManualTickSource()


@pytest.fixture
def panel(default_config, tick_source) -> AnimatingPanel:
    """A panel with reproducible jitter, items appear in place."""
    return AnimatingPanel(default_config, tick_source, jitter=deterministic_jitter)


@pytest.fixture
def sliding_panel(default_config, tick_source) -> AnimatingPanel:
    """A panel whose late items slide and fade in from the left."""
    return AnimatingPanel(
        default_config,
        tick_source,
        entry_policy=SlideFadeFromLeft(fade_frames=10),
        jitter=deterministic_jitter,
    )


@pytest.fixture
def ten_items() -> List[str]:
    """Ten item handles."""
    return [f"tile-{i}" for i in range(10)]
