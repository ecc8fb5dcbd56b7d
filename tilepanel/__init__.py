"""
TilePanel - Animated Wrapping Tile Layout

Arranges items in a wrapping grid and animates each one from its previous
position to its new cell with a per-item spring-damper, driven by a frame
scheduler that is only active while something is moving.
"""

__version__ = "0.1.0"

from .config import PanelConfig, load_config
from .geometry import Point, Rect, Size, Vector, PreconditionError, integrate_step
from .layout import GridPlacement, compute_layout
from .animation import (
    AnimatingPanel,
    FrameScheduler,
    ManualTickSource,
    AsyncioTickSource,
    SlideFadeFromLeft,
)

__all__ = [
    "AnimatingPanel",
    "AsyncioTickSource",
    "FrameScheduler",
    "GridPlacement",
    "ManualTickSource",
    "PanelConfig",
    "Point",
    "PreconditionError",
    "Rect",
    "Size",
    "SlideFadeFromLeft",
    "Vector",
    "compute_layout",
    "integrate_step",
    "load_config",
]
