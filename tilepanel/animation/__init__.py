"""Spring-damper animation of panel items driven by a frame scheduler."""

from .entry import AppearInPlace, Entry, EntryPolicy, SlideFadeFromLeft
from .motion import MotionState
from .panel import AnimatingPanel, ItemVisual, deterministic_jitter
from .scheduler import (
    AsyncioTickSource,
    FrameScheduler,
    FrameTickSource,
    ManualTickSource,
    SchedulerDisposedError,
)

__all__ = [
    "AnimatingPanel",
    "AppearInPlace",
    "AsyncioTickSource",
    "Entry",
    "EntryPolicy",
    "FrameScheduler",
    "FrameTickSource",
    "ItemVisual",
    "ManualTickSource",
    "MotionState",
    "SchedulerDisposedError",
    "SlideFadeFromLeft",
    "deterministic_jitter",
]
