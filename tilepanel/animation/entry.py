"""
Entry policies

Decide where a newly managed item starts its animation from. The panel
asks its policy once per item, on the item's first placement.
"""

from dataclasses import dataclass
from typing import Hashable

from ..geometry import Point, Rect, Vector


@dataclass(frozen=True)
class Entry:
    """Starting point for a new item and an optional fade-in length (ticks)."""
    start: Point
    fade_frames: int = 0


class EntryPolicy:
    """Base entry policy: items appear directly in their cell."""

    def enter(self, item: Hashable, bounds: Rect, arranged_once: bool) -> Entry:
        """Return the entry for ``item`` whose first cell is ``bounds``.

        Args:
            item: Host handle of the new item
            bounds: Cell the item was just placed in
            arranged_once: True if the panel finished an arrange pass before
        """
        return Entry(bounds.location)


class AppearInPlace(EntryPolicy):
    """New items simply show up at their target."""


class SlideFadeFromLeft(EntryPolicy):
    """Items added after the first layout slide in from one cell to the left
    while fading in. Items present at the first layout appear in place.
    """

    def __init__(self, fade_frames: int = 30):
        if fade_frames < 0:
            raise ValueError(f"fade_frames must be >= 0, got {fade_frames}")
        self.fade_frames = fade_frames

    def enter(self, item: Hashable, bounds: Rect, arranged_once: bool) -> Entry:
        if not arranged_once:
            return Entry(bounds.location)
        return Entry(bounds.location - Vector(bounds.width, 0.0), self.fade_frames)
