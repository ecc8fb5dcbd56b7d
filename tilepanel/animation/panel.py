"""
Animating Panel

Drives every managed item from its previous position to the cell the
placement strategy assigns it. Each item carries a MotionState that is
integrated once per frame with a damped spring; the panel stays attached to
the frame scheduler only while at least one item is still moving.

Per frame, for each item:
    factor = attraction * 0.01 * (1 + (variation * jitter_seed - 0.5))
    integrate_step(current, velocity, target, factor, dampening)
    offset = current - target
"""

import hashlib
import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence

from ..config import PanelConfig
from ..geometry import (
    SETTLE_EPSILON,
    TERMINAL_SPEED,
    Point,
    Rect,
    Size,
    Vector,
    integrate_step,
    is_valid,
    require,
)
from ..layout.grid import GridPlacement, PlacementStrategy
from .entry import AppearInPlace, EntryPolicy
from .motion import MotionState
from .scheduler import FrameScheduler, FrameTickSource, ManualTickSource

logger = logging.getLogger(__name__)


def deterministic_jitter(item: Hashable) -> float:
    """Reproducible jitter seed in [0, 1) derived from ``str(item)``."""
    h = hashlib.md5(str(item).encode()).hexdigest()
    return int(h[:8], 16) / 0x100000000


@dataclass(frozen=True)
class ItemVisual:
    """What the host should render for one item this frame."""
    offset: Vector
    opacity: float


class AnimatingPanel:
    """
    Animation driver for a collection of host items.

    Usage:
        panel = AnimatingPanel(PanelConfig(item_width=50, item_height=50))
        panel.attach()
        panel.update_layout(items, available_width=220)
        # host ticks the tick source; read panel.offset(item) each frame
    """

    def __init__(
        self,
        config: Optional[PanelConfig] = None,
        tick_source: Optional[FrameTickSource] = None,
        placement: Optional[PlacementStrategy] = None,
        entry_policy: Optional[EntryPolicy] = None,
        jitter: Optional[Callable[[Hashable], float]] = None,
    ):
        """
        Args:
            config: Validated panel parameters (defaults if omitted)
            tick_source: Frame source, a ManualTickSource when omitted
            placement: Placement strategy, a grid of config-sized cells by default
            entry_policy: Where new items start, in place by default
            jitter: Per-item seed generator returning a float in [0, 1)
        """
        self.config = config or PanelConfig()
        self.scheduler = FrameScheduler(tick_source or ManualTickSource())

        self.placement = placement or GridPlacement(
            Size(self.config.item_width, self.config.item_height))
        self.entry_policy = entry_policy or AppearInPlace()
        self._jitter = jitter or (lambda item: random.random())

        self._states: Dict[Hashable, MotionState] = {}
        self._frame_listeners: List[Callable[["AnimatingPanel"], None]] = []
        self._arranged_once = False
        self._animating = False

        self.scheduler.add_rendering_handler(self._on_rendering)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self):
        """Host hook: the panel became visible."""
        self.scheduler.start_listening()

    def detach(self):
        """Host hook: the panel was detached. Item state is kept for resume."""
        self.scheduler.stop_listening()

    def dispose(self):
        """Release the scheduler and forget every item."""
        self.scheduler.dispose()
        self._states.clear()
        self._frame_listeners.clear()

    # ------------------------------------------------------------------
    # Layout passes
    # ------------------------------------------------------------------

    def measure(self, item_count: int, available_width: float) -> Size:
        """Desired container size for ``item_count`` items."""
        return self.placement.measure(item_count, available_width)

    def arrange(self, items: Sequence[Hashable], final_size: Size) -> Size:
        """Place every item in order and start animating toward the new cells.

        Items that were managed before but are missing from ``items`` lose
        their motion state.
        """
        origins = self.placement.arrange(len(items), final_size.width)
        cell = self.placement.cell_size

        for item, origin in zip(items, origins):
            self.set_target(item, origin, cell)

        self._prune(items)
        self._arranged_once = True
        return final_size

    def update_layout(self, items: Sequence[Hashable], available_width: float) -> Size:
        """Measure then arrange.

        The resolved width is ``available_width`` when finite, but never
        narrower than the measured width: a container narrower than one
        cell still arranges a single column.
        """
        measured = self.measure(len(items), available_width)
        if is_valid(available_width):
            width = max(available_width, measured.width)
        else:
            width = measured.width
        return self.arrange(items, Size(width, measured.height))

    # ------------------------------------------------------------------
    # Item management
    # ------------------------------------------------------------------

    def set_target(self, item: Hashable, position: Point, size: Optional[Size] = None):
        """Record the layout target for ``item``.

        First placement creates the item's motion state, starting wherever
        the entry policy says. Known items keep their position and velocity.
        """
        require(is_valid(position), f"target for {item!r} is not finite: {position}")
        self.scheduler.start_listening()

        state = self._states.get(item)
        if state is None:
            entry = self.entry_policy.enter(
                item, Rect.from_location(position, size or self.placement.cell_size),
                self._arranged_once)
            state = MotionState(current=entry.start, target=position,
                                jitter_seed=self._jitter(item))
            state.begin_fade(entry.fade_frames)
            self._states[item] = state
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("New item %r enters at (%.1f, %.1f) -> (%.1f, %.1f)",
                             item, entry.start.x, entry.start.y, position.x, position.y)

        state.target = position
        state.publish()
        self._animating = True

    def remove(self, item: Hashable) -> bool:
        """Drop ``item``'s motion state. Returns False if it was not managed."""
        state = self._states.pop(item, None)
        if state is None:
            return False
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Removed item %r", item)
        return True

    def _prune(self, items: Iterable[Hashable]):
        keep = set(items)
        for item in [i for i in self._states if i not in keep]:
            self.remove(item)

    # ------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Advance every item by one frame.

        Returns:
            True if any item moved (or is still fading in)
        """
        dampening = self.config.dampening
        attraction = self.config.attraction * 0.01
        variation = self.config.variation

        moved = False
        for state in self._states.values():
            moved = self._update_item(state, dampening, attraction, variation) or moved

        self._animating = moved
        return moved

    @staticmethod
    def _update_item(state: MotionState, dampening: float,
                     attraction: float, variation: float) -> bool:
        factor = attraction * (1 + (variation * state.jitter_seed - 0.5))

        step = integrate_step(
            state.current, state.velocity, state.target,
            factor, dampening,
            TERMINAL_SPEED, SETTLE_EPSILON, SETTLE_EPSILON,
        )
        state.current = step.position
        state.velocity = step.velocity
        state.publish()

        fading = state.advance_fade()
        return step.moved or fading

    def _on_rendering(self, timestamp: float):
        moved = self.tick()
        if not moved:
            self.scheduler.stop_listening()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("All %d items settled at t=%.3f", len(self._states), timestamp)

        for listener in list(self._frame_listeners):
            listener(self)

    def add_frame_listener(self, listener: Callable[["AnimatingPanel"], None]):
        """Call ``listener(panel)`` after every scheduler-driven tick."""
        self._frame_listeners.append(listener)

    def remove_frame_listener(self, listener: Callable[["AnimatingPanel"], None]):
        if listener in self._frame_listeners:
            self._frame_listeners.remove(listener)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[Hashable]:
        return list(self._states)

    @property
    def arranged_once(self) -> bool:
        return self._arranged_once

    @property
    def is_animating(self) -> bool:
        """False once the last tick settled every item."""
        return self._animating

    def state(self, item: Hashable) -> Optional[MotionState]:
        return self._states.get(item)

    def offset(self, item: Hashable) -> Vector:
        """Translation to apply to ``item``. Raises KeyError for unknown items."""
        return self._states[item].offset

    def opacity(self, item: Hashable) -> float:
        return self._states[item].opacity

    def snapshot(self) -> Dict[Hashable, ItemVisual]:
        """Offset and opacity of every managed item."""
        return {item: ItemVisual(s.offset, s.opacity) for item, s in self._states.items()}
