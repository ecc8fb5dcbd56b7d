"""Delta encoding of panel offset frames.

Streams only the items whose offset or opacity changed since the previous
frame. Settled items produce no traffic; a full keyframe is emitted every
``keyframe_interval`` frames so late viewers can resynchronize.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Tuple
import logging

from ..animation.panel import ItemVisual

logger = logging.getLogger(__name__)

# item id -> (dx, dy, opacity)
VisualTuple = Tuple[float, float, float]


@dataclass
class OffsetFrame:
    """One encoded frame.

    ``changed`` holds every item on a keyframe, otherwise only items that
    moved, faded, or appeared. ``removed`` lists items no longer managed.
    """
    index: int
    keyframe: bool = False
    changed: Dict[str, VisualTuple] = field(default_factory=dict)
    removed: List[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        return self.keyframe or bool(self.changed) or bool(self.removed)

    def to_dict(self) -> Dict:
        """JSON-ready form."""
        return {
            "index": self.index,
            "keyframe": self.keyframe,
            "changed": {k: list(v) for k, v in self.changed.items()},
            "removed": list(self.removed),
        }


def _visual_tuple(visual: ItemVisual) -> VisualTuple:
    return (visual.offset.x, visual.offset.y, visual.opacity)


class OffsetFrameEncoder:
    """Turns panel snapshots into delta frames."""

    def __init__(self, keyframe_interval: int = 60, tolerance: float = 1e-6):
        """
        Args:
            keyframe_interval: Emit a full frame every N frames (0 = only the first)
            tolerance: Minimum change in any component to count as changed
        """
        if keyframe_interval < 0:
            raise ValueError(f"keyframe_interval must be >= 0, got {keyframe_interval}")
        self.keyframe_interval = keyframe_interval
        self.tolerance = tolerance

        self.prev: Dict[str, VisualTuple] = {}
        self.frame_index = 0

        # Statistics
        self.total_items = 0
        self.total_changed = 0

    def encode(self, snapshot: Dict[Hashable, ItemVisual]) -> OffsetFrame:
        """Encode ``snapshot`` (as returned by ``AnimatingPanel.snapshot``)."""
        current = {str(item): _visual_tuple(v) for item, v in snapshot.items()}

        keyframe = self.frame_index == 0 or (
            self.keyframe_interval > 0 and self.frame_index % self.keyframe_interval == 0)

        if keyframe:
            changed = dict(current)
        else:
            changed = {
                key: value for key, value in current.items()
                if key not in self.prev or self._differs(value, self.prev[key])
            }
        removed = [key for key in self.prev if key not in current]

        frame = OffsetFrame(self.frame_index, keyframe, changed, removed)

        self.prev = current
        self.frame_index += 1
        self.total_items += len(current)
        self.total_changed += len(changed)

        if logger.isEnabledFor(logging.DEBUG) and self.frame_index % 100 == 0:
            logger.debug(
                "Offset frames: %d encoded, %.1f%% of item updates sent",
                self.frame_index,
                100.0 * self.total_changed / max(1, self.total_items),
            )
        return frame

    def _differs(self, a: VisualTuple, b: VisualTuple) -> bool:
        return any(abs(x - y) > self.tolerance for x, y in zip(a, b))

    def reset(self):
        """Forget previous state; the next frame is a keyframe."""
        self.prev = {}
        self.frame_index = 0
        self.total_items = 0
        self.total_changed = 0


class OffsetFrameDecoder:
    """Rebuilds the full item state from a sequence of frames."""

    def __init__(self):
        self.items: Dict[str, VisualTuple] = {}

    def apply(self, frame: OffsetFrame) -> Dict[str, VisualTuple]:
        if frame.keyframe:
            self.items = {}
        self.items.update(frame.changed)
        for key in frame.removed:
            self.items.pop(key, None)
        return dict(self.items)
