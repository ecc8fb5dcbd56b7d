"""Per-item motion state owned by the animating panel."""

from dataclasses import dataclass, field

from ..geometry import Point, Vector, is_valid, require


@dataclass
class MotionState:
    """Animated position of one managed item.

    ``offset`` is the translation the host applies on top of the item's
    arranged cell; it is always ``current - target`` after an update.
    """
    current: Point
    target: Point
    jitter_seed: float  # [0, 1), fixed at creation
    velocity: Vector = field(default_factory=Vector)
    offset: Vector = field(default_factory=Vector)

    # Entry fade
    opacity: float = 1.0
    fade_frames: int = 0  # length of the running fade, 0 = none
    fade_elapsed: int = 0

    def __post_init__(self):
        require(is_valid(self.current), f"initial position is not finite: {self.current}")
        require(is_valid(self.target), f"target is not finite: {self.target}")
        require(0.0 <= self.jitter_seed < 1.0,
                f"jitter seed must be in [0, 1), got {self.jitter_seed}")
        self.publish()

    def publish(self):
        """Refresh the published offset from the current position."""
        self.offset = self.current - self.target

    def begin_fade(self, frames: int):
        """Start fading in from fully transparent over ``frames`` ticks."""
        if frames > 0:
            self.opacity = 0.0
            self.fade_frames = frames
            self.fade_elapsed = 0

    def advance_fade(self) -> bool:
        """Step the entry fade. Returns True while the fade is still running."""
        if not self.fade_frames:
            return False
        self.fade_elapsed += 1
        if self.fade_elapsed >= self.fade_frames:
            self.opacity = 1.0
            self.fade_frames = 0
            self.fade_elapsed = 0
            return False
        self.opacity = self.fade_elapsed / self.fade_frames
        return True

    @property
    def is_fading(self) -> bool:
        return self.fade_frames > 0
