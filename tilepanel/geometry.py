"""
Geometry and Physics Kernel

Pure value types and numeric helpers used by the animation driver:
- Point / Vector / Size / Rect value objects
- Validity checks (finite components only)
- Single-step spring-damper integration with an explicit settle threshold

Nothing in this module holds state between calls.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Union

# Fixed driver constants
TERMINAL_SPEED = 10000.0
SETTLE_EPSILON = 0.1


class PreconditionError(AssertionError):
    """Raised when a caller passes non-finite geometry or out-of-domain parameters.

    This indicates a defect in the caller, not a recoverable state.
    """


def require(condition: bool, message: str):
    """Raise PreconditionError with ``message`` unless ``condition`` holds."""
    if not condition:
        raise PreconditionError(message)


@dataclass(frozen=True)
class Vector:
    """A 2-D displacement or velocity."""
    x: float = 0.0
    y: float = 0.0

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def __add__(self, other: "Vector") -> "Vector":
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector") -> "Vector":
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector":
        return Vector(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector":
        return Vector(-self.x, -self.y)

    def as_tuple(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class Point:
    """A 2-D position in panel coordinates."""
    x: float = 0.0
    y: float = 0.0

    def __sub__(self, other):
        # Point - Point -> Vector, Point - Vector -> Point
        if isinstance(other, Point):
            return subtract(self, other)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y)
        return NotImplemented

    def __add__(self, other: Vector) -> "Point":
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        return NotImplemented

    def as_tuple(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class Size:
    """Width/height pair. Width may be infinite for an unbounded measure pass."""
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned cell bounds."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_location(cls, location: Point, size: Size) -> "Rect":
        return cls(location.x, location.y, size.width, size.height)

    @property
    def location(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def is_finite(value: float) -> bool:
    """True if value is neither NaN nor infinite."""
    return not (math.isnan(value) or math.isinf(value))


def is_valid(value: Union[float, Point, Vector, Size]) -> bool:
    """Check that a scalar or every component of a geometric value is finite."""
    if isinstance(value, (Point, Vector)):
        return is_finite(value.x) and is_finite(value.y)
    if isinstance(value, Size):
        return is_finite(value.width) and is_finite(value.height)
    return is_finite(value)


def subtract(a: Point, b: Point) -> Vector:
    """Return the vector from ``b`` to ``a``."""
    require(is_valid(a), f"subtract: non-finite point {a}")
    require(is_valid(b), f"subtract: non-finite point {b}")
    return Vector(a.x - b.x, a.y - b.y)


class StepResult(NamedTuple):
    """Outcome of one integration step."""
    moved: bool
    position: Point
    velocity: Vector


def integrate_step(
    current: Point,
    velocity: Vector,
    target: Point,
    attraction_factor: float,
    dampening: float,
    terminal_speed: float = TERMINAL_SPEED,
    position_epsilon: float = SETTLE_EPSILON,
    velocity_epsilon: float = SETTLE_EPSILON,
) -> StepResult:
    """Advance one spring-damper step from ``current`` toward ``target``.

    Once both the remaining distance and the speed are within their epsilons
    the item snaps exactly onto the target with zero velocity and the step
    reports ``moved=False``.

    The terminal speed clamp is evaluated against the incoming velocity, not
    the freshly computed one, so it lags by one tick. A step may therefore
    leave the speed above ``terminal_speed``; the following step scales it
    back down.

    Args:
        current: Current animated position
        velocity: Current animated velocity
        target: Desired position
        attraction_factor: Spring stiffness per tick, > 0
        dampening: Fraction of velocity removed per tick, in (0, 1)
        terminal_speed: Velocity ceiling, > 0
        position_epsilon: Settle threshold for distance to target, > 0
        velocity_epsilon: Settle threshold for speed, > 0

    Returns:
        StepResult(moved, position, velocity)

    Raises:
        PreconditionError: On non-finite input or out-of-domain parameters
    """
    require(is_valid(current), f"current position is not finite: {current}")
    require(is_valid(velocity), f"velocity is not finite: {velocity}")
    require(is_valid(target), f"target position is not finite: {target}")
    require(is_finite(dampening) and 0 < dampening < 1,
            f"dampening must be in (0, 1), got {dampening}")
    require(is_finite(attraction_factor) and attraction_factor > 0,
            f"attraction factor must be finite and > 0, got {attraction_factor}")
    require(terminal_speed > 0, f"terminal speed must be > 0, got {terminal_speed}")
    require(position_epsilon > 0 and velocity_epsilon > 0,
            "settle epsilons must be > 0")

    diff = target - current
    speed = velocity.length

    if diff.length <= position_epsilon and speed <= velocity_epsilon:
        return StepResult(False, target, Vector(0.0, 0.0))

    new_velocity = velocity * (1 - dampening) + diff * attraction_factor
    if speed > terminal_speed:
        new_velocity = new_velocity * (terminal_speed / speed)

    return StepResult(True, current + new_velocity, new_velocity)
