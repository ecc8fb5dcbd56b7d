"""
Tests for the geometry and physics kernel.

Tests cover:
- Point/Vector arithmetic and validity checks
- Settling (snap to target) and a regular spring step
- Terminal speed clamp evaluated on the incoming velocity
- Convergence from arbitrary finite starting states
- Precondition failures
"""

import math

import pytest

from tilepanel.geometry import (
    SETTLE_EPSILON,
    TERMINAL_SPEED,
    Point,
    PreconditionError,
    Rect,
    Size,
    Vector,
    integrate_step,
    is_valid,
    subtract,
)


# =============================================================================
# Value Types
# =============================================================================

class TestValueTypes:
    """Tests for point and vector arithmetic."""

    def test_point_minus_point_is_vector(self):
        assert Point(5, 7) - Point(2, 3) == Vector(3, 4)

    def test_point_plus_vector(self):
        assert Point(1, 1) + Vector(2, -3) == Point(3, -2)

    def test_point_minus_vector(self):
        assert Point(1, 1) - Vector(50, 0) == Point(-49, 1)

    def test_vector_length(self):
        assert Vector(3, 4).length == 5.0

    def test_vector_scaling_and_sum(self):
        assert Vector(1, 2) * 3 + Vector(1, 1) == Vector(4, 7)
        assert 2 * Vector(1, 2) == Vector(2, 4)

    def test_subtract(self):
        assert subtract(Point(10, 0), Point(4, 4)) == Vector(6, -4)

    def test_subtract_rejects_non_finite(self):
        with pytest.raises(PreconditionError):
            subtract(Point(math.nan, 0), Point(0, 0))

    def test_rect_location(self):
        rect = Rect.from_location(Point(5, 6), Size(50, 40))
        assert rect.location == Point(5, 6)
        assert rect.size == Size(50, 40)


class TestValidity:
    """Tests for finite-value checks."""

    @pytest.mark.parametrize("value", [
        Point(0, 0), Vector(-1e9, 1e9), Size(10, 0), 3.5,
    ])
    def test_finite_values_are_valid(self, value):
        assert is_valid(value)

    @pytest.mark.parametrize("value", [
        Point(math.nan, 0),
        Vector(0, math.inf),
        Size(math.inf, 10),
        -math.inf,
        math.nan,
    ])
    def test_non_finite_values_are_invalid(self, value):
        assert not is_valid(value)


# =============================================================================
# Integration Step
# =============================================================================

class TestIntegrateStep:
    """Tests for a single spring-damper step."""

    def test_settled_snaps_to_target(self):
        result = integrate_step(
            Point(100.05, 0), Vector(0.05, 0), Point(100, 0),
            0.02, 0.2, TERMINAL_SPEED, SETTLE_EPSILON, SETTLE_EPSILON,
        )
        assert result.moved is False
        assert result.position == Point(100, 0)
        assert result.velocity == Vector(0, 0)

    def test_far_from_target_moves(self):
        result = integrate_step(Point(0, 0), Vector(0, 0), Point(100, 0), 0.02, 0.2)
        assert result.moved is True
        assert result.velocity.x == pytest.approx(2.0)
        assert result.position.x == pytest.approx(2.0)
        assert result.position.y == 0

    def test_velocity_alone_keeps_moving(self):
        """At the target but still moving: velocity decays by the dampening."""
        result = integrate_step(Point(0, 0), Vector(10, 0), Point(0, 0), 0.02, 0.2)
        assert result.moved is True
        assert result.velocity.x == pytest.approx(8.0)
        assert result.position.x == pytest.approx(8.0)

    def test_close_but_fast_is_not_settled(self):
        result = integrate_step(Point(0, 0), Vector(0.5, 0), Point(0.05, 0), 0.02, 0.2)
        assert result.moved is True


class TestTerminalSpeed:
    """Tests for the velocity ceiling."""

    def test_clamp_rescales_by_incoming_speed(self):
        """20000 exceeds the ceiling, so the new velocity is scaled by 10000/20000."""
        result = integrate_step(
            Point(0, 0), Vector(20000, 0), Point(0, 0), 0.02, 0.2,
            terminal_speed=10000,
        )
        # 20000 * 0.8 = 16000, scaled by 0.5
        assert result.velocity.x == pytest.approx(8000.0)
        assert result.position.x == pytest.approx(8000.0)

    def test_clamp_lags_one_tick(self):
        """An incoming speed under the ceiling is not clamped even if the new one is over."""
        result = integrate_step(
            Point(0, 0), Vector(9000, 0), Point(1e6, 0), 0.01, 0.2,
            terminal_speed=10000,
        )
        # 9000 * 0.8 + 1e6 * 0.01 = 17200, above the ceiling but unclamped
        assert result.velocity.x == pytest.approx(17200.0)
        assert result.velocity.length > 10000

        # The next step sees 17200 and scales by 10000 / 17200
        second = integrate_step(
            result.position, result.velocity, Point(1e6, 0), 0.01, 0.2,
            terminal_speed=10000,
        )
        expected = (17200 * 0.8 + (1e6 - 17200) * 0.01) * (10000 / 17200)
        assert second.velocity.x == pytest.approx(expected)

    def test_clamp_preserves_direction(self):
        result = integrate_step(
            Point(0, 0), Vector(-30000, 40000), Point(0, 0), 0.02, 0.5,
            terminal_speed=10000,
        )
        # 50000 incoming -> scale 0.2 after dampening to 0.5
        assert result.velocity.x == pytest.approx(-3000.0)
        assert result.velocity.y == pytest.approx(4000.0)


class TestConvergence:
    """Repeated steps always settle exactly on the target."""

    @pytest.mark.parametrize("attraction_factor,dampening", [
        (0.01, 0.2),
        (0.03, 0.2),
        (0.005, 0.5),
        (0.02, 0.9),
        (0.015, 0.05),
    ])
    def test_converges_to_target(self, attraction_factor, dampening):
        position = Point(-300, 40)
        velocity = Vector(50, -20)
        target = Point(120, 75)

        for _ in range(100000):
            result = integrate_step(position, velocity, target, attraction_factor, dampening)
            assert is_valid(result.position)
            assert is_valid(result.velocity)
            position, velocity = result.position, result.velocity
            if not result.moved:
                break
        else:
            pytest.fail("integration did not settle")

        assert position == target
        assert velocity == Vector(0, 0)

    def test_huge_distance_stays_finite(self):
        position, velocity = Point(0, 0), Vector(0, 0)
        target = Point(1e12, -1e12)
        for _ in range(200):
            position, velocity = integrate_step(position, velocity, target, 0.03, 0.2)[1:]
            assert is_valid(position)
            assert is_valid(velocity)


class TestPreconditions:
    """Out-of-domain input is a caller defect."""

    @pytest.mark.parametrize("kwargs", [
        {"current": Point(math.nan, 0)},
        {"velocity": Vector(math.inf, 0)},
        {"target": Point(0, -math.inf)},
        {"dampening": 0.0},
        {"dampening": 1.0},
        {"attraction_factor": 0.0},
        {"attraction_factor": math.inf},
        {"terminal_speed": 0.0},
        {"position_epsilon": 0.0},
        {"velocity_epsilon": -1.0},
    ])
    def test_rejects_invalid_input(self, kwargs):
        args = dict(
            current=Point(0, 0), velocity=Vector(0, 0), target=Point(10, 10),
            attraction_factor=0.02, dampening=0.2,
        )
        args.update(kwargs)
        with pytest.raises(PreconditionError):
            integrate_step(**args)

    def test_precondition_error_is_an_assertion(self):
        with pytest.raises(AssertionError):
            integrate_step(Point(0, 0), Vector(0, 0), Point(1, 1), 0.02, 1.5)
