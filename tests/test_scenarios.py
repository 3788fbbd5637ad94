"""
Scenario Preset Tests
Setup-only checks (run=False) for every preset, plus the expected outcome of
the presets that model a specific situation.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from physics import BALL_RADIUS, HEX_RADIUS, screen_center
from scenarios import SCENARIOS, APOTHEM, drop, sliding, spinning_wall
from vector import closest_point_on_segment

CENTER = screen_center()


class TestSetupOnly:
    """run=False builds the engine without stepping it."""

    @pytest.mark.parametrize("name", sorted(SCENARIOS))
    def test_elapsed_is_zero(self, name):
        result = SCENARIOS[name](run=False)
        assert result["elapsed"] == 0.0
        assert result["hexagon"].rotation == 0.0

    @pytest.mark.parametrize("name", sorted(SCENARIOS))
    def test_result_shares_engine_state(self, name):
        result = SCENARIOS[name](run=False)
        assert result["ball"] is result["engine"].ball
        assert result["hexagon"] is result["engine"].hexagon

    @pytest.mark.parametrize("name", sorted(SCENARIOS))
    def test_ball_starts_inside(self, name):
        result = SCENARIOS[name](run=False)
        offset = result["ball"].position - CENTER
        assert offset.length() < HEX_RADIUS

    @pytest.mark.parametrize("name", ["default", "drop", "fast_spin"])
    def test_run_advances_time(self, name):
        result = SCENARIOS[name](run=True)
        assert result["elapsed"] > 0.0
        offset = result["ball"].position - CENTER
        assert offset.length() < HEX_RADIUS


class TestDrop:

    def test_settles_on_bottom_edge(self):
        result = drop(run=True)
        ball = result["ball"]
        a, b = result["hexagon"].edges()[1]
        dist = (ball.position - closest_point_on_segment(a, b, ball.position)).length()
        assert dist == pytest.approx(BALL_RADIUS, abs=1.0)
        assert ball.speed < 10.0
        assert ball.wall_hits > 5


class TestSliding:

    def test_overlaps_bottom_edge_at_start(self):
        result = sliding(run=False, depth=5.0)
        ball = result["ball"]
        assert CENTER.y + APOTHEM - ball.position.y == pytest.approx(BALL_RADIUS - 5.0)

    def test_slides_without_bounce(self):
        result = sliding(run=False)
        engine = result["engine"]
        engine.step()
        assert engine.ball.velocity.y == pytest.approx(0.0, abs=1e-9)
        assert engine.ball.velocity.x == pytest.approx(100.0, abs=1e-9)


class TestSpinningWall:

    def test_wall_pushes_resting_ball(self):
        result = spinning_wall(run=False)
        engine = result["engine"]
        engine.step()
        assert engine.ball.wall_hits == 1
        assert engine.ball.velocity.y < 0.0

    def test_reverse_spin_leaves_ball_alone(self):
        """Wall moving away from the ball only corrects position."""
        result = spinning_wall(run=False, angular_speed=-0.5, depth=3.0)
        engine = result["engine"]
        engine.step()
        assert engine.ball.wall_hits == 0
        assert engine.ball.speed == 0.0
