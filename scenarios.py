"""
Scenario Presets
Ready-made initial conditions for the spinning hexagon. Each preset builds an
engine, optionally runs it, and returns a result dict.
"""

import math
from physics import (
    Ball, Hexagon, PhysicsEngine, BALL_RADIUS, HEX_RADIUS, FIXED_DT,
    screen_center,
)
from vector import Vector2

# Simulated time for run=True presets
_RUN_TIME = 5.0

# Distance from the hexagon center to the middle of an edge
APOTHEM = HEX_RADIUS * math.cos(math.pi / 6)


def _finish(engine: PhysicsEngine, run: bool, run_time: float = _RUN_TIME) -> dict:
    elapsed = engine.simulate(FIXED_DT, run_time) if run else 0.0
    return {"engine": engine, "ball": engine.ball, "hexagon": engine.hexagon,
            "elapsed": elapsed}


def default(run=False) -> dict:
    """Reference start: ball above center, horizontal push, slow spin."""
    return _finish(PhysicsEngine(), run)


def drop(run=False) -> dict:
    """Ball released at rest from the center of a still hexagon."""
    center = screen_center()
    engine = PhysicsEngine(
        ball=Ball(position=center, velocity=Vector2(0.0, 0.0)),
        hexagon=Hexagon(center=center, angular_speed=0.0),
    )
    return _finish(engine, run, run_time=30.0)


def spinning_wall(run=False, angular_speed: float = 0.5,
                  offset_x: float = -80.0, depth: float = 1.0) -> dict:
    """Resting ball overlapping the bottom edge of a spinning, gravity-free hexagon.

    The contact sits off the edge midpoint so the wall has a normal velocity
    component there.
    """
    center = screen_center()
    pos = Vector2(center.x + offset_x, center.y + APOTHEM - (BALL_RADIUS - depth))
    engine = PhysicsEngine(
        ball=Ball(position=pos, velocity=Vector2(0.0, 0.0)),
        hexagon=Hexagon(center=center, angular_speed=angular_speed),
        gravity=0.0, damping=1.0,
    )
    return _finish(engine, run)


def sliding(run=False, speed: float = 100.0, depth: float = 5.0) -> dict:
    """Ball overlapping the bottom edge while moving parallel to it."""
    center = screen_center()
    pos = Vector2(center.x, center.y + APOTHEM - (BALL_RADIUS - depth))
    engine = PhysicsEngine(
        ball=Ball(position=pos, velocity=Vector2(speed, 0.0)),
        hexagon=Hexagon(center=center, angular_speed=0.0),
        gravity=0.0, damping=1.0,
    )
    return _finish(engine, run)


def fast_spin(run=False) -> dict:
    """Default start in a hexagon spinning twice as fast."""
    engine = PhysicsEngine(hexagon=Hexagon(center=screen_center(), angular_speed=1.0))
    return _finish(engine, run)


SCENARIOS = {
    "default":       default,
    "drop":          drop,
    "spinning_wall": spinning_wall,
    "sliding":       sliding,
    "fast_spin":     fast_spin,
}
