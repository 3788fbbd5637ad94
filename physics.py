"""
Spinning Hexagon Physics Engine
Gravity, per-step damping, and lossy collisions against a rotating hexagon.
"""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import List, Tuple

from vector import Vector2, closest_point_on_segment

# ──────────────────────────────────────────────
# Constants (screen units: pixels, seconds, +y down)
# ──────────────────────────────────────────────
SCREEN_WIDTH: int = 800
SCREEN_HEIGHT: int = 600

GRAVITY: float = 500.0        # px/s^2, pulls toward +y
DAMPING: float = 0.99         # velocity multiplier applied once per step
RESTITUTION: float = 0.9      # wall restitution along the contact normal
FIXED_DT: float = 1.0 / 60.0  # canonical timestep

BALL_RADIUS: float = 10.0
BALL_START_OFFSET: Tuple[float, float] = (0.0, -150.0)  # from hexagon center
BALL_START_VELOCITY: Tuple[float, float] = (100.0, 0.0)

HEX_SIDES: int = 6
HEX_RADIUS: float = 200.0         # center-to-vertex distance
HEX_ANGULAR_SPEED: float = 0.5    # rad/s


def screen_center() -> Vector2:
    return Vector2(SCREEN_WIDTH / 2, SCREEN_HEIGHT / 2)


@dataclass
class Ball:
    """Rigid circular body. Position and velocity are replaced, never mutated in place."""
    position: Vector2 = field(default_factory=Vector2)
    velocity: Vector2 = field(default_factory=Vector2)
    radius: float = BALL_RADIUS
    wall_hits: int = 0

    def __post_init__(self):
        if not isinstance(self.position, Vector2):
            self.position = Vector2.from_iterable(self.position)
        if not isinstance(self.velocity, Vector2):
            self.velocity = Vector2.from_iterable(self.velocity)
        self.radius = float(self.radius)

    @property
    def speed(self) -> float:
        return self.velocity.length()


@dataclass
class Hexagon:
    """Regular hexagon rotating about a fixed center. Vertices are derived on demand."""
    center: Vector2 = field(default_factory=screen_center)
    radius: float = HEX_RADIUS
    rotation: float = 0.0
    angular_speed: float = HEX_ANGULAR_SPEED

    def __post_init__(self):
        if not isinstance(self.center, Vector2):
            self.center = Vector2.from_iterable(self.center)

    def vertices(self) -> List[Vector2]:
        """Vertex i sits at angle rotation + i·2π/6 from the center."""
        angles = self.rotation + np.arange(HEX_SIDES) * (2 * math.pi / HEX_SIDES)
        xs = self.center.x + self.radius * np.cos(angles)
        ys = self.center.y + self.radius * np.sin(angles)
        return [Vector2(float(x), float(y)) for x, y in zip(xs, ys)]

    def edges(self) -> List[Tuple[Vector2, Vector2]]:
        """Edge i joins vertex i and vertex (i+1) % 6."""
        verts = self.vertices()
        return [(verts[i], verts[(i + 1) % HEX_SIDES]) for i in range(HEX_SIDES)]

    def wall_velocity(self, point: Vector2) -> Vector2:
        """Rigid-body velocity of a boundary point: ω × r, i.e. perp(r)·ω in 2D."""
        return (point - self.center).perp() * self.angular_speed


@dataclass(frozen=True)
class Snapshot:
    """Read-only render view of the simulation."""
    ball_center: Vector2
    ball_radius: float
    hexagon_vertices: Tuple[Vector2, ...]

    def to_dict(self, ndigits: int = 3) -> dict:
        """JSON-ready view, coordinates rounded to ndigits."""
        def pt(v: Vector2) -> list:
            return [round(v.x, ndigits), round(v.y, ndigits)]

        return {
            "ball": {"pos": pt(self.ball_center), "radius": self.ball_radius},
            "hexagon": [pt(v) for v in self.hexagon_vertices],
        }


def default_ball() -> Ball:
    """Ball above the hexagon center with a horizontal push."""
    return Ball(position=screen_center() + Vector2(*BALL_START_OFFSET),
                velocity=Vector2(*BALL_START_VELOCITY),
                radius=BALL_RADIUS)


def default_hexagon() -> Hexagon:
    return Hexagon(center=screen_center(), radius=HEX_RADIUS,
                   rotation=0.0, angular_speed=HEX_ANGULAR_SPEED)


class PhysicsEngine:
    """Single ball inside a spinning hexagon, advanced one fixed step at a time."""

    def __init__(self, ball: Ball = None, hexagon: Hexagon = None,
                 gravity: float = GRAVITY, damping: float = DAMPING,
                 restitution: float = RESTITUTION):
        self.ball = ball if ball is not None else default_ball()
        self.hexagon = hexagon if hexagon is not None else default_hexagon()
        self.gravity = gravity
        self.damping = damping
        self.restitution = restitution
        self.events: list = []

    # ──────────────────────────────────────────
    # Ball dynamics
    # ──────────────────────────────────────────
    def _integrate_ball(self, dt: float) -> None:
        """Semi-implicit Euler: gravity, then discrete per-step damping, then position."""
        ball = self.ball
        v = Vector2(ball.velocity.x, ball.velocity.y + self.gravity * dt)
        v = v * self.damping
        ball.velocity = v
        ball.position = ball.position + v * dt

    # ──────────────────────────────────────────
    # Wall collision
    # ──────────────────────────────────────────
    def _resolve_edge(self, index: int, a: Vector2, b: Vector2) -> None:
        """Push the ball out of edge AB and reflect its velocity in the wall's moving frame.

        Normal points from the wall toward the ball center. When the center lies
        exactly on the edge, the edge perpendicular is used instead.

        Reflection is done on the relative velocity:
            rel = v - wall_vel
            rel -= n · (1 + e)(rel · n)      only when rel · n < 0
            v   = rel + wall_vel
        """
        ball = self.ball
        closest = closest_point_on_segment(a, b, ball.position)
        diff = ball.position - closest
        dist = diff.length()
        if dist >= ball.radius:
            return

        penetration = ball.radius - dist
        if dist != 0:
            normal = diff.normalize()
        else:
            normal = (b - a).perp().normalize()

        ball.position = ball.position + normal * penetration

        wall_vel = self.hexagon.wall_velocity(closest)
        rel_vel = ball.velocity - wall_vel
        dot = rel_vel.dot(normal)
        if dot >= 0:
            # Separating or sliding: position correction only
            return

        rel_vel = rel_vel - normal * ((1 + self.restitution) * dot)
        ball.velocity = rel_vel + wall_vel
        ball.wall_hits += 1
        self.events.append({"type": "wall", "edge": index, "speed": float(-dot)})

    def _check_wall_collisions(self) -> None:
        # Edges are resolved one after another, so a correction on edge i is
        # already visible to edge i+1 within the same step.
        for i, (a, b) in enumerate(self.hexagon.edges()):
            self._resolve_edge(i, a, b)

    # ──────────────────────────────────────────
    # Main Update Loop
    # ──────────────────────────────────────────
    def step(self, dt: float = FIXED_DT) -> None:
        """Advance the simulation by dt seconds.

        dt is used as given. Large or highly variable steps can tunnel through
        an edge; callers are expected to drive this at a small fixed rate.
        """
        self.events.clear()
        self._integrate_ball(dt)
        self.hexagon.rotation += self.hexagon.angular_speed * dt
        self._check_wall_collisions()

    def snapshot(self) -> Snapshot:
        return Snapshot(
            ball_center=self.ball.position,
            ball_radius=self.ball.radius,
            hexagon_vertices=tuple(self.hexagon.vertices()),
        )

    def simulate(self, dt: float = FIXED_DT, max_time: float = 10.0) -> float:
        """
        Run fixed steps until max_time of simulated time has elapsed.

        Returns:
            Elapsed time in seconds.
        """
        t = 0.0
        n_steps = int(round(max_time / dt))
        for _ in range(n_steps):
            self.step(dt)
            t += dt
        return t
