"""
SimulationController — Layer 2 (Simulation Logic)

Owns the physics engine and drives it at a fixed timestep.
Communicates with Layer 3 (server.py / browser renderer) via two queues:
  - pending_events  : rendering commands (reset, scenario_loaded, paused, …)
  - physics_events  : wall-hit events for sound/flash playback

Layer 3 calls:
  ctrl.step(dt)               — advance physics by the elapsed frame time
  ctrl.snapshot()             — ball center/radius + hexagon vertices
  ctrl.pending_events         — list of dicts to consume and act on
  ctrl.physics_events         — list of wall-hit dicts
"""

import json
import math
import numpy as np

from physics import PhysicsEngine, Ball, Snapshot, FIXED_DT
from scenarios import SCENARIOS
from vector import Vector2


DEFAULT_INFO_MSG = "[Space] Pause  [R] Reset  [1-5] Scenario"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_vec(name: str, value) -> Vector2:
    """[x, y] list/tuple of numbers -> Vector2. Anything else raises TypeError."""
    if (not isinstance(value, (list, tuple)) or len(value) != 2
            or not all(_is_number(v) for v in value)):
        raise TypeError(f"'{name}' must be [x, y] numbers, got {value!r}")
    return Vector2(float(value[0]), float(value[1]))


class SimulationController:
    """Layer 2: fixed-timestep driver + command surface for one engine."""

    # ── Class-level constants ─────────────────────────────────────────────────
    SIM_DT        = FIXED_DT
    MAX_SUBSTEPS  = 4        # engine steps per frame before excess time is dropped
    MAX_FRAME_DT  = 0.05     # clamp to avoid spiral-of-death after a stall

    # ── Constructor ───────────────────────────────────────────────────────────

    def __init__(self):
        self.engine = PhysicsEngine()
        self.scenario = "default"
        self.paused = False
        self.sim_time = 0.0
        self._accumulator = 0.0

        # Status / info messages (L3 reads these to update text)
        self.status_msg = "Running..."
        self.info_msg   = DEFAULT_INFO_MSG

        # Event queues
        self.pending_events: list[dict] = []   # L3 rendering commands
        self.physics_events: list[dict] = []   # wall hits

    # ──────────────────────────────────────────────────────────────────────────
    # Main loop
    # ──────────────────────────────────────────────────────────────────────────

    def step(self, dt_frame: float) -> int:
        """Advance physics by a frame's worth of time. Returns engine steps taken."""
        if self.paused:
            return 0

        self.physics_events.clear()
        if not math.isfinite(dt_frame):
            dt_frame = 0.0
        self._accumulator += min(max(dt_frame, 0.0), self.MAX_FRAME_DT)

        steps = 0
        while self._accumulator >= self.SIM_DT and steps < self.MAX_SUBSTEPS:
            self.engine.step(self.SIM_DT)
            self.physics_events.extend(self.engine.events)
            self._accumulator -= self.SIM_DT
            self.sim_time += self.SIM_DT
            steps += 1

        if self._accumulator >= self.SIM_DT:
            # Could not keep up: drop the backlog rather than stepping with a larger dt
            self._accumulator = 0.0
        return steps

    def snapshot(self) -> Snapshot:
        return self.engine.snapshot()

    # ──────────────────────────────────────────────────────────────────────────
    # State management
    # ──────────────────────────────────────────────────────────────────────────

    def reset(self) -> np.ndarray:
        """Rebuild the current scenario from scratch and return the obs vector."""
        self.load_scenario(self.scenario)
        self.pending_events.append({"type": "reset"})
        self.status_msg = "Reset."
        return self.get_obs()

    def load_scenario(self, name: str) -> None:
        """Replace the engine with a preset from scenarios.SCENARIOS."""
        if name not in SCENARIOS:
            raise ValueError(f"load_scenario: unknown scenario '{name}'")
        result = SCENARIOS[name](run=False)
        self.engine = result["engine"]
        self.scenario = name
        self.sim_time = 0.0
        self._accumulator = 0.0
        self.physics_events.clear()
        self.pending_events.append({"type": "scenario_loaded", "name": name})
        self.info_msg = f"Scenario {name}"
        self.status_msg = "Running..." if not self.paused else "Paused."

    def toggle_pause(self) -> None:
        self.paused = not self.paused
        self.status_msg = "Paused." if self.paused else "Running..."
        self.pending_events.append({"type": "paused", "value": self.paused})

    # ──────────────────────────────────────────────────────────────────────────
    # Observation / serialization
    # ──────────────────────────────────────────────────────────────────────────

    def get_obs(self) -> np.ndarray:
        """Flat float32 vector: [x, y, vx, vy, rotation]."""
        b = self.engine.ball
        return np.array([
            b.position.x, b.position.y,
            b.velocity.x, b.velocity.y,
            self.engine.hexagon.rotation,
        ], dtype=np.float32)

    def get_state_json(self) -> str:
        """Return current state as compact single-line set-command JSON."""
        b = self.engine.ball
        payload = {
            "cmd": "set",
            "ball": {
                "pos": [round(b.position.x, 4), round(b.position.y, 4)],
                "vel": [round(b.velocity.x, 4), round(b.velocity.y, 4)],
            },
            "rotation": round(self.engine.hexagon.rotation, 6),
        }
        return json.dumps(payload, separators=(',', ':'))

    # ──────────────────────────────────────────────────────────────────────────
    # Command surface
    # ──────────────────────────────────────────────────────────────────────────

    def execute_command(self, text: str) -> None:
        """Parse a JSON command string and dispatch to handlers."""
        if not text:
            print("[SIM] execute_command: empty text")
            return
        text = text.replace('\r', '')
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            print(f"[SIM] JSON parse error: {exc}")
            self.status_msg = f"JSON error: {exc}"
            return
        if not isinstance(data, dict):
            self.status_msg = "Command must be a JSON object."
            return

        cmd = str(data.get("cmd", "")).lower().strip()
        print(f"[SIM] cmd={cmd}")
        if cmd == "set":
            self._cmd_set(data)
        elif cmd == "reset":
            self.reset()
        elif cmd == "scenario":
            name = str(data.get("name", ""))
            try:
                self.load_scenario(name)
            except ValueError as exc:
                print(f"[SIM] {exc}")
                self.status_msg = f"scenario: unknown '{name}'. Use {sorted(SCENARIOS)}."
        elif cmd == "pause":
            self.toggle_pause()
        else:
            self.status_msg = f"Unknown cmd '{cmd}'. Use set/reset/scenario/pause."

    def _cmd_set(self, data: dict) -> None:
        """set: overwrite ball position/velocity and/or hexagon rotation.

        Format (same as get_state_json)::

            {"cmd": "set", "ball": {"pos": [x, y], "vel": [vx, vy]}, "rotation": r}

        Every field is optional but at least one of ball/rotation is required.
        Nothing is applied unless all given fields parse.
        """
        bd = data.get("ball")
        rotation = data.get("rotation")
        if bd is None and rotation is None:
            self.status_msg = "set: 'ball' or 'rotation' field required."
            return

        # Parse everything before touching the engine so a bad field changes nothing
        ball = self.engine.ball
        try:
            new_pos, new_vel = ball.position, ball.velocity
            if bd is not None:
                if not isinstance(bd, dict):
                    raise TypeError("'ball' must be an object")
                if bd.get("pos") is not None:
                    new_pos = _parse_vec("pos", bd["pos"])
                if bd.get("vel") is not None:
                    new_vel = _parse_vec("vel", bd["vel"])
            new_rotation = self.engine.hexagon.rotation
            if rotation is not None:
                if not _is_number(rotation):
                    raise TypeError(f"'rotation' must be a number, got {rotation!r}")
                new_rotation = float(rotation)
        except TypeError as exc:
            print(f"[SIM] set failed: {exc}")
            self.status_msg = f"set error: {exc}"
            return

        if bd is not None:
            self.engine.ball = Ball(position=new_pos, velocity=new_vel,
                                    radius=ball.radius, wall_hits=ball.wall_hits)
        self.engine.hexagon.rotation = new_rotation

        b = self.engine.ball
        print(f"[SIM]   set ball -> ({b.position.x:.3f},{b.position.y:.3f})")
        self.status_msg = "set: state updated."
