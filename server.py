"""
Spinning Hexagon Web Server — Layer 3 (FastAPI + WebSocket)

Serves the canvas frontend and runs the physics loop,
streaming snapshots to browser clients over WebSocket.
"""

import asyncio
import json
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from controller import SimulationController
from physics import SCREEN_WIDTH, SCREEN_HEIGHT, HEX_RADIUS

STATIC_DIR = Path(__file__).resolve().parent / "static"

# ── Controller ──────────────────────────────────────────────────────────────

ctrl = SimulationController()


# ── Lifespan (startup/shutdown) ─────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(game_loop())
    yield
    task.cancel()


app = FastAPI(lifespan=lifespan)

# ── Client state ────────────────────────────────────────────────────────────

clients: list[WebSocket] = []

# Scenario map (keys 1-5)
SCENARIO_KEYS = {
    "1": "default",
    "2": "drop",
    "3": "spinning_wall",
    "4": "sliding",
    "5": "fast_spin",
}

# ── Async game loop ─────────────────────────────────────────────────────────

TARGET_FPS = 60
FRAME_DT = 1.0 / TARGET_FPS


async def game_loop():
    """Main loop running at ~60 fps."""
    last_time = time.perf_counter()

    while True:
        now = time.perf_counter()
        dt = now - last_time
        last_time = now

        # 1. Physics step (controller clamps dt and runs fixed substeps)
        ctrl.step(dt)

        # 2. Build frame message and broadcast
        if clients:
            frame_msg = _build_frame_message()
            dead: list[WebSocket] = []
            for ws in clients:
                try:
                    await ws.send_text(frame_msg)
                except Exception as exc:
                    print(f"[WS] dropping client: {exc!r}")
                    dead.append(ws)
            for ws in dead:
                if ws in clients:
                    clients.remove(ws)

        # Sleep to maintain target FPS
        elapsed = time.perf_counter() - now
        sleep_time = FRAME_DT - elapsed
        if sleep_time > 0:
            await asyncio.sleep(sleep_time)
        else:
            await asyncio.sleep(0)


def _build_frame_message() -> str:
    """Serialize the current snapshot and drained event queues into a JSON frame."""
    snap = ctrl.snapshot()

    events = list(ctrl.pending_events)
    ctrl.pending_events.clear()

    hits = []
    for ev in ctrl.physics_events:
        hits.append({
            "edge": ev.get("edge", -1),
            "speed": round(float(ev.get("speed", 0.0)), 3),
        })
    ctrl.physics_events.clear()

    frame = {
        "type": "frame",
        **snap.to_dict(),
        "events": events,
        "hits": hits,
        "paused": ctrl.paused,
        "status": ctrl.status_msg,
        "info": ctrl.info_msg,
    }
    return json.dumps(frame, separators=(',', ':'))


# ── Key press handlers ──────────────────────────────────────────────────────

def _handle_key_down(key: str):
    """Handle a key press event from the client."""
    if key == "space":
        ctrl.toggle_pause()
    elif key == "r":
        ctrl.reset()
    elif key in SCENARIO_KEYS:
        ctrl.load_scenario(SCENARIO_KEYS[key])


# ── WebSocket endpoint ──────────────────────────────────────────────────────

@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    clients.append(ws)

    # Send init message with viewport/physics constants
    init_msg = json.dumps({
        "type": "init",
        "width": SCREEN_WIDTH,
        "height": SCREEN_HEIGHT,
        "hex_radius": HEX_RADIUS,
        "ball_radius": ctrl.snapshot().ball_radius,
        "sim_dt": ctrl.SIM_DT,
        "scenarios": SCENARIO_KEYS,
    })
    await ws.send_text(init_msg)

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue

            cmd = msg.get("cmd", "")
            if cmd == "key_down":
                _handle_key_down(msg.get("key", ""))
            elif cmd == "execute":
                ctrl.execute_command(msg.get("text", ""))
            elif cmd == "get_state":
                await ws.send_text(json.dumps({
                    "type": "state_json",
                    "data": ctrl.get_state_json(),
                }))
    except WebSocketDisconnect:
        pass
    finally:
        if ws in clients:
            clients.remove(ws)


# ── Static files + root route ───────────────────────────────────────────────

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.get("/")
async def root():
    return FileResponse(STATIC_DIR / "index.html")


# ── Run with uvicorn ────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=False)
