"""
Server Tests — frame serialization, key handling and the /ws handshake.
"""

import sys
import os
import json
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import server
from controller import SimulationController
from physics import SCREEN_WIDTH, SCREEN_HEIGHT, BALL_RADIUS


@pytest.fixture(autouse=True)
def fresh_controller(monkeypatch):
    """Each test gets its own controller in place of the module-level one."""
    ctrl = SimulationController()
    monkeypatch.setattr(server, "ctrl", ctrl)
    return ctrl


class TestFrameMessage:

    def test_frame_layout(self, fresh_controller):
        frame = json.loads(server._build_frame_message())
        assert frame["type"] == "frame"
        assert frame["ball"]["pos"] == [400.0, 150.0]
        assert frame["ball"]["radius"] == BALL_RADIUS
        assert len(frame["hexagon"]) == 6
        assert frame["hexagon"][0] == [600.0, 300.0]
        assert frame["paused"] is False

    def test_frame_uses_snapshot_dict(self, fresh_controller):
        for _ in range(30):
            fresh_controller.step(fresh_controller.SIM_DT)
        frame = json.loads(server._build_frame_message())
        d = fresh_controller.snapshot().to_dict()
        assert frame["ball"] == d["ball"]
        assert frame["hexagon"] == d["hexagon"]

    def test_frame_drains_queues(self, fresh_controller):
        fresh_controller.load_scenario("drop")
        fresh_controller.physics_events.append({"type": "wall", "edge": 1, "speed": 12.34567})

        frame = json.loads(server._build_frame_message())
        assert {"type": "scenario_loaded", "name": "drop"} in frame["events"]
        assert frame["hits"] == [{"edge": 1, "speed": 12.346}]
        assert fresh_controller.pending_events == []
        assert fresh_controller.physics_events == []


class TestKeys:

    def test_space_toggles_pause(self, fresh_controller):
        server._handle_key_down("space")
        assert fresh_controller.paused

    def test_number_keys_load_scenarios(self, fresh_controller):
        server._handle_key_down("2")
        assert fresh_controller.scenario == "drop"
        server._handle_key_down("5")
        assert fresh_controller.scenario == "fast_spin"

    def test_reset_key(self, fresh_controller):
        fresh_controller.step(fresh_controller.SIM_DT)
        server._handle_key_down("r")
        assert fresh_controller.sim_time == 0.0

    def test_unmapped_key_ignored(self, fresh_controller):
        server._handle_key_down("q")
        assert fresh_controller.scenario == "default"
        assert not fresh_controller.paused


class TestEndpoints:

    def test_index_served(self):
        with TestClient(server.app) as client:
            resp = client.get("/")
            assert resp.status_code == 200
            assert "<canvas" in resp.text

    def test_websocket_init_and_state(self):
        with TestClient(server.app) as client:
            with client.websocket_connect("/ws") as ws:
                init = ws.receive_json()
                assert init["type"] == "init"
                assert init["width"] == SCREEN_WIDTH
                assert init["height"] == SCREEN_HEIGHT
                assert init["ball_radius"] == BALL_RADIUS

                ws.send_json({"cmd": "get_state"})
                # Frames from the game loop may arrive first
                msg = ws.receive_json()
                while msg["type"] == "frame":
                    msg = ws.receive_json()
                assert msg["type"] == "state_json"
                assert json.loads(msg["data"])["cmd"] == "set"
