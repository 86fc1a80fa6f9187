"""Tests for the diagnostics and control API."""

import sys
import os

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.api.app import create_app
from horde.api.dependencies import get_engine_manager
from horde.config import AIConfig
from horde.core.models import Vector2


@pytest.fixture
def client():
    app = create_app(AIConfig(seed=3), autostart=False)
    with TestClient(app) as c:
        yield c


class TestReadEndpoints:
    def test_state(self, client):
        resp = client.get("/api/v1/state")
        assert resp.status_code == 200
        data = resp.json()
        assert data["stats"]["tick"] == 0
        assert data["stats"]["running"] is False
        assert data["player"] == [120.0, 0.0]
        assert data["agents"] == []

    def test_map_is_run_length_encoded(self, client):
        data = client.get("/api/v1/map").json()
        assert data["width"] == 160 and data["height"] == 160
        rle = data["grid"]
        assert sum(rle[i + 1] for i in range(0, len(rle), 2)) == 160 * 160

    def test_config(self, client):
        data = client.get("/api/v1/config").json()
        assert data["seed"] == 3
        assert data["max_agents"] == 50
        assert data["performance_thresholds"] == [0.8, 0.6, 0.4, 0.2]

    def test_spawns(self, client):
        data = client.get("/api/v1/spawns").json()
        assert data["total_requested"] == 0
        assert set(data["pattern_weights"]) == {"scattered", "clustered", "ambush", "swarm"}

    def test_events_empty(self, client):
        data = client.get("/api/v1/events").json()
        assert data["events"] == []

    def test_missing_agent_is_404(self, client):
        assert client.get("/api/v1/agents/999").status_code == 404

    def test_agent_detail(self, client):
        manager = get_engine_manager()
        agent = manager.system.spawn("brute", Vector2(20.0, 0.0))
        manager._publish_snapshot()

        data = client.get(f"/api/v1/agents/{agent.id}").json()
        assert data["archetype"] == "brute"
        assert data["state"] == "idle"
        assert data["blackboard"]["spawn_position"] == [20.0, 0.0]

        state = client.get("/api/v1/state").json()
        assert [a["id"] for a in state["agents"]] == [agent.id]
        events = client.get("/api/v1/events", params={"category": "agent_spawned"}).json()["events"]
        assert events[0]["data"]["agent_type"] == "brute"


class TestDifficultyEndpoints:
    def test_defaults(self, client):
        data = client.get("/api/v1/difficulty").json()
        assert data["level"] == 1.0
        assert data["overridden"] is False
        assert set(data["breakdown"]) == {"combat", "movement", "survival", "skill"}

    def test_override_round_trip(self, client):
        resp = client.post("/api/v1/difficulty/override", json={"level": 10.0})
        assert resp.status_code == 200
        data = client.get("/api/v1/difficulty").json()
        assert data["overridden"] is True
        assert data["level"] == 3.0
        assert data["history"][-1]["reason"] == "Manual override"

        assert client.delete("/api/v1/difficulty/override").status_code == 200
        assert client.get("/api/v1/difficulty").json()["overridden"] is False

    def test_override_rejects_non_positive(self, client):
        assert client.post("/api/v1/difficulty/override", json={"level": -1.0}).status_code == 422


class TestControlEndpoints:
    def test_unknown_action(self, client):
        assert client.post("/api/v1/control/explode").status_code == 422

    def test_pause_when_stopped(self, client):
        data = client.post("/api/v1/control/pause").json()
        assert data["status"] == "error"

    def test_start_then_start_again(self, client):
        assert client.post("/api/v1/control/start").json()["status"] == "ok"
        assert client.post("/api/v1/control/start").json()["status"] == "noop"
        assert client.post("/api/v1/control/pause").json()["status"] == "ok"

    def test_reset(self, client):
        data = client.post("/api/v1/control/reset").json()
        assert data["status"] == "ok"
        assert data["tick"] == 0

    def test_speed(self, client):
        assert client.post("/api/v1/speed", params={"tps": 10}).status_code == 200
        assert client.get("/api/v1/config").json()["tick_rate"] == pytest.approx(0.1)
        assert client.post("/api/v1/speed", params={"tps": 500}).status_code == 422

    def test_responses_carry_current_tick(self, client):
        manager = get_engine_manager()
        assert manager.current_tick == 0
        manager.system.tick_once(0.05)
        manager._publish_snapshot()
        assert manager.current_tick == 1
        assert client.post("/api/v1/speed", params={"tps": 10}).json()["tick"] == 1
        assert client.post("/api/v1/difficulty/override", json={"level": 2.0}).json()["tick"] == 1
