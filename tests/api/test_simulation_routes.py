"""Tests for the simulation routes: lifecycle commands, state and event queries."""

import pytest


@pytest.mark.asyncio
class TestLifecycleRoutes:
    async def test_get_state(self, client, engine):
        resp = await client.get("/api/v1/simulation")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "preparing"
        assert data["id"] == engine.get_state().id
        assert len(data["systems"]) == 8
        assert data["events"] == []

    async def test_start_pause_stop(self, client, engine):
        resp = await client.post("/api/v1/simulation/start")
        assert resp.json() == {"changed": True, "status": "running"}

        resp = await client.post("/api/v1/simulation/start")
        assert resp.json() == {"changed": False, "status": "running"}

        resp = await client.post("/api/v1/simulation/pause")
        assert resp.json() == {"changed": True, "status": "paused"}

        resp = await client.post("/api/v1/simulation/stop")
        assert resp.json() == {"changed": True, "status": "completed"}

        resp = await client.post("/api/v1/simulation/start")
        assert resp.status_code == 200
        assert resp.json() == {"changed": False, "status": "completed"}

    async def test_initialize(self, client, engine, clock):
        engine.start()
        clock.advance(64)
        resp = await client.post("/api/v1/simulation/initialize", json={"seed": 5})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "preparing"
        assert data["event_count"] == 0

    async def test_initialize_without_body(self, client):
        resp = await client.post("/api/v1/simulation/initialize")
        assert resp.status_code == 200
        assert resp.json()["status"] == "preparing"

    async def test_initialize_rejects_bad_seed(self, client):
        resp = await client.post("/api/v1/simulation/initialize", json={"seed": "abc"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] is True
        assert data["errors"]


@pytest.mark.asyncio
class TestEventRoutes:
    @pytest.fixture
    def finished(self, engine, clock):
        engine.start()
        clock.advance(64)
        return engine

    async def test_state_without_events(self, client, finished):
        resp = await client.get("/api/v1/simulation", params={"include_events": "false"})
        data = resp.json()
        assert data["event_count"] == 3
        assert data["events"] == []

    async def test_metrics(self, client, finished):
        resp = await client.get("/api/v1/simulation/metrics")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_threats"] == 1
        assert data["mitigated_threats"] == 1

    async def test_list_events(self, client, finished):
        resp = await client.get("/api/v1/simulation/events")
        assert [e["type"] for e in resp.json()] == ["attack", "detection", "mitigation"]

    async def test_filter_and_limit(self, client, finished):
        resp = await client.get("/api/v1/simulation/events", params={"type": "detection"})
        assert [e["id"] for e in resp.json()] == ["response-event-1"]

        resp = await client.get("/api/v1/simulation/events", params={"limit": 1})
        assert [e["id"] for e in resp.json()] == ["mitigation-event-1"]

    async def test_bad_filters_rejected(self, client, finished):
        resp = await client.get("/api/v1/simulation/events", params={"type": "recon"})
        assert resp.status_code == 422
        resp = await client.get("/api/v1/simulation/events", params={"limit": -1})
        assert resp.status_code == 422

    async def test_get_event(self, client, finished):
        resp = await client.get("/api/v1/simulation/events/event-1")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "mitigated"
        assert data["red_team_action"]["id"] == "red-event-1"

    async def test_unknown_event_is_404(self, client, finished):
        resp = await client.get("/api/v1/simulation/events/event-404")
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] is True
        assert data["detail"] == "Event event-404 not found"
        assert data["request_id"]

    async def test_scenarios(self, client):
        resp = await client.get("/api/v1/simulation/scenarios")
        assert resp.status_code == 200
        names = [s["name"] for s in resp.json()]
        assert "Ransomware Deployment" in names


@pytest.mark.asyncio
class TestServiceRoutes:
    async def test_root(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "operational"

    async def test_health(self, client, engine):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["simulation"]["simulation_id"] == engine.get_state().id
        assert data["websocket"]["clients"] == 0

    async def test_request_id_echoed(self, client):
        resp = await client.get("/", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"
