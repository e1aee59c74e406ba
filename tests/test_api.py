import random
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from route_engine.main import create_app
from route_engine.services.routing.osrm_client import LegDirections
from route_engine.services.routing.service import RouteOptimizer

NY = ZoneInfo("America/New_York")
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=NY)

LOCATIONS = [
    {"id": "A", "name": "Building A", "latitude": 40.66, "longitude": -73.95},
    {"id": "B", "name": "Building B", "latitude": 40.67, "longitude": -73.94},
    {"id": "C", "name": "Building C", "latitude": 40.75, "longitude": -73.98},
]


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class StaticProvider:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    def directions(self, origin, destination):
        if self.fail:
            raise ConnectionError("provider down")
        return LegDirections(distance_km=1.0, duration_min=4.0, instructions=["Go straight"])


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def provider():
    return StaticProvider()


@pytest.fixture
def client(clock, provider):
    optimizer = RouteOptimizer(clock=clock, directions_provider=provider, rng=random.Random(1))
    return TestClient(create_app(optimizer))


def _optimize(client, **overrides):
    payload = {
        "locations": LOCATIONS,
        "tasks": [{"id": "T1", "building_id": "C", "urgency": "critical", "category": "inspection"}],
        "start_location": {"latitude": 40.65, "longitude": -73.95},
        "constraints": {"optimize_for": "balanced", "priority_building_ids": ["B"]},
    }
    payload.update(overrides)
    return client.post("/api/routes/optimize", json=payload)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_optimize_returns_complete_route(client):
    response = _optimize(client)

    assert response.status_code == 200
    body = response.json()
    assert sorted(waypoint["location"]["id"] for waypoint in body["waypoints"]) == ["A", "B", "C"]
    assert body["total_distance_km"] > 0
    by_id = {waypoint["location"]["id"]: waypoint for waypoint in body["waypoints"]}
    assert by_id["C"]["priority"] == 1


def test_optimize_empty_request(client):
    response = _optimize(client, locations=[], tasks=[])

    assert response.status_code == 200
    body = response.json()
    assert body["waypoints"] == []
    assert body["efficiency"] == 1.0


def test_optimize_rejects_invalid_coordinates(client):
    bad = [{"id": "X", "name": "Nowhere", "latitude": 123.0, "longitude": 0.0}]

    assert _optimize(client, locations=bad).status_code == 422


def test_directions_round_trip(client):
    route = _optimize(client).json()

    response = client.post(
        "/api/routes/directions",
        json={"route": route, "start_location": {"latitude": 40.65, "longitude": -73.95}},
    )

    assert response.status_code == 200
    segments = response.json()
    assert [segment["segment_index"] for segment in segments] == [0, 1, 2]
    assert segments[0]["instructions"] == ["Go straight"]


def test_directions_failure_maps_to_bad_gateway(client, provider):
    route = _optimize(client).json()
    provider.fail = True

    response = client.post(
        "/api/routes/directions",
        json={"route": route, "start_location": {"latitude": 40.65, "longitude": -73.95}},
    )

    assert response.status_code == 502
    assert "No route found" in response.json()["detail"]


def test_monitor_reports_running_late(client, clock):
    route = _optimize(client).json()
    clock.now = NOW + timedelta(hours=5)

    response = client.post(
        "/api/routes/monitor",
        json={"route": route, "current_location": {"latitude": 40.66, "longitude": -73.95}, "completed_stop_ids": []},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["reason"] == "running_late"
    assert len(body["suggested_route"]["waypoints"]) == 3


def test_monitor_on_completed_route_returns_null(client):
    route = _optimize(client).json()

    response = client.post(
        "/api/routes/monitor",
        json={
            "route": route,
            "current_location": {"latitude": 40.66, "longitude": -73.95},
            "completed_stop_ids": ["A", "B", "C"],
        },
    )

    assert response.status_code == 200
    assert response.json() is None


def test_monitor_accepts_route_planned_from_naive_start(client):
    route = _optimize(client, constraints={"preferred_start_time": "2026-10-19T09:00:00"}).json()

    response = client.post(
        "/api/routes/monitor",
        json={"route": route, "current_location": {"latitude": 40.66, "longitude": -73.95}, "completed_stop_ids": []},
    )

    assert response.status_code == 200
    assert response.json()["reason"] == "running_late"


@pytest.mark.parametrize("error,expected_status", [(ValueError("bad route"), 400), (RuntimeError("boom"), 500)])
def test_monitor_errors_are_mapped(client, monkeypatch, error, expected_status):
    route = _optimize(client).json()
    optimizer = client.app.state.optimizer

    def failing_monitor(*args, **kwargs):
        raise error

    monkeypatch.setattr(optimizer, "monitor", failing_monitor)
    response = client.post(
        "/api/routes/monitor",
        json={"route": route, "current_location": {"latitude": 40.66, "longitude": -73.95}, "completed_stop_ids": []},
    )

    assert response.status_code == expected_status
    assert str(error) in response.json()["detail"]
