from datetime import datetime, timezone

import pytest

from route_engine.models.domain import Location, OptimizationMode, RouteConstraints
from route_engine.services.routing.models import OptimizedRoute, TrafficSeverity, Waypoint
from route_engine.services.routing.scoring import RouteScorer

NOON = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _waypoint(lid: str) -> Waypoint:
    return Waypoint(
        location=Location(id=lid, name=lid, latitude=40.7, longitude=-73.9),
        estimated_arrival=NOON,
        estimated_departure=NOON,
        task_duration_min=30,
        priority=3,
        time_window=None,
        distance_from_prev_km=1.0,
        travel_time_min=10.0,
    )


def _route(ids=("A", "B", "C"), distance=12.0, duration=90.0, efficiency=1.0) -> OptimizedRoute:
    return OptimizedRoute(
        waypoints=tuple(_waypoint(lid) for lid in ids),
        total_distance_km=distance,
        total_duration_min=duration,
        efficiency=efficiency,
        traffic_severity=TrafficSeverity.NORMAL,
        calculated_at=NOON,
    )


@pytest.mark.parametrize(
    "mode,expected",
    [
        (OptimizationMode.TIME, 1.5),
        (OptimizationMode.DISTANCE, 12.0),
        (OptimizationMode.BALANCED, 13.5),
    ],
)
def test_base_cost_by_mode(mode, expected):
    assert RouteScorer().score(_route(), RouteConstraints(optimize_for=mode)) == pytest.approx(expected)


def test_max_duration_overrun_penalty():
    constraints = RouteConstraints(optimize_for=OptimizationMode.TIME, max_duration_minutes=60)

    # 30 minutes over: 0.5h * 100
    assert RouteScorer().score(_route(duration=90.0), constraints) == pytest.approx(1.5 + 50.0)
    assert RouteScorer().score(_route(duration=45.0), constraints) == pytest.approx(0.75)


def test_priority_bonus_rewards_early_visits():
    scorer = RouteScorer()
    constraints = RouteConstraints(optimize_for=OptimizationMode.DISTANCE, priority_building_ids=frozenset({"C"}))

    first = scorer.score(_route(ids=("C", "A", "B")), constraints)
    last = scorer.score(_route(ids=("A", "B", "C")), constraints)

    assert first == pytest.approx(12.0 - 15.0)
    assert last == pytest.approx(12.0 - 5.0)
    assert first < last


def test_low_efficiency_penalty():
    constraints = RouteConstraints(optimize_for=OptimizationMode.DISTANCE)

    assert RouteScorer().score(_route(efficiency=0.6), constraints) == pytest.approx(12.0 + 20.0)
