from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from route_engine.models.domain import Location
from route_engine.services.geospatial import chain_distance_km, distance_km
from route_engine.services.routing.evaluator import RouteEvaluator
from route_engine.services.routing.models import TaskAnalysis, TimeWindow, TrafficData
from route_engine.services.routing.traffic import TrafficModel

NY = ZoneInfo("America/New_York")
START = (40.65, -73.95)
NOON = datetime(2026, 10, 19, 12, 0, tzinfo=NY)


def _location(lid: str, lat: float, lon: float) -> Location:
    return Location(id=lid, name=f"Building {lid}", latitude=lat, longitude=lon)


STOPS = [
    _location("A", 40.66, -73.95),
    _location("B", 40.68, -73.93),
    _location("C", 40.75, -73.98),
]


def test_timings_are_monotonic_and_totals_add_up():
    traffic = TrafficModel().estimate(STOPS, NOON)
    route = RouteEvaluator(task_duration_min=30).evaluate(STOPS, TaskAnalysis(), traffic, START, NOON)

    assert [waypoint.location.id for waypoint in route.waypoints] == ["A", "B", "C"]
    for waypoint in route.waypoints:
        assert waypoint.estimated_departure >= waypoint.estimated_arrival
        assert waypoint.estimated_departure - waypoint.estimated_arrival == timedelta(minutes=30)
    for current, following in zip(route.waypoints, route.waypoints[1:]):
        assert following.estimated_arrival >= current.estimated_departure

    assert route.total_distance_km == pytest.approx(sum(w.distance_from_prev_km for w in route.waypoints))
    assert route.total_duration_min == pytest.approx(sum(w.travel_time_min for w in route.waypoints))
    assert route.traffic_severity == traffic.overall_severity


def test_travel_time_comes_from_location_condition():
    traffic = TrafficModel(typical_travel_time_s=1800).estimate(STOPS, NOON)
    route = RouteEvaluator().evaluate(STOPS, TaskAnalysis(), traffic, START, NOON)

    # A and B are moderate (1.3x); C sits in the dense-urban box and is heavy (1.6x).
    assert [w.travel_time_min for w in route.waypoints] == pytest.approx([39.0, 39.0, 48.0])
    assert route.waypoints[0].estimated_arrival == NOON + timedelta(minutes=39)


def test_travel_time_falls_back_to_average_speed():
    traffic = TrafficData.normal(NOON)
    evaluator = RouteEvaluator(average_speed_mph=25)
    stop = STOPS[0]

    leg_km = distance_km(START, stop.coordinate)
    expected_s = leg_km * 1000 / (25 * 0.44704)
    assert evaluator.travel_time_s(START, stop, traffic) == pytest.approx(expected_s)


def test_efficiency_is_chain_over_travelled_distance():
    traffic = TrafficModel().estimate(STOPS, NOON)
    route = RouteEvaluator().evaluate(STOPS, TaskAnalysis(), traffic, START, NOON)

    expected = chain_distance_km([stop.coordinate for stop in STOPS]) / route.total_distance_km
    assert route.efficiency == pytest.approx(expected)
    assert 0 < route.efficiency <= 1


def test_zero_distance_route_has_unit_efficiency():
    stop = _location("HERE", START[0], START[1])
    route = RouteEvaluator().evaluate([stop], TaskAnalysis(), TrafficData.normal(NOON), START, NOON)

    assert route.total_distance_km == 0
    assert route.efficiency == 1.0


def test_waypoints_carry_priority_and_window():
    window = TimeWindow(earliest_start=NOON, latest_end=NOON + timedelta(days=1))
    analysis = TaskAnalysis(time_windows={"B": window}, priorities={"B": 1})
    route = RouteEvaluator().evaluate(STOPS, analysis, TrafficData.normal(NOON), START, NOON)

    by_id = {waypoint.location.id: waypoint for waypoint in route.waypoints}
    assert by_id["B"].priority == 1
    assert by_id["B"].time_window == window
    assert by_id["A"].priority == 3
    assert by_id["A"].time_window is None


def test_evaluation_is_deterministic():
    traffic = TrafficModel().estimate(STOPS, NOON)
    evaluator = RouteEvaluator()

    assert evaluator.evaluate(STOPS, TaskAnalysis(), traffic, START, NOON) == evaluator.evaluate(
        STOPS, TaskAnalysis(), traffic, START, NOON
    )
