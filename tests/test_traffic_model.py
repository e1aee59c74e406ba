from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from route_engine.models.domain import Location
from route_engine.services.routing.models import TrafficSeverity
from route_engine.services.routing.traffic import TrafficModel, severity_for_hour, traffic_multiplier

NY = ZoneInfo("America/New_York")


def _location(lid: str, lat: float, lon: float) -> Location:
    return Location(id=lid, name=f"Building {lid}", latitude=lat, longitude=lon)


def _at(hour: int) -> datetime:
    return datetime(2026, 10, 19, hour, 15, tzinfo=NY)


BROOKLYN = _location("BK", 40.65, -73.95)
MIDTOWN = _location("MT", 40.75, -73.98)


@pytest.mark.parametrize(
    "hour,expected",
    [
        (7, TrafficSeverity.HEAVY),
        (9, TrafficSeverity.HEAVY),
        (10, TrafficSeverity.MODERATE),
        (16, TrafficSeverity.MODERATE),
        (17, TrafficSeverity.HEAVY),
        (19, TrafficSeverity.HEAVY),
        (20, TrafficSeverity.NORMAL),
        (22, TrafficSeverity.NORMAL),
        (23, TrafficSeverity.LIGHT),
        (3, TrafficSeverity.LIGHT),
        (6, TrafficSeverity.LIGHT),
    ],
)
def test_severity_for_hour(hour, expected):
    assert severity_for_hour(hour) == expected


def test_rush_hour_outside_dense_area():
    data = TrafficModel(typical_travel_time_s=1800).estimate([BROOKLYN], _at(8))

    condition = data.conditions["BK"]
    assert condition.severity == TrafficSeverity.HEAVY
    assert condition.expected_travel_time_s == pytest.approx(1800 * 1.6)
    assert condition.current_delay_s == pytest.approx(1800 * 0.6)
    assert condition.typical_travel_time_s == 1800


def test_dense_urban_location_escalates_one_step():
    data = TrafficModel(typical_travel_time_s=1800).estimate([BROOKLYN, MIDTOWN], _at(12))

    assert data.conditions["BK"].severity == TrafficSeverity.MODERATE
    assert data.conditions["MT"].severity == TrafficSeverity.HEAVY
    assert data.overall_severity == TrafficSeverity.HEAVY


def test_escalation_caps_at_severe():
    data = TrafficModel().estimate([MIDTOWN], _at(18))

    assert data.conditions["MT"].severity == TrafficSeverity.SEVERE
    assert data.conditions["MT"].expected_travel_time_s == pytest.approx(data.conditions["MT"].typical_travel_time_s * 2.0)


def test_light_traffic_has_negative_delay():
    data = TrafficModel(typical_travel_time_s=1800).estimate([BROOKLYN], _at(2))

    assert data.conditions["BK"].severity == TrafficSeverity.LIGHT
    assert data.conditions["BK"].current_delay_s == pytest.approx(-360.0)


def test_empty_location_list_reports_normal():
    data = TrafficModel().estimate([], _at(8))

    assert data.conditions == {}
    assert data.overall_severity == TrafficSeverity.NORMAL


def test_bounding_box_edge_is_outside():
    model = TrafficModel()

    assert model.is_dense_urban(MIDTOWN)
    assert not model.is_dense_urban(_location("EDGE", 40.7, -73.95))


def test_multipliers():
    assert [traffic_multiplier(severity) for severity in TrafficSeverity] == [0.8, 1.0, 1.3, 1.6, 2.0]


@pytest.mark.parametrize(
    "delay,expected",
    [
        (0, TrafficSeverity.LIGHT),
        (299, TrafficSeverity.LIGHT),
        (300, TrafficSeverity.NORMAL),
        (900, TrafficSeverity.MODERATE),
        (1500, TrafficSeverity.HEAVY),
        (1800, TrafficSeverity.SEVERE),
    ],
)
def test_categorize_delay(delay, expected):
    assert TrafficModel.categorize_delay(delay) == expected


def test_hour_bucket_uses_configured_timezone():
    # 13:00 UTC is 09:00 in New York, inside the morning rush.
    data = TrafficModel(tz="America/New_York").estimate([BROOKLYN], datetime(2026, 10, 19, 13, 0, tzinfo=timezone.utc))

    assert data.overall_severity == TrafficSeverity.HEAVY
    assert data.last_updated.tzinfo == NY
    assert data.last_updated.hour == 9
