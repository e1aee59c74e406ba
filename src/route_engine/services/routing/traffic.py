"""Time-of-day traffic model.

This is a deterministic estimate computed in-process, not a live feed. Every
location gets the same typical travel time; the severity bucket for the hour
(escalated one step inside the dense-urban box) scales it into the expected
travel time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import Location, localize
from ..geospatial import point_in_bounds
from .models import TrafficCondition, TrafficData, TrafficSeverity

SEVERITY_MULTIPLIERS: dict[TrafficSeverity, float] = {
    TrafficSeverity.LIGHT: 0.8,
    TrafficSeverity.NORMAL: 1.0,
    TrafficSeverity.MODERATE: 1.3,
    TrafficSeverity.HEAVY: 1.6,
    TrafficSeverity.SEVERE: 2.0,
}


def traffic_multiplier(severity: TrafficSeverity) -> float:
    return SEVERITY_MULTIPLIERS[severity]


def severity_for_hour(hour: int) -> TrafficSeverity:
    """Base severity for an hour of the day (0-23)."""
    if 7 <= hour <= 9 or 17 <= hour <= 19:
        return TrafficSeverity.HEAVY
    if 10 <= hour <= 16:
        return TrafficSeverity.MODERATE
    if 20 <= hour <= 22:
        return TrafficSeverity.NORMAL
    return TrafficSeverity.LIGHT


class TrafficEstimator(Protocol):
    def estimate(self, locations: Sequence[Location], at_time: datetime) -> TrafficData:
        ...


class TrafficModel:
    def __init__(
        self,
        typical_travel_time_s: float | None = None,
        dense_urban_bounds: tuple[float, float, float, float] | None = None,
        tz: str | None = None,
    ) -> None:
        self.typical_travel_time_s = (
            typical_travel_time_s if typical_travel_time_s is not None else settings.typical_travel_time_seconds
        )
        self.dense_urban_bounds = tuple(dense_urban_bounds or settings.dense_urban_bounds)
        self.tz = ZoneInfo(tz or settings.timezone)

    def is_dense_urban(self, location: Location) -> bool:
        return point_in_bounds(location.latitude, location.longitude, self.dense_urban_bounds)

    def condition_for(self, location: Location, base: TrafficSeverity) -> TrafficCondition:
        severity = base.escalate() if self.is_dense_urban(location) else base
        expected = self.typical_travel_time_s * traffic_multiplier(severity)
        return TrafficCondition(
            expected_travel_time_s=expected,
            typical_travel_time_s=self.typical_travel_time_s,
            current_delay_s=expected - self.typical_travel_time_s,
            severity=severity,
        )

    def estimate(self, locations: Sequence[Location], at_time: datetime) -> TrafficData:
        """Conditions for each location at ``at_time``, bucketed by the local hour."""
        at_time = localize(at_time, self.tz)
        base = severity_for_hour(at_time.hour)
        conditions = {location.id: self.condition_for(location, base) for location in locations}
        overall = max((condition.severity for condition in conditions.values()), default=TrafficSeverity.NORMAL)
        return TrafficData(conditions=conditions, last_updated=at_time, overall_severity=overall)

    @staticmethod
    def categorize_delay(delay_s: float) -> TrafficSeverity:
        """Bucket an observed delay into a severity."""
        if delay_s < 300:
            return TrafficSeverity.LIGHT
        if delay_s < 600:
            return TrafficSeverity.NORMAL
        if delay_s < 1200:
            return TrafficSeverity.MODERATE
        if delay_s < 1800:
            return TrafficSeverity.HEAVY
        return TrafficSeverity.SEVERE
