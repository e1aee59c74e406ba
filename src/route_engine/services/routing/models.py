"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Optional

from ...models.domain import Coordinate, Location


class TrafficSeverity(IntEnum):
    LIGHT = 0
    NORMAL = 1
    MODERATE = 2
    HEAVY = 3
    SEVERE = 4

    def escalate(self, steps: int = 1) -> "TrafficSeverity":
        return TrafficSeverity(min(int(TrafficSeverity.SEVERE), int(self) + steps))


@dataclass(frozen=True, slots=True)
class TimeWindow:
    earliest_start: datetime
    latest_end: datetime
    preferred_time: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class TrafficCondition:
    expected_travel_time_s: float
    typical_travel_time_s: float
    current_delay_s: float
    severity: TrafficSeverity


@dataclass(frozen=True, slots=True)
class TrafficData:
    conditions: dict[str, TrafficCondition]
    last_updated: datetime
    overall_severity: TrafficSeverity

    @classmethod
    def normal(cls, at: datetime) -> "TrafficData":
        return cls(conditions={}, last_updated=at, overall_severity=TrafficSeverity.NORMAL)


@dataclass(slots=True)
class TaskAnalysis:
    """Per-location time windows and priorities plus task-level dependency edges."""

    time_windows: dict[str, TimeWindow] = field(default_factory=dict)
    dependencies: dict[str, set[str]] = field(default_factory=dict)
    priorities: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Waypoint:
    location: Location
    estimated_arrival: datetime
    estimated_departure: datetime
    task_duration_min: float
    priority: int
    time_window: Optional[TimeWindow]
    distance_from_prev_km: float
    travel_time_min: float


@dataclass(frozen=True, slots=True)
class OptimizedRoute:
    waypoints: tuple[Waypoint, ...]
    total_distance_km: float
    total_duration_min: float
    efficiency: float
    traffic_severity: TrafficSeverity
    calculated_at: datetime

    @property
    def location_ids(self) -> list[str]:
        return [waypoint.location.id for waypoint in self.waypoints]

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.total_duration_min)

    @property
    def formatted_distance(self) -> str:
        return format_distance(self.total_distance_km)


EMPTY_ROUTE = OptimizedRoute(
    waypoints=(),
    total_distance_km=0.0,
    total_duration_min=0.0,
    efficiency=1.0,
    traffic_severity=TrafficSeverity.NORMAL,
    calculated_at=datetime(1970, 1, 1, tzinfo=timezone.utc),
)


@dataclass(slots=True)
class RouteSegment:
    origin: Coordinate
    destination: Coordinate
    location: Location
    distance_km: float
    estimated_duration_min: float
    instructions: list[str]
    traffic_severity: TrafficSeverity = TrafficSeverity.NORMAL
    segment_index: int = 0


class AdjustmentReason(str, Enum):
    TRAFFIC_CHANGE = "traffic_change"
    RUNNING_LATE = "running_late"


@dataclass(frozen=True, slots=True)
class RouteAdjustment:
    reason: AdjustmentReason
    suggested_route: OptimizedRoute
    time_saved_min: float


def format_duration(minutes: float) -> str:
    total = int(round(minutes))
    hours, mins = divmod(total, 60)
    if hours:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_distance(kilometers: float) -> str:
    if kilometers < 1.0:
        return f"{kilometers * 1000:.0f} m"
    return f"{kilometers:.1f} km"
