"""Domain models for the locations, tasks and constraints fed to the optimizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional

Coordinate = tuple[float, float]
"""A (latitude, longitude) pair."""


@dataclass(frozen=True, slots=True)
class Location:
    """A visitable building or site, read from the external location catalog."""

    id: str
    name: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
    CRITICAL = "critical"
    EMERGENCY = "emergency"


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of work at a location, as supplied by the task-management service."""

    id: str
    building_id: str
    category: Optional[str] = None
    urgency: Optional[Urgency] = None
    due_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None


class OptimizationMode(str, Enum):
    TIME = "time"
    DISTANCE = "distance"
    BALANCED = "balanced"


@dataclass(frozen=True, slots=True)
class RouteConstraints:
    """Per-request options for a single optimization call."""

    max_duration_minutes: Optional[float] = None
    priority_building_ids: frozenset[str] = field(default_factory=frozenset)
    avoid_traffic: bool = False
    preferred_start_time: Optional[datetime] = None
    optimize_for: OptimizationMode = OptimizationMode.BALANCED

    def signature(self) -> str:
        """Constraint part of the cache fingerprint."""
        max_duration = self.max_duration_minutes if self.max_duration_minutes is not None else 0
        return f"{self.optimize_for.value}_{self.avoid_traffic}_{max_duration}"


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Express ``value`` in ``tz``; naive datetimes are taken as already local."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)
