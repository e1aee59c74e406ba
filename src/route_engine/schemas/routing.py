"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Coordinate, Location, OptimizationMode, RouteConstraints, Task, Urgency
from ..services.routing.models import (
    AdjustmentReason,
    OptimizedRoute,
    TimeWindow,
    TrafficSeverity,
    Waypoint,
)


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> Coordinate:
        return (self.latitude, self.longitude)


class LocationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> Location:
        return Location(id=self.id, name=self.name, latitude=self.latitude, longitude=self.longitude)


class TaskModel(BaseModel):
    id: str
    building_id: str
    category: Optional[str] = None
    urgency: Optional[Urgency] = None
    due_date: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None

    def to_domain(self) -> Task:
        return Task(**self.model_dump())


class ConstraintsModel(BaseModel):
    max_duration_minutes: Optional[float] = Field(None, gt=0)
    priority_building_ids: List[str] = Field(default_factory=list)
    avoid_traffic: bool = False
    preferred_start_time: Optional[datetime] = None
    optimize_for: OptimizationMode = OptimizationMode.BALANCED

    def to_domain(self) -> RouteConstraints:
        return RouteConstraints(
            max_duration_minutes=self.max_duration_minutes,
            priority_building_ids=frozenset(self.priority_building_ids),
            avoid_traffic=self.avoid_traffic,
            preferred_start_time=self.preferred_start_time,
            optimize_for=self.optimize_for,
        )


class OptimizeRequest(BaseModel):
    locations: List[LocationModel]
    tasks: List[TaskModel] = Field(default_factory=list)
    start_location: Optional[CoordinateModel] = Field(
        default=None,
        description="Where the visitor starts. Defaults to the configured start position.",
    )
    constraints: ConstraintsModel = Field(default_factory=ConstraintsModel)


class TimeWindowModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    earliest_start: datetime
    latest_end: datetime
    preferred_time: Optional[datetime] = None


class WaypointModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    location: LocationModel
    estimated_arrival: datetime
    estimated_departure: datetime
    task_duration_min: float
    priority: int
    time_window: Optional[TimeWindowModel] = None
    distance_from_prev_km: float
    travel_time_min: float


class RouteModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    waypoints: List[WaypointModel]
    total_distance_km: float
    total_duration_min: float
    efficiency: float
    traffic_severity: TrafficSeverity
    calculated_at: datetime

    @classmethod
    def from_domain(cls, route: OptimizedRoute) -> "RouteModel":
        return cls.model_validate(route)

    def to_domain(self) -> OptimizedRoute:
        return OptimizedRoute(
            waypoints=tuple(
                Waypoint(
                    location=waypoint.location.to_domain(),
                    estimated_arrival=waypoint.estimated_arrival,
                    estimated_departure=waypoint.estimated_departure,
                    task_duration_min=waypoint.task_duration_min,
                    priority=waypoint.priority,
                    time_window=TimeWindow(**waypoint.time_window.model_dump()) if waypoint.time_window else None,
                    distance_from_prev_km=waypoint.distance_from_prev_km,
                    travel_time_min=waypoint.travel_time_min,
                )
                for waypoint in self.waypoints
            ),
            total_distance_km=self.total_distance_km,
            total_duration_min=self.total_duration_min,
            efficiency=self.efficiency,
            traffic_severity=self.traffic_severity,
            calculated_at=self.calculated_at,
        )


class DirectionsRequest(BaseModel):
    route: RouteModel
    start_location: CoordinateModel


class RouteSegmentModel(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    location: LocationModel
    distance_km: float
    estimated_duration_min: float
    instructions: List[str]
    traffic_severity: TrafficSeverity
    segment_index: int


class MonitorRequest(BaseModel):
    route: RouteModel
    current_location: CoordinateModel
    completed_stop_ids: List[str] = Field(default_factory=list)


class RouteAdjustmentModel(BaseModel):
    reason: AdjustmentReason
    suggested_route: RouteModel
    time_saved_min: float
