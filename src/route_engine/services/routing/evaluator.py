"""Turn an ordered stop list into a concrete timed route."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from ...config import settings
from ...models.domain import Coordinate, Location
from ..geospatial import chain_distance_km, distance_km, straight_line_travel_seconds
from .models import OptimizedRoute, TaskAnalysis, TrafficData, Waypoint
from .tasks import DEFAULT_PRIORITY
from .traffic import traffic_multiplier


class RouteEvaluator:
    """Deterministic, side-effect-free route walker."""

    def __init__(self, task_duration_min: float | None = None, average_speed_mph: float | None = None) -> None:
        self.task_duration_min = (
            task_duration_min if task_duration_min is not None else settings.task_duration_minutes
        )
        self.average_speed_mph = average_speed_mph if average_speed_mph is not None else settings.average_speed_mph

    def travel_time_s(self, origin: Coordinate, destination: Location, traffic: TrafficData) -> float:
        condition = traffic.conditions.get(destination.id)
        if condition is not None:
            return condition.expected_travel_time_s
        base = straight_line_travel_seconds(distance_km(origin, destination.coordinate), self.average_speed_mph)
        return base * traffic_multiplier(traffic.overall_severity)

    def evaluate(
        self,
        ordered: Sequence[Location],
        analysis: TaskAnalysis,
        traffic: TrafficData,
        start_location: Coordinate,
        start_time: datetime,
        calculated_at: datetime | None = None,
    ) -> OptimizedRoute:
        waypoints: list[Waypoint] = []
        position = start_location
        clock = start_time
        total_distance = 0.0
        total_duration_s = 0.0
        task_duration = timedelta(minutes=self.task_duration_min)

        for location in ordered:
            leg_km = distance_km(position, location.coordinate)
            leg_s = self.travel_time_s(position, location, traffic)
            total_distance += leg_km
            total_duration_s += leg_s

            arrival = clock + timedelta(seconds=leg_s)
            departure = arrival + task_duration
            waypoints.append(
                Waypoint(
                    location=location,
                    estimated_arrival=arrival,
                    estimated_departure=departure,
                    task_duration_min=self.task_duration_min,
                    priority=analysis.priorities.get(location.id, DEFAULT_PRIORITY),
                    time_window=analysis.time_windows.get(location.id),
                    distance_from_prev_km=leg_km,
                    travel_time_min=leg_s / 60.0,
                )
            )
            position = location.coordinate
            clock = departure

        # Ratio of the stop-to-stop chain to the distance actually travelled from the start.
        if total_distance > 0:
            efficiency = chain_distance_km([location.coordinate for location in ordered]) / total_distance
        else:
            efficiency = 1.0

        return OptimizedRoute(
            waypoints=tuple(waypoints),
            total_distance_km=total_distance,
            total_duration_min=total_duration_s / 60.0,
            efficiency=efficiency,
            traffic_severity=traffic.overall_severity,
            calculated_at=calculated_at or start_time,
        )
