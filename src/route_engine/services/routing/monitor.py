"""Mid-route drift checks that decide when to re-plan the remaining stops."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import Coordinate, Location, OptimizationMode, RouteConstraints, Task, localize
from .models import AdjustmentReason, OptimizedRoute, RouteAdjustment, Waypoint
from .traffic import TrafficEstimator

logger = logging.getLogger(__name__)


class Reoptimizer(Protocol):
    def optimize(
        self,
        locations: Sequence[Location],
        tasks: Sequence[Task] = (),
        start_location: Optional[Coordinate] = None,
        constraints: Optional[RouteConstraints] = None,
    ) -> OptimizedRoute:
        ...


class ProgressMonitor:
    """Bounded, idempotent check polled by an external scheduler."""

    def __init__(
        self,
        optimizer: Reoptimizer,
        traffic_model: TrafficEstimator,
        clock: Callable[[], datetime],
        late_threshold_s: float | None = None,
        delay_ratio_threshold: float | None = None,
        improvement_ratio: float | None = None,
        tz: ZoneInfo | None = None,
    ) -> None:
        self.optimizer = optimizer
        self.traffic_model = traffic_model
        self.clock = clock
        self.tz = tz or ZoneInfo(settings.timezone)
        self.late_threshold = timedelta(
            seconds=late_threshold_s if late_threshold_s is not None else settings.running_late_threshold_seconds
        )
        self.delay_ratio_threshold = (
            delay_ratio_threshold if delay_ratio_threshold is not None else settings.traffic_delay_ratio_threshold
        )
        self.improvement_ratio = improvement_ratio if improvement_ratio is not None else settings.traffic_improvement_ratio

    def has_significant_traffic_change(self, remaining: Sequence[Waypoint], now: datetime) -> bool:
        traffic = self.traffic_model.estimate([waypoint.location for waypoint in remaining], now)
        for waypoint in remaining:
            condition = traffic.conditions.get(waypoint.location.id)
            if condition is not None and condition.current_delay_s > condition.typical_travel_time_s * self.delay_ratio_threshold:
                return True
        return False

    def _replan(
        self, locations: list[Location], current_location: Coordinate, constraints: RouteConstraints
    ) -> OptimizedRoute | None:
        try:
            return self.optimizer.optimize(locations, (), current_location, constraints)
        except Exception:
            logger.exception(f"Re-optimization of {len(locations)} remaining stops failed")
            return None

    def check(
        self,
        route: OptimizedRoute,
        current_location: Coordinate,
        completed_stop_ids: set[str] | frozenset[str],
    ) -> RouteAdjustment | None:
        """Suggest a re-plan of the stops not yet in ``completed_stop_ids``, or None.

        ``time_saved_min`` is measured against the travel minutes still planned for
        the remaining stops, not the whole original route, and may be negative.
        """
        current_index = next(
            (index for index, waypoint in enumerate(route.waypoints) if waypoint.location.id not in completed_stop_ids),
            None,
        )
        if current_index is None:
            return None

        remaining = route.waypoints[current_index:]
        remaining_locations = [waypoint.location for waypoint in remaining]
        remaining_duration = sum(waypoint.travel_time_min for waypoint in remaining)
        now = localize(self.clock(), self.tz)
        planned_arrival = localize(remaining[0].estimated_arrival, self.tz)

        if now > planned_arrival + self.late_threshold:
            logger.info(f"Running behind schedule at stop {remaining[0].location.id}, recalculating route")
            new_route = self._replan(
                remaining_locations, current_location, RouteConstraints(optimize_for=OptimizationMode.TIME)
            )
            if new_route is not None:
                return RouteAdjustment(
                    reason=AdjustmentReason.RUNNING_LATE,
                    suggested_route=new_route,
                    time_saved_min=remaining_duration - new_route.total_duration_min,
                )

        if self.has_significant_traffic_change(remaining, now):
            logger.info("Traffic conditions changed, evaluating route adjustment")
            new_route = self._replan(remaining_locations, current_location, RouteConstraints(avoid_traffic=True))
            if new_route is not None and new_route.total_duration_min <= remaining_duration * self.improvement_ratio:
                return RouteAdjustment(
                    reason=AdjustmentReason.TRAFFIC_CHANGE,
                    suggested_route=new_route,
                    time_saved_min=remaining_duration - new_route.total_duration_min,
                )

        return None
