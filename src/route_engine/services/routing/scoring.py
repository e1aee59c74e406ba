"""Single scalar objective shared by every solving strategy (lower is better)."""

from __future__ import annotations

from ...models.domain import OptimizationMode, RouteConstraints
from .models import OptimizedRoute

MAX_DURATION_PENALTY_PER_HOUR = 100.0
PRIORITY_POSITION_BONUS = 5.0
EFFICIENCY_PENALTY = 50.0


class RouteScorer:
    def base_cost(self, route: OptimizedRoute, mode: OptimizationMode) -> float:
        hours = route.total_duration_min / 60.0
        match mode:
            case OptimizationMode.TIME:
                return hours
            case OptimizationMode.DISTANCE:
                return route.total_distance_km
            case OptimizationMode.BALANCED:
                return hours + route.total_distance_km
        raise ValueError(f"Unknown optimization mode '{mode}'.")

    def score(self, route: OptimizedRoute, constraints: RouteConstraints) -> float:
        cost = self.base_cost(route, constraints.optimize_for)

        max_duration = constraints.max_duration_minutes
        if max_duration is not None and route.total_duration_min > max_duration:
            cost += (route.total_duration_min - max_duration) / 60.0 * MAX_DURATION_PENALTY_PER_HOUR

        # Positional bonus counts the stop itself, so the first slot earns the most.
        stop_count = len(route.waypoints)
        for index, waypoint in enumerate(route.waypoints):
            if waypoint.location.id in constraints.priority_building_ids:
                cost -= (stop_count - index) * PRIORITY_POSITION_BONUS

        cost += (1.0 - route.efficiency) * EFFICIENCY_PENALTY
        return cost
