"""Greedy nearest-neighbour construction for large stop sets."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from ....models.domain import Coordinate, Location
from ...geospatial import distance_km
from .base import RoutingStrategy, SolverContext

TRAVEL_TIME_WEIGHT = 10.0
PRIORITY_BONUS = 100.0
EARLY_PENALTY_PER_MINUTE = 2.0
LATE_PENALTY_PER_MINUTE = 5.0
PRIORITY_BUILDING_BONUS = 200.0


class HeuristicSolver(RoutingStrategy):
    """One-step lookahead greedy: O(n^2) candidate scorings."""

    name = "heuristic"

    def candidate_score(
        self,
        candidate: Location,
        position: Coordinate,
        clock: datetime,
        context: SolverContext,
    ) -> float:
        distance_m = distance_km(position, candidate.coordinate) * 1000.0
        travel_s = context.evaluator.travel_time_s(position, candidate, context.traffic)
        score = distance_m + travel_s * TRAVEL_TIME_WEIGHT

        priority = context.analysis.priorities.get(candidate.id)
        if priority is not None:
            score -= (5 - priority) * PRIORITY_BONUS

        window = context.analysis.time_windows.get(candidate.id)
        if window is not None:
            arrival = clock + timedelta(seconds=travel_s)
            if arrival < window.earliest_start:
                score += (window.earliest_start - arrival).total_seconds() / 60.0 * EARLY_PENALTY_PER_MINUTE
            elif arrival > window.latest_end:
                score += (arrival - window.latest_end).total_seconds() / 60.0 * LATE_PENALTY_PER_MINUTE

        if candidate.id in context.constraints.priority_building_ids:
            score -= PRIORITY_BUILDING_BONUS
        return score

    def solve(self, stops: Sequence[Location], context: SolverContext) -> list[Location]:
        route: list[Location] = []
        unvisited = list(stops)
        position = context.start_location
        stop_slot = timedelta(minutes=context.evaluator.task_duration_min)

        while unvisited:
            clock = context.start_time + stop_slot * len(route)
            best = min(unvisited, key=lambda candidate: self.candidate_score(candidate, position, clock, context))
            route.append(best)
            unvisited.remove(best)
            position = best.coordinate

        return route
