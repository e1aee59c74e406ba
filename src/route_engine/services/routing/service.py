"""Route optimization orchestration service."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import Coordinate, Location, RouteConstraints, Task, localize
from .cache import RouteCache, fingerprint
from .evaluator import RouteEvaluator
from .models import EMPTY_ROUTE, OptimizedRoute, RouteAdjustment, RouteSegment, TrafficSeverity
from .monitor import ProgressMonitor
from .osrm_client import DirectionsError, DirectionsProvider, OSRMClient
from .scoring import RouteScorer
from .solvers import RoutingStrategy, SolverContext, get_strategy
from .tasks import TaskAnalyzer
from .traffic import TrafficEstimator, TrafficModel

logger = logging.getLogger(__name__)

StrategySelector = Callable[[int], RoutingStrategy]


def default_clock() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


def default_start_location() -> Coordinate:
    return (settings.default_start_latitude, settings.default_start_longitude)


def _unique_locations(locations: Sequence[Location]) -> list[Location]:
    seen: set[str] = set()
    unique: list[Location] = []
    for location in locations:
        if location.id in seen:
            logger.warning(f"Duplicate location {location.id} in request, keeping first occurrence")
            continue
        seen.add(location.id)
        unique.append(location)
    return unique


def _is_permutation(ordering: Sequence[Location] | None, stops: Sequence[Location]) -> bool:
    if ordering is None or len(ordering) != len(stops):
        return False
    return sorted(location.id for location in ordering) == sorted(location.id for location in stops)


class RouteOptimizer:
    """Single-agent, single-day stop sequencer.

    Construct once at the composition root and share the instance; the route cache
    is the only state shared between calls.
    """

    def __init__(
        self,
        *,
        traffic_model: TrafficEstimator | None = None,
        task_analyzer: TaskAnalyzer | None = None,
        evaluator: RouteEvaluator | None = None,
        scorer: RouteScorer | None = None,
        directions_provider: DirectionsProvider | None = None,
        strategy_selector: StrategySelector | None = None,
        clock: Callable[[], datetime] | None = None,
        cache: RouteCache | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.clock = clock or default_clock
        self.tz = ZoneInfo(settings.timezone)
        self.traffic_model = traffic_model or TrafficModel()
        self.task_analyzer = task_analyzer or TaskAnalyzer()
        self.evaluator = evaluator or RouteEvaluator()
        self.scorer = scorer or RouteScorer()
        self.cache = cache or RouteCache(self.clock)
        self.rng = rng or random.Random(settings.genetic_seed)
        self.strategy_selector = strategy_selector or (lambda stop_count: get_strategy(stop_count, rng=self.rng))
        self._directions_provider = directions_provider
        self.monitor_service = ProgressMonitor(self, self.traffic_model, self.clock, tz=self.tz)

    def optimize(
        self,
        locations: Sequence[Location],
        tasks: Sequence[Task] = (),
        start_location: Optional[Coordinate] = None,
        constraints: Optional[RouteConstraints] = None,
    ) -> OptimizedRoute:
        if not locations:
            return EMPTY_ROUTE

        constraints = constraints or RouteConstraints()
        stops = _unique_locations(locations)
        key = fingerprint(stops, constraints)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Using cached route for {len(stops)} stops")
            return cached

        logger.info(f"Calculating optimized route for {len(stops)} stops")
        start = start_location or default_start_location()
        start_time = localize(constraints.preferred_start_time or self.clock(), self.tz)
        context = SolverContext(
            analysis=self.task_analyzer.analyze(tasks, stops),
            traffic=self.traffic_model.estimate(stops, start_time),
            start_location=start,
            start_time=start_time,
            constraints=constraints,
            evaluator=self.evaluator,
            scorer=self.scorer,
        )

        ordering = self._solve(stops, context)
        route = self.evaluator.evaluate(
            ordering,
            context.analysis,
            context.traffic,
            start,
            start_time,
            calculated_at=localize(self.clock(), self.tz),
        )
        cost = self.scorer.score(route, constraints)
        self.cache.put(key, route)

        logger.info(
            f"Route optimized: {route.formatted_distance}, {route.formatted_duration}, "
            f"cost={cost:.2f}, traffic={route.traffic_severity.name.lower()}"
        )
        return route

    def _solve(self, stops: list[Location], context: SolverContext) -> list[Location]:
        strategy = self.strategy_selector(len(stops))
        logger.debug(f"Using {strategy.name} strategy for {len(stops)} stops")
        try:
            ordering = strategy.solve(stops, context)
        except Exception:
            logger.exception(f"{strategy.name} strategy failed, falling back to input order")
            return list(stops)
        if not _is_permutation(ordering, stops):
            logger.warning(f"{strategy.name} strategy returned an unusable ordering, falling back to input order")
            return list(stops)
        return list(ordering)

    def _get_directions_provider(self) -> DirectionsProvider:
        if self._directions_provider is None:
            try:
                self._directions_provider = OSRMClient()
            except ValueError as exc:
                raise DirectionsError(f"Directions provider is not configured: {exc}") from exc
        return self._directions_provider

    def get_directions(self, route: OptimizedRoute, start_location: Coordinate) -> list[RouteSegment]:
        """Materialize a route into a per-leg driving itinerary.

        Raises DirectionsError for the first leg the provider cannot serve. The cached
        route itself is left untouched.
        """
        provider = self._get_directions_provider()
        segments: list[RouteSegment] = []
        current = start_location

        for index, waypoint in enumerate(route.waypoints):
            destination = waypoint.location.coordinate
            try:
                leg = provider.directions(current, destination)
            except DirectionsError:
                raise
            except Exception as exc:
                logger.warning(f"No route found for leg {index} to {waypoint.location.id}: {exc}")
                raise DirectionsError(
                    f"No route found for leg {index} to '{waypoint.location.name}'.", leg_index=index
                ) from exc

            segments.append(
                RouteSegment(
                    origin=current,
                    destination=destination,
                    location=waypoint.location,
                    distance_km=leg.distance_km,
                    estimated_duration_min=leg.duration_min,
                    instructions=list(leg.instructions),
                    traffic_severity=TrafficSeverity.NORMAL,
                    segment_index=index,
                )
            )
            current = destination

        return segments

    def monitor(
        self,
        route: OptimizedRoute,
        current_location: Coordinate,
        completed_stop_ids: set[str] | frozenset[str],
    ) -> RouteAdjustment | None:
        return self.monitor_service.check(route, current_location, completed_stop_ids)
