"""Base classes for route solving strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ....models.domain import Coordinate, Location, RouteConstraints
from ..evaluator import RouteEvaluator
from ..models import OptimizedRoute, TaskAnalysis, TrafficData
from ..scoring import RouteScorer


@dataclass(slots=True)
class SolverContext:
    """Call-scoped inputs every strategy needs to evaluate a candidate ordering."""

    analysis: TaskAnalysis
    traffic: TrafficData
    start_location: Coordinate
    start_time: datetime
    constraints: RouteConstraints
    evaluator: RouteEvaluator
    scorer: RouteScorer

    def evaluate(self, ordering: Sequence[Location]) -> OptimizedRoute:
        return self.evaluator.evaluate(ordering, self.analysis, self.traffic, self.start_location, self.start_time)

    def cost(self, ordering: Sequence[Location]) -> float:
        return self.scorer.score(self.evaluate(ordering), self.constraints)


class RoutingStrategy(ABC):
    """Contract for sequencing strategies. Returns an ordering, never timings."""

    name: str = "base"

    @abstractmethod
    def solve(self, stops: Sequence[Location], context: SolverContext) -> list[Location]:
        raise NotImplementedError
