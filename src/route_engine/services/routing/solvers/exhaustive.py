"""Bounded permutation search for small stop sets."""

from __future__ import annotations

import logging
from itertools import islice, permutations
from typing import Sequence

from ....config import settings
from ....models.domain import Location
from .base import RoutingStrategy, SolverContext

logger = logging.getLogger(__name__)


class ExhaustiveSolver(RoutingStrategy):
    name = "exhaustive"

    def __init__(self, max_permutations: int | None = None) -> None:
        self.max_permutations = (
            max_permutations if max_permutations is not None else settings.exhaustive_max_permutations
        )

    def solve(self, stops: Sequence[Location], context: SolverContext) -> list[Location]:
        if len(stops) > settings.exhaustive_max_stops:
            logger.warning(
                f"Exhaustive search over {len(stops)} stops is capped at {self.max_permutations} permutations"
            )

        best: list[Location] | None = None
        best_cost = float("inf")
        for candidate in islice(permutations(stops), self.max_permutations):
            cost = context.cost(candidate)
            if cost < best_cost:
                best_cost = cost
                best = list(candidate)

        return best if best is not None else list(stops)
