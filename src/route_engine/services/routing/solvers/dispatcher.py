"""Factory for routing strategies based on stop count."""

from __future__ import annotations

import random

from ....config import settings
from .base import RoutingStrategy
from .exhaustive import ExhaustiveSolver
from .genetic import GeneticSolver
from .heuristic import HeuristicSolver


def get_strategy(stop_count: int, rng: random.Random | None = None) -> RoutingStrategy:
    if stop_count <= settings.exhaustive_max_stops:
        return ExhaustiveSolver()
    if stop_count <= settings.genetic_max_stops:
        return GeneticSolver(rng=rng)
    return HeuristicSolver()
