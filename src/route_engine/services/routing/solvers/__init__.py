"""Route sequencing strategies."""

from .base import RoutingStrategy, SolverContext
from .dispatcher import get_strategy
from .exhaustive import ExhaustiveSolver
from .genetic import GeneticSolver
from .heuristic import HeuristicSolver

__all__ = [
    "ExhaustiveSolver",
    "GeneticSolver",
    "HeuristicSolver",
    "RoutingStrategy",
    "SolverContext",
    "get_strategy",
]
