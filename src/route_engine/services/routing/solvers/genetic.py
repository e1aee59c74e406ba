"""Genetic algorithm for medium-sized stop sets.

Minimizes the shared route cost. Each generation keeps the elite unchanged and
breeds the rest through tournament selection, order crossover (OX) and swap
mutation. The random source is injectable so runs can be reproduced.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from ....config import settings
from ....models.domain import Location
from .base import RoutingStrategy, SolverContext


@dataclass(slots=True)
class Individual:
    route: list[Location]
    fitness: float


class GeneticSolver(RoutingStrategy):
    name = "genetic"

    def __init__(
        self,
        rng: random.Random | None = None,
        population_size: int | None = None,
        generations: int | None = None,
        elite_count: int | None = None,
        tournament_size: int | None = None,
        mutation_rate: float | None = None,
    ) -> None:
        self.rng = rng or random.Random(settings.genetic_seed)
        self.population_size = population_size if population_size is not None else settings.genetic_population_size
        self.generations = generations if generations is not None else settings.genetic_generations
        self.elite_count = elite_count if elite_count is not None else settings.genetic_elite_count
        self.tournament_size = tournament_size if tournament_size is not None else settings.genetic_tournament_size
        self.mutation_rate = mutation_rate if mutation_rate is not None else settings.genetic_mutation_rate

    def solve(self, stops: Sequence[Location], context: SolverContext) -> list[Location]:
        if len(stops) < 2:
            return list(stops)

        population = [self._individual(self.rng.sample(list(stops), len(stops)), context) for _ in range(self.population_size)]
        best = min(population, key=lambda individual: individual.fitness)

        for _ in range(self.generations):
            population.sort(key=lambda individual: individual.fitness)
            next_generation = population[: self.elite_count]

            while len(next_generation) < self.population_size:
                first = self.select_parent(population)
                second = self.select_parent(population)
                offspring = self.mutate(self.crossover(first.route, second.route))
                child = self._individual(offspring, context)
                next_generation.append(child)
                if child.fitness < best.fitness:
                    best = child

            population = next_generation

        return list(best.route)

    def _individual(self, route: list[Location], context: SolverContext) -> Individual:
        return Individual(route=route, fitness=context.cost(route))

    def select_parent(self, population: Sequence[Individual]) -> Individual:
        tournament = [population[self.rng.randrange(len(population))] for _ in range(self.tournament_size)]
        return min(tournament, key=lambda individual: individual.fitness)

    def crossover(self, first: Sequence[Location], second: Sequence[Location]) -> list[Location]:
        """Order crossover: keep a slice of the first parent, fill the rest in the second's order."""
        if len(first) != len(second) or not first:
            return list(first)

        size = len(first)
        start = self.rng.randrange(size)
        end = self.rng.randint(start, size - 1)

        offspring: list[Location | None] = [None] * size
        offspring[start : end + 1] = first[start : end + 1]
        taken = {location.id for location in first[start : end + 1]}

        donors = (location for location in second if location.id not in taken)
        for index in range(size):
            if offspring[index] is None:
                offspring[index] = next(donors)
        return [location for location in offspring if location is not None]

    def mutate(self, route: list[Location]) -> list[Location]:
        if len(route) < 2:
            return route
        mutated = list(route)
        if self.rng.random() < self.mutation_rate:
            first = self.rng.randrange(len(route))
            second = self.rng.randrange(len(route))
            if first != second:
                mutated[first], mutated[second] = mutated[second], mutated[first]
        return mutated
