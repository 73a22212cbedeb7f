import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .evaluation import GenerationStats, generation_stats
from .genome import SalesmanGenome


T = TypeVar("T")


class SelectionType(str, Enum):
    ROULETTE = "roulette"
    TOURNAMENT = "tournament"


@dataclass
class GAConfig:
    population_size: int = 5000
    reproduction_size: int = 200
    max_iterations: int = 1000
    mutation_rate: float = 0.1
    tournament_size: int = 40
    selection: SelectionType = SelectionType.TOURNAMENT
    target_fitness: float = float("-inf")
    random_seed: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.selection, str):
            self.selection = SelectionType(self.selection.lower())


class GeneticAlgorithm:
    """Generational GA over tours that share one fixed starting city.

    Each generation selects ``reproduction_size`` parents from the current
    population, breeds a full replacement population from random parent
    pairs (crossover, then per-child mutation) and discards the old one.
    The best genome seen so far is tracked separately from the population,
    so the reported best never gets worse.
    """

    def __init__(
        self,
        cost_matrix,
        starting_city: int,
        config: GAConfig = None,
        rng: random.Random = None,
    ):
        self.cfg = config or GAConfig()
        self.cost_matrix = np.asarray(cost_matrix, dtype=np.float64)
        self.number_of_cities = self.cost_matrix.shape[0]
        self.genome_size = self.number_of_cities - 1
        self.starting_city = starting_city
        self.rng = rng or random.Random(self.cfg.random_seed)
        self._check_config()
        self.population: List[SalesmanGenome] = []
        self.best: Optional[SalesmanGenome] = None
        self.generation = 0
        self.history: List[GenerationStats] = []

    def _check_config(self) -> None:
        cfg = self.cfg
        if self.cost_matrix.ndim != 2 or self.cost_matrix.shape[0] != self.cost_matrix.shape[1]:
            raise ValueError(f"cost matrix must be square, got shape {self.cost_matrix.shape}")
        if self.number_of_cities < 2:
            raise ValueError("need at least 2 cities")
        if not 0 <= self.starting_city < self.number_of_cities:
            raise ValueError(
                f"starting city {self.starting_city} out of range [0, {self.number_of_cities})"
            )
        if cfg.population_size < 1:
            raise ValueError("population_size must be positive")
        if cfg.reproduction_size < 2:
            raise ValueError("reproduction_size must be at least 2 to form parent pairs")
        if cfg.max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")
        if not 0.0 <= cfg.mutation_rate <= 1.0:
            raise ValueError("mutation_rate must be within [0, 1]")
        if cfg.selection == SelectionType.TOURNAMENT:
            if cfg.tournament_size < 1:
                raise ValueError("tournament_size must be positive")
            if cfg.tournament_size > cfg.population_size:
                raise ValueError(
                    f"tournament_size {cfg.tournament_size} exceeds population_size {cfg.population_size}"
                )

    def new_genome(self, tour: Sequence[int]) -> SalesmanGenome:
        return SalesmanGenome(tour, self.cost_matrix, self.starting_city)

    def initial_population(self) -> List[SalesmanGenome]:
        return [
            SalesmanGenome.random(self.number_of_cities, self.cost_matrix, self.starting_city, self.rng)
            for _ in range(self.cfg.population_size)
        ]

    def selection(self, population: Sequence[SalesmanGenome]) -> List[SalesmanGenome]:
        if self.cfg.selection == SelectionType.ROULETTE:
            pick = self.roulette_selection
        else:
            pick = self.tournament_selection
        return [pick(population) for _ in range(self.cfg.reproduction_size)]

    def roulette_selection(self, population: Sequence[SalesmanGenome]) -> SalesmanGenome:
        if not population:
            raise ValueError("cannot select from an empty population")
        if any(g.fitness <= 0 for g in population):
            raise ValueError("roulette selection requires strictly positive fitness values")
        total_fitness = sum(g.fitness for g in population)
        # Minimisation: walk reciprocals so cheaper tours own a wider slice.
        drawn = self.rng.randrange(max(1, int(total_fitness)))
        target = float("inf") if drawn == 0 else 1.0 / drawn
        current = 0.0
        for genome in population:
            current += 1.0 / genome.fitness
            if current >= target:
                return genome
        return population[self.rng.randrange(len(population))]

    def pick_n_random(self, items: Sequence[T], n: int) -> List[T]:
        if len(items) < n:
            raise ValueError(f"cannot sample {n} items from a pool of {len(items)}")
        return self.rng.sample(list(items), n)

    def tournament_selection(self, population: Sequence[SalesmanGenome]) -> SalesmanGenome:
        contestants = self.pick_n_random(population, self.cfg.tournament_size)
        return min(contestants)

    def crossover(
        self,
        parent1: SalesmanGenome,
        parent2: SalesmanGenome,
        breakpoint: Optional[int] = None,
    ) -> Tuple[SalesmanGenome, SalesmanGenome]:
        if breakpoint is None:
            breakpoint = self.rng.randrange(self.genome_size)
        p1 = parent1.tour
        p2 = parent2.tour

        # Child 1 takes parent2's prefix order, child 2 parent1's suffix order.
        child1 = list(p1)
        pos1 = {city: i for i, city in enumerate(child1)}
        for i in range(breakpoint):
            _swap_into(child1, pos1, p2[i], i)

        child2 = list(p2)
        pos2 = {city: i for i, city in enumerate(child2)}
        for i in range(breakpoint, self.genome_size):
            _swap_into(child2, pos2, p1[i], i)

        return self.new_genome(child1), self.new_genome(child2)

    def mutate(self, genome: SalesmanGenome) -> SalesmanGenome:
        if self.rng.random() >= self.cfg.mutation_rate:
            return genome
        tour = list(genome.tour)
        i = self.rng.randrange(self.genome_size)
        j = self.rng.randrange(self.genome_size)
        tour[i], tour[j] = tour[j], tour[i]
        return self.new_genome(tour)

    def create_generation(self, selected: Sequence[SalesmanGenome]) -> List[SalesmanGenome]:
        generation: List[SalesmanGenome] = []
        while len(generation) < self.cfg.population_size:
            parent1, parent2 = self.pick_n_random(selected, 2)
            child1, child2 = self.crossover(parent1, parent2)
            generation.append(self.mutate(child1))
            generation.append(self.mutate(child2))
        # Children come in pairs; an odd size drops the last one.
        return generation[: self.cfg.population_size]

    def _record(self, population: Sequence[SalesmanGenome]) -> GenerationStats:
        current = min(population)
        if self.best is None or current < self.best:
            self.best = current
        stats = generation_stats(self.generation, population, self.best.fitness)
        self.history.append(stats)
        return stats

    def reset(self) -> None:
        self.population = self.initial_population()
        self.best = None
        self.generation = 0
        self.history = []
        self._record(self.population)

    def step(self) -> GenerationStats:
        if not self.population:
            self.reset()
        selected = self.selection(self.population)
        self.population = self.create_generation(selected)
        self.generation += 1
        return self._record(self.population)

    def reached_target(self) -> bool:
        return self.best is not None and self.best.fitness < self.cfg.target_fitness

    def optimize(
        self, on_generation: Optional[Callable[[GenerationStats], None]] = None
    ) -> SalesmanGenome:
        self.reset()
        for _ in range(self.cfg.max_iterations):
            if self.reached_target():
                break
            stats = self.step()
            if on_generation is not None:
                on_generation(stats)
        return self.best


def _swap_into(tour: List[int], positions: dict, city: int, index: int) -> None:
    src = positions[city]
    if src == index:
        return
    other = tour[index]
    tour[index], tour[src] = city, other
    positions[city] = index
    positions[other] = src
