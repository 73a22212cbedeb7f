import random
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

from .base import closed_tour_cost


@dataclass(frozen=True, eq=False)
class SalesmanGenome:
    """One candidate tour: the visiting order of every city except the start.

    The tour is implicitly closed: it leaves ``starting_city``, visits each
    entry of ``tour`` in order and returns to ``starting_city``. ``fitness`` is
    the cost of that cycle, computed once at construction; lower is better.
    """

    tour: Tuple[int, ...]
    cost_matrix: np.ndarray = field(repr=False)
    starting_city: int = 0
    fitness: float = field(init=False)

    def __post_init__(self):
        # Frozen, so normalise through object.__setattr__.
        object.__setattr__(self, "tour", tuple(int(c) for c in self.tour))
        object.__setattr__(self, "cost_matrix", np.asarray(self.cost_matrix))
        object.__setattr__(
            self, "fitness", closed_tour_cost(self.cost_matrix, self.starting_city, self.tour)
        )

    @staticmethod
    def random(
        number_of_cities: int,
        cost_matrix: np.ndarray,
        starting_city: int,
        rng: random.Random = None,
    ) -> "SalesmanGenome":
        rng = rng or random.Random()
        cost_matrix = np.asarray(cost_matrix)
        if cost_matrix.shape != (number_of_cities, number_of_cities):
            raise ValueError(
                f"cost matrix shape {cost_matrix.shape} does not match {number_of_cities} cities"
            )
        if not 0 <= starting_city < number_of_cities:
            raise ValueError(f"starting city {starting_city} out of range [0, {number_of_cities})")
        tour = [c for c in range(number_of_cities) if c != starting_city]
        rng.shuffle(tour)
        return SalesmanGenome(tour, cost_matrix, starting_city)

    @property
    def number_of_cities(self) -> int:
        return len(self.tour) + 1

    @property
    def path(self) -> Tuple[int, ...]:
        return (self.starting_city, *self.tour, self.starting_city)

    def is_valid(self) -> bool:
        expected = set(range(self.cost_matrix.shape[0])) - {self.starting_city}
        return len(self.tour) == len(expected) and set(self.tour) == expected

    def __lt__(self, other: "SalesmanGenome") -> bool:
        return self.fitness < other.fitness

    def __le__(self, other: "SalesmanGenome") -> bool:
        return self.fitness <= other.fitness

    def to_dict(self) -> dict:
        return {
            "starting_city": self.starting_city,
            "tour": list(self.tour),
            "fitness": self.fitness,
        }

    def __str__(self) -> str:
        path = " ".join(str(c) for c in self.path)
        length = int(self.fitness) if float(self.fitness).is_integer() else f"{self.fitness:.4f}"
        return f"Path: {path}\nLength: {length}"


def tours_of(genomes: Sequence[SalesmanGenome]) -> np.ndarray:
    return np.array([g.tour for g in genomes], dtype=np.int64)
