import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np


Tour = List[int]


def closed_tour_cost(cost_matrix: np.ndarray, starting_city: int, tour: Sequence[int]) -> float:
    if len(tour) == 0:
        return 0.0
    cost_matrix = np.asarray(cost_matrix)
    path = np.fromiter(tour, dtype=np.intp, count=len(tour))
    src = np.concatenate(([starting_city], path))
    dst = np.concatenate((path, [starting_city]))
    return float(cost_matrix[src, dst].sum())


@dataclass
class SolveResult:
    tour: Tour
    length: float
    starting_city: int
    optimum: Optional[float] = None
    generations: int = 0
    selection: str = ""
    path: Tour = field(init=False)

    def __post_init__(self):
        self.tour = list(self.tour)
        self.path = [self.starting_city, *self.tour, self.starting_city]

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum

    def to_dict(self) -> dict:
        return {
            "starting_city": self.starting_city,
            "tour": self.tour,
            "path": self.path,
            "length": self.length,
            "optimum": self.optimum,
            "gap": None if math.isinf(self.gap) else self.gap,
            "generations": self.generations,
            "selection": self.selection,
        }
