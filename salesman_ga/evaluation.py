from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

import numpy as np
import torch

from .genome import SalesmanGenome, tours_of


@dataclass
class GenerationStats:
    generation: int
    best: float
    mean: float
    worst: float
    best_so_far: float

    def to_dict(self) -> dict:
        return asdict(self)


def generation_stats(
    generation: int, population: Sequence[SalesmanGenome], best_so_far: float
) -> GenerationStats:
    if not population:
        inf = float("inf")
        return GenerationStats(generation, inf, inf, inf, best_so_far)
    fitness = np.fromiter((g.fitness for g in population), dtype=np.float64, count=len(population))
    return GenerationStats(
        generation=generation,
        best=float(fitness.min()),
        mean=float(fitness.mean()),
        worst=float(fitness.max()),
        best_so_far=float(min(best_so_far, fitness.min())),
    )


def as_cost_tensor(cost_matrix, device: Optional[torch.device] = None) -> torch.Tensor:
    if torch.is_tensor(cost_matrix):
        return cost_matrix.to(device=device, dtype=torch.float64)
    return torch.as_tensor(np.asarray(cost_matrix, dtype=np.float64), device=device)


def batch_tour_costs(cost: torch.Tensor, tours: torch.Tensor, starting_city: int) -> torch.Tensor:
    # tours: [B, N-1] without the starting city; close each one through it.
    start = torch.full((tours.shape[0], 1), starting_city, dtype=torch.long, device=tours.device)
    cycle = torch.cat([start, tours.long()], dim=1)
    return cost[cycle, cycle.roll(-1, dims=1)].sum(dim=1)


def recompute_fitness(
    population: Sequence[SalesmanGenome], device: Optional[torch.device] = None
) -> List[float]:
    if not population:
        return []
    first = population[0]
    cost = as_cost_tensor(first.cost_matrix, device=device)
    tours = torch.as_tensor(tours_of(population), device=cost.device)
    return batch_tour_costs(cost, tours, first.starting_city).tolist()


def verify_population(
    population: Sequence[SalesmanGenome],
    device: Optional[torch.device] = None,
    atol: float = 1e-6,
) -> bool:
    if not all(g.is_valid() for g in population):
        return False
    recomputed = recompute_fitness(population, device=device)
    stored = [g.fitness for g in population]
    return bool(np.allclose(recomputed, stored, rtol=0.0, atol=atol))
