"""
Genetic-algorithm solver for the Traveling Salesman Problem with a fixed starting city.
"""

from .base import SolveResult, Tour, closed_tour_cost
from .evolutionary import GAConfig, GeneticAlgorithm, SelectionType
from .genome import SalesmanGenome

__all__ = [
    "GAConfig",
    "GeneticAlgorithm",
    "SalesmanGenome",
    "SelectionType",
    "SolveResult",
    "Tour",
    "closed_tour_cost",
    "data",
    "evaluation",
]
