import dataclasses

import numpy as np
import pytest

from salesman_ga.base import closed_tour_cost
from salesman_ga.genome import SalesmanGenome


def test_random_genome_is_permutation_without_start(rng, ten_cities):
    for start in (0, 4, 9):
        g = SalesmanGenome.random(10, ten_cities, start, rng)
        assert len(g.tour) == 9
        assert start not in g.tour
        assert sorted(g.tour) == [c for c in range(10) if c != start]
        assert g.is_valid()


def test_fitness_includes_closing_edge(four_cities):
    g = SalesmanGenome([1, 3, 2], four_cities, 0)
    # 0->1 (10) + 1->3 (25) + 3->2 (30) + 2->0 (15)
    assert g.fitness == 80


def test_fitness_matches_recomputation(rng, ten_cities):
    for _ in range(20):
        g = SalesmanGenome.random(10, ten_cities, 3, rng)
        expected = ten_cities[3, g.tour[0]]
        for a, b in zip(g.tour, g.tour[1:]):
            expected += ten_cities[a, b]
        expected += ten_cities[g.tour[-1], 3]
        assert g.fitness == pytest.approx(expected)
        assert g.fitness == closed_tour_cost(ten_cities, 3, g.tour)


def test_asymmetric_costs_follow_direction():
    cost = np.array([[0, 1, 100], [100, 0, 1], [1, 100, 0]])
    assert SalesmanGenome([1, 2], cost, 0).fitness == 3
    assert SalesmanGenome([2, 1], cost, 0).fitness == 300


def test_two_cities_single_gene(rng):
    cost = np.array([[0, 7], [7, 0]])
    g = SalesmanGenome.random(2, cost, 0, rng)
    assert g.tour == (1,)
    assert g.fitness == 2 * 7


def test_genome_is_immutable(four_cities):
    g = SalesmanGenome([1, 2, 3], four_cities, 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        g.fitness = 0
    assert isinstance(g.tour, tuple)


def test_ordering_by_fitness(four_cities):
    good = SalesmanGenome([1, 3, 2], four_cities, 0)
    bad = SalesmanGenome([1, 2, 3], four_cities, 0)
    assert good < bad
    assert good <= bad
    assert min([bad, good]) is good
    assert sorted([bad, good]) == [good, bad]


def test_random_rejects_inconsistent_input(rng, four_cities):
    with pytest.raises(ValueError):
        SalesmanGenome.random(5, four_cities, 0, rng)
    with pytest.raises(ValueError):
        SalesmanGenome.random(4, four_cities, 4, rng)


def test_rendering_closes_the_path(four_cities):
    g = SalesmanGenome([1, 3, 2], four_cities, 0)
    assert g.path == (0, 1, 3, 2, 0)
    assert str(g) == "Path: 0 1 3 2 0\nLength: 80"
    assert g.to_dict() == {"starting_city": 0, "tour": [1, 3, 2], "fitness": 80.0}
