import random

import numpy as np
import pytest


FOUR_CITIES = [
    [0, 10, 15, 20],
    [10, 0, 35, 25],
    [15, 35, 0, 30],
    [20, 25, 30, 0],
]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def four_cities():
    return np.array(FOUR_CITIES, dtype=np.float64)


@pytest.fixture
def ten_cities():
    gen = np.random.default_rng(99)
    mat = gen.integers(1, 50, size=(10, 10)).astype(np.float64)
    np.fill_diagonal(mat, 0.0)
    return mat
