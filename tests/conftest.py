import numpy as np
import pytest

from faco.problem import ProblemInstance


@pytest.fixture
def square_problem():
    # unit square: sides 1, diagonals sqrt(2)
    coords = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    return ProblemInstance.from_coords(coords, name="square")


@pytest.fixture
def random_problem():
    return ProblemInstance.random_uniform(40, seed=42, scale=100.0)
