import math

import numpy as np
import pytest

from faco.ant import Ant, compact_unvisited
from faco.bitmask import Bitmask
from faco.problem import ProblemInstance


def test_visit_scenario():
    ant = Ant()
    ant.initialize(5)
    for node in [2, 0, 4, 1, 3]:
        assert ant.try_visit(node)
    assert ant.is_complete()
    assert list(ant) == [2, 0, 4, 1, 3]
    assert ant.successor(2) == 0
    assert ant.predecessor(0) == 2
    assert ant.contains_edge(4, 1)
    assert ant.contains_edge(1, 4)
    assert not ant.contains_edge(0, 3)


def test_initialize_resets_state():
    ant = Ant()
    ant.initialize(6)
    assert ant.visited_count == 0
    assert ant.unvisited_count() == 6
    assert ant.cost == math.inf
    assert not any(ant.is_visited(node) for node in range(6))
    assert sorted(ant.get_unvisited_nodes()) == list(range(6))


def test_try_visit_twice():
    ant = Ant()
    ant.initialize(4)
    assert ant.try_visit(1)
    route = ant.route.copy()
    count = ant.visited_count
    words = ant.visited.words.copy()

    assert not ant.try_visit(1)
    assert np.array_equal(ant.route, route)
    assert ant.visited_count == count
    assert np.array_equal(ant.visited.words, words)


def test_visit_tracks_current_node_and_counts():
    ant = Ant()
    ant.initialize(5)
    ant.visit(3)
    assert ant.get_current_node() == 3
    ant.visit(0)
    assert ant.get_current_node() == 0
    assert ant.visited_count == 2
    assert ant.unvisited_count() == 3
    assert ant.is_visited(3) and ant.is_visited(0)
    assert not ant.is_visited(1)


def test_visit_already_visited_is_contract_violation():
    ant = Ant()
    ant.initialize(3)
    ant.visit(0)
    with pytest.raises(AssertionError):
        ant.visit(0)


@pytest.mark.parametrize("seed", range(3))
def test_visit_all_in_any_order(seed):
    n = 70
    ant = Ant()
    ant.initialize(n)
    for node in np.random.default_rng(seed).permutation(n):
        assert ant.try_visit(node)
    assert ant.visited_count == n
    assert len(ant.get_unvisited_nodes()) == 0
    assert sorted(ant) == list(range(n))
    assert np.array_equal(ant.positions[ant.route], np.arange(n))


def test_unvisited_list_is_compacted_lazily():
    ant = Ant()
    ant.initialize(8)
    for node in (5, 1, 6):
        ant.visit(node)
    # visiting does not shrink the candidate list
    assert ant.unvisited_size == 8

    unvisited = ant.get_unvisited_nodes()
    assert list(unvisited) == [0, 2, 3, 4, 7]
    assert len(unvisited) == ant.unvisited_count()
    assert ant.unvisited_size == 5

    ant.visit(3)
    assert list(ant.get_unvisited_nodes()) == [0, 2, 4, 7]


def test_compact_unvisited_kernel():
    nodes = np.array([4, 0, 3, 1, 2], dtype=np.uint32)
    mask = Bitmask(5)
    mask.set_bit(0)
    mask.set_bit(2)
    size = compact_unvisited(nodes, 5, mask.words)
    assert size == 3
    assert list(nodes[:size]) == [4, 3, 1]


def test_reuse_across_constructions():
    ant = Ant()
    ant.initialize(5)
    route = ant.route
    for node in range(5):
        ant.visit(node)
    ant.initialize(5)
    assert ant.route is route
    assert ant.visited_count == 0
    assert ant.visited.count() == 0
    for node in [4, 3, 2, 1, 0]:
        assert ant.try_visit(node)
    assert list(ant) == [4, 3, 2, 1, 0]

    ant.initialize(9)
    assert len(ant.route) == 9
    assert ant.unvisited_count() == 9


def test_ant_from_route_is_complete(square_problem):
    ant = Ant([0, 1, 2, 3], 4.0)
    assert ant.is_complete()
    assert ant.unvisited_count() == 0
    assert len(ant.get_unvisited_nodes()) == 0
    assert all(ant.is_visited(node) for node in range(4))
    assert ant.validate(square_problem)


def test_complete_ant_used_as_tour(square_problem):
    ant = Ant()
    ant.initialize(4)
    for node in [0, 1, 2, 3]:
        ant.visit(node)
    ant.recompute_cost(square_problem)
    ant.relocate_with_cost(0, 2, square_problem)
    assert list(ant) == [0, 2, 1, 3]
    assert ant.validate(square_problem)


def test_update_marks_all_visited(square_problem):
    ant = Ant()
    ant.initialize(4)
    ant.visit(2)
    ant.update([3, 2, 1, 0], 4.0)
    assert ant.is_complete()
    assert ant.visited.count() == 4
    assert ant.validate(square_problem)


def test_validate_detects_incomplete(square_problem):
    ant = Ant()
    ant.initialize(4)
    ant.visit(0)
    report = ant.validate(square_problem)
    assert not report
    assert any("incomplete" in error for error in report.errors)


def test_validate_detects_bitmask_mismatch(square_problem):
    ant = Ant([0, 1, 2, 3], 4.0)
    ant.visited.clear_bit(2)
    report = ant.validate(square_problem)
    assert not report
    assert any("bitmask" in error for error in report.errors)


def test_validate_detects_cost_drift(square_problem):
    ant = Ant([0, 1, 2, 3], 4.5)
    report = ant.validate(square_problem)
    assert not report
    assert any("cost" in error for error in report.errors)


def test_validate_after_random_moves():
    problem = ProblemInstance.random_uniform(30, seed=5)
    ant = Ant()
    ant.initialize(problem.dimension)
    for node in np.random.default_rng(5).permutation(problem.dimension):
        ant.visit(node)
    ant.recompute_cost(problem)
    rng = np.random.default_rng(6)
    for _ in range(200):
        u, v = rng.choice(problem.dimension, size=2, replace=False)
        ant.relocate_with_cost(u, v, problem)
    report = ant.validate(problem)
    assert report, str(report)
