import math
from dataclasses import dataclass, field

import numpy as np
import numba as nb

from . import moves
from .config import DEFAULT_CONFIG

ROUTE_DTYPE = np.uint32
POSITION_DTYPE = np.int64


@nb.jit(nb.int64(nb.int64, nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def get_succ(node, route_, positions_):
    """
    Get the successor of a given node in the route.

    Args:
        node: The node to find the successor for
        route_: Array containing the route sequence
        positions_: Array mapping node to its position in route_

    Returns:
        The successor node of the given node
    """
    pos = positions_[node]

    # If at the last position, successor is the first node (wrap around)
    if pos + 1 == len(route_):
        return route_[0]
    else:
        return route_[pos + 1]


@nb.jit(nb.int64(nb.int64, nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def get_pred(node, route_, positions_):
    """
    Get the predecessor of a given node in the route.

    Args:
        node: The node to find the predecessor for
        route_: Array containing the route sequence
        positions_: Array mapping node to its position in route_

    Returns:
        The predecessor node of the given node
    """
    pos = positions_[node]

    # If at the first position, predecessor is the last node (wrap around)
    if pos == 0:
        return route_[len(route_) - 1]
    else:
        return route_[pos - 1]


@nb.jit(nb.boolean(nb.int64, nb.int64, nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def contains_edge(a, b, route_, positions_):
    """Check if the route has an undirected edge between a and b."""
    return b == get_succ(a, route_, positions_) or b == get_pred(a, route_, positions_)


@nb.jit(nb.boolean(nb.int64, nb.int64, nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def contains_directed_edge(a, b, route_, positions_):
    """Check if b directly follows a in the route."""
    return b == get_succ(a, route_, positions_)


@nb.jit(nb.float64(nb.uint32[:], nb.float64[:, :]), nopython=True, nogil=True)
def get_route_cost(route, distances):
    """
    Calculate the total cost of a closed route based on the distance matrix.

    Args:
        route: Array containing the route sequence (non-empty)
        distances: Distance matrix (n x n)

    Returns:
        Total cost of the route
    """
    n = len(route)
    cost = 0.0
    for i in range(n - 1):
        cost += distances[route[i], route[i + 1]]
    cost += distances[route[n - 1], route[0]]  # Complete the cycle
    return cost


@dataclass
class ValidationReport:
    """Outcome of a self-check. Truthy when no mismatch was found."""
    errors: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self):
        return self.ok

    def __str__(self):
        return "ok" if self.ok else "; ".join(self.errors)


class RouteIterator:
    """
    Cyclic cursor over a route. Never exhausts: stop after ``len(route)``
    steps to walk a full cycle.
    """

    __slots__ = ("route", "position")

    def __init__(self, route, position=0):
        self.route = route
        self.position = int(position)

    def current(self) -> int:
        return int(self.route[self.position])

    def advance_forward(self) -> int:
        self.position = self.position + 1 if self.position + 1 < len(self.route) else 0
        return int(self.route[self.position])

    def advance_backward(self) -> int:
        self.position = self.position - 1 if self.position != 0 else len(self.route) - 1
        return int(self.route[self.position])

    def __iter__(self):
        return self

    def __next__(self):
        return self.advance_forward()


class Tour:
    """
    A closed route stored as an array of nodes plus its inverse
    ``positions`` (node -> index) and the route cost.

    The cost supplied on construction or ``update`` is trusted as is.
    """

    def __init__(self, route=None, cost=math.inf):
        if route is None:
            self.route = np.zeros(0, dtype=ROUTE_DTYPE)
            self.positions = np.zeros(0, dtype=POSITION_DTYPE)
        else:
            self.route = np.array(route, dtype=ROUTE_DTYPE)
            self.positions = np.zeros(len(self.route), dtype=POSITION_DTYPE)
            self.update_positions()
        self.cost = float(cost)

    @property
    def dimension(self) -> int:
        return len(self.route)

    def update(self, route, cost=None):
        """
        Replace the route wholesale, from an array and a cost or from another
        tour, and rebuild the position index.
        """
        if isinstance(route, Tour):
            route, cost = route.route, route.cost
        assert cost is not None
        route = np.asarray(route, dtype=ROUTE_DTYPE)
        if len(route) == len(self.route):
            self.route[:] = route
        else:
            self.route = route.copy()
            self.positions = np.zeros(len(route), dtype=POSITION_DTYPE)
        self.cost = float(cost)
        self.update_positions()

    def update_positions(self):
        moves.update_positions(self.route, self.positions)

    def successor(self, node: int) -> int:
        return int(get_succ(int(node), self.route, self.positions))

    def predecessor(self, node: int) -> int:
        return int(get_pred(int(node), self.route, self.positions))

    # We assume that the route is undirected
    def contains_edge(self, a: int, b: int) -> bool:
        return bool(contains_edge(int(a), int(b), self.route, self.positions))

    def contains_directed_edge(self, a: int, b: int) -> bool:
        return bool(contains_directed_edge(int(a), int(b), self.route, self.positions))

    def position_of(self, node: int) -> int:
        return int(self.positions[node])

    def swap_positions(self, i: int, j: int):
        """Exchange the nodes at positions i and j. Cost is not updated."""
        moves.swap_positions(self.route, self.positions, int(i), int(j))

    def relocate(self, u: int, v: int):
        """Place v right after u. Cost is not updated."""
        moves.relocate(int(u), int(v), self.route, self.positions)

    def relocate_with_cost(self, u: int, v: int, problem):
        """Place v right after u, maintaining the cost incrementally."""
        assert u != v
        assert len(self.route) >= 2
        self.cost = moves.relocate_with_cost(
            int(u), int(v), self.route, self.positions, self.cost, problem.distances
        )

    def iterator(self, start_node: int) -> RouteIterator:
        return RouteIterator(self.route, self.positions[start_node])

    def compute_cost(self, problem) -> float:
        return problem.route_length(self.route)

    def recompute_cost(self, problem) -> float:
        self.cost = self.compute_cost(problem)
        return self.cost

    def edges(self):
        n = len(self.route)
        for i in range(n):
            yield int(self.route[i]), int(self.route[i + 1 if i + 1 < n else 0])

    def copy(self):
        other = Tour.__new__(Tour)
        other.route = self.route.copy()
        other.positions = self.positions.copy()
        other.cost = self.cost
        return other

    def validate(self, problem=None, rel_tol=None) -> ValidationReport:
        """
        Check that the route is a permutation, that the position index is in
        sync and, given a problem, that the cost matches the route length.
        """
        report = ValidationReport()
        n = len(self.route)
        if problem is not None and n != problem.dimension:
            report.errors.append(f"route has {n} nodes, problem has {problem.dimension}")
        if not np.array_equal(np.sort(self.route), np.arange(n)):
            report.errors.append("route is not a permutation of [0, n)")
            return report
        if len(self.positions) != n or not np.array_equal(self.positions[self.route], np.arange(n)):
            report.errors.append("positions out of sync with route")
        if problem is not None and n > 0:
            check_cost(self.cost, problem.route_length(self.route), rel_tol, report)
        return report

    def __len__(self):
        return len(self.route)

    def __iter__(self):
        return (int(node) for node in self.route)

    def __repr__(self):
        return f"{type(self).__name__}(dimension={len(self.route)}, cost={self.cost})"


def check_cost(cost, expected, rel_tol, report):
    if rel_tol is None:
        rel_tol = DEFAULT_CONFIG["cost_rel_tol"]
    if not math.isclose(cost, expected, rel_tol=rel_tol, abs_tol=1e-9):
        report.errors.append(f"cost {cost} does not match route length {expected}")
