import math

import numpy as np
import numba as nb

from .bitmask import Bitmask, get_bit
from .tour import POSITION_DTYPE, ROUTE_DTYPE, Tour, ValidationReport


@nb.jit(nb.int64(nb.uint32[:], nb.int64, nb.uint64[:]), nopython=True, nogil=True)
def compact_unvisited(nodes, size, visited_words):
    """
    Drop visited nodes from nodes[:size] in place, keeping the relative order
    of the remaining ones.

    Args:
        nodes: Candidate list, may hold stale (already visited) entries
        size: Number of valid entries at the front of nodes
        visited_words: Words of the visited bitmask

    Returns:
        New number of valid entries
    """
    j = 0
    for i in range(size):
        node = nodes[i]
        if not get_bit(visited_words, np.int64(node)):
            nodes[j] = node
            j += 1
    return j


class Ant(Tour):
    """
    Tour under construction.

    ``route[:visited_count]`` holds the visited nodes in visit order and the
    position index is kept in sync for that prefix, so a complete ant can be
    used wherever a Tour is expected. The rest of the route is undefined
    until construction completes.

    The unvisited list is only an over-approximation between calls to
    ``get_unvisited_nodes``: visiting a node does not remove it.
    """

    def __init__(self, route=None, cost=math.inf):
        super().__init__(route, cost)
        self.visited = Bitmask()
        self.unvisited = np.zeros(0, dtype=ROUTE_DTYPE)
        self.initialize_from_route()

    def initialize(self, dimension: int):
        """Reset the construction state, reusing storage when the dimension is unchanged."""
        if len(self.route) != dimension:
            self.route = np.zeros(dimension, dtype=ROUTE_DTYPE)
            self.positions = np.zeros(dimension, dtype=POSITION_DTYPE)
            self.unvisited = np.zeros(dimension, dtype=ROUTE_DTYPE)
        self.visited_count = 0
        self.cost = math.inf

        self.unvisited[:] = np.arange(dimension, dtype=ROUTE_DTYPE)
        self.unvisited_size = dimension

        self.visited.resize(dimension)
        self.visited.clear()

    def update(self, route, cost=None):
        super().update(route, cost)
        self.initialize_from_route()

    def initialize_from_route(self):
        # a wholesale route replacement leaves a complete ant
        n = len(self.route)
        self.visited_count = n
        self.visited.resize(n)
        self.visited.clear()
        for node in self.route:
            self.visited.set_bit(node)
        if len(self.unvisited) != n:
            self.unvisited = np.zeros(n, dtype=ROUTE_DTYPE)
        self.unvisited_size = 0

    def visit(self, node: int):
        assert not self.is_visited(node)

        self.route[self.visited_count] = node
        self.positions[node] = self.visited_count
        self.visited_count += 1
        self.visited.set_bit(node)

    def try_visit(self, node: int) -> bool:
        if not self.is_visited(node):
            self.visit(node)
            return True
        return False

    def is_visited(self, node: int) -> bool:
        return self.visited.get_bit(node)

    def is_complete(self) -> bool:
        return self.visited_count == self.dimension

    def get_current_node(self) -> int:
        return int(self.route[self.visited_count - 1])

    def unvisited_count(self) -> int:
        return self.dimension - self.visited_count

    def get_unvisited_nodes(self) -> np.ndarray:
        """
        Return the unvisited nodes, filtering stale entries out of the
        candidate list first.

        This has linear complexity in the current list length, so it should
        not be called after every single visit.
        """
        self.unvisited_size = compact_unvisited(self.unvisited, self.unvisited_size, self.visited.words)
        assert self.unvisited_size == self.unvisited_count()
        return self.unvisited[:self.unvisited_size]

    def validate(self, problem, rel_tol=None) -> ValidationReport:
        """
        Re-derive the visited set from the route and compare it with the
        maintained bitmask, then check the cost against the problem.
        """
        report = ValidationReport()
        if self.dimension != problem.dimension:
            report.errors.append(f"ant dimension {self.dimension} != problem dimension {problem.dimension}")
        if not self.is_complete():
            report.errors.append(f"construction incomplete: {self.visited_count} of {self.dimension} nodes visited")

        derived = Bitmask(self.dimension)
        for node in self.route[:self.visited_count]:
            if derived.get_bit(node):
                report.errors.append(f"node {node} visited twice")
            derived.set_bit(node)
        if derived != self.visited:
            report.errors.append("visited bitmask does not match the route")

        if report.ok:
            tour_report = super().validate(problem, rel_tol)
            report.errors.extend(tour_report.errors)
        return report

    def __repr__(self):
        return f"Ant(dimension={self.dimension}, visited={self.visited_count}, cost={self.cost})"

