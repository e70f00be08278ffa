import logging

import numpy as np
import numba as nb

from .config import DEFAULT_CONFIG
from .moves import relocate_with_cost, relocation_gain
from .tour import get_pred, get_succ

logger = logging.getLogger(__name__)

# Smallest cost decrease accepted as an improvement
EPS = 1e-9


@nb.jit(nb.int64(nb.int64[:], nb.uint8[:], nb.int64, nb.int64, nb.int64), nopython=True, nogil=True)
def push_back(queue, queued, head, size, node):
    """
    Append node to the circular queue unless it is already queued.

    Args:
        queue: Circular buffer of nodes (one slot per node)
        queued: Flag per node, 1 while the node is in the queue
        head: Index of the first queued element
        size: Number of queued elements
        node: Node to add

    Returns:
        New number of queued elements
    """
    if queued[node] == 0:
        queue[(head + size) % len(queue)] = node
        queued[node] = 1
        size += 1
    return size


@nb.jit(nb.float64(nb.uint32[:], nb.int64[:], nb.float64, nb.float64[:, :], nb.int64[:, :], nb.int64[:], nb.int64),
        nopython=True, nogil=True)
def relocation_descent(route_, positions_, cost, distances, nn_list, checklist, max_changes):
    """
    Node relocation local search restricted to nearest neighbors.

    A node v taken from the checklist may be moved right after one of its
    nearest neighbors u, or right before it (after pred(u)). The best
    improving move is applied with the incremental cost relocate and the
    endpoints of all changed edges go back to the checklist.

    Args:
        route_: Array containing the route sequence (modified in-place)
        positions_: Array mapping node to its position in route_ (modified in-place)
        cost: Current cost of the route
        distances: Distance matrix (n x n)
        nn_list: Nearest neighbor lists (n x k)
        checklist: Nodes to examine first
        max_changes: Maximum number of moves to apply

    Returns:
        Cost of the route after the search
    """
    n = len(route_)
    queue = np.zeros(n, dtype=np.int64)
    queued = np.zeros(n, dtype=np.uint8)
    head = 0
    size = 0
    for node in checklist:
        size = push_back(queue, queued, head, size, node)

    changes_count = 0
    while size > 0 and changes_count < max_changes:
        v = queue[head]
        head = head + 1 if head + 1 < n else 0
        size -= 1
        queued[v] = 0

        best_delta = -EPS
        best_target = -1
        for j in range(nn_list.shape[1]):
            u = nn_list[v, j]
            for side in range(2):
                t = u if side == 0 else get_pred(u, route_, positions_)
                if t == v or get_succ(t, route_, positions_) == v:
                    continue
                delta = relocation_gain(t, v, route_, positions_, distances)
                if delta < best_delta:
                    best_delta = delta
                    best_target = t

        if best_target >= 0:
            v_pred = get_pred(v, route_, positions_)
            v_succ = get_succ(v, route_, positions_)
            t_succ = get_succ(best_target, route_, positions_)

            cost = relocate_with_cost(best_target, v, route_, positions_, cost, distances)
            changes_count += 1

            size = push_back(queue, queued, head, size, v_pred)
            size = push_back(queue, queued, head, size, v_succ)
            size = push_back(queue, queued, head, size, v)
            size = push_back(queue, queued, head, size, best_target)
            size = push_back(queue, queued, head, size, t_succ)

    return cost


def relocation_search(tour, problem, nn_list=None, max_changes=None, start_node=None):
    """
    Improve ``tour`` in place with the relocation descent.

    The initial checklist walks the whole tour from ``start_node`` (the
    first route node by default). The tour cost must be up to date on entry.

    Returns:
        Cost change (zero or negative)
    """
    n = len(tour)
    if n < 4:
        # every order of three or fewer nodes has the same length
        return 0.0
    if nn_list is None:
        nn_list = problem.nearest_neighbors(DEFAULT_CONFIG['nn_list_size'])
    if max_changes is None:
        max_changes = DEFAULT_CONFIG['relocation_max_changes']
    if max_changes is None:
        max_changes = np.iinfo(np.int64).max
    if start_node is None:
        start_node = int(tour.route[0])

    iterator = tour.iterator(start_node)
    checklist = np.zeros(n, dtype=np.int64)
    checklist[0] = iterator.current()
    for i in range(1, n):
        checklist[i] = iterator.advance_forward()

    initial_cost = tour.cost
    tour.cost = relocation_descent(
        tour.route, tour.positions, float(tour.cost), problem.distances,
        np.ascontiguousarray(nn_list, dtype=np.int64), checklist, int(max_changes)
    )
    logger.debug("Relocation search: %.4f -> %.4f", initial_cost, tour.cost)
    return tour.cost - initial_cost
