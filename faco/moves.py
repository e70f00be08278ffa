import numba as nb


@nb.jit(nb.void(nb.uint32[:], nb.int64[:], nb.int64, nb.int64), nopython=True, nogil=True)
def swap_positions(route_, positions_, i, j):
    """
    Exchange route_[i] and route_[j] keeping positions_ in sync.

    Args:
        route_: Array containing the route sequence (modified in-place)
        positions_: Array mapping node to its position in route_ (modified in-place)
        i: First position
        j: Second position
    """
    a = route_[i]
    b = route_[j]
    route_[i] = b
    route_[j] = a
    positions_[b] = i
    positions_[a] = j


@nb.jit(nb.float64(nb.uint32[:], nb.int64[:], nb.int64, nb.float64, nb.float64[:, :]), nopython=True, nogil=True)
def swap_with_next(route_, positions_, i, current_cost, distances):
    """
    Swap route_[i] with its cyclic successor position and update the cost.

    For a window p u v s the edges (p, u) and (v, s) are replaced by
    (p, v) and (u, s); the (u, v) edge survives the swap. On tours with at
    most three nodes every order has the same length, so the cost is kept.

    Args:
        route_: Array containing the route sequence (modified in-place)
        positions_: Array mapping node to its position in route_ (modified in-place)
        i: Position of the first node of the swapped pair
        current_cost: Cost of the route before the swap
        distances: Distance matrix (n x n)

    Returns:
        Cost of the route after the swap
    """
    n = len(route_)
    j = i + 1 if i + 1 < n else 0
    u = route_[i]
    v = route_[j]
    cost_delta = 0.0
    if n > 3:
        p = route_[i - 1 if i > 0 else n - 1]
        s = route_[j + 1 if j + 1 < n else 0]
        cost_delta = (distances[p, v] + distances[u, s]
                      - distances[p, u] - distances[v, s])
    route_[i] = v
    route_[j] = u
    positions_[v] = i
    positions_[u] = j
    return current_cost + cost_delta


@nb.jit(nb.types.UniTuple(nb.int64, 2)(nb.int64, nb.int64, nb.int64[:], nb.int64), nopython=True, nogil=True)
def relocation_plan(target, node, positions_, n):
    """
    Choose the shorter cascade that places node right after target.

    Going forward from target there are ``gap`` nodes before node. Node
    either moves backward over those ``gap`` nodes, or forward over the
    other ``n - 2 - gap`` nodes and then past target. Ties move backward.

    Returns:
        Tuple (direction, steps) with direction -1 (backward) or +1 (forward)
    """
    gap = positions_[node] - positions_[target] - 1
    if gap < 0:
        gap += n
    forward_steps = n - 1 - gap
    if gap <= forward_steps:
        return -1, gap
    return 1, forward_steps


@nb.jit(nb.void(nb.int64, nb.int64, nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def relocate(target, node, route_, positions_):
    """
    Relocate node to be the successor of target, keeping the cyclic order of
    all other nodes. Cost is not touched.

    Only the nodes of the shorter span are shifted, so the work is
    O(min(gap, n - 1 - gap)) rather than O(n).

    Args:
        target: The node after which to place the relocated node
        node: The node to relocate
        route_: Array containing the route sequence (modified in-place)
        positions_: Array mapping node to its position in route_ (modified in-place)
    """
    n = len(route_)
    direction, steps = relocation_plan(target, node, positions_, n)
    node_value = route_[positions_[node]]
    pos = positions_[node]

    if direction < 0:
        # t 1 2 3 n => t n 1 2 3
        for _ in range(steps):
            prev = pos - 1 if pos > 0 else n - 1
            route_[pos] = route_[prev]
            positions_[route_[pos]] = pos
            pos = prev
    else:
        # t 1 2 n 3 4 (around the cycle) => t n 1 2 3 4
        for _ in range(steps):
            nxt = pos + 1 if pos + 1 < n else 0
            route_[pos] = route_[nxt]
            positions_[route_[pos]] = pos
            pos = nxt

    route_[pos] = node_value
    positions_[node_value] = pos


@nb.jit(nb.float64(nb.int64, nb.int64, nb.uint32[:], nb.int64[:], nb.float64, nb.float64[:, :]), nopython=True, nogil=True)
def relocate_with_cost(target, node, route_, positions_, current_cost, distances):
    """
    Relocate node to be the successor of target as a cascade of adjacent
    swaps, each one adjusting the cost by its local edge delta.

    Produces the same route as ``relocate``.

    Args:
        target: The node after which to place the relocated node
        node: The node to relocate
        route_: Array containing the route sequence (modified in-place)
        positions_: Array mapping node to its position in route_ (modified in-place)
        current_cost: Current cost of the route
        distances: Distance matrix (n x n)

    Returns:
        New cost of the route after relocation
    """
    n = len(route_)
    direction, steps = relocation_plan(target, node, positions_, n)
    cost = current_cost
    for _ in range(steps):
        pos = positions_[node]
        if direction < 0:
            cost = swap_with_next(route_, positions_, pos - 1 if pos > 0 else n - 1, cost, distances)
        else:
            cost = swap_with_next(route_, positions_, pos, cost, distances)
    return cost


@nb.jit(nb.float64(nb.int64, nb.int64, nb.uint32[:], nb.int64[:], nb.float64[:, :]), nopython=True, nogil=True)
def relocation_gain(target, node, route_, positions_, distances):
    """
    Cost change of moving node right after target, without applying the move.

    Requires target != node and node not already the successor of target.
    """
    n = len(route_)
    t_pos = positions_[target]
    v_pos = positions_[node]
    target_succ = route_[t_pos + 1 if t_pos + 1 < n else 0]
    node_pred = route_[v_pos - 1 if v_pos > 0 else n - 1]
    node_succ = route_[v_pos + 1 if v_pos + 1 < n else 0]
    return (- distances[node_pred, node]
            - distances[node, node_succ]
            - distances[target, target_succ]
            + distances[node_pred, node_succ]
            + distances[target, node]
            + distances[node, target_succ])


@nb.jit(nb.void(nb.uint32[:], nb.int64[:]), nopython=True, nogil=True)
def update_positions(route_, positions_):
    for i in range(len(route_)):
        positions_[route_[i]] = i

