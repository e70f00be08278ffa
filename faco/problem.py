import numpy as np
import numba as nb

from .tour import ROUTE_DTYPE, get_route_cost


@nb.jit(nb.int64[:, :](nb.float64[:, :], nb.int64), nopython=True, nogil=True)
def build_nearest_neighbor_lists(distances: np.ndarray, k_nearest: int):
    """
    Build nearest neighbor lists for each node.

    Args:
        distances: Distance matrix (n x n)
        k_nearest: Number of nearest neighbors to keep (at most n - 1)

    Returns:
        nn_list: k nearest neighbors for each node, closest first
    """
    n = distances.shape[0]
    nn_list = np.zeros((n, k_nearest), dtype=np.int64)

    for node in range(n):
        # Get all other nodes and their distances
        other_nodes = np.zeros(n - 1, dtype=np.int64)
        node_distances = np.zeros(n - 1, dtype=np.float64)

        idx = 0
        for other in range(n):
            if other != node:
                other_nodes[idx] = other
                node_distances[idx] = distances[node, other]
                idx += 1

        # Sort by distance
        sorted_indices = np.argsort(node_distances)

        for i in range(k_nearest):
            nn_list[node, i] = other_nodes[sorted_indices[i]]

    return nn_list


class ProblemInstance:
    """
    Symmetric TSP instance backed by a dense distance matrix.

    This is the distance oracle used by the cost-aware moves and by the
    validation of tours.
    """

    def __init__(self, distances, name=None):
        distances = np.ascontiguousarray(distances, dtype=np.float64)
        if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
            raise ValueError(f"Distance matrix must be square, got shape {distances.shape}")
        if np.any(distances < 0) or not np.all(np.isfinite(distances)):
            raise ValueError("Distance matrix must hold finite, non-negative values")
        self.distances = distances
        self.name = name
        self.coords = None
        self._nn_lists = {}

    @classmethod
    def from_coords(cls, coords, name=None, rounded=False):
        """
        Euclidean instance from an (n, 2) array of coordinates.

        With ``rounded`` the distances are rounded to the nearest integer as
        in TSPLIB EUC_2D.
        """
        coords = np.asarray(coords, dtype=np.float64)
        distances = np.sqrt(((coords[:, None, :] - coords[None, :, :]) ** 2).sum(-1))
        if rounded:
            distances = np.floor(distances + 0.5)
        instance = cls(distances, name=name)
        instance.coords = coords
        return instance

    @classmethod
    def random_uniform(cls, n, seed=None, scale=1.0, rounded=False):
        rng = np.random.default_rng(seed)
        coords = rng.random((n, 2)) * scale
        name = f"rand{n}" if seed is None else f"rand{n}_s{seed}"
        return cls.from_coords(coords, name=name, rounded=rounded)

    @property
    def dimension(self) -> int:
        return self.distances.shape[0]

    def distance(self, a: int, b: int) -> float:
        return float(self.distances[a, b])

    def route_length(self, route) -> float:
        """Length of the closed route, including the edge back to the start."""
        route = np.asarray(route, dtype=ROUTE_DTYPE)
        if len(route) == 0:
            return 0.0
        return float(get_route_cost(route, self.distances))

    def nearest_neighbors(self, k):
        """k nearest neighbors per node as an (n, k) int64 array, cached per k."""
        k = max(0, min(int(k), self.dimension - 1))
        if k not in self._nn_lists:
            self._nn_lists[k] = build_nearest_neighbor_lists(self.distances, k)
        return self._nn_lists[k]

    def __repr__(self):
        return f"ProblemInstance(name={self.name!r}, dimension={self.dimension})"
