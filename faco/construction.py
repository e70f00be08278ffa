import logging

import numpy as np

from .ant import Ant
from .config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


def build_nn_tour(problem, start_node=0, nn_list=None, ant=None):
    """
    Build a tour using nearest neighbors with fallback to the closest
    unvisited node.

    Args:
        problem: ProblemInstance providing the distances
        start_node: Starting node for the tour
        nn_list: Nearest neighbor lists (n x k); built from the problem if None
        ant: Ant to reuse; a new one is created if None

    Returns:
        The complete ant, with its cost computed from the problem
    """
    dimension = problem.dimension
    if ant is None:
        ant = Ant()
    ant.initialize(dimension)
    if dimension == 0:
        return ant
    if nn_list is None:
        nn_list = problem.nearest_neighbors(DEFAULT_CONFIG['nn_list_size'])

    ant.visit(start_node)
    fallbacks = 0
    while not ant.is_complete():
        prev = ant.get_current_node()
        for node in nn_list[prev]:
            if ant.try_visit(int(node)):
                break
        else:
            # All candidates taken, pick the closest unvisited node
            unvisited = ant.get_unvisited_nodes()
            ant.visit(int(unvisited[np.argmin(problem.distances[prev, unvisited])]))
            fallbacks += 1

    ant.recompute_cost(problem)
    logger.debug("NN tour from %d: cost %.4f, %d fallbacks", start_node, ant.cost, fallbacks)
    return ant
