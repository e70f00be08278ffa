from .bitmask import Bitmask
from .tour import RouteIterator, Tour, ValidationReport
from .ant import Ant
from .problem import ProblemInstance
from .construction import build_nn_tour
from .local_search import relocation_search
from .config import DEFAULT_CONFIG, load_config

__all__ = [
    "Bitmask",
    "RouteIterator",
    "Tour",
    "ValidationReport",
    "Ant",
    "ProblemInstance",
    "build_nn_tour",
    "relocation_search",
    "DEFAULT_CONFIG",
    "load_config",
]
