"""
Helpers around the solver: best-known values, run statistics, timing.
"""

import json
import time
from datetime import datetime
from pathlib import Path

import numpy as np

_best_known_solutions = {}


def get_best_known_solutions():
    return _best_known_solutions


def load_best_known_solutions(path):
    """
    Load a JSON object mapping instance names to best-known tour lengths.

    A missing file leaves the database unchanged.
    """
    path = Path(path)
    if path.is_file():
        with open(path, 'r') as f:
            _best_known_solutions.update(json.load(f))
    return _best_known_solutions


def get_best_known_value(instance_name, default_value=0.0):
    return float(_best_known_solutions.get(instance_name, default_value))


def sample_mean(values):
    if len(values) == 0:
        raise ValueError("sample_mean requires at least one value")
    return float(np.mean(values))


def sample_stdev(values):
    """Sample standard deviation (n - 1 in the denominator)."""
    if len(values) < 2:
        raise ValueError("sample_stdev requires at least two values")
    return float(np.std(values, ddof=1))


def get_current_datetime_string(date_sep="-", time_sep=":", between_sep=" ", include_us=False):
    """
    Returns a string with the current date & time,
    e.g. 2021-12-31 15:45:59
    """
    fmt = f"%Y{date_sep}%m{date_sep}%d{between_sep}%H{time_sep}%M{time_sep}%S"
    if include_us:
        fmt += ".%f"
    return datetime.now().strftime(fmt)


class Timer:
    def __init__(self):
        self.start_time = time.perf_counter()

    def reset(self):
        self.start_time = time.perf_counter()

    def get_elapsed_seconds(self) -> float:
        return time.perf_counter() - self.start_time

    def __str__(self):
        return f"{self.get_elapsed_seconds():.3f}"
