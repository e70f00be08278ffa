"""
Default settings for the tour core, the construction / local search helpers
and the benchmark runner.
"""

import json

import yaml

DEFAULT_CONFIG = {
    # Candidate lists
    'nn_list_size': 16,

    # Local search
    'relocation_max_changes': None,  # None = run until no improving move is left

    # Validation
    'cost_rel_tol': 1e-6,
    'validate': False,  # run full self-checks after every benchmark run

    # Benchmark
    'nodes': [100, 200],
    'instances': 3,
    'runs': 5,
    'seed': 0,
    'best_known_path': None,
    'output': None,
}


def load_config(config_path=None):
    """Load configuration from YAML or JSON file and merge it with the defaults."""
    final_config = DEFAULT_CONFIG.copy()
    if config_path is None:
        return final_config

    config_path = str(config_path)
    with open(config_path, 'r') as f:
        if config_path.endswith('.yaml') or config_path.endswith('.yml'):
            config = yaml.safe_load(f)
        else:
            config = json.load(f)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file '{config_path}' must contain a mapping, got {type(config).__name__}")

    final_config.update(config)
    return final_config
