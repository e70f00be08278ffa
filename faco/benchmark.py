"""
Benchmark of the tour core on random uniform instances: nearest neighbor
construction through an Ant followed by the relocation descent.
"""

import argparse
import logging
import os

import numpy as np
import pandas as pd
from tqdm import tqdm

from .ant import Ant
from .config import load_config
from .construction import build_nn_tour
from .local_search import relocation_search
from .problem import ProblemInstance
from .utils import (
    Timer,
    get_best_known_value,
    get_current_datetime_string,
    load_best_known_solutions,
    sample_mean,
    sample_stdev,
)

logger = logging.getLogger(__name__)


def run_instance(problem, n_runs, nn_list_size, max_changes=None, validate=False, rng=None):
    """
    Run ``n_runs`` construction + local search passes on one instance,
    reusing a single Ant.

    Returns:
        Dict with the per-instance statistics
    """
    if rng is None:
        rng = np.random.default_rng()
    nn_list = problem.nearest_neighbors(nn_list_size)
    ant = Ant()

    nn_costs = []
    ls_costs = []
    timer = Timer()
    for _ in range(n_runs):
        start_node = int(rng.integers(problem.dimension))
        build_nn_tour(problem, start_node, nn_list, ant=ant)
        nn_costs.append(ant.cost)

        relocation_search(ant, problem, nn_list, max_changes=max_changes)
        ls_costs.append(ant.cost)

        if validate:
            report = ant.validate(problem)
            if not report:
                raise RuntimeError(f"Invalid tour on {problem.name}: {report}")
    elapsed = timer.get_elapsed_seconds()

    result = {
        "Nodes": problem.dimension,
        "NN_Mean": sample_mean(nn_costs),
        "Length_Mean": sample_mean(ls_costs),
        "Length_Std": sample_stdev(ls_costs) if n_runs > 1 else 0.0,
        "Length_Best": float(np.min(ls_costs)),
        "Avg_Time": elapsed / n_runs,
    }

    best_known_value = get_best_known_value(problem.name, default_value=0.0)
    if best_known_value > 0:
        result["Best_Known"] = best_known_value
        result["Error_%"] = (result["Length_Mean"] - best_known_value) / best_known_value * 100
    else:
        result["Best_Known"] = "N/A"
        result["Error_%"] = "N/A"
    return result


def run_benchmark(config):
    if config['best_known_path'] is not None:
        load_best_known_solutions(config['best_known_path'])

    rng = np.random.default_rng(config['seed'])
    rows = {}
    instances = [
        (n, config['seed'] + i)
        for n in config['nodes']
        for i in range(config['instances'])
    ]
    for n, seed in tqdm(instances, dynamic_ncols=True):
        problem = ProblemInstance.random_uniform(n, seed=seed)
        rows[problem.name] = run_instance(
            problem,
            config['runs'],
            config['nn_list_size'],
            max_changes=config['relocation_max_changes'],
            validate=config['validate'],
            rng=rng,
        )
        logger.info("%s: mean %.4f, best %.4f", problem.name,
                    rows[problem.name]["Length_Mean"], rows[problem.name]["Length_Best"])

    results_df = pd.DataFrame.from_dict(rows, orient="index")
    results_df.index.name = "Instance"

    if config['output'] is not None:
        dirname = os.path.dirname(config['output'])
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        results_df.to_csv(config['output'], index=True)
        logger.info("Results saved to %s", config['output'])
    return results_df


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("nodes", type=int, nargs="*", help="Problem scales")
    parser.add_argument("-c", "--config", type=str, default=None, help="YAML or JSON config file")
    parser.add_argument("-i", "--instances", type=int, default=None, help="Number of instances per scale")
    parser.add_argument("-r", "--runs", type=int, default=None, help="Number of runs per instance")
    parser.add_argument("-k", "--nn", type=int, default=None, help="Nearest neighbor list size")
    parser.add_argument("-b", "--best_known", type=str, default=None, help="JSON file with best-known values")
    parser.add_argument("-o", "--output", type=str, default=None, help="CSV file for the results")
    parser.add_argument("--validate", action='store_true', help="Self-check every tour")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("-v", "--verbose", action='store_true', help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    if args.nodes:
        config['nodes'] = args.nodes
    overrides = {
        'instances': args.instances,
        'runs': args.runs,
        'nn_list_size': args.nn,
        'best_known_path': args.best_known,
        'output': args.output,
        'seed': args.seed,
    }
    config.update({key: value for key, value in overrides.items() if value is not None})
    if args.validate:
        config['validate'] = True

    logger.info("Benchmark started at %s", get_current_datetime_string())
    logger.info("scales: %s, instances: %d, runs: %d", config['nodes'], config['instances'], config['runs'])
    results_df = run_benchmark(config)
    print(results_df.to_string())
    return results_df


if __name__ == "__main__":
    main()
