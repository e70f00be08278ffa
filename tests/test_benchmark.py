import json

import pandas as pd
import pytest

from faco import utils
from faco.benchmark import main, run_instance
from faco.problem import ProblemInstance


@pytest.fixture(autouse=True)
def empty_best_known_db():
    utils.get_best_known_solutions().clear()
    yield
    utils.get_best_known_solutions().clear()


def test_run_instance_statistics():
    problem = ProblemInstance.random_uniform(30, seed=1)
    result = run_instance(problem, n_runs=3, nn_list_size=8, validate=True)
    assert result["Nodes"] == 30
    assert result["Length_Best"] <= result["Length_Mean"] <= result["NN_Mean"]
    assert result["Length_Std"] >= 0
    assert result["Best_Known"] == "N/A"


def test_main_writes_csv(tmp_path):
    best_known = tmp_path / "best.json"
    best_known.write_text(json.dumps({"rand25_s7": 3.0}))
    output = tmp_path / "out" / "results.csv"

    results_df = main([
        "25", "-i", "2", "-r", "2", "-k", "6", "--seed", "7",
        "-b", str(best_known), "-o", str(output), "--validate",
    ])

    assert list(results_df.index) == ["rand25_s7", "rand25_s8"]
    assert results_df.loc["rand25_s7", "Best_Known"] == 3.0
    assert results_df.loc["rand25_s8", "Best_Known"] == "N/A"
    saved = pd.read_csv(output, index_col=0)
    assert list(saved.index) == ["rand25_s7", "rand25_s8"]
