import json
import re

import pytest

from faco import utils


@pytest.fixture(autouse=True)
def empty_best_known_db():
    utils.get_best_known_solutions().clear()
    yield
    utils.get_best_known_solutions().clear()


def test_best_known_db(tmp_path):
    path = tmp_path / "best-known.json"
    path.write_text(json.dumps({"kroA100": 21282, "rand50_s0": 5.75}))
    db = utils.load_best_known_solutions(path)
    assert db["kroA100"] == 21282
    assert utils.get_best_known_value("kroA100") == 21282.0
    assert utils.get_best_known_value("rand50_s0") == 5.75
    assert utils.get_best_known_value("missing") == 0.0
    assert utils.get_best_known_value("missing", default_value=-1.0) == -1.0


def test_missing_best_known_file_is_ignored(tmp_path):
    db = utils.load_best_known_solutions(tmp_path / "nope.json")
    assert db == {}


def test_sample_mean_and_stdev():
    assert utils.sample_mean([1.0, 2.0, 3.0]) == pytest.approx(2.0)
    assert utils.sample_stdev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.13808993)
    with pytest.raises(ValueError):
        utils.sample_mean([])
    with pytest.raises(ValueError):
        utils.sample_stdev([1.0])


def test_datetime_string_format():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", utils.get_current_datetime_string())
    assert re.fullmatch(r"\d{8}_\d{6}", utils.get_current_datetime_string("", "", "_"))
    assert re.fullmatch(r".*\.\d{6}", utils.get_current_datetime_string(include_us=True))


def test_timer():
    timer = utils.Timer()
    first = timer.get_elapsed_seconds()
    assert first >= 0
    assert timer.get_elapsed_seconds() >= first
    timer.reset()
    assert float(str(timer)) >= 0
