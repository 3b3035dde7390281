"""Selftests for SimulationConfig validation.

Run:
  python -m selftest.test_config
"""

import json
import logging
import os
import tempfile

import numpy as np

from logger_setup import setup_logging
from sim_config import InvalidConfigError, SimulationConfig, load_config
from selftest.util import run_tests


def _expect_invalid(fn):
    try:
        fn()
    except InvalidConfigError:
        return
    raise AssertionError("expected InvalidConfigError")


def test_defaults_are_valid():
    config = SimulationConfig()
    assert config.dot_size == 16
    assert config.bass_multiplier == 1.5
    assert config.chaos_strength == 2.5


def test_rejects_non_positive_dot_size():
    _expect_invalid(lambda: SimulationConfig(dot_size=0))
    _expect_invalid(lambda: SimulationConfig(dot_size=-4))
    _expect_invalid(lambda: SimulationConfig(dot_size="16"))


def test_rejects_bad_gains():
    _expect_invalid(lambda: SimulationConfig(bass_multiplier=0))
    _expect_invalid(lambda: SimulationConfig(chaos_strength=-0.1))
    assert SimulationConfig(chaos_strength=0).chaos_strength == 0.0


def test_rejects_non_finite_values():
    for bad in (float("nan"), float("inf"), float("-inf"), np.float64("nan")):
        _expect_invalid(lambda: SimulationConfig(dot_size=bad))
        _expect_invalid(lambda: SimulationConfig(bass_multiplier=bad))
        _expect_invalid(lambda: SimulationConfig(chaos_strength=bad))

    config = SimulationConfig()

    def assign_nan_gain():
        config.bass_multiplier = float("nan")

    _expect_invalid(assign_nan_gain)
    assert config.bass_multiplier == 1.5


def test_accepts_numpy_scalars_but_not_bools():
    config = SimulationConfig(dot_size=np.int64(16), bass_multiplier=np.float32(2.0), chaos_strength=np.int32(0))
    assert config.dot_size == 16
    assert config.bass_multiplier == 2.0
    assert config.chaos_strength == 0.0
    _expect_invalid(lambda: SimulationConfig(dot_size=True))
    _expect_invalid(lambda: SimulationConfig(bass_multiplier=True))


def test_failed_assignment_keeps_previous_value():
    config = SimulationConfig(dot_size=12)

    def assign():
        config.dot_size = 0

    _expect_invalid(assign)
    assert config.dot_size == 12


def test_from_dict_round_trip_through_config_file():
    section = {"dot_size": 8, "bass_multiplier": 2.0, "chaos_strength": 1.0}
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w") as f:
            json.dump({"simulation": section}, f)
        loaded = load_config(path)
    config = SimulationConfig.from_dict(loaded["simulation"])
    assert config.to_dict() == section


def test_setup_logging_configures_the_dotwave_logger():
    previous_dir = os.getcwd()
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "config.json")
        with open(path, "w") as f:
            json.dump({"run_id": "t1", "logging": {"level": "DEBUG", "format": "%(message)s"}}, f)
        os.chdir(tmp)
        try:
            logger = setup_logging(path)
            setup_logging(path)
            assert logger is logging.getLogger("dotwave")
            assert logger.propagate is False
            assert len(logger.handlers) == 2
            assert os.path.isfile(os.path.join(tmp, "runs", "t1", "visualizer.log"))
        finally:
            dotwave = logging.getLogger("dotwave")
            for handler in list(dotwave.handlers):
                handler.close()
                dotwave.removeHandler(handler)
            os.chdir(previous_dir)


def main():
    run_tests(globals())
    print("OK: config selftests passed")


if __name__ == "__main__":
    main()
