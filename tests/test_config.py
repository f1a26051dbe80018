"""Tests for controller and trajectory configuration records."""

import math
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.control import (
    ControllerConfig,
    HybridConfig,
    MpcConfig,
    PurePursuitConfig,
    StanleyConfig,
)
from parking_control.trajectory import TrajectoryConfig


def test_defaults() -> None:
    config = ControllerConfig()
    assert config.wheelbase == 2.8
    assert config.phi_max == pytest.approx(math.pi / 4.0)
    assert config.max_accel * config.sampling_time == pytest.approx(0.15)
    assert MpcConfig().phi_max == pytest.approx(math.pi / 6.0)
    assert PurePursuitConfig().v_max == 3.0


def test_from_mapping_overrides_named_values() -> None:
    config = HybridConfig.from_mapping({"k1": 3.0, "parking_tolerance": 0.2})
    assert config.k1 == 3.0
    assert config.parking_tolerance == 0.2
    assert config.k2 == HybridConfig().k2


def test_from_mapping_converts_lists_to_tuples() -> None:
    config = MpcConfig.from_mapping({"q_weights": [1.0, 2.0, 3.0], "r_weights": [0.1, 0.2]})
    assert config.q_weights == (1.0, 2.0, 3.0)
    assert config.r_weights == (0.1, 0.2)


def test_from_mapping_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="lookahead_distance"):
        HybridConfig.from_mapping({"lookahead_distance": 3.0})


@pytest.mark.parametrize("config_cls", [ControllerConfig, HybridConfig, MpcConfig, PurePursuitConfig, StanleyConfig])
def test_as_dict_round_trip(config_cls) -> None:
    config = config_cls()
    assert config_cls.from_mapping(config.as_dict()) == config


@pytest.mark.parametrize(
    "config_cls, kwargs",
    [
        (ControllerConfig, {"v_max": -1.0}),
        (ControllerConfig, {"phi_max": 2.0}),
        (ControllerConfig, {"sampling_time": 0.0}),
        (ControllerConfig, {"reposition_distance": 0.1}),
        (ControllerConfig, {"speed_lead_time": -0.1}),
        (HybridConfig, {"alpha_v": 0.0}),
        (HybridConfig, {"k2": -1.0}),
        (StanleyConfig, {"softening_speed": 0.0}),
        (PurePursuitConfig, {"lookahead_min": 5.0, "lookahead_max": 4.0}),
        (PurePursuitConfig, {"smoothing_factor": 1.5}),
        (TrajectoryConfig, {"a_max": 0.0}),
        (TrajectoryConfig, {"max_steer_rad": 2.0}),
        (TrajectoryConfig, {"max_output_points": 1}),
    ],
)
def test_invalid_values_rejected(config_cls, kwargs) -> None:
    with pytest.raises(ValueError):
        config_cls(**kwargs)


def test_configs_are_immutable() -> None:
    config = StanleyConfig()
    with pytest.raises(AttributeError):
        config.k_heading = 2.0
