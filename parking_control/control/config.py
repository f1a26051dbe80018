from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any, Self


@dataclass(frozen=True)
class ControllerConfig:
    """Limits and thresholds shared by every tracking controller.

    Distances are in meters, speeds in m/s, angles in radians and times in
    seconds. Instances are immutable for the life of a maneuver.
    ``speed_lead_time`` turns the reference acceleration into extra speed
    feedforward so the vehicle brakes in step with a lagging drivetrain.
    """

    wheelbase: float = 2.8
    v_max: float = 2.0
    v_min: float = 0.0
    phi_max: float = math.pi / 4.0
    sampling_time: float = 0.1
    max_accel: float = 1.5
    max_steer_rate: float = 0.8
    parking_tolerance: float = 0.3
    stop_speed: float = 0.01
    approach_distance: float = 2.0
    approach_speed: float = 0.5
    reposition_distance: float = 0.5
    heading_tolerance: float = 0.05
    speed_lead_time: float = 0.4

    def __post_init__(self) -> None:
        if self.wheelbase <= 0.0:
            raise ValueError("wheelbase must be positive.")
        if self.v_max <= 0.0:
            raise ValueError("v_max must be positive.")
        if self.v_min > self.v_max:
            raise ValueError("v_min must not exceed v_max.")
        if self.phi_max <= 0.0 or self.phi_max >= math.pi / 2.0:
            raise ValueError("phi_max must lie in (0, pi/2).")
        if self.sampling_time <= 0.0:
            raise ValueError("sampling_time must be positive.")
        if self.max_accel <= 0.0 or self.max_steer_rate <= 0.0:
            raise ValueError("Rate limits must be strictly positive.")
        if self.parking_tolerance <= 0.0 or self.approach_distance <= 0.0:
            raise ValueError("Distance thresholds must be strictly positive.")
        if self.stop_speed < 0.0 or self.approach_speed < 0.0:
            raise ValueError("Speed thresholds must be non-negative.")
        if self.reposition_distance < self.parking_tolerance:
            raise ValueError("reposition_distance must not be below parking_tolerance.")
        if self.heading_tolerance < 0.0:
            raise ValueError("heading_tolerance must be non-negative.")
        if self.speed_lead_time < 0.0:
            raise ValueError("speed_lead_time must be non-negative.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> Self:
        """Build a config from flat named values, rejecting unknown names."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} parameters: {', '.join(unknown)}")
        kwargs = {
            name: tuple(value) if isinstance(value, list) else value
            for name, value in values.items()
        }
        return cls(**kwargs)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HybridConfig(ControllerConfig):
    """Gains for the multi-mode error-feedback controller."""

    k1: float = 2.0
    k2: float = 4.0
    k3: float = 1.5
    alpha_v: float = 0.7
    alpha_phi: float = 0.8

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.k1 < 0.0 or self.k2 < 0.0 or self.k3 < 0.0:
            raise ValueError("Feedback gains must be non-negative.")
        _check_filter_coefficient("alpha_v", self.alpha_v)
        _check_filter_coefficient("alpha_phi", self.alpha_phi)


@dataclass(frozen=True)
class PurePursuitConfig(ControllerConfig):
    v_max: float = 3.0
    v_default: float = 1.0
    lookahead_distance: float = 4.0
    lookahead_time: float = 1.5
    lookahead_min: float = 2.0
    lookahead_max: float = 15.0
    kp_longitudinal: float = 0.8
    enable_smoothing: bool = True
    smoothing_factor: float = 0.7
    approach_threshold: float = 3.0
    align_threshold: float = 0.5
    parking_threshold: float = 0.2
    approach_remaining_points: int = 10
    target_capture_distance: float = 2.0

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.lookahead_min <= 0.0 or self.lookahead_max < self.lookahead_min:
            raise ValueError("Lookahead bounds must satisfy 0 < min <= max.")
        if self.lookahead_distance <= 0.0 or self.lookahead_time < 0.0:
            raise ValueError("Lookahead distance must be positive and time non-negative.")
        if self.kp_longitudinal < 0.0:
            raise ValueError("kp_longitudinal must be non-negative.")
        _check_filter_coefficient("smoothing_factor", self.smoothing_factor)
        if not self.approach_threshold > self.align_threshold > self.parking_threshold > 0.0:
            raise ValueError(
                "Phase thresholds must satisfy approach > align > parking > 0."
            )
        if self.approach_remaining_points < 0:
            raise ValueError("approach_remaining_points must be non-negative.")


@dataclass(frozen=True)
class MpcConfig(ControllerConfig):
    phi_max: float = math.pi / 6.0
    prediction_horizon: int = 6
    q_weights: tuple[float, float, float] = (2000.0, 200.0, 400.0)
    r_weights: tuple[float, float] = (0.5, 2.0)
    smoothing_factor: float = 0.85
    max_iterations: int = 50
    tolerance: float = 1e-5
    regularization: float = 1e-4
    fallback_kp_longitudinal: float = 0.8
    fallback_kp_lateral: float = 0.6
    fallback_kp_heading: float = 0.4

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.prediction_horizon < 1:
            raise ValueError("prediction_horizon must be at least 1.")
        if len(self.q_weights) != 3 or any(w < 0.0 for w in self.q_weights):
            raise ValueError("q_weights must hold three non-negative values.")
        if len(self.r_weights) != 2 or any(w <= 0.0 for w in self.r_weights):
            raise ValueError("r_weights must hold two positive values.")
        _check_filter_coefficient("smoothing_factor", self.smoothing_factor)
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1.")
        if self.tolerance <= 0.0 or self.regularization < 0.0:
            raise ValueError("tolerance must be positive and regularization non-negative.")


@dataclass(frozen=True)
class StanleyConfig(ControllerConfig):
    k_cross_track: float = 1.5
    k_heading: float = 1.0
    k_feedforward: float = 1.0
    softening_speed: float = 0.5
    kp_longitudinal: float = 2.0
    alpha_v: float = 0.7
    alpha_phi: float = 0.8

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.k_cross_track < 0.0 or self.k_heading < 0.0 or self.k_feedforward < 0.0:
            raise ValueError("Steering gains must be non-negative.")
        if self.softening_speed <= 0.0:
            raise ValueError("softening_speed must be positive.")
        if self.kp_longitudinal < 0.0:
            raise ValueError("kp_longitudinal must be non-negative.")
        _check_filter_coefficient("alpha_v", self.alpha_v)
        _check_filter_coefficient("alpha_phi", self.alpha_phi)


def _check_filter_coefficient(name: str, value: float) -> None:
    if not 0.0 < value <= 1.0:
        raise ValueError(f"{name} must lie in (0, 1].")
