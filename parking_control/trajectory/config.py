from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class VelocityProfileConfig:
    """Kinematic limits used when synthesizing the along-path speed profile.

    Accelerations are in m/s^2.
    """

    a_lat_max: float = 1.5
    a_max: float = 1.0
    d_max: float = 1.2

    def __post_init__(self) -> None:
        if self.a_lat_max <= 0.0:
            raise ValueError("a_lat_max must be positive.")
        if self.a_max <= 0.0 or self.d_max <= 0.0:
            raise ValueError("Acceleration and deceleration limits must be strictly positive.")


@dataclass(frozen=True)
class TrajectoryConfig:
    """Configuration values for reference trajectory generation.

    Distances are in meters, speeds in m/s and angles in radians.
    """

    v_max: float = 1.5
    max_curvature: float = 0.25
    min_waypoint_distance: float = 0.3
    a_lat_max: float = 1.5
    a_max: float = 1.0
    d_max: float = 1.2
    max_steer_rad: float = math.pi / 6.0
    wheelbase: float = 2.8
    dense_samples_min: int = 1000
    dense_samples_per_waypoint: int = 50
    max_output_points: int = 500

    def __post_init__(self) -> None:
        if self.v_max <= 0.0:
            raise ValueError("v_max must be positive.")
        if self.max_curvature <= 0.0:
            raise ValueError("max_curvature must be positive.")
        if self.min_waypoint_distance < 0.0:
            raise ValueError("min_waypoint_distance must be non-negative.")
        if self.max_steer_rad <= 0.0 or self.max_steer_rad >= math.pi / 2.0:
            raise ValueError("max_steer_rad must lie in (0, pi/2).")
        if self.wheelbase <= 0.0:
            raise ValueError("wheelbase must be positive.")
        if self.dense_samples_min < 2 or self.dense_samples_per_waypoint < 1:
            raise ValueError("Dense resampling counts must be at least 2 and 1.")
        if self.max_output_points < 2:
            raise ValueError("max_output_points must be at least 2.")
        # Validates the acceleration limits.
        self.velocity_profile()

    def velocity_profile(self) -> VelocityProfileConfig:
        return VelocityProfileConfig(
            a_lat_max=self.a_lat_max, a_max=self.a_max, d_max=self.d_max
        )
