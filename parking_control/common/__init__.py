"""Shared geometry helpers and synthetic planner outputs."""

from .geometry import (
    DEGENERATE_EPS,
    TWO_PI,
    cumulative_distances,
    derivative_curvature,
    gaussian_smooth,
    menger_curvature,
    moving_average,
    round_half_up,
    wrap_angle,
    wrap_angles,
)
from .paths import arc_path, parking_maneuver_path, straight_path

__all__ = [
    "DEGENERATE_EPS",
    "TWO_PI",
    "arc_path",
    "cumulative_distances",
    "derivative_curvature",
    "gaussian_smooth",
    "menger_curvature",
    "moving_average",
    "parking_maneuver_path",
    "round_half_up",
    "straight_path",
    "wrap_angle",
    "wrap_angles",
]
