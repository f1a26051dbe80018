from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def straight_path(
    length_m: float = 10.0,
    heading_rad: float = 0.0,
    spacing_m: float = 0.5,
    start_xy: Sequence[float] = (0.0, 0.0),
) -> np.ndarray:
    """Evenly spaced (x, y, theta) poses along a straight segment."""
    if length_m <= 0.0:
        raise ValueError("length_m must be positive")
    if spacing_m <= 0.0:
        raise ValueError("spacing_m must be positive")

    count = max(2, int(math.ceil(length_m / spacing_m)) + 1)
    s = np.linspace(0.0, length_m, count)
    x = start_xy[0] + s * math.cos(heading_rad)
    y = start_xy[1] + s * math.sin(heading_rad)
    theta = np.full(count, heading_rad, dtype=float)
    return np.column_stack((x, y, theta))


def arc_path(
    radius_m: float = 5.0,
    sweep_rad: float = math.pi / 2.0,
    spacing_m: float = 0.5,
    center_xy: Sequence[float] = (0.0, 0.0),
    start_angle_rad: float = -math.pi / 2.0,
) -> np.ndarray:
    """Counter-clockwise circular arc; poses face along the direction of travel."""
    if radius_m <= 0.0:
        raise ValueError("radius_m must be positive")
    if sweep_rad <= 0.0:
        raise ValueError("sweep_rad must be positive")

    count = max(3, int(math.ceil(radius_m * sweep_rad / spacing_m)) + 1)
    angles = start_angle_rad + np.linspace(0.0, sweep_rad, count)
    x = center_xy[0] + radius_m * np.cos(angles)
    y = center_xy[1] + radius_m * np.sin(angles)
    theta = angles + math.pi / 2.0
    return np.column_stack((x, y, theta))


def parking_maneuver_path(
    aisle_length_m: float = 12.0,
    turn_radius_m: float = 5.0,
    bay_depth_m: float = 5.0,
    spacing_m: float = 0.5,
    start_xy: Sequence[float] = (0.0, 0.0),
) -> np.ndarray:
    """Drive down an aisle, turn left through a quarter circle, pull into a bay.

    Stands in for the global planner: the result is an ordered, obstacle-free
    pose sequence from the start pose to the goal pose.
    """
    aisle = straight_path(aisle_length_m, 0.0, spacing_m, start_xy)
    corner_x, corner_y = aisle[-1, 0], aisle[-1, 1]
    turn = arc_path(
        radius_m=turn_radius_m,
        sweep_rad=math.pi / 2.0,
        spacing_m=spacing_m,
        center_xy=(corner_x, corner_y + turn_radius_m),
        start_angle_rad=-math.pi / 2.0,
    )
    bay = straight_path(
        bay_depth_m,
        math.pi / 2.0,
        spacing_m,
        (turn[-1, 0], turn[-1, 1]),
    )
    return np.vstack((aisle, turn[1:], bay[1:]))
