from __future__ import annotations

import logging
import math

import numpy as np

from parking_control.common import cumulative_distances, menger_curvature

from .config import TrajectoryConfig
from .errors import TrajectoryError, TrajectoryException
from .timing import TimedTrajectory, compute_time_profile, generate_timed_trajectory
from .velocity_profile import generate_velocity_profile
from .waypoints import filter_close_waypoints, smooth_waypoints

logger = logging.getLogger(__name__)


def make_time_grid(total_time_s: float, dt: float) -> np.ndarray:
    """Fixed-rate grid covering ``[0, total_time_s]`` inclusive."""
    if dt <= 0.0:
        raise ValueError("dt must be positive")
    if total_time_s < dt:
        raise ValueError("total_time_s must span at least one step")
    steps = int(math.floor(total_time_s / dt + 1e-9))
    return np.arange(steps + 1, dtype=float) * dt


def generate_trajectory(
    raw_waypoints,
    time_grid: np.ndarray,
    config: TrajectoryConfig | None = None,
) -> TimedTrajectory:
    """Turn planner waypoints into a time-indexed reference trajectory.

    Raises :class:`TrajectoryException` when the planner output is empty or
    collapses to a single pose, so no controller is ever run on it.
    """
    config = config or TrajectoryConfig()
    raw = np.asarray(raw_waypoints, dtype=float)
    if raw.size == 0:
        raise TrajectoryException(
            TrajectoryError.EMPTY_PATH, "Planner returned an empty path."
        )

    filtered = filter_close_waypoints(raw, config.min_waypoint_distance)
    if filtered.shape[0] < 2:
        raise TrajectoryException(
            TrajectoryError.DEGENERATE_PATH,
            "Path collapses to a single pose after removing close waypoints.",
        )

    smoothed = smooth_waypoints(
        filtered,
        config.max_curvature,
        dense_samples_min=config.dense_samples_min,
        dense_samples_per_waypoint=config.dense_samples_per_waypoint,
        max_output_points=config.max_output_points,
    )
    distances = cumulative_distances(smoothed)
    if distances[-1] <= 0.0:
        raise TrajectoryException(
            TrajectoryError.DEGENERATE_PATH, "Smoothed path has zero length."
        )

    curvatures = menger_curvature(smoothed)
    velocities = generate_velocity_profile(
        distances, curvatures, config.v_max, config.velocity_profile()
    )
    time_per_waypoint, duration_s = compute_time_profile(distances, velocities)

    trajectory = generate_timed_trajectory(
        smoothed,
        time_per_waypoint,
        duration_s,
        time_grid,
        config.wheelbase,
        max_steer_rad=config.max_steer_rad,
        path_speeds=velocities,
    )

    logger.info(
        "Generated trajectory: %d raw -> %d filtered -> %d smoothed waypoints, "
        "length %.2f m, duration %.2f s over a %.2f s grid, peak curvature %.3f 1/m",
        raw.shape[0] if raw.ndim > 1 else 1,
        filtered.shape[0],
        smoothed.shape[0],
        float(distances[-1]),
        duration_s,
        trajectory.final_time_s,
        float(np.max(curvatures)),
    )
    if duration_s > trajectory.final_time_s:
        logger.warning(
            "Time grid ends at %.2f s before the maneuver completes at %.2f s",
            trajectory.final_time_s,
            duration_s,
        )
    return trajectory
