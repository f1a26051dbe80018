from __future__ import annotations

import logging

import numpy as np
from scipy.interpolate import PchipInterpolator

from parking_control.common import (
    cumulative_distances,
    derivative_curvature,
    moving_average,
    round_half_up,
)

from .errors import TrajectoryError, TrajectoryException

logger = logging.getLogger(__name__)


def _as_waypoint_array(waypoints) -> np.ndarray:
    points = np.asarray(waypoints, dtype=float)
    if points.size == 0:
        raise TrajectoryException(TrajectoryError.EMPTY_PATH, "Waypoint sequence is empty.")
    if points.ndim != 2 or points.shape[1] < 2:
        raise TrajectoryException(
            TrajectoryError.INVALID_WAYPOINTS,
            f"Waypoints must be shaped (N, >=2); received shape {points.shape}.",
        )
    if not np.all(np.isfinite(points)):
        raise TrajectoryException(
            TrajectoryError.INVALID_WAYPOINTS, "Waypoints contain non-finite values."
        )
    return points


def filter_close_waypoints(waypoints, min_distance: float) -> np.ndarray:
    """Drop waypoints closer than ``min_distance`` to the last kept waypoint.

    The first waypoint is always kept, so the result holds at least one row.
    """
    points = _as_waypoint_array(waypoints)
    if min_distance < 0.0:
        raise ValueError("min_distance must be non-negative")

    kept = [0]
    last_xy = points[0, :2]
    for idx in range(1, points.shape[0]):
        current_xy = points[idx, :2]
        if float(np.hypot(*(current_xy - last_xy))) >= min_distance:
            kept.append(idx)
            last_xy = current_xy
    return points[kept].copy()


def smooth_waypoints(
    waypoints,
    max_curvature: float,
    *,
    dense_samples_min: int = 1000,
    dense_samples_per_waypoint: int = 50,
    max_output_points: int = 500,
) -> np.ndarray:
    """Resample and low-pass filter a waypoint path, returning (x, y, theta) rows.

    The path is interpolated densely over arc length with a shape-preserving
    cubic, each coordinate is smoothed with a moving average and the heading
    is rebuilt from the smoothed tangent. ``max_curvature`` is a soft target:
    the smoothed path is checked against it and a warning is logged when the
    smoothing alone does not bring the peak curvature under the limit.
    """
    points = _as_waypoint_array(waypoints)
    distances = cumulative_distances(points)
    # Interpolation needs strictly increasing abscissae.
    distances, unique_idx = np.unique(distances, return_index=True)
    points = points[unique_idx]
    if points.shape[0] < 2:
        raise TrajectoryException(
            TrajectoryError.DEGENERATE_PATH,
            "Path needs at least two distinct waypoints to be smoothed.",
        )

    n_interp = max(dense_samples_min, points.shape[0] * dense_samples_per_waypoint)
    s_interp = np.linspace(0.0, distances[-1], n_interp)
    x_interp = PchipInterpolator(distances, points[:, 0])(s_interp)
    y_interp = PchipInterpolator(distances, points[:, 1])(s_interp)

    window = max(5, round_half_up(n_interp / 100))
    x_smooth = moving_average(x_interp, window)
    y_smooth = moving_average(y_interp, window)

    dx = np.gradient(x_smooth)
    dy = np.gradient(y_smooth)
    theta_smooth = moving_average(np.unwrap(np.arctan2(dy, dx)), 2 * window)

    curvature = derivative_curvature(x_smooth, y_smooth)
    peak_curvature = float(np.max(curvature)) if curvature.size else 0.0
    if peak_curvature > max_curvature:
        logger.warning(
            "Smoothed path peak curvature %.3f 1/m exceeds the %.3f 1/m target",
            peak_curvature,
            max_curvature,
        )

    n_final = min(max_output_points, n_interp)
    indices = np.floor(np.linspace(0, n_interp - 1, n_final) + 0.5).astype(int)
    return np.column_stack((x_smooth[indices], y_smooth[indices], theta_smooth[indices]))
