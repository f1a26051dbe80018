from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy.interpolate import PchipInterpolator

from parking_control.common import DEGENERATE_EPS, gaussian_smooth, round_half_up, wrap_angles
from parking_control.control.commands import ReferenceSample

from .errors import TrajectoryError, TrajectoryException

# Samples at each end of the grid pinned to zero velocity.
_BOUNDARY_REST_SAMPLES = 3
_DERIVATIVE_SMOOTHING_WINDOW = 5
# Below this speed the steering feedforward is zero.
_FEEDFORWARD_MIN_SPEED = 0.05
# Squared speed below which the heading rate is treated as noise.
_STOPPED_SPEED_SQ = 1e-6


@dataclass(frozen=True)
class TimedTrajectory:
    """Fixed-rate reference signal plus the smoothed path it was built from.

    Tick arrays share the length of ``time_s``. Past ``duration_s`` the pose
    holds at the final waypoint and all rates are zero.
    """

    time_s: np.ndarray
    x: np.ndarray
    y: np.ndarray
    heading: np.ndarray
    steering: np.ndarray
    x_dot: np.ndarray
    y_dot: np.ndarray
    heading_rate: np.ndarray
    speed: np.ndarray
    acceleration: np.ndarray
    duration_s: float
    dt: float
    path: np.ndarray
    path_speeds: np.ndarray
    path_times: np.ndarray

    def __len__(self) -> int:
        return int(self.time_s.size)

    @property
    def final_time_s(self) -> float:
        return float(self.time_s[-1])

    @property
    def final_pose(self) -> tuple[float, float, float]:
        return float(self.x[-1]), float(self.y[-1]), float(self.heading[-1])

    def sample(self, index: int) -> ReferenceSample:
        i = int(index)
        return ReferenceSample(
            x=float(self.x[i]),
            y=float(self.y[i]),
            heading=float(self.heading[i]),
            steering=float(self.steering[i]),
            x_dot=float(self.x_dot[i]),
            y_dot=float(self.y_dot[i]),
            heading_rate=float(self.heading_rate[i]),
            acceleration=float(self.acceleration[i]),
        )

    def index_at(self, time_s: float) -> int:
        raw = round_half_up((float(time_s) - float(self.time_s[0])) / self.dt)
        return min(max(raw, 0), len(self) - 1)

    def sample_at(self, time_s: float) -> ReferenceSample:
        """Reference at the grid tick nearest ``time_s``, clamped to the grid."""
        return self.sample(self.index_at(time_s))

    def path_points(self) -> np.ndarray:
        """Smoothed path as (x, y, theta, v) rows for geometric trackers."""
        return np.column_stack(
            (self.path[:, 0], self.path[:, 1], wrap_angles(self.path[:, 2]), self.path_speeds)
        )


def compute_time_profile(
    distances: np.ndarray, velocities: np.ndarray
) -> tuple[np.ndarray, float]:
    """Arrival time at each path point, integrating segment length over mean speed.

    Segments whose mean speed is effectively zero take no time.
    """
    distances = np.asarray(distances, dtype=float)
    velocities = np.asarray(velocities, dtype=float)
    if distances.shape != velocities.shape:
        raise ValueError(
            f"distances {distances.shape} and velocities {velocities.shape} must match"
        )
    times = np.zeros(distances.size, dtype=float)
    if distances.size < 2:
        return times, 0.0

    ds = np.diff(distances)
    v_avg = 0.5 * (velocities[1:] + velocities[:-1])
    moving = v_avg > DEGENERATE_EPS
    dt = np.zeros_like(ds)
    dt[moving] = ds[moving] / v_avg[moving]
    times[1:] = np.cumsum(dt)
    return times, float(times[-1])


def _grid_step(time_grid: np.ndarray) -> float:
    if time_grid.ndim != 1 or time_grid.size < 2:
        raise TrajectoryException(
            TrajectoryError.INVALID_TIME_GRID, "Time grid needs at least two samples."
        )
    dt = float(time_grid[1] - time_grid[0])
    if not math.isfinite(dt) or dt <= 0.0:
        raise TrajectoryException(
            TrajectoryError.INVALID_TIME_GRID, "Time grid must be strictly increasing."
        )
    return dt


def generate_timed_trajectory(
    waypoints: np.ndarray,
    time_per_waypoint: np.ndarray,
    duration_s: float,
    time_grid: np.ndarray,
    wheelbase: float,
    max_steer_rad: float = math.pi / 6.0,
    path_speeds: np.ndarray | None = None,
) -> TimedTrajectory:
    waypoints = np.asarray(waypoints, dtype=float)
    time_per_waypoint = np.asarray(time_per_waypoint, dtype=float)
    time_grid = np.asarray(time_grid, dtype=float)
    if waypoints.ndim != 2 or waypoints.shape[1] < 3 or waypoints.shape[0] == 0:
        raise TrajectoryException(
            TrajectoryError.INVALID_WAYPOINTS,
            f"Waypoints must be shaped (N, 3); received shape {waypoints.shape}.",
        )
    if time_per_waypoint.shape != (waypoints.shape[0],):
        raise ValueError("time_per_waypoint must hold one time per waypoint")
    dt = _grid_step(time_grid)

    # First occurrence of each distinct time; stationary segments collapse.
    unique_times, unique_idx = np.unique(time_per_waypoint, return_index=True)
    unique_poses = waypoints[unique_idx, :3]

    final_pose = waypoints[-1, :3]
    poses = np.tile(final_pose, (time_grid.size, 1))
    moving = time_grid <= duration_s
    finished = ~moving
    if unique_times.size >= 2 and np.any(moving):
        interpolator = PchipInterpolator(unique_times, unique_poses, axis=0)
        poses[moving] = interpolator(time_grid[moving])
    x, y, heading = poses[:, 0], poses[:, 1], poses[:, 2]

    def _smoothed_rate(values: np.ndarray) -> np.ndarray:
        rate = np.gradient(values, dt) if values.size > 1 else np.zeros_like(values)
        rate[finished] = 0.0
        rate = gaussian_smooth(rate, _DERIVATIVE_SMOOTHING_WINDOW)
        rate[:_BOUNDARY_REST_SAMPLES] = 0.0
        rate[-_BOUNDARY_REST_SAMPLES:] = 0.0
        rate[finished] = 0.0
        return rate

    x_dot = _smoothed_rate(x)
    y_dot = _smoothed_rate(y)

    heading_unwrapped = np.unwrap(heading)
    heading_rate = gaussian_smooth(
        np.gradient(heading_unwrapped, dt), _DERIVATIVE_SMOOTHING_WINDOW
    )
    heading_rate[x_dot**2 + y_dot**2 < _STOPPED_SPEED_SQ] = 0.0
    heading_rate[finished] = 0.0

    speed = np.hypot(x_dot, y_dot)
    acceleration = np.gradient(speed, dt) if speed.size > 1 else np.zeros_like(speed)
    acceleration[:_BOUNDARY_REST_SAMPLES] = 0.0
    acceleration[-_BOUNDARY_REST_SAMPLES:] = 0.0
    acceleration[finished] = 0.0
    steering = np.zeros_like(speed)
    fast = speed > _FEEDFORWARD_MIN_SPEED
    steering[fast] = np.arctan(wheelbase * heading_rate[fast] / speed[fast])
    steering = np.clip(steering, -max_steer_rad, max_steer_rad)
    steering = gaussian_smooth(steering, _DERIVATIVE_SMOOTHING_WINDOW)

    if path_speeds is None:
        path_speeds = np.zeros(waypoints.shape[0], dtype=float)

    return TimedTrajectory(
        time_s=time_grid.copy(),
        x=x.copy(),
        y=y.copy(),
        heading=wrap_angles(heading),
        steering=steering,
        x_dot=x_dot,
        y_dot=y_dot,
        heading_rate=heading_rate,
        speed=speed,
        acceleration=acceleration,
        duration_s=float(duration_s),
        dt=dt,
        path=waypoints[:, :3].copy(),
        path_speeds=np.asarray(path_speeds, dtype=float).copy(),
        path_times=time_per_waypoint.copy(),
    )
