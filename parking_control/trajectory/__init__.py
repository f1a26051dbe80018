"""Reference trajectory generation from planner waypoints."""

from .config import TrajectoryConfig, VelocityProfileConfig
from .errors import TrajectoryError, TrajectoryException
from .generator import generate_trajectory, make_time_grid
from .timing import TimedTrajectory, compute_time_profile, generate_timed_trajectory
from .velocity_profile import (
    curvature_speed_cap,
    generate_velocity_profile,
    limit_acceleration,
)
from .waypoints import filter_close_waypoints, smooth_waypoints

__all__ = [
    "TimedTrajectory",
    "TrajectoryConfig",
    "TrajectoryError",
    "TrajectoryException",
    "VelocityProfileConfig",
    "compute_time_profile",
    "curvature_speed_cap",
    "filter_close_waypoints",
    "generate_timed_trajectory",
    "generate_trajectory",
    "generate_velocity_profile",
    "limit_acceleration",
    "make_time_grid",
    "smooth_waypoints",
]
