"""Tests for time parameterization and the end-to-end trajectory generator."""

import logging
import math
from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.common import parking_maneuver_path, straight_path, wrap_angle
from parking_control.trajectory import (
    TrajectoryConfig,
    TrajectoryError,
    TrajectoryException,
    compute_time_profile,
    generate_timed_trajectory,
    generate_trajectory,
    make_time_grid,
)


def test_compute_time_profile_integrates_mean_speed() -> None:
    times, duration = compute_time_profile(
        np.array([0.0, 1.0, 2.0, 3.0]), np.array([0.0, 1.0, 1.0, 0.0])
    )
    assert times.tolist() == pytest.approx([0.0, 2.0, 3.0, 5.0])
    assert duration == pytest.approx(5.0)


def test_compute_time_profile_skips_stationary_segments() -> None:
    times, duration = compute_time_profile(
        np.array([0.0, 1.0, 2.0]), np.array([0.0, 0.0, 1.0])
    )
    assert times.tolist() == pytest.approx([0.0, 0.0, 2.0])
    assert duration == pytest.approx(2.0)


def test_make_time_grid() -> None:
    grid = make_time_grid(1.0, 0.1)
    assert grid.size == 11
    assert grid[0] == 0.0
    assert grid[-1] == pytest.approx(1.0)
    with pytest.raises(ValueError):
        make_time_grid(1.0, 0.0)


@pytest.mark.parametrize("waypoints", [straight_path(10.0), parking_maneuver_path()])
def test_reference_holds_final_pose_after_duration(waypoints) -> None:
    trajectory = generate_trajectory(waypoints, make_time_grid(80.0, 0.1))
    finished = trajectory.time_s > trajectory.duration_s
    assert np.any(finished)

    final = trajectory.path[-1]
    assert np.all(trajectory.x[finished] == final[0])
    assert np.all(trajectory.y[finished] == final[1])
    assert np.allclose(trajectory.heading[finished], wrap_angle(final[2]))
    assert np.all(trajectory.x_dot[finished] == 0.0)
    assert np.all(trajectory.y_dot[finished] == 0.0)
    assert np.all(trajectory.heading_rate[finished] == 0.0)
    assert np.all(trajectory.acceleration[finished] == 0.0)
    assert trajectory.final_pose[0] == final[0]


def test_trajectory_arrays_are_consistent() -> None:
    config = TrajectoryConfig()
    trajectory = generate_trajectory(parking_maneuver_path(), make_time_grid(80.0, 0.1), config)

    assert len(trajectory) == 801
    for name in ("x", "y", "heading", "steering", "x_dot", "y_dot", "heading_rate", "speed", "acceleration"):
        values = getattr(trajectory, name)
        assert values.shape == trajectory.time_s.shape
        assert np.all(np.isfinite(values))
    assert np.all(trajectory.heading > -math.pi)
    assert np.all(trajectory.heading <= math.pi)
    assert np.all(np.abs(trajectory.steering) <= config.max_steer_rad + 1e-12)
    assert np.all(trajectory.x_dot[:3] == 0.0)
    assert np.all(trajectory.speed[:3] == 0.0)
    assert np.all(np.diff(trajectory.path_times) >= 0.0)
    assert trajectory.path_times[-1] == pytest.approx(trajectory.duration_s)
    # Turning left through the bay entry needs positive steering somewhere.
    assert np.max(trajectory.steering) > 0.05


def test_sample_at_clamps_to_grid() -> None:
    trajectory = generate_trajectory(straight_path(10.0), make_time_grid(30.0, 0.1))

    first = trajectory.sample_at(-5.0)
    assert first.x == trajectory.x[0]
    last = trajectory.sample_at(1e6)
    assert (last.x, last.y) == (trajectory.x[-1], trajectory.y[-1])
    assert last.speed == 0.0
    assert trajectory.index_at(1.04) == 10
    assert trajectory.sample(10).x == trajectory.x[10]


def test_path_points_for_geometric_trackers() -> None:
    trajectory = generate_trajectory(parking_maneuver_path(), make_time_grid(80.0, 0.1))
    points = trajectory.path_points()

    assert points.shape == (trajectory.path.shape[0], 4)
    assert np.all(points[:, 2] > -math.pi) and np.all(points[:, 2] <= math.pi)
    assert points[0, 3] == 0.0
    assert points[-1, 3] == 0.0
    assert np.max(points[:, 3]) <= TrajectoryConfig().v_max + 1e-9


def test_short_grid_logs_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="parking_control.trajectory.generator"):
        trajectory = generate_trajectory(straight_path(10.0), make_time_grid(2.0, 0.1))
    assert trajectory.final_time_s < trajectory.duration_s
    assert any("before the maneuver completes" in r.getMessage() for r in caplog.records)


def test_empty_planner_output_raises() -> None:
    with pytest.raises(TrajectoryException) as excinfo:
        generate_trajectory([], make_time_grid(10.0, 0.1))
    assert excinfo.value.error is TrajectoryError.EMPTY_PATH


def test_collapsed_path_raises() -> None:
    clustered = [[0.0, 0.0, 0.0], [0.1, 0.0, 0.0], [0.05, 0.1, 0.0]]
    with pytest.raises(TrajectoryException) as excinfo:
        generate_trajectory(clustered, make_time_grid(10.0, 0.1))
    assert excinfo.value.error is TrajectoryError.DEGENERATE_PATH


def test_invalid_time_grid_raises() -> None:
    with pytest.raises(TrajectoryException) as excinfo:
        generate_trajectory(straight_path(5.0), np.array([0.0]))
    assert excinfo.value.error is TrajectoryError.INVALID_TIME_GRID

    with pytest.raises(TrajectoryException):
        generate_timed_trajectory(
            straight_path(5.0),
            np.linspace(0.0, 5.0, 11),
            5.0,
            np.array([1.0, 0.5, 0.0]),
            wheelbase=2.8,
        )


def test_acceleration_follows_reference_speed() -> None:
    trajectory = generate_trajectory(straight_path(10.0), make_time_grid(40.0, 0.1))
    moving = (trajectory.time_s <= trajectory.duration_s) & (np.arange(len(trajectory)) >= 3)
    central = np.gradient(trajectory.speed, trajectory.dt)

    assert np.allclose(trajectory.acceleration[moving][:-3], central[moving][:-3])
    assert np.max(trajectory.acceleration) > 0.0
    assert np.min(trajectory.acceleration) < 0.0
    assert trajectory.acceleration[-1] == 0.0
    assert trajectory.sample(5).acceleration == trajectory.acceleration[5]
