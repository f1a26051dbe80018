"""Tests for waypoint filtering and smoothing."""

import logging
import math
from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.common import parking_maneuver_path, straight_path
from parking_control.trajectory import (
    TrajectoryError,
    TrajectoryException,
    filter_close_waypoints,
    smooth_waypoints,
)


def test_filter_keeps_first_point_and_spacing() -> None:
    points = np.array(
        [
            [0.0, 0.0, 0.0],
            [0.1, 0.0, 0.0],
            [0.2, 0.0, 0.0],
            [0.35, 0.0, 0.0],
            [0.5, 0.0, 0.0],
            [1.0, 0.0, 0.0],
        ]
    )
    filtered = filter_close_waypoints(points, 0.3)

    assert np.array_equal(filtered[0], points[0])
    assert filtered[:, 0].tolist() == pytest.approx([0.0, 0.35, 1.0])
    gaps = np.hypot(np.diff(filtered[:, 0]), np.diff(filtered[:, 1]))
    assert np.all(gaps >= 0.3)


def test_filter_is_idempotent() -> None:
    rng = np.random.default_rng(7)
    points = np.column_stack((np.cumsum(rng.uniform(0.0, 0.6, 40)), rng.uniform(-0.2, 0.2, 40)))
    once = filter_close_waypoints(points, 0.3)
    twice = filter_close_waypoints(once, 0.3)
    assert np.array_equal(once, twice)


def test_filter_collapses_clustered_points() -> None:
    points = np.array([[1.0, 1.0], [1.05, 1.0], [1.0, 1.1]])
    filtered = filter_close_waypoints(points, 0.3)
    assert filtered.shape == (1, 2)


@pytest.mark.parametrize(
    "waypoints, expected",
    [
        ([], TrajectoryError.EMPTY_PATH),
        (np.zeros((0, 3)), TrajectoryError.EMPTY_PATH),
        ([1.0, 2.0, 3.0], TrajectoryError.INVALID_WAYPOINTS),
        ([[0.0, 0.0], [math.nan, 1.0]], TrajectoryError.INVALID_WAYPOINTS),
    ],
)
def test_invalid_waypoints_raise(waypoints, expected) -> None:
    with pytest.raises(TrajectoryException) as excinfo:
        filter_close_waypoints(waypoints, 0.3)
    assert excinfo.value.error is expected


def test_smooth_straight_path_keeps_heading_and_endpoints() -> None:
    path = straight_path(10.0)
    smoothed = smooth_waypoints(path, 0.25)

    assert smoothed.shape == (500, 3)
    assert np.allclose(smoothed[:, 1], 0.0, atol=1e-9)
    assert np.allclose(smoothed[:, 2], 0.0, atol=1e-9)
    assert smoothed[0, 0] == pytest.approx(0.0, abs=0.1)
    assert smoothed[-1, 0] == pytest.approx(10.0, abs=0.1)
    assert np.all(np.diff(smoothed[:, 0]) > 0.0)


def test_smooth_output_is_capped_at_dense_count() -> None:
    smoothed = smooth_waypoints(
        straight_path(2.0, spacing_m=1.0),
        0.25,
        dense_samples_min=100,
        dense_samples_per_waypoint=10,
        max_output_points=500,
    )
    assert smoothed.shape == (100, 3)


def test_smooth_heading_follows_turn() -> None:
    smoothed = smooth_waypoints(parking_maneuver_path(), 0.25)
    assert smoothed[0, 2] == pytest.approx(0.0, abs=0.05)
    assert smoothed[-1, 2] == pytest.approx(math.pi / 2.0, abs=0.05)
    assert np.all(np.isfinite(smoothed))


def test_smooth_warns_when_curvature_target_exceeded(caplog) -> None:
    corner = np.array([[0.0, 0.0], [5.0, 0.0], [5.0, 5.0]])
    with caplog.at_level(logging.WARNING, logger="parking_control.trajectory.waypoints"):
        smooth_waypoints(corner, 0.01)
    assert any("curvature" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize("max_curvature, warns", [(0.15, True), (1.0, False)])
def test_curvature_warning_compares_per_metre_curvature(caplog, max_curvature, warns) -> None:
    # The bay turn has a 5 m radius, so peak curvature is close to 0.2 1/m.
    waypoints = parking_maneuver_path(turn_radius_m=5.0)
    with caplog.at_level(logging.WARNING, logger="parking_control.trajectory.waypoints"):
        smooth_waypoints(waypoints, max_curvature)
    warned = any("curvature" in record.getMessage() for record in caplog.records)
    assert warned is warns


def test_smooth_rejects_single_distinct_point() -> None:
    with pytest.raises(TrajectoryException) as excinfo:
        smooth_waypoints([[2.0, 3.0], [2.0, 3.0]], 0.25)
    assert excinfo.value.error is TrajectoryError.DEGENERATE_PATH
