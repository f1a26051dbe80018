"""Unit tests for the shared geometry helpers."""

import math
from pathlib import Path
import sys

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.common import (
    arc_path,
    cumulative_distances,
    derivative_curvature,
    gaussian_smooth,
    menger_curvature,
    moving_average,
    round_half_up,
    wrap_angle,
    wrap_angles,
)


ANGLES = [
    0.0,
    1.0,
    -1.0,
    math.pi,
    -math.pi,
    3.0 * math.pi,
    -3.0 * math.pi,
    2.0 * math.pi,
    7.5,
    -7.5,
    100.0,
    -1e4,
    math.nextafter(-math.pi, 0.0),
]


@pytest.mark.parametrize("angle", ANGLES)
def test_wrap_angle_range_and_idempotence(angle: float) -> None:
    wrapped = wrap_angle(angle)
    assert -math.pi < wrapped <= math.pi
    assert wrap_angle(wrapped) == wrapped
    assert math.sin(wrapped) == pytest.approx(math.sin(angle), abs=1e-9)
    assert math.cos(wrapped) == pytest.approx(math.cos(angle), abs=1e-9)


def test_wrap_angle_maps_minus_pi_to_pi() -> None:
    assert wrap_angle(-math.pi) == math.pi
    assert wrap_angle(math.pi) == math.pi


def test_wrap_angles_matches_scalar_version() -> None:
    rng = np.random.default_rng(3)
    angles = np.concatenate((rng.uniform(-50.0, 50.0, 200), np.array(ANGLES)))
    wrapped = wrap_angles(angles)
    assert np.all(wrapped > -np.pi) and np.all(wrapped <= np.pi)
    assert np.array_equal(wrap_angles(wrapped), wrapped)
    expected = np.array([wrap_angle(a) for a in angles])
    assert np.allclose(wrapped, expected, atol=1e-12)


def test_cumulative_distances_monotone() -> None:
    points = np.array([[0.0, 0.0], [3.0, 4.0], [3.0, 4.0], [6.0, 8.0]])
    distances = cumulative_distances(points)
    assert distances.tolist() == pytest.approx([0.0, 5.0, 5.0, 10.0])
    assert np.all(np.diff(distances) >= 0.0)


def test_cumulative_distances_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        cumulative_distances(np.zeros(4))


def test_menger_curvature_of_circle() -> None:
    points = arc_path(radius_m=4.0, sweep_rad=math.pi, spacing_m=0.1)
    curvature = menger_curvature(points)
    assert curvature.shape == (points.shape[0],)
    assert np.allclose(curvature, 0.25, atol=1e-6)


def test_menger_curvature_degenerate_points_are_zero() -> None:
    points = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [2.0, 0.0]])
    curvature = menger_curvature(points)
    assert np.all(np.isfinite(curvature))
    assert np.allclose(curvature, 0.0)


def test_derivative_curvature_handles_stationary_samples() -> None:
    x = np.zeros(10)
    y = np.zeros(10)
    curvature = derivative_curvature(x, y)
    assert np.all(curvature == 0.0)

    theta = np.linspace(0.0, math.pi / 2.0, 200)
    radius = 2.0
    circle = derivative_curvature(radius * np.cos(theta), radius * np.sin(theta))
    assert np.allclose(circle[2:-2], 1.0 / radius, rtol=1e-3)


def test_derivative_curvature_on_densely_sampled_arc() -> None:
    radius = 2.0
    theta = np.arange(0.0, math.pi / 2.0, 0.01 / radius)
    curvature = derivative_curvature(radius * np.cos(theta), radius * np.sin(theta))

    assert np.max(curvature) == pytest.approx(1.0 / radius, rel=1e-2)
    assert np.allclose(curvature[2:-2], 1.0 / radius, rtol=1e-3)


def test_smoothing_filters_preserve_constants() -> None:
    values = np.full(50, 1.25)
    assert np.allclose(moving_average(values, 7), 1.25)
    assert np.allclose(gaussian_smooth(values, 10), 1.25)


def test_smoothing_window_of_one_is_passthrough() -> None:
    values = np.arange(5, dtype=float)
    assert np.array_equal(moving_average(values, 1), values)
    assert np.array_equal(gaussian_smooth(values, 1), values)


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (24.9, 25), (-0.5, 0), (3.0, 3)],
)
def test_round_half_up(value, expected) -> None:
    assert round_half_up(value) == expected


def test_menger_smoothing_window_rounds_halves_up() -> None:
    # One corner at index 12 of a 25-point path; 25 / 10 rounds to a
    # three-sample window.
    x = np.arange(25, dtype=float)
    y = np.where(x > 12, x - 12, 0.0)
    curvatures = menger_curvature(np.column_stack((x, y)))
    nonzero = np.flatnonzero(curvatures > 1e-12)
    assert nonzero.tolist() == [11, 12, 13]
    assert curvatures[11] == pytest.approx(curvatures[13])
