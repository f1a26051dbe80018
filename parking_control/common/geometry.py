from __future__ import annotations

import math

import numpy as np
from scipy.ndimage import gaussian_filter1d, uniform_filter1d

TWO_PI = 2.0 * math.pi

# Denominators below this are treated as degenerate geometry.
DEGENERATE_EPS = 1e-6


def round_half_up(value: float) -> int:
    """Nearest integer, with halves rounded up rather than to even."""
    return int(math.floor(float(value) + 0.5))


def wrap_angle(angle: float) -> float:
    """Wrap an angle to (-pi, pi]."""
    angle = float(angle)
    if -math.pi < angle <= math.pi:
        return angle
    wrapped = math.pi - (math.pi - angle) % TWO_PI
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def wrap_angles(angles: np.ndarray) -> np.ndarray:
    angles = np.asarray(angles, dtype=float)
    wrapped = np.pi - np.mod(np.pi - angles, TWO_PI)
    wrapped = np.where(wrapped <= -np.pi, wrapped + TWO_PI, wrapped)
    in_range = (angles > -np.pi) & (angles <= np.pi)
    return np.where(in_range, angles, wrapped)


def cumulative_distances(points: np.ndarray) -> np.ndarray:
    """Cumulative arc length along the (x, y) columns of ``points``."""
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] < 2:
        raise ValueError(f"points must be shaped (N, >=2); received shape {pts.shape}")
    distances = np.zeros(pts.shape[0], dtype=float)
    if pts.shape[0] > 1:
        steps = np.hypot(np.diff(pts[:, 0]), np.diff(pts[:, 1]))
        distances[1:] = np.cumsum(steps)
    return distances


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    window = int(window)
    if window <= 1 or values.size == 0:
        return values.copy()
    return uniform_filter1d(values, size=window, mode="nearest")


def gaussian_smooth(values: np.ndarray, window: int) -> np.ndarray:
    """Gaussian-weighted smoothing over a centered window of ``window`` samples.

    The kernel standard deviation is a fifth of the window and the kernel is
    truncated at half a window on each side. Edges are handled by replicating
    the boundary sample.
    """
    values = np.asarray(values, dtype=float)
    window = int(window)
    if window <= 1 or values.size == 0:
        return values.copy()
    sigma = window / 5.0
    return gaussian_filter1d(values, sigma=sigma, mode="nearest", truncate=2.5)


def menger_curvature(points: np.ndarray) -> np.ndarray:
    """Unsigned three-point curvature at every path point.

    Endpoints take their neighbour's value and the result is lightly smoothed
    with a moving average. Degenerate triangles contribute zero curvature.
    """
    pts = np.asarray(points, dtype=float)
    n = pts.shape[0]
    curvatures = np.zeros(n, dtype=float)
    if n < 3:
        return curvatures

    p1 = pts[:-2, :2]
    p2 = pts[1:-1, :2]
    p3 = pts[2:, :2]
    a = np.linalg.norm(p2 - p1, axis=1)
    b = np.linalg.norm(p3 - p2, axis=1)
    c = np.linalg.norm(p3 - p1, axis=1)

    valid = (a > DEGENERATE_EPS) & (b > DEGENERATE_EPS) & (c > DEGENERATE_EPS)
    s = 0.5 * (a + b + c)
    area = np.sqrt(np.maximum(0.0, s * (s - a) * (s - b) * (s - c)))
    with np.errstate(divide="ignore", invalid="ignore"):
        interior = np.where(valid, 4.0 * area / (a * b * c), 0.0)
    curvatures[1:-1] = np.nan_to_num(interior, nan=0.0, posinf=0.0, neginf=0.0)

    curvatures[0] = curvatures[1]
    curvatures[-1] = curvatures[-2]
    return moving_average(curvatures, min(10, round_half_up(n / 10)))


def derivative_curvature(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Unsigned curvature from first and second derivatives over arc length.

    Samples that repeat their neighbour have no tangent and report zero.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size < 3:
        return np.zeros_like(x)
    s = cumulative_distances(np.column_stack((x, y)))
    if s[-1] <= DEGENERATE_EPS:
        return np.zeros_like(x)

    with np.errstate(divide="ignore", invalid="ignore"):
        dx = np.gradient(x, s)
        dy = np.gradient(y, s)
        ddx = np.gradient(dx, s)
        ddy = np.gradient(dy, s)
        numerator = np.abs(dx * ddy - dy * ddx)
        denominator = (dx**2 + dy**2) ** 1.5
        curvature = numerator / denominator
    curvature[denominator < DEGENERATE_EPS] = 0.0
    curvature[~np.isfinite(curvature)] = 0.0
    return curvature
