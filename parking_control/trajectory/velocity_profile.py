from __future__ import annotations

import math

import numpy as np

from parking_control.common import DEGENERATE_EPS, gaussian_smooth, round_half_up

from .config import VelocityProfileConfig


def curvature_speed_cap(
    curvatures: np.ndarray, v_max: float, a_lat_max: float
) -> np.ndarray:
    """Highest speed that keeps lateral acceleration under ``a_lat_max``."""
    curvatures = np.abs(np.asarray(curvatures, dtype=float))
    cap = np.full(curvatures.shape, float(v_max), dtype=float)
    curved = curvatures > DEGENERATE_EPS
    cap[curved] = np.minimum(v_max, np.sqrt(a_lat_max / curvatures[curved]))
    return cap


def limit_acceleration(
    distances: np.ndarray, velocities: np.ndarray, a_max: float, d_max: float
) -> np.ndarray:
    """Forward/backward pass that starts and ends the profile at rest."""
    distances = np.asarray(distances, dtype=float)
    limited = np.array(velocities, dtype=float)
    n = limited.size
    if n == 0:
        return limited

    limited[0] = 0.0
    for i in range(1, n):
        ds = distances[i] - distances[i - 1]
        if ds > DEGENERATE_EPS:
            limited[i] = min(limited[i], math.sqrt(limited[i - 1] ** 2 + 2.0 * a_max * ds))

    limited[-1] = 0.0
    for i in range(n - 2, -1, -1):
        ds = distances[i + 1] - distances[i]
        if ds > DEGENERATE_EPS:
            limited[i] = min(limited[i], math.sqrt(limited[i + 1] ** 2 + 2.0 * d_max * ds))
    return limited


def generate_velocity_profile(
    distances: np.ndarray,
    curvatures: np.ndarray,
    v_max: float,
    config: VelocityProfileConfig | None = None,
) -> np.ndarray:
    """Speed for every path point, at rest at both ends.

    Order of operations: curvature cap, acceleration limiting, Gaussian
    smoothing, linear ramp over the first and last samples, then hard zeros
    at the two endpoints. Smoothing may leave small interior violations of
    the cap; only the boundaries are re-enforced afterwards.
    """
    config = config or VelocityProfileConfig()
    distances = np.asarray(distances, dtype=float)
    curvatures = np.asarray(curvatures, dtype=float)
    if distances.shape != curvatures.shape or distances.ndim != 1:
        raise ValueError(
            "distances and curvatures must be 1-D arrays of equal length; "
            f"received {distances.shape} and {curvatures.shape}"
        )
    if v_max <= 0.0:
        raise ValueError("v_max must be positive")

    n = distances.size
    if n == 0:
        return np.zeros(0, dtype=float)

    velocities = curvature_speed_cap(curvatures, v_max, config.a_lat_max)
    velocities = limit_acceleration(distances, velocities, config.a_max, config.d_max)
    velocities = gaussian_smooth(velocities, max(10, round_half_up(n / 30)))

    # Head and tail ramps must not overlap on short paths.
    ramp_length = min(n // 2, max(5, round_half_up(n / 50)))
    for i in range(ramp_length):
        factor = i / ramp_length
        velocities[i] *= factor
        velocities[n - 1 - i] *= factor

    velocities[0] = 0.0
    velocities[-1] = 0.0
    return velocities
