from __future__ import annotations

from dataclasses import dataclass

import numpy as np

_MAX_BACKTRACKS = 20


@dataclass(frozen=True)
class QpSolution:
    x: np.ndarray
    iterations: int
    converged: bool
    ok: bool
    objective: float


def solve_box_qp(
    hessian: np.ndarray,
    linear: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    max_iterations: int = 50,
    tolerance: float = 1e-5,
    regularization: float = 1e-4,
    x0: np.ndarray | None = None,
) -> QpSolution:
    """Minimize ``0.5 x'Hx + f'x`` subject to ``lower <= x <= upper``.

    Projected gradient descent on the Tikhonov-regularized Hessian. Each
    iteration starts from a ``2/L`` step (``L`` the largest eigenvalue) and
    halves it until the sufficient-decrease condition holds. Iteration stops
    once the update norm drops below ``tolerance`` or the budget runs out.

    ``ok`` is false only when the problem data or the iterate are unusable;
    running out of iterations is reported through ``converged``.
    """
    f = np.asarray(linear, dtype=float).ravel()
    n = f.size
    lower = np.broadcast_to(np.asarray(lower, dtype=float), (n,))
    upper = np.broadcast_to(np.asarray(upper, dtype=float), (n,))
    h = np.asarray(hessian, dtype=float)
    fallback_x = np.clip(np.zeros(n), lower, upper)

    if h.shape != (n, n) or np.any(lower > upper):
        raise ValueError(
            f"Inconsistent QP data: H {h.shape}, f ({n},), bounds must satisfy lower <= upper"
        )
    if not (np.all(np.isfinite(h)) and np.all(np.isfinite(f))):
        return QpSolution(fallback_x, 0, False, False, float("nan"))

    h = 0.5 * (h + h.T) + regularization * np.eye(n)
    lipschitz = float(np.linalg.eigvalsh(h)[-1])
    if lipschitz <= 0.0:
        return QpSolution(fallback_x, 0, False, False, float("nan"))

    def objective(x: np.ndarray) -> float:
        return float(0.5 * x @ h @ x + f @ x)

    x = fallback_x if x0 is None else np.clip(np.asarray(x0, dtype=float), lower, upper)
    value = objective(x)
    converged = False
    iterations = 0
    for iterations in range(1, max_iterations + 1):
        grad = h @ x + f
        step = 2.0 / lipschitz
        for _ in range(_MAX_BACKTRACKS):
            x_new = np.clip(x - step * grad, lower, upper)
            delta = x_new - x
            new_value = objective(x_new)
            if new_value <= value + grad @ delta + (0.5 / step) * (delta @ delta):
                break
            step *= 0.5

        x, value = x_new, new_value
        if float(np.linalg.norm(delta)) < tolerance:
            converged = True
            break

    ok = bool(np.all(np.isfinite(x)) and np.isfinite(value))
    return QpSolution(x, iterations, converged, ok, value)
