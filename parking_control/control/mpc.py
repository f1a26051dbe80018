from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .commands import (
    ControlCommand,
    ControllerState,
    ControlResult,
    ReferenceSample,
    VehicleState,
    as_reference,
    as_vehicle_state,
)
from .config import MpcConfig
from .phases import ControlPhase
from .qp import solve_box_qp
from .shaping import CommandShaper
from .tracking import (
    TrackingErrors,
    classify_phase,
    compute_tracking_errors,
    is_near_target,
)

logger = logging.getLogger(__name__)

# Floor on the linearization speed; below it the error model loses rank.
MIN_LINEARIZATION_SPEED = 0.5
PARKED_HEADING_DEADBAND = 0.1
PARKED_HEADING_GAIN_SCALE = 0.5
LOW_SPEED_THRESHOLD = 0.5
LOW_SPEED_ALPHA_V = 0.7
LOW_SPEED_ALPHA_PHI = 0.8
APPROACH_V_MAX = 1.0
APPROACH_PHI_SCALE = 0.8
REPOSITION_SPEED_CAP = 1.0


@dataclass(frozen=True)
class MpcDebug:
    errors: TrackingErrors
    phase: ControlPhase
    path_errors: np.ndarray
    solver_ok: bool
    converged: bool
    iterations: int
    used_fallback: bool
    raw_velocity: float
    raw_steering: float


def prediction_matrices(
    a_d: np.ndarray, b_d: np.ndarray, horizon: int
) -> tuple[np.ndarray, np.ndarray]:
    """Batch matrices so that stacked predicted states are ``Phi e0 + Gamma U``."""
    nx, nu = b_d.shape
    phi = np.zeros((nx * horizon, nx))
    gamma = np.zeros((nx * horizon, nu * horizon))
    powers = [np.eye(nx)]
    for _ in range(horizon):
        powers.append(powers[-1] @ a_d)
    for i in range(horizon):
        phi[nx * i : nx * (i + 1), :] = powers[i + 1]
        for j in range(i + 1):
            gamma[nx * i : nx * (i + 1), nu * j : nu * (j + 1)] = powers[i - j] @ b_d
    return phi, gamma


def error_model(
    v_lin: float, wheelbase: float, dt: float
) -> tuple[np.ndarray, np.ndarray]:
    """Forward-Euler discretization of the path-frame error dynamics.

    States are (lateral, longitudinal, heading) errors; inputs are speed and
    steering deviations from the reference.
    """
    a_c = np.array([[0.0, 0.0, v_lin], [0.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
    b_c = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, v_lin / wheelbase]])
    return np.eye(3) + a_c * dt, b_c * dt


class MpcController:
    """Receding-horizon tracker over a linearized error model.

    Each tick solves a box-constrained QP for speed/steering deviations from
    the reference and applies the first move. A non-finite solve falls back
    to proportional error feedback.
    """

    def __init__(self, config: MpcConfig | None = None) -> None:
        self._config = config or MpcConfig()
        self._shaper = CommandShaper(self._config)

    @property
    def config(self) -> MpcConfig:
        return self._config

    def compute(
        self,
        vehicle: VehicleState | Sequence[float],
        reference: ReferenceSample | Sequence[float],
        state: ControllerState,
    ) -> ControlResult:
        vehicle = as_vehicle_state(vehicle)
        reference = as_reference(reference)
        cfg = self._config

        errors = compute_tracking_errors(vehicle, reference)
        phase = classify_phase(errors, cfg)
        # Path-frame errors: positive lateral to the left, positive longitudinal ahead.
        path_errors = np.array([-errors.lateral, -errors.longitudinal, errors.heading_error])

        if phase is ControlPhase.PARKED:
            return self._parked(errors, path_errors, state)

        approaching = is_near_target(errors, cfg)
        v_max_local = cfg.v_max
        if approaching:
            v_max_local = max(cfg.v_min, min(cfg.v_max, APPROACH_V_MAX))
        phi_max_local = cfg.phi_max * APPROACH_PHI_SCALE if approaching else cfg.phi_max

        if phase is ControlPhase.REPOSITIONING:
            v_ref = min(REPOSITION_SPEED_CAP, errors.position_error) * max(
                0.0, errors.bearing_alignment
            )
        else:
            v_ref = (
                errors.reference_speed
                + cfg.speed_lead_time * errors.reference_acceleration
            )
        v_ref = min(max(v_ref, cfg.v_min), v_max_local)
        phi_ref = min(max(reference.steering, -phi_max_local), phi_max_local)

        q_weights = np.array(cfg.q_weights, dtype=float)
        r_weights = np.array(cfg.r_weights, dtype=float)
        if approaching:
            q_weights[0] *= 2.0
            q_weights[2] *= 1.5
            r_weights[1] *= 2.0

        horizon = cfg.prediction_horizon
        a_d, b_d = error_model(
            max(MIN_LINEARIZATION_SPEED, v_ref), cfg.wheelbase, cfg.sampling_time
        )
        phi, gamma = prediction_matrices(a_d, b_d, horizon)
        q_bar = np.kron(np.eye(horizon), np.diag(q_weights))
        r_bar = np.kron(np.eye(horizon), np.diag(r_weights))
        hessian = 2.0 * (gamma.T @ q_bar @ gamma + r_bar)
        linear = 2.0 * gamma.T @ q_bar @ phi @ path_errors

        lower = np.tile([cfg.v_min - v_ref, -phi_max_local - phi_ref], horizon)
        upper = np.tile([v_max_local - v_ref, phi_max_local - phi_ref], horizon)
        solution = solve_box_qp(
            hessian,
            linear,
            lower,
            upper,
            max_iterations=cfg.max_iterations,
            tolerance=cfg.tolerance,
            regularization=cfg.regularization,
        )

        if solution.ok:
            if not solution.converged:
                logger.debug(
                    "QP stopped after %d iterations without meeting tolerance %.1e",
                    solution.iterations,
                    cfg.tolerance,
                )
            v_raw = v_ref + float(solution.x[0])
            phi_raw = phi_ref + float(solution.x[1])
        else:
            logger.warning("QP solve failed; using proportional fallback")
            v_raw, phi_raw = self._fallback(path_errors, v_ref, phi_ref, phase, approaching)

        if approaching:
            approach_span = cfg.approach_distance - cfg.parking_tolerance
            v_raw *= max(0.1, (errors.position_error - cfg.parking_tolerance) / approach_span)

        v_limited, _ = self._shaper.limit(v_raw, phi_raw, state)
        if v_limited < LOW_SPEED_THRESHOLD:
            alpha_v, alpha_phi = LOW_SPEED_ALPHA_V, LOW_SPEED_ALPHA_PHI
        else:
            alpha_v = alpha_phi = cfg.smoothing_factor
        command, next_state = self._shaper.shape(
            v_raw, phi_raw, state, phase, alpha_v=alpha_v, alpha_phi=alpha_phi
        )

        debug = MpcDebug(
            errors=errors,
            phase=phase,
            path_errors=path_errors,
            solver_ok=solution.ok,
            converged=solution.converged,
            iterations=solution.iterations,
            used_fallback=not solution.ok,
            raw_velocity=v_raw,
            raw_steering=phi_raw,
        )
        return ControlResult(command=command, state=next_state, debug=debug)

    def _parked(
        self, errors: TrackingErrors, path_errors: np.ndarray, state: ControllerState
    ) -> ControlResult:
        cfg = self._config
        steering = 0.0
        if abs(errors.heading_error) > PARKED_HEADING_DEADBAND:
            steering = -cfg.fallback_kp_heading * PARKED_HEADING_GAIN_SCALE * errors.heading_error
            _, steering = self._shaper.limit(0.0, steering, state)
        command, next_state = self._shaper.hold(
            ControlCommand(0.0, steering), state, ControlPhase.PARKED
        )
        debug = MpcDebug(
            errors=errors,
            phase=ControlPhase.PARKED,
            path_errors=path_errors,
            solver_ok=True,
            converged=True,
            iterations=0,
            used_fallback=False,
            raw_velocity=0.0,
            raw_steering=steering,
        )
        return ControlResult(command=command, state=next_state, debug=debug)

    def _fallback(
        self,
        path_errors: np.ndarray,
        v_ref: float,
        phi_ref: float,
        phase: ControlPhase,
        approaching: bool,
    ) -> tuple[float, float]:
        cfg = self._config
        kp_long = cfg.fallback_kp_longitudinal
        kp_lat = cfg.fallback_kp_lateral
        kp_head = cfg.fallback_kp_heading
        if approaching:
            kp_long *= 0.5
            kp_lat *= 1.5
            kp_head *= 1.2

        e_lateral, e_longitudinal, e_heading = (float(e) for e in path_errors)
        if phase is ControlPhase.REPOSITIONING:
            velocity = v_ref
        else:
            velocity = v_ref - kp_long * e_longitudinal
        steering = phi_ref - kp_lat * e_lateral - kp_head * e_heading
        return velocity, steering
