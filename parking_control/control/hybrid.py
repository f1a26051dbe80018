from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .commands import (
    ControlCommand,
    ControllerState,
    ControlResult,
    ReferenceSample,
    VehicleState,
    as_reference,
    as_vehicle_state,
)
from .config import HybridConfig
from .phases import ControlPhase
from .shaping import CommandShaper
from .tracking import (
    TrackingErrors,
    classify_phase,
    compute_tracking_errors,
    is_near_target,
    tracking_velocity,
)

# Fraction of the heading gain used while stopped.
STOPPED_HEADING_GAIN_SCALE = 0.3
STOPPED_SPEED = 0.05
FEEDFORWARD_MIN_SPEED = 0.1
LATERAL_SOFTENING_SPEED = 0.5
APPROACH_STEERING_SCALE = 0.7


@dataclass(frozen=True)
class HybridDebug:
    errors: TrackingErrors
    phase: ControlPhase
    raw_velocity: float
    raw_steering: float


class HybridController:
    """Multi-mode tracker: feedforward plus path-frame error feedback.

    The phase is reclassified each tick from the current error. Once the
    vehicle is parked the speed command is pinned to zero and steering only
    removes the residual heading error.
    """

    def __init__(self, config: HybridConfig | None = None) -> None:
        self._config = config or HybridConfig()
        self._shaper = CommandShaper(
            self._config, alpha_v=self._config.alpha_v, alpha_phi=self._config.alpha_phi
        )

    @property
    def config(self) -> HybridConfig:
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
        v_raw = tracking_velocity(errors, phase, cfg.k1, cfg)
        phi_raw = self._steering(errors, reference, phase, v_raw)

        command, next_state = self._shaper.shape(v_raw, phi_raw, state, phase)
        if phase is ControlPhase.PARKED:
            steering = (
                0.0 if abs(errors.heading_error) < cfg.heading_tolerance else command.steering
            )
            command, next_state = self._shaper.hold(
                ControlCommand(0.0, steering), state, phase
            )

        debug = HybridDebug(
            errors=errors, phase=phase, raw_velocity=v_raw, raw_steering=phi_raw
        )
        return ControlResult(command=command, state=next_state, debug=debug)

    def _steering(
        self,
        errors: TrackingErrors,
        reference: ReferenceSample,
        phase: ControlPhase,
        v_raw: float,
    ) -> float:
        cfg = self._config
        if phase is ControlPhase.PARKED or abs(v_raw) < STOPPED_SPEED:
            return -cfg.k2 * STOPPED_HEADING_GAIN_SCALE * errors.heading_error

        feedforward = 0.0
        if abs(v_raw) > FEEDFORWARD_MIN_SPEED:
            feedforward = math.atan(cfg.wheelbase * reference.heading_rate / v_raw)

        # Cross-track gain grows with the path turn rate.
        k_lateral = cfg.k3 * (1.0 + abs(reference.heading_rate))
        lateral = math.atan2(
            k_lateral * errors.lateral, max(LATERAL_SOFTENING_SPEED, abs(v_raw))
        )
        heading = -cfg.k2 * errors.heading_error

        steering = feedforward + lateral + heading
        if is_near_target(errors, cfg):
            steering *= APPROACH_STEERING_SCALE
        return steering
