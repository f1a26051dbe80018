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
from .config import StanleyConfig
from .phases import ControlPhase
from .shaping import CommandShaper
from .tracking import (
    TrackingErrors,
    classify_phase,
    compute_tracking_errors,
    tracking_velocity,
)

STOPPED_SPEED = 0.05


@dataclass(frozen=True)
class StanleyDebug:
    errors: TrackingErrors
    phase: ControlPhase
    raw_velocity: float
    feedforward: float
    heading_term: float
    cross_track_term: float


class StanleyController:
    """Front-axle style steering law on the reference pose.

    Steering sums the reference steering angle, a heading correction and an
    arctangent cross-track term softened at low speed. Speed uses the same
    error-damped feedforward law as the hybrid controller.
    """

    def __init__(self, config: StanleyConfig | None = None) -> None:
        self._config = config or StanleyConfig()
        self._shaper = CommandShaper(
            self._config, alpha_v=self._config.alpha_v, alpha_phi=self._config.alpha_phi
        )

    @property
    def config(self) -> StanleyConfig:
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
        v_raw = tracking_velocity(errors, phase, cfg.kp_longitudinal, cfg)

        heading_term = -cfg.k_heading * errors.heading_error
        if phase is ControlPhase.PARKED or abs(v_raw) < STOPPED_SPEED:
            feedforward = 0.0
            cross_track_term = 0.0
        else:
            feedforward = cfg.k_feedforward * reference.steering
            cross_track_term = math.atan2(
                cfg.k_cross_track * errors.lateral, cfg.softening_speed + abs(v_raw)
            )
        phi_raw = feedforward + heading_term + cross_track_term

        command, next_state = self._shaper.shape(v_raw, phi_raw, state, phase)
        if phase is ControlPhase.PARKED:
            steering = (
                0.0 if abs(errors.heading_error) < cfg.heading_tolerance else command.steering
            )
            command, next_state = self._shaper.hold(
                ControlCommand(0.0, steering), state, phase
            )

        debug = StanleyDebug(
            errors=errors,
            phase=phase,
            raw_velocity=v_raw,
            feedforward=feedforward,
            heading_term=heading_term,
            cross_track_term=cross_track_term,
        )
        return ControlResult(command=command, state=next_state, debug=debug)
