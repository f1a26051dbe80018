from __future__ import annotations

import math
from dataclasses import dataclass

from parking_control.common import DEGENERATE_EPS, wrap_angle

from .commands import ReferenceSample, VehicleState
from .config import ControllerConfig
from .phases import ControlPhase

# Cap on the distance term of the repositioning speed law.
_REPOSITION_ERROR_CAP = 1.0
# Floor on the speed scaling applied near the goal.
_APPROACH_SCALE_FLOOR = 0.1


@dataclass(frozen=True)
class TrackingErrors:
    """Pose error of the vehicle relative to one reference sample.

    ``longitudinal`` is positive when the vehicle trails the reference along
    its heading; ``lateral`` is positive when the vehicle sits to the right
    of the reference. ``bearing_alignment`` is the cosine between the vehicle
    heading and the bearing from the vehicle to the reference point.
    """

    error_x: float
    error_y: float
    position_error: float
    heading_error: float
    longitudinal: float
    lateral: float
    reference_speed: float
    reference_acceleration: float = 0.0
    bearing_alignment: float = 1.0


def compute_tracking_errors(
    state: VehicleState, reference: ReferenceSample
) -> TrackingErrors:
    ex = state.x - reference.x
    ey = state.y - reference.y
    ref_heading = wrap_angle(reference.heading)
    cos_h = math.cos(ref_heading)
    sin_h = math.sin(ref_heading)
    position_error = math.hypot(ex, ey)
    alignment = 1.0
    if position_error > DEGENERATE_EPS:
        alignment = (
            -ex * math.cos(state.heading) - ey * math.sin(state.heading)
        ) / position_error
    return TrackingErrors(
        error_x=ex,
        error_y=ey,
        position_error=position_error,
        heading_error=wrap_angle(wrap_angle(state.heading) - ref_heading),
        longitudinal=-ex * cos_h - ey * sin_h,
        lateral=ex * sin_h - ey * cos_h,
        reference_speed=reference.speed,
        reference_acceleration=reference.acceleration,
        bearing_alignment=alignment,
    )


def is_parked(errors: TrackingErrors, config: ControllerConfig) -> bool:
    return (
        errors.position_error < config.parking_tolerance
        and errors.reference_speed < config.stop_speed
    )


def is_near_target(errors: TrackingErrors, config: ControllerConfig) -> bool:
    return (
        errors.position_error < config.approach_distance
        and errors.reference_speed < config.approach_speed
    )


def classify_phase(errors: TrackingErrors, config: ControllerConfig) -> ControlPhase:
    """Phase implied by the instantaneous error, highest priority first."""
    if is_parked(errors, config):
        return ControlPhase.PARKED
    if (
        errors.reference_speed < config.stop_speed
        and errors.position_error > config.reposition_distance
    ):
        return ControlPhase.REPOSITIONING
    if is_near_target(errors, config):
        return ControlPhase.APPROACHING
    return ControlPhase.TRACKING


def tracking_velocity(
    errors: TrackingErrors,
    phase: ControlPhase,
    gain: float,
    config: ControllerConfig,
) -> float:
    """Unsaturated speed request from feedforward plus longitudinal feedback.

    Lateral and heading errors each damp the request; near the goal it is
    scaled down further with the remaining distance. While repositioning the
    vehicle only creeps toward a reference that lies ahead of it.
    """
    if phase is ControlPhase.PARKED:
        return 0.0
    if phase is ControlPhase.REPOSITIONING:
        return (
            gain
            * min(errors.position_error, _REPOSITION_ERROR_CAP)
            * max(0.0, errors.bearing_alignment)
        )

    velocity = (
        errors.reference_speed
        + config.speed_lead_time * errors.reference_acceleration
        + gain * errors.longitudinal
    )
    velocity /= 1.0 + abs(errors.lateral)
    velocity /= 1.0 + 2.0 * abs(errors.heading_error)
    if is_near_target(errors, config):
        velocity *= max(
            _APPROACH_SCALE_FLOOR, errors.position_error / config.approach_distance
        )
    return velocity
