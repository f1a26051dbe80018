from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from parking_control.common import wrap_angle

from .commands import (
    ControlCommand,
    ControllerState,
    ControlResult,
    ReferenceSample,
    VehicleState,
    as_reference,
    as_vehicle_state,
)
from .config import PurePursuitConfig
from .phases import ControlPhase
from .shaping import CommandShaper

_PHASE_ORDER = (
    ControlPhase.TRACKING,
    ControlPhase.APPROACHING,
    ControlPhase.ALIGNING,
    ControlPhase.PARKED,
)
_CURVATURE_GAIN = {
    ControlPhase.TRACKING: 1.0,
    ControlPhase.APPROACHING: 1.5,
    ControlPhase.ALIGNING: 2.0,
}
_SMOOTHING_ALPHA = {
    ControlPhase.APPROACHING: 0.8,
    ControlPhase.ALIGNING: 0.9,
}

# Below this distance to the target the steering command is zero.
MIN_TARGET_DISTANCE = 0.05
TIGHT_TURN_STEERING = math.pi / 6.0
TIGHT_TURN_SPEED_SCALE = 0.7
FINAL_CREEP_DISTANCE = 0.3
FINAL_CREEP_SPEED_CAP = 0.1
STANDING_START_POINTS = 5
STANDING_START_SPEED = 0.1
# Keeps the vehicle rolling until the approach phase takes over the speed law.
TRACKING_MIN_SPEED = 0.3


@dataclass(frozen=True)
class PurePursuitDebug:
    phase: ControlPhase
    nearest_index: int
    target_index: int
    lookahead: float
    distance_to_goal: float
    alpha: float
    raw_velocity: float
    raw_steering: float


class PurePursuitController:
    """Geometric lookahead tracker with a forward-only parking state machine.

    The phase advances TRACKING -> APPROACHING -> ALIGNING -> PARKED by at
    most one step per tick and never moves back. Once PARKED every call
    returns a zero command until a fresh :class:`ControllerState` is used.
    """

    def __init__(self, path_points: np.ndarray, config: PurePursuitConfig | None = None):
        points = np.asarray(path_points, dtype=float)
        if points.ndim != 2 or points.shape[0] < 2 or points.shape[1] < 3:
            raise ValueError(
                f"path_points must be shaped (N>=2, >=3); received shape {points.shape}"
            )
        self._points = points.copy()
        self._config = config or PurePursuitConfig()
        self._shaper = CommandShaper(self._config)

    @classmethod
    def from_trajectory(cls, trajectory, config: PurePursuitConfig | None = None):
        return cls(trajectory.path_points(), config)

    @property
    def config(self) -> PurePursuitConfig:
        return self._config

    @property
    def path_points(self) -> np.ndarray:
        return self._points.copy()

    def compute(
        self,
        vehicle: VehicleState | Sequence[float],
        reference: ReferenceSample | Sequence[float] | None,
        state: ControllerState,
    ) -> ControlResult:
        """One control tick; ``reference`` is validated but steering uses the path."""
        vehicle = as_vehicle_state(vehicle)
        if reference is not None:
            as_reference(reference)
        cfg = self._config
        points = self._points
        v_current = vehicle.speed if vehicle.speed is not None else cfg.v_default

        final_x, final_y = float(points[-1, 0]), float(points[-1, 1])
        distance_to_goal = math.hypot(final_x - vehicle.x, final_y - vehicle.y)
        offsets = np.hypot(points[:, 0] - vehicle.x, points[:, 1] - vehicle.y)
        nearest_index = int(np.argmin(offsets))
        remaining = points.shape[0] - 1 - nearest_index

        phase = self._advance_phase(state.phase, distance_to_goal, remaining)
        if phase is ControlPhase.PARKED:
            command, next_state = self._shaper.hold(ControlCommand(0.0, 0.0), state, phase)
            debug = PurePursuitDebug(
                phase=phase,
                nearest_index=nearest_index,
                target_index=points.shape[0] - 1,
                lookahead=0.0,
                distance_to_goal=distance_to_goal,
                alpha=0.0,
                raw_velocity=0.0,
                raw_steering=0.0,
            )
            return ControlResult(command=command, state=next_state, debug=debug)

        lookahead = self._lookahead(phase, v_current, distance_to_goal)
        target_index = self._target_index(phase, offsets, nearest_index, lookahead, distance_to_goal)
        dx = float(points[target_index, 0]) - vehicle.x
        dy = float(points[target_index, 1]) - vehicle.y
        target_distance = math.hypot(dx, dy)
        alpha = wrap_angle(math.atan2(dy, dx) - vehicle.heading)

        steering = 0.0
        if target_distance > MIN_TARGET_DISTANCE:
            gain = _CURVATURE_GAIN[phase]
            steering = math.atan(gain * 2.0 * cfg.wheelbase * math.sin(alpha) / target_distance)
        steering = max(-cfg.phi_max, min(cfg.phi_max, steering))

        # Profile speed where the vehicle is, not at the lookahead target.
        v_desired = float(points[nearest_index, 3]) if points.shape[1] > 3 else cfg.v_default
        velocity = self._speed(phase, v_current, v_desired, steering, distance_to_goal)
        if nearest_index < STANDING_START_POINTS and v_current < STANDING_START_SPEED:
            velocity = min(velocity, STANDING_START_SPEED * (nearest_index + 1))

        alpha_smooth = 1.0
        near_stop = distance_to_goal < FINAL_CREEP_DISTANCE and v_current < 0.2
        if cfg.enable_smoothing and not near_stop:
            alpha_smooth = _SMOOTHING_ALPHA.get(phase, cfg.smoothing_factor)
        command, next_state = self._shaper.shape(
            velocity, steering, state, phase, alpha_v=alpha_smooth, alpha_phi=alpha_smooth
        )

        debug = PurePursuitDebug(
            phase=phase,
            nearest_index=nearest_index,
            target_index=target_index,
            lookahead=lookahead,
            distance_to_goal=distance_to_goal,
            alpha=alpha,
            raw_velocity=velocity,
            raw_steering=steering,
        )
        return ControlResult(command=command, state=next_state, debug=debug)

    def _advance_phase(
        self, phase: ControlPhase, distance_to_goal: float, remaining: int
    ) -> ControlPhase:
        cfg = self._config
        if phase not in _PHASE_ORDER:
            phase = ControlPhase.TRACKING
        if phase is ControlPhase.TRACKING:
            if (
                distance_to_goal < cfg.approach_threshold
                or remaining < cfg.approach_remaining_points
            ):
                return ControlPhase.APPROACHING
        elif phase is ControlPhase.APPROACHING:
            if distance_to_goal < cfg.align_threshold:
                return ControlPhase.ALIGNING
        elif phase is ControlPhase.ALIGNING:
            if distance_to_goal < cfg.parking_threshold:
                return ControlPhase.PARKED
        return phase

    def _lookahead(self, phase: ControlPhase, v_current: float, distance_to_goal: float) -> float:
        cfg = self._config
        if phase is ControlPhase.APPROACHING:
            return max(0.8, min(2.0, 0.7 * distance_to_goal))
        if phase is ControlPhase.ALIGNING:
            return max(0.5, distance_to_goal)
        lookahead = cfg.lookahead_distance + abs(v_current) * cfg.lookahead_time
        return max(cfg.lookahead_min, min(cfg.lookahead_max, lookahead))

    def _target_index(
        self,
        phase: ControlPhase,
        offsets: np.ndarray,
        nearest_index: int,
        lookahead: float,
        distance_to_goal: float,
    ) -> int:
        last = offsets.size - 1
        if phase is ControlPhase.ALIGNING or distance_to_goal < self._config.target_capture_distance:
            return last
        beyond = np.nonzero(offsets[nearest_index:] >= lookahead)[0]
        if beyond.size == 0:
            return last
        return nearest_index + int(beyond[0])

    def _speed(
        self,
        phase: ControlPhase,
        v_current: float,
        v_desired: float,
        steering: float,
        distance_to_goal: float,
    ) -> float:
        kp = self._config.kp_longitudinal
        if phase is ControlPhase.APPROACHING:
            v_target = max(0.2, min(0.8, 0.4 * distance_to_goal))
            return v_current + 0.5 * kp * (v_target - v_current)
        if phase is ControlPhase.ALIGNING:
            if distance_to_goal > FINAL_CREEP_DISTANCE:
                return 0.15
            return min(FINAL_CREEP_SPEED_CAP, max(0.05, 0.5 * distance_to_goal))
        v_desired = max(v_desired, TRACKING_MIN_SPEED)
        if abs(steering) > TIGHT_TURN_STEERING:
            v_desired *= TIGHT_TURN_SPEED_SCALE
        return v_current + kp * (v_desired - v_current)
