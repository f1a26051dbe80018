from __future__ import annotations

import math

from .commands import ControlCommand, ControllerState
from .config import ControllerConfig
from .phases import ControlPhase


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


class CommandShaper:
    """Saturate, slew-limit and low-pass filter raw (v, phi) requests.

    The previous command comes from the :class:`ControllerState` passed in,
    so one shaper can serve any number of independent vehicles.
    """

    def __init__(
        self,
        config: ControllerConfig,
        alpha_v: float = 1.0,
        alpha_phi: float = 1.0,
    ) -> None:
        self._config = config
        self._alpha_v = float(alpha_v)
        self._alpha_phi = float(alpha_phi)

    def limit(
        self, velocity: float, steering: float, state: ControllerState
    ) -> tuple[float, float]:
        """Saturated and rate-limited request, before filtering."""
        config = self._config
        v_prev = state.previous_velocity
        phi_prev = state.previous_steering

        # A non-finite request holds the previous command.
        v_cmd = float(velocity) if math.isfinite(velocity) else v_prev
        phi_cmd = float(steering) if math.isfinite(steering) else phi_prev
        v_cmd = _clamp(v_cmd, config.v_min, config.v_max)
        phi_cmd = _clamp(phi_cmd, -config.phi_max, config.phi_max)

        max_dv = config.max_accel * config.sampling_time
        max_dphi = config.max_steer_rate * config.sampling_time
        v_cmd = _clamp(v_cmd, v_prev - max_dv, v_prev + max_dv)
        phi_cmd = _clamp(phi_cmd, phi_prev - max_dphi, phi_prev + max_dphi)
        return v_cmd, phi_cmd

    def shape(
        self,
        velocity: float,
        steering: float,
        state: ControllerState,
        phase: ControlPhase,
        *,
        alpha_v: float | None = None,
        alpha_phi: float | None = None,
    ) -> tuple[ControlCommand, ControllerState]:
        config = self._config
        v_cmd, phi_cmd = self.limit(velocity, steering, state)

        a_v = self._alpha_v if alpha_v is None else alpha_v
        a_phi = self._alpha_phi if alpha_phi is None else alpha_phi
        v_cmd = a_v * v_cmd + (1.0 - a_v) * state.previous_velocity
        phi_cmd = a_phi * phi_cmd + (1.0 - a_phi) * state.previous_steering

        command = ControlCommand(
            velocity=_clamp(v_cmd, config.v_min, config.v_max),
            steering=_clamp(phi_cmd, -config.phi_max, config.phi_max),
        )
        return command, state.with_command(command, phase)

    def hold(
        self, command: ControlCommand, state: ControllerState, phase: ControlPhase
    ) -> tuple[ControlCommand, ControllerState]:
        """Emit ``command`` without slew limiting; reserved for terminal stops."""
        config = self._config
        command = ControlCommand(
            velocity=_clamp(command.velocity, config.v_min, config.v_max),
            steering=_clamp(command.steering, -config.phi_max, config.phi_max),
        )
        return command, state.with_command(command, phase)
