from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Self

from .phases import ControlPhase


@dataclass(frozen=True)
class VehicleState:
    """Measured pose of the rear axle and, optionally, the measured speed."""

    x: float
    y: float
    heading: float
    speed: float | None = None

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> Self:
        if len(values) < 3:
            raise ValueError(
                f"Vehicle state needs (x, y, theta[, v]); received {len(values)} values"
            )
        speed = float(values[3]) if len(values) > 3 else None
        return cls(float(values[0]), float(values[1]), float(values[2]), speed)


@dataclass(frozen=True)
class ReferenceSample:
    """One tick of the timed reference trajectory.

    ``acceleration`` is the along-path rate of change of the reference speed;
    vectors without an eighth entry leave it at zero.
    """

    x: float
    y: float
    heading: float
    steering: float
    x_dot: float
    y_dot: float
    heading_rate: float
    acceleration: float = 0.0

    @classmethod
    def from_vector(cls, values: Sequence[float]) -> Self:
        if len(values) < 7:
            raise ValueError(
                "Reference needs (xd, yd, thetad, phid, xd_dot, yd_dot, thetad_dot); "
                f"received {len(values)} values"
            )
        return cls(*(float(v) for v in values[:8]))

    @property
    def speed(self) -> float:
        return math.hypot(self.x_dot, self.y_dot)


@dataclass(frozen=True)
class ControlCommand:
    velocity: float = 0.0
    steering: float = 0.0


@dataclass(frozen=True)
class ControllerState:
    """Per-maneuver call state threaded through every controller invocation.

    Controllers never mutate it; each call returns the record to pass into
    the next tick. Start every maneuver from :meth:`initial`.
    """

    previous_velocity: float = 0.0
    previous_steering: float = 0.0
    phase: ControlPhase = ControlPhase.TRACKING
    initialized: bool = False

    @classmethod
    def initial(cls) -> Self:
        return cls()

    @property
    def previous_command(self) -> ControlCommand:
        return ControlCommand(self.previous_velocity, self.previous_steering)

    def with_command(self, command: ControlCommand, phase: ControlPhase) -> Self:
        return replace(
            self,
            previous_velocity=command.velocity,
            previous_steering=command.steering,
            phase=phase,
            initialized=True,
        )


@dataclass(frozen=True)
class ControlResult:
    command: ControlCommand
    state: ControllerState
    debug: Any = field(default=None, compare=False)


def as_vehicle_state(value: VehicleState | Sequence[float]) -> VehicleState:
    return value if isinstance(value, VehicleState) else VehicleState.from_vector(value)


def as_reference(value: ReferenceSample | Sequence[float]) -> ReferenceSample:
    return value if isinstance(value, ReferenceSample) else ReferenceSample.from_vector(value)
