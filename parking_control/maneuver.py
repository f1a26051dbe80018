from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from parking_control.control import (
    ControlCommand,
    ControllerState,
    ControlPhase,
    ControlResult,
    ReferenceSample,
    VehicleState,
)
from parking_control.sim import (
    BicycleState,
    SimulationStep,
    Simulator,
    SimulatorConfig,
    TelemetryLogger,
)
from parking_control.trajectory import TimedTrajectory

logger = logging.getLogger(__name__)


class TrackingController(Protocol):
    def compute(
        self,
        vehicle: VehicleState,
        reference: ReferenceSample,
        state: ControllerState,
    ) -> ControlResult: ...


@dataclass
class ManeuverStep:
    time_s: float
    vehicle: BicycleState
    reference: ReferenceSample
    command: ControlCommand
    phase: ControlPhase
    debug: Any = None

    @property
    def position_error(self) -> float:
        return math.hypot(self.vehicle.x - self.reference.x, self.vehicle.y - self.reference.y)


@dataclass
class ControlLoop:
    """Fixed-rate glue between one vehicle, its controller and the reference.

    Owns the controller call state for a single vehicle; construct one loop
    per vehicle instance and call :meth:`reset` before a new maneuver.
    """

    controller: TrackingController
    trajectory: TimedTrajectory
    state: ControllerState = field(default_factory=ControllerState.initial)
    last_command: ControlCommand | None = None
    last_reference: ReferenceSample | None = None
    last_result: ControlResult | None = None

    def __call__(self, time_s: float, vehicle: BicycleState) -> ControlCommand:
        reference = self.trajectory.sample_at(time_s)
        result = self.controller.compute(vehicle.as_vehicle_state(), reference, self.state)
        self.state = result.state
        self.last_reference = reference
        self.last_result = result
        self.last_command = result.command
        return result.command

    def reset(self) -> None:
        self.state = ControllerState.initial()
        self.last_command = None
        self.last_reference = None
        self.last_result = None


def initial_state_from(trajectory: TimedTrajectory) -> BicycleState:
    """Vehicle at rest on the first reference pose."""
    return BicycleState(
        x=float(trajectory.x[0]),
        y=float(trajectory.y[0]),
        heading=float(trajectory.heading[0]),
    )


def run_maneuver(
    trajectory: TimedTrajectory,
    controller: TrackingController,
    *,
    simulator_config: SimulatorConfig | None = None,
    initial_state: BicycleState | None = None,
    final_time_s: float | None = None,
    log_path: Path | None = None,
) -> list[ManeuverStep]:
    """Drive the simulated vehicle along ``trajectory`` with ``controller``."""
    if simulator_config is None:
        simulator_config = SimulatorConfig(dt=trajectory.dt)
    sampling_time = getattr(getattr(controller, "config", None), "sampling_time", None)
    if sampling_time is not None and not math.isclose(sampling_time, simulator_config.dt):
        logger.warning(
            "Simulator step %.3f s differs from controller sampling time %.3f s",
            simulator_config.dt,
            sampling_time,
        )

    simulator = Simulator(simulator_config)
    simulator.reset(initial_state if initial_state is not None else initial_state_from(trajectory))
    loop = ControlLoop(controller=controller, trajectory=trajectory)
    end_time_s = trajectory.final_time_s if final_time_s is None else final_time_s

    history: list[ManeuverStep] = []

    def record(step: SimulationStep) -> None:
        result = loop.last_result
        history.append(
            ManeuverStep(
                time_s=step.time_s,
                vehicle=step.state,
                reference=loop.last_reference,
                command=step.command,
                phase=result.state.phase,
                debug=result.debug,
            )
        )

    if log_path is None:
        simulator.run(end_time_s, loop, progress_callback=record)
    else:
        with TelemetryLogger(log_path) as telemetry:

            def record_and_log(step: SimulationStep) -> None:
                record(step)
                telemetry.log(step, step.command, loop.last_reference, history[-1].phase)

            simulator.run(end_time_s, loop, progress_callback=record_and_log)

    if history:
        final = history[-1]
        logger.info(
            "Maneuver finished at %.2f s in phase %s, final position error %.3f m",
            final.time_s,
            final.phase.value,
            final.position_error,
        )
    return history
