import csv
import math
from pathlib import Path
from typing import Self

from parking_control.control import ControlCommand, ControlPhase, ReferenceSample

from .simulator import SimulationStep


class TelemetryLogger:
    """CSV logger for closed-loop parking runs."""

    HEADERS = [
        "time_s",
        "ref_x",
        "ref_y",
        "ref_heading",
        "ref_steering",
        "ref_speed",
        "veh_x",
        "veh_y",
        "veh_heading",
        "veh_speed",
        "veh_steering",
        "cmd_velocity",
        "cmd_steering",
        "position_error",
        "phase",
    ]

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.path.open("w", newline="")
        self._writer = csv.writer(self._file)
        self._writer.writerow(self.HEADERS)

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def log(
        self,
        step: SimulationStep,
        command: ControlCommand,
        reference: ReferenceSample | None = None,
        phase: ControlPhase | None = None,
    ) -> None:
        state = step.state
        if reference is None:
            ref_values = [float("nan")] * 5
            position_error = float("nan")
        else:
            ref_values = [
                reference.x,
                reference.y,
                reference.heading,
                reference.steering,
                reference.speed,
            ]
            position_error = math.hypot(state.x - reference.x, state.y - reference.y)

        row = [
            step.time_s,
            *ref_values,
            state.x,
            state.y,
            state.heading,
            state.speed,
            state.steering,
            command.velocity,
            command.steering,
            position_error,
            phase.value if phase is not None else "",
        ]
        self._writer.writerow(row)
        self._file.flush()
