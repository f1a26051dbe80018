from dataclasses import dataclass
import math
from typing import Callable

import numpy as np

from parking_control.common import wrap_angle
from parking_control.control import ControlCommand

from .config import SimulatorConfig
from .states import BicycleState


@dataclass
class SimulationStep:
    time_s: float
    state: BicycleState
    command: ControlCommand


class Simulator:
    """Kinematic bicycle with first-order speed and steering actuator lag."""

    def __init__(self, config: SimulatorConfig | None = None) -> None:
        self._config = config or SimulatorConfig()
        self.dt = float(self._config.dt)
        self.state = BicycleState()
        self.time_s = 0.0

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    def reset(self, state: BicycleState | None = None, time_s: float = 0.0) -> None:
        self.state = state.copy() if state is not None else BicycleState()
        self.time_s = float(time_s)

    def step(self, command: ControlCommand, dt: float | None = None) -> SimulationStep:
        dt = float(dt if dt is not None else self.dt)
        if dt <= 0.0:
            raise ValueError("dt must be positive")
        cfg = self._config

        # First-order lag emulating drivetrain and steering actuator response.
        alpha_v = dt / (max(cfg.speed_time_constant, 1e-3) + dt)
        alpha_phi = dt / (max(cfg.steering_time_constant, 1e-3) + dt)
        speed_cmd = float(np.clip(command.velocity, -cfg.max_speed_m_s, cfg.max_speed_m_s))
        steer_cmd = float(np.clip(command.steering, -cfg.max_steer_rad, cfg.max_steer_rad))
        self.state.speed += alpha_v * (speed_cmd - self.state.speed)
        self.state.steering += alpha_phi * (steer_cmd - self.state.steering)

        # Forward-Euler integration of the rear-axle bicycle model.
        speed = self.state.speed
        self.state.x += speed * math.cos(self.state.heading) * dt
        self.state.y += speed * math.sin(self.state.heading) * dt
        self.state.heading = wrap_angle(
            self.state.heading + speed / cfg.wheelbase * math.tan(self.state.steering) * dt
        )

        self.time_s += dt
        return SimulationStep(time_s=self.time_s, state=self.state.copy(), command=command)

    def run(
        self,
        final_time_s: float,
        command_fn: Callable[[float, BicycleState], ControlCommand],
        progress_callback: Callable[[SimulationStep], None] | None = None,
    ) -> list[SimulationStep]:
        steps = int(np.ceil((final_time_s - self.time_s) / self.dt - 1e-9))
        history: list[SimulationStep] = []
        for _ in range(max(0, steps)):
            cmd = command_fn(self.time_s, self.state.copy())
            step = self.step(cmd, dt=self.dt)
            history.append(step)
            if progress_callback is not None:
                progress_callback(step)
        return history
