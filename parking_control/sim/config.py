from dataclasses import dataclass
import math


@dataclass(frozen=True)
class SimulatorConfig:
    """Configuration parameters for the kinematic bicycle simulator."""

    dt: float = 0.1
    wheelbase: float = 2.8
    speed_time_constant: float = 0.1
    steering_time_constant: float = 0.1
    max_steer_rad: float = math.pi / 4.0
    max_speed_m_s: float = 5.0

    def __post_init__(self) -> None:
        if self.dt <= 0.0:
            raise ValueError("dt must be positive.")
        if self.wheelbase <= 0.0:
            raise ValueError("wheelbase must be positive.")
        if self.speed_time_constant < 0.0 or self.steering_time_constant < 0.0:
            raise ValueError("Actuator time constants must be non-negative.")
        if self.max_steer_rad <= 0.0 or self.max_speed_m_s <= 0.0:
            raise ValueError("Actuator limits must be strictly positive.")
