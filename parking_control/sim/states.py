from __future__ import annotations

from dataclasses import dataclass

from parking_control.control import VehicleState


@dataclass
class BicycleState:
    """Rear-axle pose plus the actual (lagged) speed and steering angle."""

    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0
    speed: float = 0.0
    steering: float = 0.0

    def copy(self) -> "BicycleState":
        return BicycleState(
            x=self.x,
            y=self.y,
            heading=self.heading,
            speed=self.speed,
            steering=self.steering,
        )

    def as_vehicle_state(self) -> VehicleState:
        return VehicleState(self.x, self.y, self.heading, self.speed)
