from .config import SimulatorConfig
from .simulator import SimulationStep, Simulator
from .states import BicycleState
from .telemetry import TelemetryLogger

__all__ = [
    "BicycleState",
    "SimulatorConfig",
    "SimulationStep",
    "Simulator",
    "TelemetryLogger",
]
