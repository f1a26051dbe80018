"""Parking trajectory generation and tracking control for a bicycle-model vehicle."""

from .common import parking_maneuver_path, straight_path, wrap_angle
from .control import (
    ControlCommand,
    ControllerState,
    ControlPhase,
    HybridController,
    MpcController,
    PurePursuitController,
    StanleyController,
)
from .trajectory import (
    TimedTrajectory,
    TrajectoryConfig,
    TrajectoryException,
    generate_trajectory,
    make_time_grid,
)
from .sim import Simulator, SimulatorConfig, TelemetryLogger
from .maneuver import ControlLoop, ManeuverStep, run_maneuver

__all__ = [
    "ControlCommand",
    "ControlLoop",
    "ControlPhase",
    "ControllerState",
    "HybridController",
    "ManeuverStep",
    "MpcController",
    "PurePursuitController",
    "Simulator",
    "SimulatorConfig",
    "StanleyController",
    "TelemetryLogger",
    "TimedTrajectory",
    "TrajectoryConfig",
    "TrajectoryException",
    "generate_trajectory",
    "make_time_grid",
    "parking_maneuver_path",
    "run_maneuver",
    "straight_path",
    "wrap_angle",
]
