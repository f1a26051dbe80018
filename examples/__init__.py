"""Runnable closed-loop parking demos built on the simulator."""

from parking_control.common import parking_maneuver_path, straight_path
from .common import CONTROLLER_NAMES, analyze_history, build_controller, run_parking_example

__all__ = [
    "CONTROLLER_NAMES",
    "analyze_history",
    "build_controller",
    "parking_maneuver_path",
    "run_parking_example",
    "straight_path",
]
