"""Tracking controllers sharing one (state, reference, call state) contract."""

from .commands import (
    ControlCommand,
    ControllerState,
    ControlResult,
    ReferenceSample,
    VehicleState,
)
from .config import (
    ControllerConfig,
    HybridConfig,
    MpcConfig,
    PurePursuitConfig,
    StanleyConfig,
)
from .hybrid import HybridController, HybridDebug
from .mpc import MpcController, MpcDebug
from .phases import ControlPhase
from .pure_pursuit import PurePursuitController, PurePursuitDebug
from .qp import QpSolution, solve_box_qp
from .shaping import CommandShaper
from .stanley import StanleyController, StanleyDebug
from .tracking import (
    TrackingErrors,
    classify_phase,
    compute_tracking_errors,
    tracking_velocity,
)

__all__ = [
    "CommandShaper",
    "ControlCommand",
    "ControlPhase",
    "ControlResult",
    "ControllerConfig",
    "ControllerState",
    "HybridConfig",
    "HybridController",
    "HybridDebug",
    "MpcConfig",
    "MpcController",
    "MpcDebug",
    "PurePursuitConfig",
    "PurePursuitController",
    "PurePursuitDebug",
    "QpSolution",
    "ReferenceSample",
    "StanleyConfig",
    "StanleyController",
    "StanleyDebug",
    "TrackingErrors",
    "VehicleState",
    "classify_phase",
    "compute_tracking_errors",
    "solve_box_qp",
    "tracking_velocity",
]
