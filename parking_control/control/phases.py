from enum import Enum


class ControlPhase(Enum):
    """Operating phase shared by every controller.

    Pure Pursuit advances through the phases monotonically and latches in
    ``PARKED``. Hybrid, MPC and Stanley reclassify the phase every tick from
    the instantaneous tracking error.
    """

    TRACKING = "tracking"
    REPOSITIONING = "repositioning"
    APPROACHING = "approaching"
    ALIGNING = "aligning"
    PARKED = "parked"
