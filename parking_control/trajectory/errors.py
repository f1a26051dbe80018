from enum import Enum


class TrajectoryError(Enum):
    EMPTY_PATH = "empty_path"
    DEGENERATE_PATH = "degenerate_path"
    INVALID_WAYPOINTS = "invalid_waypoints"
    INVALID_TIME_GRID = "invalid_time_grid"


class TrajectoryException(RuntimeError):
    def __init__(self, error: TrajectoryError, message: str):
        super().__init__(message)
        self.error = error
