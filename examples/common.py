from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable

import numpy as np

from parking_control.control import (
    HybridController,
    MpcController,
    PurePursuitController,
    StanleyController,
)
from parking_control.maneuver import ManeuverStep, TrackingController, run_maneuver
from parking_control.sim import SimulatorConfig
from parking_control.trajectory import (
    TimedTrajectory,
    TrajectoryConfig,
    generate_trajectory,
    make_time_grid,
)

CONTROLLER_NAMES = ("hybrid", "pure_pursuit", "mpc", "stanley")


def build_controller(name: str, trajectory: TimedTrajectory) -> TrackingController:
    if name == "hybrid":
        return HybridController()
    if name == "pure_pursuit":
        return PurePursuitController.from_trajectory(trajectory)
    if name == "mpc":
        return MpcController()
    if name == "stanley":
        return StanleyController()
    raise ValueError(f"Unknown controller {name!r}; expected one of {CONTROLLER_NAMES}")


def analyze_history(history: Iterable[ManeuverStep], trajectory: TimedTrajectory) -> None:
    history = list(history)
    if not history:
        print("No simulation history recorded.")
        return

    tracking_errors = [
        step.position_error for step in history if step.time_s <= trajectory.duration_s
    ]
    final = history[-1]
    goal_x, goal_y, _ = trajectory.final_pose
    goal_error = math.hypot(final.vehicle.x - goal_x, final.vehicle.y - goal_y)
    peak_speed = max(abs(step.command.velocity) for step in history)

    print(f"Simulated {len(history)} steps over {final.time_s:.2f} s.")
    print(f"Reference duration: {trajectory.duration_s:.2f} s")
    if tracking_errors:
        rms_error = math.sqrt(float(np.mean(np.square(tracking_errors))))
        print(f"RMS tracking error: {rms_error:.3f} m")
        print(f"Max tracking error: {max(tracking_errors):.3f} m")
    print(f"Final phase: {final.phase.value}")
    print(f"Final distance to goal: {goal_error:.3f} m")
    print(f"Final command: v={final.command.velocity:.3f} m/s, phi={final.command.steering:.3f} rad")
    print(f"Peak commanded speed: {peak_speed:.3f} m/s")


def run_parking_example(
    waypoints: np.ndarray,
    controller_name: str,
    log_path: Path,
    *,
    settle_time_s: float = 15.0,
    dt: float = 0.1,
    trajectory_config: TrajectoryConfig | None = None,
) -> tuple[TimedTrajectory, list[ManeuverStep]]:
    # Generous grid; the reference holds at the goal once the maneuver ends.
    time_grid = make_time_grid(120.0, dt)
    trajectory = generate_trajectory(waypoints, time_grid, trajectory_config)
    controller = build_controller(controller_name, trajectory)
    final_time_s = min(trajectory.final_time_s, trajectory.duration_s + settle_time_s)

    history = run_maneuver(
        trajectory,
        controller,
        simulator_config=SimulatorConfig(dt=dt),
        final_time_s=final_time_s,
        log_path=log_path,
    )
    analyze_history(history, trajectory)
    print(f"Telemetry log written to: {log_path}")
    return trajectory, history
