from __future__ import annotations

import argparse
import math
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.common import parking_maneuver_path
from parking_control.control import MpcConfig, MpcController
from parking_control.maneuver import run_maneuver
from parking_control.trajectory import TimedTrajectory, generate_trajectory, make_time_grid

Q_LONGITUDINAL = 200.0
Q_HEADING = 400.0
R_VELOCITY = 0.5


@dataclass
class SweepResult:
    horizon: int
    q_lateral: float
    r_steer: float
    mean_position_error: float
    max_position_error: float
    final_position_error: float
    fallback_ticks: int

    def __str__(self) -> str:
        return (
            f"Np={self.horizon:2d}, Q_lat={self.q_lateral:7.1f}, R_steer={self.r_steer:5.1f}, "
            f"mean_err={self.mean_position_error:6.3f} m, max_err={self.max_position_error:6.3f} m, "
            f"final_err={self.final_position_error:6.3f} m, fallbacks={self.fallback_ticks}"
        )


def run_case(
    trajectory: TimedTrajectory,
    horizon: int,
    q_lateral: float,
    r_steer: float,
    settle_time_s: float,
) -> SweepResult:
    config = MpcConfig(
        prediction_horizon=horizon,
        q_weights=(q_lateral, Q_LONGITUDINAL, Q_HEADING),
        r_weights=(R_VELOCITY, r_steer),
    )
    final_time_s = min(trajectory.final_time_s, trajectory.duration_s + settle_time_s)
    history = run_maneuver(trajectory, MpcController(config), final_time_s=final_time_s)

    errors = np.array([step.position_error for step in history], dtype=float)
    goal_x, goal_y, _ = trajectory.final_pose
    final = history[-1].vehicle
    fallbacks = sum(
        1 for step in history if getattr(step.debug, "used_fallback", False)
    )
    return SweepResult(
        horizon=horizon,
        q_lateral=q_lateral,
        r_steer=r_steer,
        mean_position_error=float(np.mean(errors)),
        max_position_error=float(np.max(errors)),
        final_position_error=math.hypot(final.x - goal_x, final.y - goal_y),
        fallback_ticks=fallbacks,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Sweep MPC horizon and weights over a simulated parking maneuver."
    )
    ap.add_argument("--horizons", type=int, nargs="+", default=[6, 12, 15, 20])
    ap.add_argument("--q-lateral", type=float, nargs="+", default=[400.0, 1000.0, 2000.0, 4000.0])
    ap.add_argument("--r-steer", type=float, nargs="+", default=[8.0, 4.0, 2.0, 1.0])
    ap.add_argument("--settle-time", type=float, default=15.0, help="Seconds simulated past the reference duration")
    ap.add_argument("--output", type=Path, default=Path("logs/mpc_sweep.txt"))
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    trajectory = generate_trajectory(parking_maneuver_path(), make_time_grid(120.0, 0.1))

    total = len(args.horizons) * len(args.q_lateral) * len(args.r_steer)
    print(f"Testing {total} configurations over a {trajectory.duration_s:.1f} s maneuver")
    results = []
    for horizon in args.horizons:
        for q_lateral in args.q_lateral:
            for r_steer in args.r_steer:
                res = run_case(trajectory, horizon, q_lateral, r_steer, args.settle_time)
                results.append(res)
                print(res)

    results.sort(key=lambda res: res.mean_position_error)
    print(f"Best: {results[0]}")

    out_path = args.output
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w") as f:
        for res in results:
            f.write(str(res) + "\n")


if __name__ == "__main__":
    main()
