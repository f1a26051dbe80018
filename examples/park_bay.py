import argparse
import logging
from pathlib import Path

if __package__ in (None, ""):
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[1]))

from examples import CONTROLLER_NAMES, parking_maneuver_path, run_parking_example

LOG_DIR = Path(__file__).resolve().parents[1] / "logs"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Drive down an aisle and into a parking bay in simulation."
    )
    ap.add_argument(
        "--controller",
        choices=CONTROLLER_NAMES,
        default="hybrid",
        help="Tracking controller to run",
    )
    ap.add_argument("--turn-radius", type=float, default=6.0, help="Corner radius [m]")
    ap.add_argument("--verbose", action="store_true", help="Log pipeline diagnostics")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    waypoints = parking_maneuver_path(
        aisle_length_m=12.0, turn_radius_m=args.turn_radius, bay_depth_m=5.0
    )
    run_parking_example(
        waypoints=waypoints,
        controller_name=args.controller,
        log_path=LOG_DIR / f"park_bay_{args.controller}.csv",
        settle_time_s=20.0,
    )


if __name__ == "__main__":
    main()
