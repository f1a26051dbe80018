from pathlib import Path

if __package__ in (None, ""):
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[1]))

from examples import CONTROLLER_NAMES, run_parking_example, straight_path

LOG_DIR = Path(__file__).resolve().parents[1] / "logs"


def main() -> None:
    waypoints = straight_path(length_m=10.0, heading_rad=0.0, spacing_m=0.5)
    for name in CONTROLLER_NAMES:
        print(f"--- {name} ---")
        run_parking_example(
            waypoints=waypoints,
            controller_name=name,
            log_path=LOG_DIR / f"park_straight_{name}.csv",
        )


if __name__ == "__main__":
    main()
