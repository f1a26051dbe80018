"""Tests for the hybrid and Stanley error-feedback controllers."""

import math
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from parking_control.control import (
    ControlCommand,
    ControllerState,
    ControlPhase,
    HybridConfig,
    HybridController,
    ReferenceSample,
    StanleyController,
    VehicleState,
)

STOPPED_REFERENCE = ReferenceSample(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
MOVING_REFERENCE = ReferenceSample(0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0)

CONTROLLERS = [HybridController, StanleyController]


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
@pytest.mark.parametrize("previous_velocity", [0.0, 0.4, 1.5])
def test_parked_speed_is_zero_regardless_of_previous_command(controller_cls, previous_velocity) -> None:
    controller = controller_cls()
    state = ControllerState(previous_velocity=previous_velocity, previous_steering=0.1, initialized=True)
    result = controller.compute(VehicleState(0.25, 0.0, 0.0), STOPPED_REFERENCE, state)

    assert result.command == ControlCommand(0.0, 0.0)
    assert result.state.phase is ControlPhase.PARKED
    assert result.state.previous_command == result.command


def test_parked_heading_residual_still_steers() -> None:
    controller = HybridController()
    result = controller.compute(VehicleState(0.1, 0.0, 0.2), STOPPED_REFERENCE, ControllerState.initial())

    assert result.command.velocity == 0.0
    # -k2 * 0.3 * 0.2, slew limited to 0.08 then filtered with alpha_phi 0.8.
    assert result.command.steering == pytest.approx(-0.064)


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_vehicle_left_of_path_steers_right(controller_cls) -> None:
    controller = controller_cls()
    result = controller.compute(VehicleState(0.0, 0.5, 0.0), MOVING_REFERENCE, ControllerState.initial())

    assert result.state.phase is ControlPhase.TRACKING
    assert result.command.steering < 0.0
    assert result.command.velocity > 0.0
    assert result.debug.errors.lateral == pytest.approx(-0.5)


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_vehicle_right_of_path_steers_left(controller_cls) -> None:
    controller = controller_cls()
    result = controller.compute(VehicleState(0.0, -0.5, 0.0), MOVING_REFERENCE, ControllerState.initial())
    assert result.command.steering > 0.0


def test_repositioning_drives_toward_stopped_reference() -> None:
    controller = HybridController()
    result = controller.compute(VehicleState(-1.0, 0.0, 0.0), STOPPED_REFERENCE, ControllerState.initial())

    assert result.state.phase is ControlPhase.REPOSITIONING
    assert result.debug.raw_velocity == pytest.approx(2.0)
    assert result.command.velocity == pytest.approx(0.15 * 0.7)


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_repositioning_never_drives_away_from_reference_behind(controller_cls) -> None:
    controller = controller_cls()
    state = ControllerState.initial()
    for _ in range(10):
        result = controller.compute(VehicleState(1.0, 0.0, 0.0, 0.0), STOPPED_REFERENCE, state)
        state = result.state
        assert result.state.phase is ControlPhase.REPOSITIONING
        assert result.debug.raw_velocity == 0.0
        assert result.command.velocity == 0.0


def test_repositioning_speed_scales_with_bearing() -> None:
    controller = HybridController()
    vehicle = VehicleState(-1.0, 0.0, math.pi / 3.0)
    result = controller.compute(vehicle, STOPPED_REFERENCE, ControllerState.initial())

    assert result.debug.errors.bearing_alignment == pytest.approx(0.5)
    assert result.debug.raw_velocity == pytest.approx(1.0)


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_reference_deceleration_lowers_speed_request(controller_cls) -> None:
    controller = controller_cls()
    braking = ReferenceSample(0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, -1.0)
    result = controller.compute(VehicleState(0.0, 0.0, 0.0, 1.0), braking, ControllerState.initial())

    # Feedforward 1.0 m/s plus 0.4 s of lead on -1.0 m/s^2.
    assert result.debug.raw_velocity == pytest.approx(0.6)


def test_hybrid_accepts_plain_sequences() -> None:
    controller = HybridController(HybridConfig(k1=1.0))
    from_vectors = controller.compute([0.0, 0.5, 0.0, 0.0], [0, 0, 0, 0, 1.0, 0, 0], ControllerState.initial())
    from_records = controller.compute(VehicleState(0.0, 0.5, 0.0, 0.0), MOVING_REFERENCE, ControllerState.initial())
    assert from_vectors.command == from_records.command


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_short_inputs_rejected(controller_cls) -> None:
    controller = controller_cls()
    with pytest.raises(ValueError):
        controller.compute([0.0, 0.0], [0.0] * 7, ControllerState.initial())
    with pytest.raises(ValueError):
        controller.compute([0.0, 0.0, 0.0], [0.0] * 6, ControllerState.initial())


@pytest.mark.parametrize("controller_cls", CONTROLLERS)
def test_non_finite_pose_holds_previous_command(controller_cls) -> None:
    controller = controller_cls()
    state = ControllerState(previous_velocity=0.5, previous_steering=0.05, initialized=True)
    result = controller.compute(VehicleState(math.nan, 0.0, 0.0), MOVING_REFERENCE, state)

    assert math.isfinite(result.command.velocity)
    assert math.isfinite(result.command.steering)
    assert result.command.velocity == pytest.approx(0.5)


def test_stanley_feedforward_uses_reference_steering() -> None:
    controller = StanleyController()
    reference = ReferenceSample(0.0, 0.0, 0.0, 0.2, 1.0, 0.0, 0.0)
    result = controller.compute(VehicleState(0.0, 0.0, 0.0), reference, ControllerState.initial())

    assert result.debug.feedforward == pytest.approx(0.2)
    assert result.debug.cross_track_term == pytest.approx(0.0)
    assert result.command.steering == pytest.approx(0.08 * 0.8)
