"""
Tests for axial placement of components relative to their parent.
"""
import numpy as np
import pytest

from rocketframe import (
    AxialMethod,
    AxialStage,
    BodyTube,
    BugError,
    InnerTube,
    ModelPreferences,
    Rocket,
)


def build_stack(front_length=10.0, rear_length=1.0):
    rocket = Rocket()
    stage = AxialStage()
    rocket.add_child(stage)
    front = BodyTube(length=front_length)
    rear = BodyTube(length=rear_length)
    stage.add_child(front)
    stage.add_child(rear)
    return rocket, stage, front, rear


# ---------------------------------------------------------------------------
# AxialMethod conversions
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("method", list(AxialMethod))
@pytest.mark.parametrize("offset", [-0.3, 0.0, 0.125, 2.0])
def test_position_offset_inverse(method, offset):
    position = method.as_position(offset, 0.4, 1.5)
    assert method.as_offset(position, 0.4, 1.5) == pytest.approx(offset)


def test_method_positions():
    assert AxialMethod.TOP.as_position(0.1, 0.4, 1.0) == pytest.approx(0.1)
    assert AxialMethod.MIDDLE.as_position(0.0, 0.4, 1.0) == pytest.approx(0.3)
    assert AxialMethod.BOTTOM.as_position(0.0, 0.4, 1.0) == pytest.approx(0.6)
    assert AxialMethod.AFTER.as_position(0.05, 0.4, 1.0) == pytest.approx(1.05)


# ---------------------------------------------------------------------------
# Default stacking
# ---------------------------------------------------------------------------

class TestStacking:

    def test_after_previous_sibling(self):
        rocket, stage, front, rear = build_stack()
        assert front.x == 0.0
        assert rear.x == 10.0
        assert stage.length == 11.0

    def test_fixture_layout(self, stage, nose, tube):
        assert nose.x == 0.0
        assert tube.x == pytest.approx(0.15)
        assert stage.length == pytest.approx(0.55)

    def test_length_change_moves_followers(self, nose, tube):
        nose.length = 0.2
        assert tube.x == pytest.approx(0.2)

    def test_after_offset_leaves_gap(self, tube):
        tube.axial_offset = 0.05
        assert tube.x == pytest.approx(0.2)

    def test_removal_moves_followers(self, stage, nose, tube):
        stage.remove_child(nose)
        assert tube.x == 0.0

    def test_stages_stack(self, rocket, stage):
        booster = AxialStage()
        rocket.add_child(booster)
        booster.add_child(BodyTube(length=0.3))
        assert booster.x == pytest.approx(0.55)
        assert rocket.length == pytest.approx(0.85)

    def test_inactive_stage_skipped(self):
        rocket = Rocket()
        sustainer, booster = AxialStage(), AxialStage()
        rocket.add_child(sustainer)
        rocket.add_child(booster)
        sustainer.add_child(BodyTube(length=0.5))
        booster.add_child(BodyTube(length=0.3))
        assert booster.x == pytest.approx(0.5)

        rocket.set_stage_active(sustainer, False)
        assert not rocket.selected_configuration.is_stage_active(sustainer)
        assert booster.x == 0.0

        rocket.set_stage_active(sustainer, True)
        assert booster.x == pytest.approx(0.5)

    def test_internal_components_default_to_top(self, tube):
        inner = InnerTube(length=0.1)
        tube.add_child(inner)
        assert inner.axial_method is AxialMethod.TOP
        assert inner.x == 0.0
        assert inner.component_locations[0][0] == pytest.approx(0.15)


# ---------------------------------------------------------------------------
# Switching methods
# ---------------------------------------------------------------------------

class TestMethodSwitch:

    @pytest.mark.parametrize("method", list(AxialMethod))
    def test_switch_keeps_position(self, tube, method):
        before = tube.component_locations.copy()
        tube.axial_method = method
        assert tube.axial_method is method
        np.testing.assert_allclose(tube.component_locations, before, atol=1e-12)

    def test_offsets_per_method(self, tube):
        assert tube.get_axial_offset(AxialMethod.AFTER) == pytest.approx(0.0)
        assert tube.get_axial_offset(AxialMethod.TOP) == pytest.approx(0.15)
        assert tube.get_axial_offset(AxialMethod.MIDDLE) == pytest.approx(0.075)
        assert tube.get_axial_offset(AxialMethod.BOTTOM) == pytest.approx(0.0)
        assert tube.get_axial_offset(AxialMethod.ABSOLUTE) == pytest.approx(0.15)

    def test_switch_rebases_offset(self, tube):
        tube.axial_method = AxialMethod.MIDDLE
        assert tube.axial_offset == pytest.approx(0.075)

    def test_set_offset_round_trip(self, inner_tube):
        inner_tube.set_axial_offset(AxialMethod.BOTTOM, -0.05)
        assert inner_tube.x == pytest.approx(0.25)
        assert inner_tube.get_axial_offset(AxialMethod.BOTTOM) == pytest.approx(-0.05)
        assert inner_tube.get_axial_offset(AxialMethod.TOP) == pytest.approx(0.25)

    def test_absolute(self, tube):
        inner = InnerTube(length=0.1)
        tube.add_child(inner)
        inner.set_axial_offset(AxialMethod.ABSOLUTE, 0.3)
        assert inner.x == pytest.approx(0.15)
        assert inner.component_locations[0][0] == pytest.approx(0.3)

    def test_absolute_follows_rocket_frame(self, nose, tube):
        inner = InnerTube(length=0.1)
        tube.add_child(inner)
        inner.set_axial_offset(AxialMethod.ABSOLUTE, 0.3)
        nose.length = 0.2
        assert inner.component_locations[0][0] == pytest.approx(0.3)
        assert inner.x == pytest.approx(0.1)


@pytest.fixture
def inner_tube(tube):
    inner = InnerTube(length=0.1)
    tube.add_child(inner)
    return inner


# ---------------------------------------------------------------------------
# Numerical guards
# ---------------------------------------------------------------------------

class TestGuards:

    def test_nan_offset_is_a_bug(self, tube):
        with pytest.raises(BugError):
            tube.axial_offset = float("nan")
        assert tube.x == pytest.approx(0.15)

    def test_tiny_position_snaps_to_zero(self, inner_tube):
        inner_tube.axial_offset = 1e-9
        assert inner_tube.x == 0.0
        assert inner_tube.axial_offset == 1e-9

    def test_snap_threshold_from_preferences(self):
        rocket = Rocket(preferences=ModelPreferences(position_epsilon=1e-3))
        stage = AxialStage()
        rocket.add_child(stage)
        tube = BodyTube(length=0.3)
        stage.add_child(tube)
        inner = InnerTube()
        tube.add_child(inner)
        inner.axial_offset = 5e-4
        assert inner.x == 0.0
        inner.axial_offset = 2e-3
        assert inner.x == pytest.approx(2e-3)

    def test_position_is_a_copy(self, tube):
        position = tube.position
        position[0] = 99.0
        assert tube.x == pytest.approx(0.15)
