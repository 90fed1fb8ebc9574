"""
Tests for body components: body tubes, transitions and nose cones.
"""
import math

import pytest

from rocketframe import (
    AxialStage,
    BodyTube,
    Material,
    NoseCone,
    Rocket,
    Shape,
    Transition,
)
from rocketframe.components import DEFAULT_RADIUS
from rocketframe.geometry import ring_mass

CARDBOARD = 680.0


class TestBodyTube:

    def test_ring_mass(self):
        tube = BodyTube(length=0.4, outer_radius=0.025, thickness=0.002)
        assert tube.component_mass == pytest.approx(ring_mass(0.025, 0.023, 0.4, CARDBOARD))
        assert tube.component_cg.x == pytest.approx(0.2)
        assert tube.component_cg.weight == pytest.approx(tube.component_mass)

    def test_inertias(self):
        tube = BodyTube(length=0.4, outer_radius=0.025, thickness=0.002)
        assert tube.rotational_unit_inertia == pytest.approx((0.025 ** 2 + 0.023 ** 2) / 2)
        assert tube.longitudinal_unit_inertia == pytest.approx(
            (3 * (0.025 ** 2 + 0.023 ** 2) + 0.4 ** 2) / 12)

    def test_filled_tube(self):
        tube = BodyTube(length=0.1, outer_radius=0.02)
        tube.filled = True
        assert tube.inner_radius == 0.0
        assert tube.component_mass == pytest.approx(math.pi * 0.02 ** 2 * 0.1 * CARDBOARD)

    def test_inner_radius_setter(self):
        tube = BodyTube(outer_radius=0.025)
        tube.inner_radius = 0.024
        assert tube.thickness == pytest.approx(0.001)

    def test_negative_length_rejected(self):
        with pytest.raises(ValueError):
            BodyTube(length=-0.1)
        tube = BodyTube()
        with pytest.raises(ValueError):
            tube.length = -1.0

    def test_automatic_radius_follows_nose(self, stage, nose):
        tail = BodyTube(length=0.3, outer_radius=None)
        stage.add_child(tail, 1)
        assert tail.outer_radius_automatic
        assert tail.outer_radius == pytest.approx(0.025)
        nose.aft_radius = 0.03
        assert tail.outer_radius == pytest.approx(0.03)

    def test_automatic_radius_default_when_alone(self):
        assert BodyTube(outer_radius=None).outer_radius == DEFAULT_RADIUS

    def test_setting_radius_disables_automatic(self, stage):
        tail = BodyTube(outer_radius=None)
        stage.add_child(tail)
        tail.outer_radius = 0.04
        assert not tail.outer_radius_automatic
        assert tail.outer_radius == 0.04

    def test_mass_follows_length(self, tube):
        mass = tube.component_mass
        tube.length = 0.8
        assert tube.component_mass == pytest.approx(2 * mass)


class TestTransition:

    def test_conical_profile(self):
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.02, aft_radius=0.03)
        assert t.radius(0.0) == 0.02
        assert t.radius(0.05) == pytest.approx(0.025)
        assert t.radius(0.1) == 0.03
        assert not t.clipped

    def test_boattail(self):
        t = Transition(Shape.CONICAL, length=0.05, fore_radius=0.025, aft_radius=0.02)
        assert t.radius(0.0) == pytest.approx(0.025)
        assert t.radius(0.05) == 0.02

    def test_clipped_ellipsoid(self):
        t = Transition(Shape.ELLIPSOID, length=0.1, fore_radius=0.02, aft_radius=0.03)
        assert t.clipped
        assert t.clip_length > 0
        assert t.radius(0.0) == pytest.approx(0.02, rel=1e-2)
        t.clipped = False
        assert t.radius(0.0) == 0.02

    def test_shape_change_resets_parameter(self):
        t = Transition(Shape.POWER, length=0.1, fore_radius=0.02, aft_radius=0.03)
        t.shape_parameter = 0.3
        t.shape = Shape.HAACK
        assert t.shape_parameter == Shape.HAACK.default_parameter

    def test_shape_parameter_clamped(self):
        t = Transition(Shape.HAACK, length=0.1, fore_radius=0.02, aft_radius=0.03)
        with pytest.warns(RuntimeWarning):
            t.shape_parameter = 0.9
        assert t.shape_parameter == pytest.approx(1 / 3)

    def test_cylinder_mass_matches_tube(self):
        t = Transition(Shape.OGIVE, length=0.2, fore_radius=0.025, aft_radius=0.025,
                       thickness=0.002)
        tube = BodyTube(length=0.2, outer_radius=0.025, thickness=0.002)
        assert t.component_mass == pytest.approx(tube.component_mass, rel=1e-9)
        assert t.component_cg.x == pytest.approx(0.1)

    def test_shoulders_add_solids(self):
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.025, aft_radius=0.025,
                       thickness=0.002)
        t.aft_shoulder_radius = 0.023
        t.aft_shoulder_thickness = 0.002
        t.aft_shoulder_length = 0.05
        t.aft_shoulder_capped = True

        core = ring_mass(0.025, 0.023, 0.1, CARDBOARD)
        shoulder = ring_mass(0.023, 0.021, 0.05, CARDBOARD)
        cap = ring_mass(0.021, 0.0, 0.002, CARDBOARD)
        total = core + shoulder + cap
        assert t.component_mass == pytest.approx(total, rel=1e-9)

        cg = (core * 0.05 + shoulder * 0.125 + cap * 0.149) / total
        assert t.component_cg.x == pytest.approx(cg, rel=1e-9)

    def test_fore_shoulder_extends_forward(self):
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.025, aft_radius=0.025)
        base = t.component_mass
        t.fore_shoulder_radius = 0.023
        t.fore_shoulder_thickness = 0.002
        t.fore_shoulder_length = 0.05
        assert t.component_mass > base
        assert t.component_cg.x < 0.05
        assert min(c.x for c in t.component_bounds) == pytest.approx(-0.05)

    def test_tiny_shoulder_ignored(self):
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.025, aft_radius=0.025)
        base = t.component_mass
        t.aft_shoulder_radius = 0.023
        t.aft_shoulder_thickness = 0.002
        t.aft_shoulder_length = 0.0005
        assert t.component_mass == pytest.approx(base)

    def test_zero_mass_state(self):
        weightless = Material("Vacuum", 0.0)
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.02, aft_radius=0.03,
                       material=weightless)
        assert t.component_mass == 0.0
        assert t.component_cg.x == 0.0
        assert t.longitudinal_unit_inertia == 0.0
        assert t.rotational_unit_inertia == 0.0

    def test_zero_length(self):
        t = Transition(Shape.CONICAL, length=0.0, fore_radius=0.02, aft_radius=0.03)
        assert t.component_mass == 0.0

    def test_mass_cache_refreshed_on_change(self):
        t = Transition(Shape.CONICAL, length=0.1, fore_radius=0.02, aft_radius=0.03)
        before = t.component_mass
        t.thickness = 0.004
        assert t.component_mass > before


class TestAutomaticRadii:

    @pytest.fixture
    def chain(self):
        rocket = Rocket()
        stage = AxialStage()
        rocket.add_child(stage)
        nose = NoseCone(length=0.1, aft_radius=0.03)
        shoulder = Transition(Shape.CONICAL, length=0.05, fore_radius=None, aft_radius=0.02)
        tail = BodyTube(length=0.3, outer_radius=None)
        for component in (nose, shoulder, tail):
            stage.add_child(component)
        return nose, shoulder, tail

    def test_fore_radius_from_previous(self, chain):
        nose, shoulder, tail = chain
        assert shoulder.fore_radius_automatic
        assert shoulder.fore_radius == pytest.approx(0.03)
        assert tail.outer_radius == pytest.approx(0.02)

    def test_aft_radius_from_next(self, stage, nose, tube):
        skirt = Transition(Shape.CONICAL, length=0.05, fore_radius=0.02, aft_radius=None)
        stage.add_child(skirt, 1)
        assert skirt.aft_radius == pytest.approx(tube.outer_radius)

    def test_automatic_neighbours_fall_back_to_default(self):
        rocket = Rocket()
        stage = AxialStage()
        rocket.add_child(stage)
        first = Transition(fore_radius=None, aft_radius=None)
        second = Transition(fore_radius=None, aft_radius=None)
        stage.add_child(first)
        stage.add_child(second)
        assert first.aft_radius == DEFAULT_RADIUS
        assert second.fore_radius == DEFAULT_RADIUS

    def test_setting_radius_clears_automatic(self, chain):
        nose, shoulder, tail = chain
        shoulder.fore_radius = 0.01
        assert not shoulder.fore_radius_automatic
        assert shoulder.fore_radius == 0.01


class TestNoseCone:

    def test_defaults(self):
        nose = NoseCone()
        assert nose.shape is Shape.OGIVE
        assert nose.fore_radius == 0.0
        assert nose.aft_radius == DEFAULT_RADIUS
        assert nose.radius(0.0) == 0.0
        assert nose.material.density == 1050.0

    def test_fore_radius_ignored(self):
        nose = NoseCone()
        with pytest.warns(RuntimeWarning):
            nose.fore_radius = 0.01
        assert nose.fore_radius == 0.0

    def test_fore_radius_automatic_ignored(self):
        nose = NoseCone()
        with pytest.warns(RuntimeWarning):
            nose.fore_radius_automatic = True
        assert not nose.fore_radius_automatic

    def test_fore_shoulder_ignored(self):
        nose = NoseCone()
        with pytest.warns(RuntimeWarning):
            nose.fore_shoulder_length = 0.02
        assert nose.fore_shoulder_length == 0.0

    def test_mass_positive_and_cg_aft_of_middle(self, nose):
        assert nose.component_mass > 0
        assert nose.component_cg.x > nose.length / 2
