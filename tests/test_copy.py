"""
Tests for subtree copies, in-place replacement and invalidation.
"""
import pytest

from rocketframe import (
    AxialStage,
    BodyTube,
    ComponentTreeError,
    InnerTube,
    InvalidatedComponentError,
    Motor,
    NoseCone,
    Rocket,
)


def ids(component):
    return [node.id for node in component]


class TestCopy:

    def test_copy_with_original_id(self, rocket):
        twin = rocket.copy_with_original_id()
        assert ids(twin) == ids(rocket)
        assert all(a is not b for a, b in zip(twin, rocket))
        assert twin.change_bus is not rocket.change_bus
        assert twin.get_child(0).get_child(1).x == pytest.approx(0.15)

    def test_copy_is_a_new_root(self, tube):
        twin = tube.copy_with_original_id()
        assert twin.parent is None
        assert twin.x == 0.0
        assert tube.parent is not None

    def test_copy_regenerates_all_ids(self, rocket):
        twin = rocket.copy()
        assert not set(ids(twin)) & set(ids(rocket))
        assert [type(n) for n in twin] == [type(n) for n in rocket]
        assert [n.name for n in twin] == [n.name for n in rocket]

    def test_copy_is_independent(self, rocket, tube):
        twin = rocket.copy()
        twin_tube = twin.get_child(0).get_child(1)
        twin_tube.length = 1.0
        assert tube.length == pytest.approx(0.4)
        assert tube.x == pytest.approx(0.15)

    def test_copy_keeps_overrides_and_rebinds_owners(self, stage, tube):
        inner = InnerTube()
        tube.add_child(inner)
        stage.override_mass = 1.0
        stage.mass_overridden = True
        stage.override_subcomponents_mass = True

        twin = stage.copy()
        twin_inner = twin.get_child(1).get_child(0)
        assert twin.mass == 1.0
        assert twin.mass_overridden_by is None
        assert twin_inner.mass_overridden_by is twin

    def test_copy_follows_configuration(self, rocket, stage):
        booster = AxialStage()
        rocket.add_child(booster)
        mount = InnerTube()
        rocket.get_child(0).get_child(1).add_child(mount)
        rocket.set_stage_active(booster, False)
        rocket.selected_configuration.set_motor(mount, Motor("F50"))

        twin = rocket.copy()
        twin_booster = twin.get_child(1)
        twin_mount = twin.get_child(0).get_child(1).get_child(0)
        config = twin.selected_configuration
        assert config is not rocket.selected_configuration
        assert not config.is_stage_active(twin_booster)
        assert config.motor_for(twin_mount).designation == "F50"

    def test_copy_does_not_carry_config_listeners(self, nose, tube):
        spare = BodyTube()
        tube.add_config_listener(spare)
        twin = tube.copy()
        assert twin.config_listeners == []
        assert not twin.bypass_change_event


class TestLoadFrom:

    @pytest.fixture
    def design(self):
        src = Rocket()
        stage = AxialStage()
        src.add_child(stage)
        stage.add_child(NoseCone(length=0.2, aft_radius=0.03))
        stage.add_child(BodyTube(length=0.6, outer_radius=0.03))
        src.name = "Imported"
        return src

    def test_replaces_design_in_place(self, rocket, design):
        src_ids = ids(design)
        bus = rocket.change_bus
        rocket.load_from(design)
        assert rocket.change_bus is bus
        assert ids(rocket) == src_ids
        assert rocket.name == "Imported"
        assert rocket.length == pytest.approx(0.8)

    def test_single_event(self, rocket, design, events):
        rocket.load_from(design)
        assert len(events) == 1
        assert events[0].is_tree_change
        assert events[0].source is rocket

    def test_old_nodes_and_source_invalidated(self, rocket, stage, tube, design):
        source_stage = design.get_child(0)
        rocket.load_from(design)
        for stale in (stage, tube, design, source_stage):
            assert stale.is_invalidated
            with pytest.raises(InvalidatedComponentError):
                stale.name
        assert not rocket.is_invalidated
        assert rocket.get_child(0).name == "Stage"

    def test_invalidated_component_rejects_mutation(self, rocket, tube, design):
        rocket.load_from(design)
        with pytest.raises(InvalidatedComponentError):
            tube.length = 1.0

    @pytest.mark.parametrize("attr", [
        "parent", "position", "x",
        "mass_overridden", "cg_overridden", "cd_overridden",
        "override_subcomponents_mass", "override_subcomponents_cg",
        "override_subcomponents_cd", "override_subcomponents_enabled",
    ])
    def test_invalidated_component_rejects_reads(self, rocket, tube, design, attr):
        rocket.load_from(design)
        with pytest.raises(InvalidatedComponentError):
            getattr(tube, attr)

    def test_copy_from_requires_root(self, tube, design):
        with pytest.raises(ComponentTreeError):
            tube.copy_from(design)
