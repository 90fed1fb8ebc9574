"""
Tests for tree structure: attach, detach, reorder and navigation.
"""
import random

import pytest

from rocketframe import (
    AxialStage,
    BodyTube,
    ComponentTreeError,
    InnerTube,
    MassComponent,
    NoseCone,
    Rocket,
    Transition,
)
from rocketframe.components import attach, detach, move


def assert_consistent(root):
    for node in root.iterator():
        node.check_component_structure()
        for child in node.children:
            assert child.parent is node


# ---------------------------------------------------------------------------
# add_child
# ---------------------------------------------------------------------------

class TestAddChild:

    def test_appends_and_sets_parent(self, stage, nose, tube):
        assert stage.children == [nose, tube]
        assert nose.parent is stage
        assert tube.parent is stage
        assert stage.child_count == 2

    def test_insert_at_index(self, stage, nose, tube):
        transition = Transition(length=0.05, fore_radius=0.025, aft_radius=0.02)
        stage.add_child(transition, 1)
        assert stage.child_position(transition) == 1
        assert stage.get_child(2) is tube

    def test_index_out_of_range(self, stage):
        with pytest.raises(IndexError):
            stage.add_child(BodyTube(), 5)
        with pytest.raises(IndexError):
            stage.add_child(BodyTube(), -1)
        assert stage.child_count == 2

    def test_already_parented_rejected(self, rocket, tube):
        other = AxialStage()
        rocket.add_child(other)
        with pytest.raises(ComponentTreeError):
            other.add_child(tube)
        assert other.child_count == 0
        assert tube.parent is rocket.get_child(0)

    def test_self_is_a_cycle(self):
        tube = InnerTube()
        with pytest.raises(ComponentTreeError):
            tube.add_child(tube)
        assert tube.child_count == 0

    def test_ancestor_is_a_cycle(self):
        outer = InnerTube()
        inner = InnerTube()
        outer.add_child(inner)
        with pytest.raises(ComponentTreeError):
            inner.add_child(outer)
        assert inner.child_count == 0
        assert outer.parent is None

    @pytest.mark.parametrize("parent_factory, child_factory", [
        (Rocket, BodyTube),
        (AxialStage, InnerTube),
        (AxialStage, AxialStage),
        (MassComponent, MassComponent),
        (InnerTube, BodyTube),
    ])
    def test_incompatible_child_rejected(self, parent_factory, child_factory):
        parent = parent_factory()
        child = child_factory()
        with pytest.raises(ComponentTreeError):
            parent.add_child(child)
        assert parent.child_count == 0
        assert child.parent is None

    def test_compatible_by_type(self):
        assert Rocket().is_compatible(AxialStage)
        assert AxialStage().is_compatible(NoseCone)
        assert BodyTube().is_compatible(MassComponent)
        assert not BodyTube().is_compatible(BodyTube)
        assert not MassComponent().allows_children


# ---------------------------------------------------------------------------
# remove / move / detach
# ---------------------------------------------------------------------------

class TestRemoveAndMove:

    def test_remove_by_reference(self, stage, nose, tube):
        assert stage.remove_child(nose) is True
        assert stage.children == [tube]
        assert nose.parent is None

    def test_remove_by_index(self, stage, nose, tube):
        assert stage.remove_child(1) is True
        assert stage.children == [nose]
        assert tube.parent is None

    def test_remove_non_child_returns_false(self, stage):
        assert stage.remove_child(BodyTube()) is False
        assert stage.child_count == 2

    def test_removed_component_is_own_root(self, stage, tube):
        inner = InnerTube()
        tube.add_child(inner)
        stage.remove_child(tube)
        assert inner.root is tube
        assert tube.rocket is None

    def test_move_reorders_and_repositions(self, stage, nose, tube):
        assert stage.move_child(tube, 0) is True
        assert stage.children == [tube, nose]
        assert tube.x == 0.0
        assert nose.x == pytest.approx(0.4)

    def test_move_non_child_returns_false(self, stage):
        assert stage.move_child(BodyTube(), 0) is False

    def test_move_index_out_of_range(self, stage, tube):
        with pytest.raises(IndexError):
            stage.move_child(tube, 2)

    def test_detach(self, stage, tube):
        assert tube.detach() is True
        assert tube.parent is None
        assert tube.detach() is False

    def test_functional_forms(self, stage, nose, tube):
        transition = Transition(length=0.05, fore_radius=0.025, aft_radius=0.02)
        attach(stage, transition, 0)
        assert stage.get_child(0) is transition
        assert move(transition, 2) is True
        assert stage.children == [nose, tube, transition]
        assert detach(transition) is True
        assert move(transition, 0) is False
        assert stage.child_count == 2

    def test_random_operations_keep_structure_consistent(self):
        rng = random.Random(1234)
        root = InnerTube()
        pool = [InnerTube() for _ in range(8)]

        for _ in range(200):
            op = rng.choice(["add", "remove", "move"])
            node = rng.choice(pool)
            attached = [c for c in pool if c.parent is not None]
            if op == "add" and node.parent is None:
                candidates = [root] + [c for c in attached if not node.is_ancestor(c)]
                parent = rng.choice(candidates)
                parent.add_child(node, rng.randint(0, parent.child_count))
            elif op == "remove" and attached:
                rng.choice(attached).detach()
            elif op == "move" and attached:
                victim = rng.choice(attached)
                victim.parent.move_child(victim, rng.randrange(victim.parent.child_count))
            assert_consistent(root)
            for component in pool:
                if component.parent is None:
                    assert_consistent(component)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

class TestNavigation:

    def test_root_and_rocket(self, rocket, stage, tube):
        assert tube.root is rocket
        assert tube.rocket is rocket
        assert tube.stage is stage
        assert stage.stage is stage
        assert rocket.stage is None
        assert tube.parents == [stage, rocket]

    def test_stage_numbers(self, rocket, stage, tube):
        booster = AxialStage()
        rocket.add_child(booster)
        booster_tube = BodyTube(length=0.3)
        booster.add_child(booster_tube)
        assert rocket.stage_count == 2
        assert rocket.stages == [stage, booster]
        assert tube.stage_number == 0
        assert booster_tube.stage_number == 1
        assert rocket.stage_number == -1
        assert BodyTube().stage_number == -1

    def test_depth_first_order(self, rocket, stage, nose, tube):
        inner = InnerTube()
        tube.add_child(inner)
        assert list(rocket) == [rocket, stage, nose, tube, inner]
        assert list(rocket.iterator(return_self=False)) == [stage, nose, tube, inner]
        assert rocket.all_children == [stage, nose, tube, inner]

    def test_next_and_previous(self, rocket, stage, nose, tube):
        inner = InnerTube()
        tube.add_child(inner)
        assert rocket.next_component() is stage
        assert nose.next_component() is tube
        assert inner.next_component() is None
        assert inner.previous_component() is tube
        assert tube.previous_component() is nose
        assert nose.previous_component() is stage
        assert rocket.previous_component() is None

    def test_previous_descends_into_last_leaf(self, stage, nose, tube):
        inner = InnerTube()
        nose_mass = MassComponent(mass=0.01)
        tube.add_child(inner)
        inner.add_child(nose_mass)
        boattail = Transition(length=0.05, fore_radius=0.025, aft_radius=0.02)
        stage.add_child(boattail)
        assert boattail.previous_component() is nose_mass

    def test_find_and_contains(self, rocket, tube):
        assert rocket.find_component(tube.id) is tube
        assert rocket.find_component("missing") is None
        assert rocket.contains_child(tube)
        assert not tube.contains_child(rocket)
        assert not tube.contains_child(tube)

    def test_is_ancestor(self, rocket, stage, tube):
        assert rocket.is_ancestor(tube)
        assert stage.is_ancestor(tube)
        assert not tube.is_ancestor(stage)
        assert not tube.is_ancestor(tube)


# ---------------------------------------------------------------------------
# Identity and metadata
# ---------------------------------------------------------------------------

class TestIdentity:

    def test_ids_unique(self):
        ids = {BodyTube().id for _ in range(50)}
        assert len(ids) == 50

    def test_equality_by_class_and_id(self, tube):
        twin = tube.copy_with_original_id()
        assert twin == tube
        assert hash(twin) == hash(tube)
        assert twin is not tube
        assert tube.copy() != tube

    def test_blank_name_resets_to_default(self, tube):
        tube.name = "Main tube"
        assert tube.name == "Main tube"
        tube.name = "   "
        assert tube.name == "Body tube"
        tube.name = None
        assert tube.name == "Body tube"

    def test_debug_tree_lists_components(self, rocket, tube):
        tube.name = "Sustainer tube"
        text = rocket.to_debug_tree()
        assert "Sustainer tube" in text
        assert "Nose cone" in text
        assert "FlightConfiguration" in text
