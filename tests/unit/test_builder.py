"""
Unit tests for hierarchy reconstruction: inference, repair, root detection
and anchoring.
"""

import pytest

from starnav.system.builder import HierarchyBuilder, RepairPolicy, build_star_system
from starnav.system.errors import MalformedInputError, MissingRootError
from starnav.system.types import ObjectType, RepairRule
from starnav.utils.config_loader import HierarchyConfig
from starnav.utils.geometry import Position


def chain_to_root(system, object_id):
    """Follow parents to the root, failing if it takes more than len(system) hops."""
    hops = 0
    current = system.get(object_id)
    while current.id != system.root_id:
        current = system.get(current.parent_id)
        hops += 1
        assert hops <= len(system), f"{object_id} never reaches the root"
    return hops


def rules_for(system, object_id):
    return [d.rule for d in system.repairs if d.object_id == object_id]


@pytest.fixture
def noisy_records():
    """Feed with a sentinel root, an undefined lagrange parent and dangling links."""
    return {
        "stanton_star": {"parent": "root", "type": "Star"},
        "stanton1": {"parent": "stanton_star", "type": "Planet", "position": {"x": 100.0, "y": 0.0, "z": 0.0}},
        "stanton1a": {"parent": "stanton1", "type": "Moon", "position": {"x": 0.0, "y": 10.0, "z": 0.0}},
        "outpost_a": {"parent": "stanton1_l2"},
        "stanton2": {"parent": "stanton_star", "type": "Planet"},
        "stanton2_l4": {"parent": "nowhere", "type": "LagrangePoint"},
        "stanton7_l1": {"parent": "also_nowhere"},
        "stanton_station_reststop_9": {"parent": "old_parent"},
        "stanton_orbitmarker_om1": {"parent": "stanton9"},
    }


class TestRootDetection:
    """Test root identification and the root sentinel."""

    def test_sun_with_root_sentinel(self):
        system = build_star_system({"sun": {"parent": "root"}, "stanton1": {"parent": "sun"}})
        assert system.root_id == "sun"
        assert system.root.parent_id == ""
        assert rules_for(system, "sun") == [RepairRule.ROOT_SENTINEL_CLEARED]

    def test_star_type_preferred(self):
        system = build_star_system({
            "alpha": {},
            "beta": {"parent": "alpha", "type": "Star"},
        })
        assert system.root_id == "beta"
        assert system.root.parent_id == ""
        assert system.get("alpha").parent_id == "beta"

    def test_parentless_fallback(self):
        system = build_star_system({"hub": {}, "spoke": {"parent": "hub"}})
        assert system.root_id == "hub"

    def test_missing_root(self):
        with pytest.raises(MissingRootError):
            build_star_system({"a": {"parent": "b"}, "b": {"parent": "a"}})

    def test_empty_feed(self):
        with pytest.raises(MissingRootError):
            build_star_system({})


class TestLagrangeInference:
    """Test synthesis of undefined lagrange points."""

    def test_inferred_lagrange_point(self):
        system = build_star_system({
            "stanton3": {},
            "outpost_a": {"parent": "stanton3_l1"},
        })
        lagrange = system.get("stanton3_l1")
        assert lagrange.parent_id == "stanton3"
        assert lagrange.object_type is ObjectType.LAGRANGE_POINT
        assert lagrange.inferred
        assert system.get("outpost_a").parent_id == "stanton3_l1"
        assert system.inferred_ids == ("stanton3_l1",)

    def test_placeholder_geometry(self):
        system = build_star_system({"stanton3": {}, "x": {"parent": "stanton3_l5"}})
        lagrange = system.get("stanton3_l5")
        assert lagrange.display_name == "L5"
        assert lagrange.entity_name == "Inferred_stanton3_l5"
        assert lagrange.position == Position(0, 0, 0)
        assert lagrange.size == 1000.0
        assert lagrange.arrival_radius == 1000.0
        assert lagrange.obstruction_radius == 0.0

    def test_placeholder_from_config(self):
        config = HierarchyConfig(inferred_lagrange_size=250.0, inferred_lagrange_arrival_radius=75.0)
        system = HierarchyBuilder(config).build({"stanton3": {}, "x": {"parent": "stanton3_l1"}})
        assert system.get("stanton3_l1").size == 250.0
        assert system.get("stanton3_l1").arrival_radius == 75.0

    def test_non_lagrange_reference_not_inferred(self):
        system = build_star_system({"sun": {}, "x": {"parent": "mystery"}})
        assert "mystery" not in system
        assert system.inferred_ids == ()

    def test_input_not_mutated(self, noisy_records):
        snapshot = {key: dict(value) for key, value in noisy_records.items()}
        build_star_system(noisy_records)
        assert noisy_records == snapshot


class TestParentRepair:
    """Test the naming-convention repair pass and its audit trail."""

    def test_lagrange_to_planet(self, noisy_records):
        system = build_star_system(noisy_records)
        assert system.get("stanton2_l4").parent_id == "stanton2"
        assert rules_for(system, "stanton2_l4") == [RepairRule.LAGRANGE_TO_PLANET]

    def test_lagrange_to_root_when_planet_missing(self, noisy_records):
        system = build_star_system(noisy_records)
        assert system.get("stanton7_l1").parent_id == "stanton_star"
        assert rules_for(system, "stanton7_l1") == [RepairRule.LAGRANGE_TO_ROOT]

    def test_reststop_without_planet_goes_to_root(self, noisy_records):
        system = build_star_system(noisy_records)
        assert system.get("stanton_station_reststop_9").parent_id == "stanton_star"
        assert rules_for(system, "stanton_station_reststop_9") == [RepairRule.RESTSTOP_TO_ROOT]

    def test_default_to_root(self, noisy_records):
        system = build_star_system(noisy_records)
        assert system.get("stanton_orbitmarker_om1").parent_id == "stanton_star"
        decision = next(d for d in system.repairs if d.object_id == "stanton_orbitmarker_om1")
        assert decision.rule is RepairRule.DEFAULT_TO_ROOT
        assert decision.old_parent == "stanton9"
        assert decision.new_parent == "stanton_star"

    def test_valid_parents_untouched(self, noisy_records):
        system = build_star_system(noisy_records)
        assert system.get("stanton1a").parent_id == "stanton1"
        assert rules_for(system, "stanton1a") == []

    def test_every_chain_reaches_root(self, noisy_records):
        system = build_star_system(noisy_records)
        for object_id in system.objects_by_id:
            chain_to_root(system, object_id)

    def test_indices_reflect_repaired_parents(self, noisy_records):
        system = build_star_system(noisy_records)
        root_children = {obj.id for obj in system.objects_by_parent["stanton_star"]}
        assert {"stanton1", "stanton2", "stanton7_l1", "stanton_orbitmarker_om1"} <= root_children
        assert "nowhere" not in system.objects_by_parent


class TestRepairPolicy:
    """Test repair decisions in isolation."""

    def setup_method(self):
        self.policy = RepairPolicy("stanton", ("star", "sun"))

    def test_find_root_key(self):
        assert self.policy.find_root_key(["stanton1", "Stanton_SUN", "stanton_star"]) == "Stanton_SUN"
        assert self.policy.find_root_key(["a", "b"]) is None

    def test_reststop_to_planet(self):
        decision = self.policy.decide(
            "stanton_station_reststop_1", "stanton3_l2_old", {"stanton3", "star"}, "star"
        )
        assert decision.rule is RepairRule.RESTSTOP_TO_PLANET
        assert decision.new_parent == "stanton3"

    def test_root_key_detached(self):
        decision = self.policy.decide("star", "galaxy", {"star"}, "star")
        assert decision.rule is RepairRule.ROOT_DETACHED
        assert decision.new_parent == ""

    def test_no_root_key(self):
        decision = self.policy.decide("thing", "gone", {"thing"}, None)
        assert decision.rule is RepairRule.DEFAULT_TO_ROOT
        assert decision.new_parent == ""

    def test_custom_prefix(self):
        policy = RepairPolicy("pyro")
        assert policy.match_lagrange("PYRO4_L3") is not None
        assert policy.match_lagrange("stanton4_l3") is None

    def test_decision_to_dict(self):
        decision = self.policy.decide("stanton2_l1", "x", {"stanton2"}, "star")
        assert decision.to_dict() == {
            "object_id": "stanton2_l1",
            "old_parent": "x",
            "new_parent": "stanton2",
            "rule": "lagrange_to_planet",
            "reason": decision.reason,
        }


class TestAnchoring:
    """Test the final pass that guarantees a rooted tree."""

    def test_orphan_adopted_without_star_keyword(self):
        """No star/sun id: the repair pass has no root, anchoring adopts leftovers."""
        system = build_star_system({
            "hub": {},
            "a": {"parent": "missing"},
        })
        assert system.root_id == "hub"
        assert system.get("a").parent_id == "hub"
        assert RepairRule.ORPHAN_ADOPTED in rules_for(system, "a")

    def test_second_parentless_object_adopted(self):
        system = build_star_system({"stanton_star": {}, "drifter": {}})
        assert system.get("drifter").parent_id == "stanton_star"
        assert rules_for(system, "drifter") == [RepairRule.ORPHAN_ADOPTED]

    def test_cycle_broken(self):
        system = build_star_system({
            "stanton_star": {},
            "a": {"parent": "b"},
            "b": {"parent": "a"},
        })
        for object_id in ("a", "b"):
            chain_to_root(system, object_id)
        assert any(d.rule is RepairRule.CYCLE_BROKEN for d in system.repairs)

    def test_self_loop_broken(self):
        system = build_star_system({"stanton_star": {}, "loop": {"parent": "loop"}})
        assert system.get("loop").parent_id == "stanton_star"
        assert rules_for(system, "loop") == [RepairRule.CYCLE_BROKEN]

    def test_star_typed_root_with_parent_detached(self):
        system = build_star_system({
            "helios": {"parent": "primary", "type": "Star"},
            "primary": {},
        })
        assert system.root_id == "helios"
        assert system.root.parent_id == ""
        assert system.get("primary").parent_id == "helios"


class TestAbsolutePositions:
    """Test precomputed world-space positions."""

    def test_three_level_chain(self):
        system = build_star_system({
            "star": {"position": {"x": 0, "y": 0, "z": 0}},
            "planet": {"parent": "star", "position": {"x": 100, "y": 0, "z": 0}},
            "moon": {"parent": "planet", "position": {"x": 0, "y": 10, "z": 0}},
        })
        assert system.absolute_positions["moon"] == Position(100, 10, 0)
        assert system.absolute_positions["planet"] == Position(100, 0, 0)

    def test_all_objects_covered(self, noisy_records):
        system = build_star_system(noisy_records)
        assert set(system.absolute_positions) == set(system.objects_by_id)


class TestMalformedInput:
    """Test handling of feeds that are not id -> record mappings."""

    def test_list_rejected(self):
        with pytest.raises(MalformedInputError):
            build_star_system([{"parent": "root"}])

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            build_star_system("not a mapping")

    def test_non_mapping_record_degrades(self):
        system = build_star_system({"stanton_star": {}, "junk": 42})
        assert system.get("junk").parent_id == "stanton_star"
        assert system.get("junk").object_type is ObjectType.GENERIC

    def test_bad_position_kept_as_nan(self):
        system = build_star_system({"stanton_star": {}, "x": {"parent": "stanton_star", "position": "bad"}})
        assert not system.get("x").position.is_finite
