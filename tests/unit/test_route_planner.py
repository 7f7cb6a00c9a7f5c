"""
Unit tests for route planning and alternative-route search.
"""

import pytest

from starnav.alerts.models import AlertType, RouteAlert
from starnav.routing.models import MIDPOINT_ID, ShipSpecification
from starnav.routing.planner import RoutePlanner, find_alternative_routes, plan_route
from starnav.system.builder import build_star_system
from starnav.system.errors import ObjectNotFoundError
from starnav.system.types import CelestialObject, ObjectType, StarSystem
from starnav.utils.config_loader import RoutingConfig
from starnav.utils.geometry import Position

NOW = 1_700_000_000_000


def hazard(alert_id, position, score=20.0):
    return RouteAlert(
        id=alert_id,
        position=position,
        region_id="stanton",
        alert_type=AlertType.PIRATE,
        created_by="pilot",
        created_at=NOW,
        expires_at=NOW + 7_200_000,
        safety_score=score,
    )


@pytest.fixture
def system():
    """Star with two planets 10,000,000 apart and a detour lagrange point."""
    return build_star_system({
        "stanton_star": {"parent": "root", "type": "Star"},
        "stanton1": {"parent": "stanton_star", "type": "Planet", "position": {"x": 0, "y": 0, "z": 0}},
        "stanton2": {"parent": "stanton_star", "type": "Planet", "position": {"x": 10_000_000, "y": 0, "z": 0}},
        "stanton2_l1": {"parent": "stanton2", "type": "LagrangePoint", "position": {"x": 5_000_000, "y": 20_000_000, "z": 0}},
        "stanton2a": {"parent": "stanton2", "type": "Moon", "position": {"x": 5_000_000, "y": -20_000_000, "z": 0}},
    })


class TestPlanRoute:
    """Test direct route planning."""

    def test_million_units_no_ship(self):
        system = build_star_system({
            "stanton_star": {},
            "a": {"parent": "stanton_star", "position": {"x": 0, "y": 0, "z": 0}},
            "b": {"parent": "stanton_star", "position": {"x": 1_000_000, "y": 0, "z": 0}},
        })
        route = plan_route(system, "a", "b", [])
        assert route.total_distance == pytest.approx(1_000_000)
        assert route.total_time == pytest.approx(5.0)
        assert route.fuel_required == 0.0
        assert route.overall_safety_score == 100.0
        assert len(route.waypoints) == 3

    def test_waypoints(self, system):
        route = RoutePlanner().plan_route(system, "stanton1", "stanton2")
        start, middle, end = route.waypoints
        assert [wp.object_id for wp in route.waypoints] == ["stanton1", "midpoint", "stanton2"]
        assert middle.position == Position(5_000_000, 0, 0)
        assert start.distance == 0.0 and start.time_from_previous == 0.0
        assert middle.distance == pytest.approx(5_000_000)
        assert end.time_from_previous == pytest.approx(25.0)

    def test_ship_speed_and_fuel(self, system):
        ship = ShipSpecification(id="c2", name="Hercules C2", quantum_speed=100_000, fuel_consumption=2.5)
        route = RoutePlanner().plan_route(system, "stanton1", "stanton2", ship=ship)
        assert route.total_time == pytest.approx(100.0)
        assert route.fuel_required == pytest.approx(25.0)

    def test_ship_without_quantum_speed_uses_default(self, system):
        ship = ShipSpecification(id="s", name="Shuttle", fuel_consumption=1.0)
        route = RoutePlanner().plan_route(system, "stanton1", "stanton2", ship=ship)
        assert route.total_time == pytest.approx(50.0)

    def test_unknown_start(self, system):
        with pytest.raises(ObjectNotFoundError):
            plan_route(system, "stanton9", "stanton2")

    def test_unknown_end(self, system):
        with pytest.raises(ObjectNotFoundError):
            plan_route(system, "stanton1", "stanton9")

    def test_hazard_scoring(self, system):
        """One hazard at the midpoint: 20 * (1 - 0.1) = 18 there, 100 elsewhere."""
        alerts = [hazard("h1", Position(5_000_000, 0, 0))]
        route = plan_route(system, "stanton1", "stanton2", alerts)
        assert [wp.safety_score for wp in route.waypoints] == pytest.approx([100.0, 18.0, 100.0])
        assert route.waypoints[1].nearby_alerts[0].id == "h1"
        assert route.overall_safety_score == pytest.approx(218.0 / 3)

    def test_many_hazards_floor_at_zero(self):
        planner = RoutePlanner()
        alerts = [hazard(f"h{i}", Position(0, 0, 0), score=90.0) for i in range(12)]
        assert planner.waypoint_safety(alerts) == 0.0

    def test_absolute_positions_option(self):
        system = build_star_system({
            "stanton_star": {},
            "stanton1": {"parent": "stanton_star", "position": {"x": 1_000_000, "y": 0, "z": 0}},
            "stanton1a": {"parent": "stanton1", "position": {"x": 1_000_000, "y": 0, "z": 0}},
        })
        local = RoutePlanner().plan_route(system, "stanton1", "stanton1a")
        world = RoutePlanner(RoutingConfig(use_absolute_positions=True)).plan_route(system, "stanton1", "stanton1a")
        assert local.total_distance == pytest.approx(0.0)
        assert world.total_distance == pytest.approx(1_000_000)

    def test_absolute_positions_read_from_snapshot(self):
        system = StarSystem.from_objects(
            "Mapped", "star",
            [
                CelestialObject("star", "Star", "", ObjectType.STAR),
                CelestialObject("a", "A", "star", ObjectType.PLANET),
                CelestialObject("b", "B", "star", ObjectType.PLANET),
            ],
            absolute_positions={
                "star": Position(0, 0, 0),
                "a": Position(0, 0, 0),
                "b": Position(3_000_000, 0, 0),
            },
        )
        planner = RoutePlanner(RoutingConfig(use_absolute_positions=True))
        assert planner.plan_route(system, "a", "b").total_distance == pytest.approx(3_000_000)

    def test_absolute_positions_walk_when_unmapped(self):
        system = StarSystem.from_objects("Unmapped", "star", [
            CelestialObject("star", "Star", "", ObjectType.STAR),
            CelestialObject("planet", "Planet", "star", ObjectType.PLANET, position=Position(1_000_000, 0, 0)),
            CelestialObject("moon", "Moon", "planet", ObjectType.MOON, position=Position(1_000_000, 0, 0)),
        ])
        planner = RoutePlanner(RoutingConfig(use_absolute_positions=True))
        assert planner.plan_route(system, "planet", "moon").total_distance == pytest.approx(1_000_000)


class TestFindAlternatives:
    """Test safer single-detour search."""

    def test_safe_direct_short_circuits(self, system):
        plans = find_alternative_routes(system, "stanton1", "stanton2", [])
        assert len(plans) == 1
        assert plans[0].overall_safety_score == 100.0

    def test_detour_around_hazard(self, system):
        alerts = [hazard("h1", Position(5_000_000, 0, 0), score=0.0)]
        plans = RoutePlanner().find_alternatives(system, "stanton1", "stanton2", alerts)
        direct_score = pytest.approx(200.0 / 3)
        assert len(plans) >= 2
        assert plans[0].overall_safety_score == 100.0
        assert plans[-1].overall_safety_score == direct_score
        scores = [p.overall_safety_score for p in plans]
        assert scores == sorted(scores, reverse=True)

    def test_midpoint_id_shared_with_plan_model(self, system):
        route = RoutePlanner().plan_route(system, "stanton1", "stanton2")
        assert route.waypoints[1].object_id == MIDPOINT_ID
        assert route.via_object_ids == []

    def test_combined_waypoints(self, system):
        alerts = [hazard("h1", Position(5_000_000, 0, 0), score=0.0)]
        plans = RoutePlanner().find_alternatives(system, "stanton1", "stanton2", alerts, max_alternatives=1)
        detour = plans[0]
        assert [wp.object_id for wp in detour.waypoints] == [
            "stanton1", "midpoint", "stanton2_l1", "midpoint", "stanton2",
        ]
        assert detour.via_object_ids == ["stanton2_l1"]

    def test_max_alternatives_cap(self, system):
        alerts = [hazard("h1", Position(5_000_000, 0, 0), score=0.0)]
        plans = RoutePlanner().find_alternatives(system, "stanton1", "stanton2", alerts, max_alternatives=1)
        assert len(plans) == 2

    def test_zero_alternatives(self, system):
        alerts = [hazard("h1", Position(5_000_000, 0, 0), score=0.0)]
        plans = RoutePlanner().find_alternatives(system, "stanton1", "stanton2", alerts, max_alternatives=0)
        assert len(plans) == 1

    def test_no_candidate_clears_margin(self, system):
        """A hazard covering the whole system hurts every detour equally."""
        planner = RoutePlanner(RoutingConfig(hazard_radius=1e9))
        alerts = [hazard("h1", Position(0, 0, 0), score=0.0)]
        plans = planner.find_alternatives(system, "stanton1", "stanton2", alerts)
        assert len(plans) == 1
        assert plans[0].overall_safety_score == 0.0

    def test_never_empty(self, system):
        alerts = [hazard(f"h{i}", Position(0, 0, 0), score=0.0) for i in range(3)]
        assert RoutePlanner().find_alternatives(system, "stanton1", "stanton2", alerts)

    def test_unknown_endpoint(self, system):
        with pytest.raises(ObjectNotFoundError):
            find_alternative_routes(system, "stanton1", "nowhere", [])

    def test_via_candidates(self, system):
        candidates = {o.id for o in RoutePlanner().via_candidates(system, "stanton1", "stanton2")}
        # Lagrange point plus root children, minus the endpoints; moons are not candidates
        assert candidates == {"stanton2_l1"}


class TestCreateRoute:
    """Test saved route snapshots."""

    def test_create_route(self, system):
        planner = RoutePlanner()
        alerts = [hazard("h1", Position(5_000_000, 0, 0))]
        plan = planner.plan_route(system, "stanton1", "stanton2", alerts)
        saved = planner.create_route(plan, "user_abcdefghij", "Cargo run", is_public=True, now=NOW)
        assert saved.id == f"route_{NOW}_user_abc"
        assert saved.waypoints == ["stanton1", "midpoint", "stanton2"]
        assert saved.distance == plan.total_distance
        assert [a.id for a in saved.alerts_on_route] == ["h1"]
        assert saved.created_at == saved.last_updated == NOW
        assert saved.is_public
