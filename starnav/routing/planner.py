"""
Route Planner - hazard-annotated routes between two system objects.

Routes are straight lines between the objects' stored positions, sampled
at start, midpoint and end. Each sample collects hazards within a fixed
radius and gets a safety score:

    no hazards -> 100
    otherwise  -> mean(hazard safety) * max(0, 1 - 0.1 * hazard_count)

The route score is the mean of its waypoint scores. Alternatives detour
through a single via-point (lagrange points, stations and direct children
of the root) and are kept only when clearly safer than the direct route.
This is a heuristic, not a shortest-path search.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from starnav.alerts.models import RouteAlert
from starnav.alerts.scoring import find_alerts_in_radius, now_ms
from starnav.routing.models import MIDPOINT_ID, RoutePlan, RouteWaypoint, SavedRoute, ShipSpecification
from starnav.system.query import SystemQueryService
from starnav.system.types import CelestialObject, ObjectType, StarSystem
from starnav.utils.config_loader import RoutingConfig
from starnav.utils.geometry import Position, distance, midpoint
from starnav.utils.logging_config import get_logger

logger = get_logger("routing.planner")

VIA_POINT_TYPES = (ObjectType.LAGRANGE_POINT, ObjectType.STATION)


class RoutePlanner:
    """
    Plans direct and detour routes over a StarSystem snapshot.

    Args:
        config: Routing parameters (defaults match the deployed heuristic)
    """

    def __init__(self, config: Optional[RoutingConfig] = None):
        self.config = config or RoutingConfig()

    def _position_of(self, system: StarSystem, obj: CelestialObject) -> Position:
        if not self.config.use_absolute_positions:
            return obj.position
        absolute = system.absolute_positions.get(obj.id)
        if absolute is None:
            absolute = SystemQueryService(system).get_absolute_position(obj.id)
        return absolute

    def waypoint_safety(self, nearby_alerts: Sequence[RouteAlert]) -> float:
        """Safety of one waypoint from the hazards around it."""
        if not nearby_alerts:
            return 100.0

        avg_alert_safety = sum(alert.safety_score for alert in nearby_alerts) / len(nearby_alerts)
        alert_count_factor = max(0.0, 1 - len(nearby_alerts) * self.config.alert_count_penalty)
        return avg_alert_safety * alert_count_factor

    def _waypoint(
        self,
        object_id: str,
        position: Position,
        leg_distance: float,
        leg_time: float,
        active_alerts: Sequence[RouteAlert],
    ) -> RouteWaypoint:
        nearby = find_alerts_in_radius(position, active_alerts, self.config.hazard_radius)
        return RouteWaypoint(
            object_id=object_id,
            position=position,
            distance=leg_distance,
            time_from_previous=leg_time,
            nearby_alerts=nearby,
            safety_score=self.waypoint_safety(nearby),
        )

    def plan_route(
        self,
        system: StarSystem,
        start_id: str,
        end_id: str,
        active_alerts: Sequence[RouteAlert] = (),
        ship: Optional[ShipSpecification] = None,
    ) -> RoutePlan:
        """
        Direct route with start, midpoint and end waypoints.

        Args:
            system: Loaded star system
            start_id: Departure object id
            end_id: Destination object id
            active_alerts: Hazards to consider
            ship: Optional ship for speed and fuel figures

        Returns:
            RoutePlan with exactly three waypoints

        Raises:
            ObjectNotFoundError: If either id is unknown
        """
        start = system.get(start_id)
        end = system.get(end_id)
        start_pos = self._position_of(system, start)
        end_pos = self._position_of(system, end)

        total_distance = distance(start_pos, end_pos)
        quantum_speed = (ship.quantum_speed if ship else 0) or self.config.default_quantum_speed
        total_time = total_distance / quantum_speed
        fuel_required = total_distance * ship.fuel_consumption / 1_000_000 if ship else 0.0

        waypoints = [
            self._waypoint(start_id, start_pos, 0.0, 0.0, active_alerts),
            self._waypoint(MIDPOINT_ID, midpoint(start_pos, end_pos), total_distance / 2, total_time / 2, active_alerts),
            self._waypoint(end_id, end_pos, total_distance / 2, total_time / 2, active_alerts),
        ]
        overall = sum(wp.safety_score for wp in waypoints) / len(waypoints)

        return RoutePlan(
            start_object_id=start_id,
            end_object_id=end_id,
            waypoints=waypoints,
            total_distance=total_distance,
            total_time=total_time,
            fuel_required=fuel_required,
            overall_safety_score=overall,
        )

    def via_candidates(self, system: StarSystem, start_id: str, end_id: str) -> List[CelestialObject]:
        """Lagrange points, stations and root children, minus the endpoints."""
        return [
            obj for obj in system.objects_by_id.values()
            if (obj.object_type in VIA_POINT_TYPES or obj.parent_id == system.root_id)
            and obj.id not in (start_id, end_id)
        ]

    def _combine(self, first: RoutePlan, second: RoutePlan) -> RoutePlan:
        return RoutePlan(
            start_object_id=first.start_object_id,
            end_object_id=second.end_object_id,
            waypoints=first.waypoints[:-1] + second.waypoints,
            total_distance=first.total_distance + second.total_distance,
            total_time=first.total_time + second.total_time,
            fuel_required=first.fuel_required + second.fuel_required,
            overall_safety_score=(first.overall_safety_score + second.overall_safety_score) / 2,
        )

    def find_alternatives(
        self,
        system: StarSystem,
        start_id: str,
        end_id: str,
        active_alerts: Sequence[RouteAlert] = (),
        max_alternatives: Optional[int] = None,
        ship: Optional[ShipSpecification] = None,
    ) -> List[RoutePlan]:
        """
        Direct route plus safer single-detour routes, safest first.

        Never empty: the direct route is always included.

        Raises:
            ObjectNotFoundError: If either id is unknown
        """
        if max_alternatives is None:
            max_alternatives = self.config.max_alternatives

        direct = self.plan_route(system, start_id, end_id, active_alerts, ship)
        if direct.overall_safety_score >= self.config.safe_route_threshold:
            return [direct]

        alternatives: List[RoutePlan] = []
        for via in self.via_candidates(system, start_id, end_id):
            if len(alternatives) >= max_alternatives:
                break

            to_via = self.plan_route(system, start_id, via.id, active_alerts, ship)
            from_via = self.plan_route(system, via.id, end_id, active_alerts, ship)
            combined = self._combine(to_via, from_via)

            if combined.overall_safety_score > direct.overall_safety_score + self.config.alternative_margin:
                alternatives.append(combined)

        logger.info(
            f"Route {start_id} -> {end_id}: direct score {direct.overall_safety_score:.1f}, "
            f"{len(alternatives)} safer alternative(s)"
        )
        return sorted([direct, *alternatives], key=lambda plan: plan.overall_safety_score, reverse=True)

    def create_route(
        self,
        plan: RoutePlan,
        user_id: str,
        name: str,
        is_public: bool = False,
        now: Optional[int] = None,
    ) -> SavedRoute:
        """Snapshot a plan as a user-owned saved route."""
        now = now_ms() if now is None else now
        return SavedRoute(
            id=f"route_{now}_{user_id[:8]}",
            name=name,
            start_point=plan.start_object_id,
            end_point=plan.end_object_id,
            waypoints=[wp.object_id for wp in plan.waypoints],
            distance=plan.total_distance,
            estimated_time=plan.total_time,
            fuel_required=plan.fuel_required,
            alerts_on_route=[alert for wp in plan.waypoints for alert in wp.nearby_alerts],
            created_at=now,
            last_updated=now,
            created_by=user_id,
            is_public=is_public,
        )


def plan_route(
    system: StarSystem,
    start_id: str,
    end_id: str,
    active_alerts: Sequence[RouteAlert] = (),
    ship: Optional[ShipSpecification] = None,
) -> RoutePlan:
    """plan_route with the default configuration."""
    return RoutePlanner().plan_route(system, start_id, end_id, active_alerts, ship)


def find_alternative_routes(
    system: StarSystem,
    start_id: str,
    end_id: str,
    active_alerts: Sequence[RouteAlert] = (),
    max_alternatives: int = 3,
) -> List[RoutePlan]:
    """find_alternatives with the default configuration."""
    return RoutePlanner().find_alternatives(system, start_id, end_id, active_alerts, max_alternatives)
