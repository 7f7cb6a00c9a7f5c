"""
Route planning data structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from starnav.alerts.models import RouteAlert
from starnav.utils.geometry import Position

# Object id given to the synthesized halfway waypoint of every leg
MIDPOINT_ID = "midpoint"


@dataclass(frozen=True)
class ShipSpecification:
    """Ship performance figures used for time and fuel estimates."""
    id: str
    name: str
    manufacturer: str = ""
    size: float = 0.0
    fuel_capacity: float = 0.0
    fuel_consumption: float = 0.0   # fuel per 1,000,000 units travelled
    quantum_speed: float = 0.0      # units/s, 0 = use the default speed
    scm_speed: float = 0.0
    cargo_capacity: float = 0.0


@dataclass
class RouteWaypoint:
    """A point along a route with its leg from the previous waypoint."""
    object_id: str
    position: Position
    distance: float            # from previous waypoint
    time_from_previous: float  # seconds
    nearby_alerts: List[RouteAlert] = field(default_factory=list)
    safety_score: float = 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object_id": self.object_id,
            "position": self.position.to_dict(),
            "distance": self.distance,
            "time_from_previous": self.time_from_previous,
            "nearby_alert_ids": [alert.id for alert in self.nearby_alerts],
            "safety_score": self.safety_score,
        }


@dataclass
class RoutePlan:
    """A planned route. Ephemeral; recomputed per query."""
    start_object_id: str
    end_object_id: str
    waypoints: List[RouteWaypoint]
    total_distance: float
    total_time: float
    fuel_required: float
    overall_safety_score: float

    @property
    def via_object_ids(self) -> List[str]:
        """Named intermediate waypoints (excludes endpoints and midpoints)."""
        ids = [wp.object_id for wp in self.waypoints[1:-1]]
        return [object_id for object_id in ids if object_id not in (MIDPOINT_ID, self.start_object_id, self.end_object_id)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_object_id": self.start_object_id,
            "end_object_id": self.end_object_id,
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "total_distance": self.total_distance,
            "total_time": self.total_time,
            "fuel_required": self.fuel_required,
            "overall_safety_score": self.overall_safety_score,
        }


@dataclass
class SavedRoute:
    """A route plan saved by a user."""
    id: str
    name: str
    start_point: str
    end_point: str
    waypoints: List[str]
    distance: float
    estimated_time: float
    fuel_required: float
    alerts_on_route: List[RouteAlert]
    created_at: int
    last_updated: int
    created_by: str
    is_public: bool = False
