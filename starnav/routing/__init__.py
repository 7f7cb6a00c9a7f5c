"""
Route planning over a loaded star system.

Example:
    >>> from starnav.routing import RoutePlanner
    >>> plans = RoutePlanner().find_alternatives(system, "stanton1", "stanton4", alerts)
    >>> plans[0].overall_safety_score
"""

from .models import MIDPOINT_ID, RoutePlan, RouteWaypoint, SavedRoute, ShipSpecification
from .planner import RoutePlanner, find_alternative_routes, plan_route

__all__ = [
    "MIDPOINT_ID",
    "RoutePlan",
    "RouteWaypoint",
    "SavedRoute",
    "ShipSpecification",
    "RoutePlanner",
    "find_alternative_routes",
    "plan_route",
]
