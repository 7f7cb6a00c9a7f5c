"""
Hazard alerts - community-reported dangers with vote-based safety scores.
"""

from starnav.alerts.models import AlertType, RouteAlert, StoredAlert
from starnav.alerts.scoring import (
    active_route_alerts,
    calculate_alert_decay,
    calculate_safety_score,
    can_report_alert,
    create_route_alert,
    find_alerts_in_radius,
    get_alert_color,
    get_total_votes,
    is_alert_active,
    record_vote,
)

__all__ = [
    "AlertType",
    "RouteAlert",
    "StoredAlert",
    "active_route_alerts",
    "calculate_alert_decay",
    "calculate_safety_score",
    "can_report_alert",
    "create_route_alert",
    "find_alerts_in_radius",
    "get_alert_color",
    "get_total_votes",
    "is_alert_active",
    "record_vote",
]
