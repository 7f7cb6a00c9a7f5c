"""
Hazard alert records.

RouteAlert is the count-based view consumed by route planning; StoredAlert
is the persisted form that keeps one timestamp per confirming/disputing
reporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from starnav.utils.geometry import Position


class AlertType(str, Enum):
    """Kinds of reported hazard."""
    PIRATE = "pirate"
    SECURITY = "security"
    DEBRIS = "debris"
    ANOMALY = "anomaly"
    TRADE = "trade"


@dataclass(frozen=True)
class RouteAlert:
    """A hazard report as seen by the route planner."""
    id: str
    position: Position
    region_id: str
    alert_type: AlertType
    created_by: str
    created_at: int          # epoch ms
    expires_at: int          # epoch ms
    confirmations: int = 0
    disputes: int = 0
    shard_id: str = ""
    safety_score: float = 50.0  # 0-100, higher = safer


@dataclass
class StoredAlert:
    """
    Persisted hazard report.

    Attributes:
        confirmations: reporter id -> vote timestamp (ms)
        disputes: reporter id -> vote timestamp (ms)
        is_active: Cleared by the expiry sweep, never by scoring
    """
    id: str
    position: Position
    region_id: str
    alert_type: AlertType
    created_by: str
    created_at: int
    expires_at: int
    shard_id: str
    safety_score: float
    confirmations: Dict[str, int] = field(default_factory=dict)
    disputes: Dict[str, int] = field(default_factory=dict)
    is_active: bool = True
    last_updated: int = 0
    description: Optional[str] = None

    def to_route_alert(self) -> RouteAlert:
        return RouteAlert(
            id=self.id,
            position=self.position,
            region_id=self.region_id,
            alert_type=self.alert_type,
            created_by=self.created_by,
            created_at=self.created_at,
            expires_at=self.expires_at,
            confirmations=len(self.confirmations),
            disputes=len(self.disputes),
            shard_id=self.shard_id,
            safety_score=self.safety_score,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Document shape: location nested, enum as its value."""
        return {
            "id": self.id,
            "location": {"position": self.position.to_dict(), "regionId": self.region_id},
            "alertType": self.alert_type.value,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "expiresAt": self.expires_at,
            "confirmations": dict(self.confirmations),
            "disputes": dict(self.disputes),
            "shardId": self.shard_id,
            "safetyScore": self.safety_score,
            "description": self.description,
            "isActive": self.is_active,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> "StoredAlert":
        location = doc.get("location") or {}
        raw_position = location.get("position") or {}
        return cls(
            id=doc["id"],
            position=Position(
                float(raw_position.get("x", 0.0)),
                float(raw_position.get("y", 0.0)),
                float(raw_position.get("z", 0.0)),
            ),
            region_id=location.get("regionId", ""),
            alert_type=AlertType(doc["alertType"]),
            created_by=doc.get("createdBy", ""),
            created_at=int(doc.get("createdAt", 0)),
            expires_at=int(doc.get("expiresAt", 0)),
            shard_id=doc.get("shardId", ""),
            safety_score=float(doc.get("safetyScore", 50.0)),
            confirmations={k: int(v) for k, v in (doc.get("confirmations") or {}).items()},
            disputes={k: int(v) for k, v in (doc.get("disputes") or {}).items()},
            is_active=bool(doc.get("isActive", True)),
            last_updated=int(doc.get("lastUpdated", 0)),
            description=doc.get("description"),
        )
