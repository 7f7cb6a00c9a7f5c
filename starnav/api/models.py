"""
Pydantic request/response schemas for the navigation API.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from starnav.alerts.models import AlertType, StoredAlert
from starnav.routing.models import RoutePlan
from starnav.system.types import CelestialObject


class Vector3(BaseModel):
    x: float
    y: float
    z: float


class ObjectSummary(BaseModel):
    id: str
    display_name: str
    object_type: str
    parent_id: str
    inferred: bool = False

    @classmethod
    def from_object(cls, obj: CelestialObject) -> "ObjectSummary":
        return cls(
            id=obj.id,
            display_name=obj.display_name,
            object_type=obj.object_type.value,
            parent_id=obj.parent_id,
            inferred=obj.inferred,
        )


class ObjectDetail(ObjectSummary):
    position: Vector3
    absolute_position: Vector3
    rotation: Dict[str, float]
    size: float
    arrival_radius: float
    obstruction_radius: float
    atmosphere_height: float
    entity_name: str
    children: List[str] = []


class OrbitPath(BaseModel):
    object_id: str
    points: List[Vector3]


class ValidationResponse(BaseModel):
    valid: bool
    issues: List[str]


class RepairResponse(BaseModel):
    object_id: str
    old_parent: str
    new_parent: str
    rule: str
    reason: str


class WaypointResponse(BaseModel):
    object_id: str
    position: Vector3
    distance: float
    time_from_previous: float
    nearby_alert_ids: List[str]
    safety_score: float


class RouteResponse(BaseModel):
    start_object_id: str
    end_object_id: str
    waypoints: List[WaypointResponse]
    total_distance: float
    total_time: float
    fuel_required: float
    overall_safety_score: float

    @classmethod
    def from_plan(cls, plan: RoutePlan) -> "RouteResponse":
        return cls(**plan.to_dict())


class ShipRequest(BaseModel):
    id: str = "custom"
    name: str = "Custom ship"
    manufacturer: str = ""
    size: float = 0.0
    fuel_capacity: float = Field(0.0, ge=0)
    fuel_consumption: float = Field(0.0, ge=0)
    quantum_speed: float = Field(0.0, ge=0)
    scm_speed: float = Field(0.0, ge=0)
    cargo_capacity: float = Field(0.0, ge=0)


class RouteRequest(BaseModel):
    start_id: str
    end_id: str
    ship: Optional[ShipRequest] = None
    max_alternatives: int = Field(3, ge=0, le=20)


class SaveRouteRequest(RouteRequest):
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    is_public: bool = False


class SavedRouteResponse(BaseModel):
    id: str
    name: str
    start_point: str
    end_point: str
    waypoints: List[str]
    distance: float
    estimated_time: float
    fuel_required: float
    alert_ids: List[str]
    created_at: int
    last_updated: int
    created_by: str
    is_public: bool


class AlertReport(BaseModel):
    user_id: str = Field(..., min_length=1)
    position: Vector3
    region_id: str = Field(..., min_length=1)
    alert_type: AlertType
    shard_id: str = ""
    description: Optional[str] = None


class VoteRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class AlertResponse(BaseModel):
    id: str
    position: Vector3
    region_id: str
    alert_type: AlertType
    created_by: str
    created_at: int
    expires_at: int
    shard_id: str
    safety_score: float
    confirmations: int
    disputes: int
    is_active: bool
    last_updated: int
    description: Optional[str] = None
    color: str
    decay: float = Field(0.0, ge=0, le=1, description="Age-based decay, 0 fresh to decay_rate at expiry")

    @classmethod
    def from_alert(cls, alert: StoredAlert, color: str, decay: float = 0.0) -> "AlertResponse":
        return cls(
            id=alert.id,
            position=Vector3(**alert.position.to_dict()),
            region_id=alert.region_id,
            alert_type=alert.alert_type,
            created_by=alert.created_by,
            created_at=alert.created_at,
            expires_at=alert.expires_at,
            shard_id=alert.shard_id,
            safety_score=alert.safety_score,
            confirmations=len(alert.confirmations),
            disputes=len(alert.disputes),
            is_active=alert.is_active,
            last_updated=alert.last_updated,
            description=alert.description,
            color=color,
            decay=decay,
        )
