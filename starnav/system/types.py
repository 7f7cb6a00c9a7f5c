"""
Core data model for a loaded star system.

Classes:
    ObjectType: Closed set of celestial object kinds
    CelestialObject: Immutable record for one object
    RepairRule / RepairDecision: Audit trail of parent repairs
    StarSystem: Indexed, rooted hierarchy snapshot
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from starnav.system.errors import MissingRootError, ObjectNotFoundError
from starnav.utils.geometry import IDENTITY_ROTATION, ORIGIN, Position, Rotation


class ObjectType(str, Enum):
    """Celestial object kinds."""
    STAR = "Star"
    PLANET = "Planet"
    MOON = "Moon"
    JUMP_POINT = "JumpPoint"
    LAGRANGE_POINT = "LagrangePoint"
    STATION = "Station"
    SPACE_STATION = "SpaceStation"
    OUTPOST = "Outpost"
    REST_STOP = "RestStop"
    LANDING_ZONE = "LandingZone"
    COMM_ARRAY = "CommArray"
    ORBIT_MARKER = "OrbitMarker"
    GENERIC = "Generic"

    @classmethod
    def parse(cls, value: Any) -> Optional["ObjectType"]:
        """Return the member whose value is *value*, or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


def _as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a loosely-typed number. Absent -> default, garbage -> NaN."""
    if value is None:
        return default
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _position_from(raw: Any) -> Position:
    if raw is None:
        return ORIGIN
    if not isinstance(raw, Mapping):
        return Position(math.nan, math.nan, math.nan)
    return Position(
        _as_float(raw.get("x")),
        _as_float(raw.get("y")),
        _as_float(raw.get("z")),
    )


def _rotation_from(raw: Any) -> Rotation:
    if not isinstance(raw, Mapping):
        return IDENTITY_ROTATION
    return Rotation(
        _as_float(raw.get("w"), 1.0),
        _as_float(raw.get("x")),
        _as_float(raw.get("y")),
        _as_float(raw.get("z")),
    )


def parent_of(payload: Mapping[str, Any]) -> str:
    """Raw parent reference of a record ("" when absent)."""
    return _as_str(payload.get("parent"))


@dataclass(frozen=True)
class CelestialObject:
    """
    One object of the star system.

    Attributes:
        id: Unique key from the source feed
        display_name: Human-readable name (defaults to id)
        parent_id: Parent id, "" for the root
        object_type: Classified kind
        position: Parent-relative position
        rotation: Orientation quaternion
        entity_name: Engine-internal label (defaults to id)
        inferred: True if synthesized by the builder
    """
    id: str
    display_name: str
    parent_id: str
    object_type: ObjectType
    position: Position = ORIGIN
    rotation: Rotation = IDENTITY_ROTATION
    size: float = 0.0
    arrival_radius: float = 0.0
    obstruction_radius: float = 0.0
    atmosphere_height: float = 0.0
    entity_name: str = ""
    inferred: bool = False

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("CelestialObject id must be a non-empty string")
        if not isinstance(self.object_type, ObjectType):
            raise TypeError(f"object_type must be an ObjectType, got {self.object_type!r}")
        if not self.entity_name:
            object.__setattr__(self, "entity_name", self.id)

    @classmethod
    def from_record(
        cls,
        object_id: str,
        payload: Mapping[str, Any],
        object_type: ObjectType,
        inferred: bool = False,
    ) -> "CelestialObject":
        """Build an object from a raw feed record. Absent fields take defaults."""
        return cls(
            id=object_id,
            display_name=_as_str(payload.get("display_name")) or object_id,
            parent_id=parent_of(payload),
            object_type=object_type,
            position=_position_from(payload.get("position")),
            rotation=_rotation_from(payload.get("rotation")),
            size=_as_float(payload.get("size")),
            arrival_radius=_as_float(payload.get("arrivalRadius")),
            obstruction_radius=_as_float(payload.get("obstructionRadius")),
            atmosphere_height=_as_float(payload.get("atmoHeight")),
            entity_name=_as_str(payload.get("system_entity_name")) or object_id,
            inferred=inferred,
        )

    def to_record(self) -> Dict[str, Any]:
        """Inverse of from_record, using the feed's field names."""
        return {
            "display_name": self.display_name,
            "parent": self.parent_id,
            "type": self.object_type.value,
            "position": self.position.to_dict(),
            "rotation": self.rotation.to_dict(),
            "size": self.size,
            "arrivalRadius": self.arrival_radius,
            "obstructionRadius": self.obstruction_radius,
            "atmoHeight": self.atmosphere_height,
            "system_entity_name": self.entity_name,
        }

    @property
    def is_root(self) -> bool:
        return self.parent_id == ""


class RepairRule(Enum):
    """Why a parent reference was changed."""
    ROOT_SENTINEL_CLEARED = "root_sentinel_cleared"
    LAGRANGE_TO_PLANET = "lagrange_to_planet"
    LAGRANGE_TO_ROOT = "lagrange_to_root"
    RESTSTOP_TO_PLANET = "reststop_to_planet"
    RESTSTOP_TO_ROOT = "reststop_to_root"
    DEFAULT_TO_ROOT = "default_to_root"
    ROOT_DETACHED = "root_detached"
    ORPHAN_ADOPTED = "orphan_adopted"
    CYCLE_BROKEN = "cycle_broken"


@dataclass(frozen=True)
class RepairDecision:
    """One entry of the builder's repair audit trail."""
    object_id: str
    old_parent: str
    new_parent: str
    rule: RepairRule
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "object_id": self.object_id,
            "old_parent": self.old_parent,
            "new_parent": self.new_parent,
            "rule": self.rule.value,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class StarSystem:
    """
    Immutable snapshot of a rooted hierarchy.

    Built once by HierarchyBuilder (or from_objects for already-clean data)
    and shared read-only by queries, validation and routing.
    """
    name: str
    root_id: str
    objects_by_id: Mapping[str, CelestialObject]
    objects_by_type: Mapping[ObjectType, Tuple[CelestialObject, ...]]
    objects_by_parent: Mapping[str, Tuple[CelestialObject, ...]]
    absolute_positions: Mapping[str, Position] = field(default_factory=dict)
    repairs: Tuple[RepairDecision, ...] = ()
    inferred_ids: Tuple[str, ...] = ()

    @classmethod
    def from_objects(
        cls,
        name: str,
        root_id: str,
        objects: Iterable[CelestialObject],
        absolute_positions: Optional[Mapping[str, Position]] = None,
        repairs: Iterable[RepairDecision] = (),
    ) -> "StarSystem":
        """
        Index objects into a snapshot without repairing anything.

        Raises:
            MissingRootError: If root_id is not among the objects
        """
        by_id: Dict[str, CelestialObject] = {}
        by_type: Dict[ObjectType, List[CelestialObject]] = {}
        by_parent: Dict[str, List[CelestialObject]] = {}

        for obj in objects:
            by_id[obj.id] = obj
            by_type.setdefault(obj.object_type, []).append(obj)
            by_parent.setdefault(obj.parent_id, []).append(obj)

        if root_id not in by_id:
            raise MissingRootError(f"Root object {root_id!r} is not part of the system")

        return cls(
            name=name,
            root_id=root_id,
            objects_by_id=MappingProxyType(by_id),
            objects_by_type=MappingProxyType({t: tuple(objs) for t, objs in by_type.items()}),
            objects_by_parent=MappingProxyType({p: tuple(objs) for p, objs in by_parent.items()}),
            absolute_positions=MappingProxyType(dict(absolute_positions or {})),
            repairs=tuple(repairs),
            inferred_ids=tuple(obj.id for obj in by_id.values() if obj.inferred),
        )

    @property
    def root(self) -> CelestialObject:
        return self.objects_by_id[self.root_id]

    def __len__(self) -> int:
        return len(self.objects_by_id)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self.objects_by_id

    def get(self, object_id: str) -> CelestialObject:
        """Object by id; raises ObjectNotFoundError if unknown."""
        try:
            return self.objects_by_id[object_id]
        except KeyError:
            raise ObjectNotFoundError(object_id) from None
