"""
Object classification from naming conventions.

Ids are matched case-insensitively against an ordered keyword list; the
first keyword found wins. Ids without a keyword fall back to the record's
``type`` field, then to Generic.
"""

from __future__ import annotations

from typing import Any, Mapping, Tuple

from starnav.system.types import ObjectType


# Priority order matters: "stanton_station_reststop_3" is a Station,
# "stantonstar" is a Star, "stanton1_lagrange" is a LagrangePoint.
KEYWORD_PRIORITY: Tuple[Tuple[str, ObjectType], ...] = (
    ("jumppoint", ObjectType.JUMP_POINT),
    ("lagrange", ObjectType.LAGRANGE_POINT),
    ("commarray", ObjectType.COMM_ARRAY),
    ("star", ObjectType.STAR),
    ("planet", ObjectType.PLANET),
    ("moon", ObjectType.MOON),
    ("station", ObjectType.STATION),
    ("outpost", ObjectType.OUTPOST),
    ("reststop", ObjectType.REST_STOP),
    ("landingzone", ObjectType.LANDING_ZONE),
    ("orbitmarker", ObjectType.ORBIT_MARKER),
)


def classify(object_id: str, payload: Any = None) -> ObjectType:
    """
    Assign an ObjectType to a feed record. Never fails.

    Args:
        object_id: Record id from the feed
        payload: Raw record (only its ``type`` field is consulted)

    Returns:
        The classified ObjectType
    """
    lowered = str(object_id).lower()
    for keyword, object_type in KEYWORD_PRIORITY:
        if keyword in lowered:
            return object_type

    if isinstance(payload, Mapping):
        declared = ObjectType.parse(payload.get("type"))
        if declared is not None:
            return declared

    return ObjectType.GENERIC
