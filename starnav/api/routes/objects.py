"""
Object endpoints - list celestial objects, details, children and geometry.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from starnav.api.models import ObjectDetail, ObjectSummary, OrbitPath, Vector3
from starnav.system.errors import ObjectNotFoundError
from starnav.system.types import ObjectType

router = APIRouter(prefix="/api/objects", tags=["objects"])


def _get_system():
    """Get the StarSystem from app state (built at startup)."""
    from starnav.api.main import app_state
    return app_state["system"]


def _get_query():
    from starnav.api.main import app_state
    return app_state["query"]


@router.get("", response_model=list[ObjectSummary])
async def list_objects(
    object_type: str | None = Query(None, description="Filter by type, e.g. Planet, Moon, LagrangePoint"),
    parent_id: str | None = Query(None, description="Filter by parent id"),
    limit: int = Query(1000, ge=1, le=10000),
    offset: int = Query(0, ge=0),
):
    """List celestial objects with summary info."""
    system = _get_system()

    if object_type:
        parsed = ObjectType.parse(object_type)
        if parsed is None:
            raise HTTPException(status_code=400, detail=f"Unknown object type: {object_type}")
        objects = _get_query().get_by_type(parsed)
    else:
        objects = list(system.objects_by_id.values())

    if parent_id is not None:
        objects = [obj for obj in objects if obj.parent_id == parent_id]

    page = objects[offset:offset + limit]
    return [ObjectSummary.from_object(obj) for obj in page]


@router.get("/{object_id}", response_model=ObjectDetail)
async def get_object(object_id: str):
    """Get detailed info for a single object."""
    query = _get_query()
    try:
        obj = query.get_by_id(object_id)
        absolute = query.get_absolute_position(object_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Object {object_id} not found")

    summary = ObjectSummary.from_object(obj)
    return ObjectDetail(
        **summary.model_dump(),
        position=Vector3(**obj.position.to_dict()),
        absolute_position=Vector3(**absolute.to_dict()),
        rotation=obj.rotation.to_dict(),
        size=obj.size,
        arrival_radius=obj.arrival_radius,
        obstruction_radius=obj.obstruction_radius,
        atmosphere_height=obj.atmosphere_height,
        entity_name=obj.entity_name,
        children=[child.id for child in query.get_children(object_id)],
    )


@router.get("/{object_id}/children", response_model=list[ObjectSummary])
async def get_children(object_id: str):
    """Direct children of an object."""
    system = _get_system()
    if object_id not in system:
        raise HTTPException(status_code=404, detail=f"Object {object_id} not found")
    return [ObjectSummary.from_object(obj) for obj in _get_query().get_children(object_id)]


@router.get("/{object_id}/absolute-position", response_model=Vector3)
async def get_absolute_position(object_id: str):
    """World-space position: sum of local positions up to the root."""
    try:
        position = _get_query().get_absolute_position(object_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Object {object_id} not found")
    return Vector3(**position.to_dict())


@router.get("/{object_id}/orbit", response_model=OrbitPath)
async def get_orbit(object_id: str, steps: int = Query(100, ge=0, le=2000)):
    """Circular orbit approximation around the object's parent."""
    try:
        points = _get_query().get_orbit_path(object_id, steps)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Object {object_id} not found")
    return OrbitPath(object_id=object_id, points=[Vector3(**p.to_dict()) for p in points])
