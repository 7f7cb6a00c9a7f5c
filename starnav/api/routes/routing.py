"""
Routing endpoints - direct routes, safer alternatives and saved routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from starnav.alerts.scoring import active_route_alerts
from starnav.api.database import get_alerts, get_routes, store_route
from starnav.api.models import RouteRequest, RouteResponse, SavedRouteResponse, SaveRouteRequest
from starnav.routing.models import ShipSpecification
from starnav.system.errors import ObjectNotFoundError

router = APIRouter(prefix="/api/routes", tags=["routes"])
logger = logging.getLogger(__name__)

MAX_ROUTE_ALERTS = 10000


def _get_planner():
    from starnav.api.main import app_state
    return app_state["planner"]


def _get_system():
    from starnav.api.main import app_state
    return app_state["system"]


def _ship_from(request: RouteRequest) -> ShipSpecification | None:
    if request.ship is None:
        return None
    return ShipSpecification(**request.ship.model_dump())


def _active_alerts():
    return active_route_alerts(get_alerts(active_only=True, limit=MAX_ROUTE_ALERTS))


@router.post("/plan", response_model=RouteResponse)
async def plan(request: RouteRequest):
    """Direct route between two objects, annotated with nearby hazards."""
    try:
        route = _get_planner().plan_route(
            _get_system(), request.start_id, request.end_id, _active_alerts(), _ship_from(request)
        )
    except ObjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RouteResponse.from_plan(route)


@router.post("/alternatives", response_model=list[RouteResponse])
async def alternatives(request: RouteRequest):
    """Direct route plus safer single-detour routes, safest first."""
    try:
        plans = _get_planner().find_alternatives(
            _get_system(),
            request.start_id,
            request.end_id,
            _active_alerts(),
            request.max_alternatives,
            _ship_from(request),
        )
    except ObjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [RouteResponse.from_plan(p) for p in plans]


@router.post("/saved", response_model=SavedRouteResponse, status_code=201)
async def save_route(request: SaveRouteRequest):
    """Plan the direct route and save it for the user."""
    planner = _get_planner()
    try:
        route = planner.plan_route(
            _get_system(), request.start_id, request.end_id, _active_alerts(), _ship_from(request)
        )
    except ObjectNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    saved = store_route(planner.create_route(route, request.user_id, request.name, request.is_public))
    logger.info("Saved route %s for %s", saved.id, saved.created_by)
    return SavedRouteResponse(
        id=saved.id,
        name=saved.name,
        start_point=saved.start_point,
        end_point=saved.end_point,
        waypoints=saved.waypoints,
        distance=saved.distance,
        estimated_time=saved.estimated_time,
        fuel_required=saved.fuel_required,
        alert_ids=[alert.id for alert in saved.alerts_on_route],
        created_at=saved.created_at,
        last_updated=saved.last_updated,
        created_by=saved.created_by,
        is_public=saved.is_public,
    )


@router.get("/saved", response_model=list[SavedRouteResponse])
async def list_saved_routes(
    user_id: str | None = Query(None, description="Owner; public routes are always included"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """Saved routes, newest first."""
    return [SavedRouteResponse(**r) for r in get_routes(user_id=user_id, limit=limit, offset=offset)]
