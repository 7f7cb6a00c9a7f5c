"""
Alert endpoints - list, report, confirm and dispute hazards.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from starnav.alerts.scoring import (
    calculate_alert_decay,
    can_report_alert,
    create_route_alert,
    get_alert_color,
    is_alert_active,
    record_vote,
)
from starnav.api.database import expire_alerts, get_alert, get_alerts, get_user_alerts, store_alert
from starnav.api.models import AlertReport, AlertResponse, VoteRequest
from starnav.utils.geometry import Position

router = APIRouter(prefix="/api/alerts", tags=["alerts"])
logger = logging.getLogger(__name__)


def _get_alert_config():
    from starnav.api.main import app_state
    return app_state["config"].alerts


def _response(alert) -> AlertResponse:
    decay = calculate_alert_decay(alert.created_at, alert.expires_at, _get_alert_config().decay_rate)
    return AlertResponse.from_alert(alert, get_alert_color(alert.alert_type), decay)


@router.get("", response_model=list[AlertResponse])
async def list_alerts(
    region_id: str | None = Query(None, description="Filter by region"),
    include_inactive: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """Hazard alerts, newest first. Expired alerts are swept first."""
    expire_alerts()
    alerts = get_alerts(region_id=region_id, active_only=not include_inactive, limit=limit, offset=offset)
    return [_response(a) for a in alerts]


@router.post("", response_model=AlertResponse, status_code=201)
async def report_alert(report: AlertReport):
    """Report a new hazard. One report per user per region per throttle window."""
    config = _get_alert_config()
    existing = get_user_alerts(report.user_id, report.region_id)
    if not can_report_alert(report.user_id, report.region_id, existing, config.report_throttle_ms):
        raise HTTPException(status_code=429, detail="Please wait before reporting another alert in this region")

    alert = create_route_alert(
        user_id=report.user_id,
        position=Position(report.position.x, report.position.y, report.position.z),
        region_id=report.region_id,
        alert_type=report.alert_type,
        shard_id=report.shard_id,
        description=report.description,
        config=config,
    )
    store_alert(alert)
    return _response(alert)


def _vote(alert_id: str, user_id: str, confirm: bool) -> AlertResponse:
    alert = get_alert(alert_id)
    if alert is None:
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    if not alert.is_active or not is_alert_active(alert.expires_at):
        raise HTTPException(status_code=409, detail=f"Alert {alert_id} has expired")

    record_vote(alert, user_id, confirm, _get_alert_config())
    store_alert(alert)
    logger.info("%s %s alert %s", user_id, "confirmed" if confirm else "disputed", alert_id)
    return _response(alert)


@router.post("/{alert_id}/confirm", response_model=AlertResponse)
async def confirm_alert(alert_id: str, vote: VoteRequest):
    """Confirm a hazard. Moves an existing dispute by the same user."""
    return _vote(alert_id, vote.user_id, confirm=True)


@router.post("/{alert_id}/dispute", response_model=AlertResponse)
async def dispute_alert(alert_id: str, vote: VoteRequest):
    """Dispute a hazard. Moves an existing confirmation by the same user."""
    return _vote(alert_id, vote.user_id, confirm=False)
