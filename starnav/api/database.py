"""
Database layer for hazard alerts and saved routes.

Reads DATABASE_URL from environment. Falls back to local SQLite when unset.
Alerts keep their per-reporter vote maps as JSON text so the stored row
round-trips to a StoredAlert without loss.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from sqlalchemy import BigInteger, Boolean, Column, Float, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from starnav.alerts.models import AlertType, StoredAlert
from starnav.alerts.scoring import now_ms
from starnav.routing.models import SavedRoute
from starnav.utils.geometry import Position

logger = logging.getLogger(__name__)

DB_PATH = Path("data/starnav.db")


class Base(DeclarativeBase):
    pass


class AlertRecord(Base):
    __tablename__ = "alerts"

    id = Column(String, primary_key=True)
    region_id = Column(String, index=True, nullable=False)
    alert_type = Column(String, nullable=False)
    created_by = Column(String, index=True, nullable=False)
    created_at = Column(BigInteger, nullable=False)   # epoch ms
    expires_at = Column(BigInteger, nullable=False)   # epoch ms
    position_x = Column(Float, nullable=False)
    position_y = Column(Float, nullable=False)
    position_z = Column(Float, nullable=False)
    shard_id = Column(String, nullable=False, default="")
    safety_score = Column(Float, nullable=False)
    confirmations_json = Column(Text, nullable=False, default="{}")
    disputes_json = Column(Text, nullable=False, default="{}")
    is_active = Column(Boolean, nullable=False, default=True)
    last_updated = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=True)


class SavedRouteRecord(Base):
    __tablename__ = "saved_routes"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    start_point = Column(String, nullable=False)
    end_point = Column(String, nullable=False)
    waypoints_json = Column(Text, nullable=False)
    distance = Column(Float, nullable=False)
    estimated_time = Column(Float, nullable=False)
    fuel_required = Column(Float, nullable=False)
    alert_ids_json = Column(Text, nullable=False, default="[]")
    created_at = Column(BigInteger, nullable=False)
    last_updated = Column(BigInteger, nullable=False)
    created_by = Column(String, index=True, nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)


# Engine and session
_engine = None
_SessionLocal = None


def init_db() -> None:
    """Initialize the database, creating tables if needed.

    Uses DATABASE_URL env var for PostgreSQL when set.
    Falls back to local SQLite otherwise.
    """
    global _engine, _SessionLocal

    database_url = os.environ.get("DATABASE_URL")

    if database_url:
        # Some hosts hand out postgres:// but SQLAlchemy requires postgresql://
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        _engine = create_engine(database_url, echo=False, pool_pre_ping=True)
        logger.info("Database initialized from DATABASE_URL")
    else:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(f"sqlite:///{DB_PATH}", echo=False)
        logger.info("Database initialized at %s (SQLite fallback)", DB_PATH)

    Base.metadata.create_all(_engine)
    _SessionLocal = sessionmaker(bind=_engine)


def get_session() -> Session:
    if _SessionLocal is None:
        init_db()
    return _SessionLocal()


# --- Alerts ---

def _alert_to_record(alert: StoredAlert, record: AlertRecord) -> AlertRecord:
    record.id = alert.id
    record.region_id = alert.region_id
    record.alert_type = alert.alert_type.value
    record.created_by = alert.created_by
    record.created_at = alert.created_at
    record.expires_at = alert.expires_at
    record.position_x = alert.position.x
    record.position_y = alert.position.y
    record.position_z = alert.position.z
    record.shard_id = alert.shard_id
    record.safety_score = alert.safety_score
    record.confirmations_json = json.dumps(alert.confirmations)
    record.disputes_json = json.dumps(alert.disputes)
    record.is_active = alert.is_active
    record.last_updated = alert.last_updated
    record.description = alert.description
    return record


def _record_to_alert(record: AlertRecord) -> StoredAlert:
    return StoredAlert(
        id=record.id,
        position=Position(record.position_x, record.position_y, record.position_z),
        region_id=record.region_id,
        alert_type=AlertType(record.alert_type),
        created_by=record.created_by,
        created_at=record.created_at,
        expires_at=record.expires_at,
        shard_id=record.shard_id,
        safety_score=record.safety_score,
        confirmations=json.loads(record.confirmations_json or "{}"),
        disputes=json.loads(record.disputes_json or "{}"),
        is_active=record.is_active,
        last_updated=record.last_updated,
        description=record.description,
    )


def store_alert(alert: StoredAlert) -> StoredAlert:
    """Insert or update an alert."""
    session = get_session()
    record = session.get(AlertRecord, alert.id) or AlertRecord()
    session.add(_alert_to_record(alert, record))
    session.commit()
    session.close()
    return alert


def get_alert(alert_id: str) -> Optional[StoredAlert]:
    """Retrieve one alert by id."""
    session = get_session()
    record = session.get(AlertRecord, alert_id)
    alert = _record_to_alert(record) if record else None
    session.close()
    return alert


def get_alerts(
    region_id: Optional[str] = None,
    active_only: bool = True,
    limit: int = 100,
    offset: int = 0,
) -> List[StoredAlert]:
    """Get alerts, newest first."""
    session = get_session()
    query = session.query(AlertRecord)
    if region_id:
        query = query.filter(AlertRecord.region_id == region_id)
    if active_only:
        query = query.filter(AlertRecord.is_active.is_(True))
    records = (
        query.order_by(AlertRecord.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    result = [_record_to_alert(r) for r in records]
    session.close()
    return result


def get_user_alerts(user_id: str, region_id: Optional[str] = None) -> List[StoredAlert]:
    """All alerts created by a user, used for report throttling."""
    session = get_session()
    query = session.query(AlertRecord).filter(AlertRecord.created_by == user_id)
    if region_id:
        query = query.filter(AlertRecord.region_id == region_id)
    result = [_record_to_alert(r) for r in query.all()]
    session.close()
    return result


def expire_alerts(now: Optional[int] = None) -> int:
    """Deactivate alerts past their expiry. Returns number of updated rows."""
    now = now_ms() if now is None else now
    session = get_session()
    count = (
        session.query(AlertRecord)
        .filter(AlertRecord.is_active.is_(True), AlertRecord.expires_at <= now)
        .update({AlertRecord.is_active: False, AlertRecord.last_updated: now}, synchronize_session=False)
    )
    session.commit()
    session.close()
    if count:
        logger.info("Expired %d alerts", count)
    return count


def clear_alerts() -> int:
    """Delete all alerts. Returns number of deleted rows."""
    session = get_session()
    count = session.query(AlertRecord).delete()
    session.commit()
    session.close()
    logger.info("Cleared %d alerts from database", count)
    return count


# --- Saved routes ---

def store_route(route: SavedRoute) -> SavedRoute:
    """Persist a saved route."""
    session = get_session()
    entry = SavedRouteRecord(
        id=route.id,
        name=route.name,
        start_point=route.start_point,
        end_point=route.end_point,
        waypoints_json=json.dumps(route.waypoints),
        distance=route.distance,
        estimated_time=route.estimated_time,
        fuel_required=route.fuel_required,
        alert_ids_json=json.dumps([alert.id for alert in route.alerts_on_route]),
        created_at=route.created_at,
        last_updated=route.last_updated,
        created_by=route.created_by,
        is_public=route.is_public,
    )
    session.merge(entry)
    session.commit()
    session.close()
    return route


def get_routes(user_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[dict]:
    """Saved routes, newest first. With a user id: theirs plus public ones."""
    session = get_session()
    query = session.query(SavedRouteRecord)
    if user_id:
        query = query.filter(
            (SavedRouteRecord.created_by == user_id) | SavedRouteRecord.is_public.is_(True)
        )
    records = (
        query.order_by(SavedRouteRecord.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    result = [
        {
            "id": r.id,
            "name": r.name,
            "start_point": r.start_point,
            "end_point": r.end_point,
            "waypoints": json.loads(r.waypoints_json),
            "distance": r.distance,
            "estimated_time": r.estimated_time,
            "fuel_required": r.fuel_required,
            "alert_ids": json.loads(r.alert_ids_json or "[]"),
            "created_at": r.created_at,
            "last_updated": r.last_updated,
            "created_by": r.created_by,
            "is_public": r.is_public,
        }
        for r in records
    ]
    session.close()
    return result
