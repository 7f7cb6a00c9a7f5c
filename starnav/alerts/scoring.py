"""
Hazard Safety Scoring - votes, decay, expiry and report throttling.

Safety scores run 0-100 where HIGHER means SAFER. A fresh report starts at
20 (presumed dangerous) and is self-confirmed by its creator.

The vote formula is kept exactly as deployed:

    score = 100 - r * 100 * w_c + (1 - r) * 100 * w_d,   r = c / (c + d)

clamped to [0, 100], 50 when nobody has voted. With the default weights
more confirmations lower the score; other weight pairs are not
guaranteed to be monotonic.

All times are epoch milliseconds. Functions take an optional ``now`` so
callers and tests can pin the clock.
"""

from __future__ import annotations

import time
from typing import Iterable, List, Optional, Sequence, Union

from starnav.alerts.models import AlertType, RouteAlert, StoredAlert
from starnav.utils.config_loader import AlertConfig
from starnav.utils.geometry import Position, distance
from starnav.utils.logging_config import get_logger

logger = get_logger("alerts.scoring")

DEFAULT_ALERT_EXPIRATION_MS = 2 * 60 * 60 * 1000
DEFAULT_REPORT_THROTTLE_MS = 5 * 60 * 1000
INITIAL_SAFETY_SCORE = 20.0
NEUTRAL_SAFETY_SCORE = 50.0

_ALERT_COLORS = {
    AlertType.PIRATE: "#FF4136",
    AlertType.SECURITY: "#0074D9",
    AlertType.DEBRIS: "#FF851B",
    AlertType.ANOMALY: "#B10DC9",
    AlertType.TRADE: "#2ECC40",
}
_UNKNOWN_COLOR = "#AAAAAA"


def now_ms() -> int:
    return int(time.time() * 1000)


def calculate_safety_score(
    confirmations: int,
    disputes: int,
    confirmation_weight: float = 0.7,
    dispute_weight: float = 0.3,
) -> float:
    """
    Safety score from vote counts.

    Args:
        confirmations: Number of reporters confirming the hazard
        disputes: Number of reporters disputing it
        confirmation_weight: Weight of confirmations (0-1)
        dispute_weight: Weight of disputes (0-1)

    Returns:
        Score in [0, 100]
    """
    total_votes = confirmations + disputes
    if total_votes == 0:
        return NEUTRAL_SAFETY_SCORE

    confirmation_ratio = confirmations / total_votes
    raw_score = (
        100
        - confirmation_ratio * 100 * confirmation_weight
        + (1 - confirmation_ratio) * 100 * dispute_weight
    )
    return max(0.0, min(100.0, raw_score))


def calculate_alert_decay(
    created_at: int,
    expires_at: int,
    decay_rate: float = 0.5,
    now: Optional[int] = None,
) -> float:
    """
    Age-based decay: elapsed fraction of the lifetime times decay_rate.

    Returns:
        0 for a fresh alert, up to decay_rate once expired, clamped to [0, 1]
    """
    now = now_ms() if now is None else now
    lifetime = expires_at - created_at
    if lifetime <= 0:
        fraction = 1.0
    else:
        fraction = min(1.0, max(0.0, (now - created_at) / lifetime))
    return max(0.0, min(1.0, fraction * decay_rate))


def is_alert_active(expires_at: int, now: Optional[int] = None) -> bool:
    """True while the current time is strictly before expiry."""
    now = now_ms() if now is None else now
    return now < expires_at


def can_report_alert(
    user_id: str,
    region_id: str,
    existing_alerts: Iterable[Union[RouteAlert, StoredAlert]],
    throttle_ms: int = DEFAULT_REPORT_THROTTLE_MS,
    now: Optional[int] = None,
) -> bool:
    """
    Report throttling: one alert per user per region per throttle window.

    Returns:
        False if the user's newest alert in the region is at most
        throttle_ms old
    """
    now = now_ms() if now is None else now
    mine = [
        alert for alert in existing_alerts
        if alert.created_by == user_id and alert.region_id == region_id
    ]
    if not mine:
        return True
    most_recent = max(mine, key=lambda alert: alert.created_at)
    return (now - most_recent.created_at) > throttle_ms


def create_route_alert(
    user_id: str,
    position: Position,
    region_id: str,
    alert_type: AlertType,
    shard_id: str,
    description: Optional[str] = None,
    config: Optional[AlertConfig] = None,
    now: Optional[int] = None,
) -> StoredAlert:
    """
    New report, self-confirmed by its creator.

    Lifetime and initial score come from AlertConfig (2 h and 20 by default).
    """
    config = config or AlertConfig()
    now = now_ms() if now is None else now

    alert = StoredAlert(
        id=f"alert_{now}_{user_id[:8]}",
        position=position,
        region_id=region_id,
        alert_type=AlertType(alert_type),
        created_by=user_id,
        created_at=now,
        expires_at=now + config.default_lifetime_ms,
        shard_id=shard_id,
        safety_score=config.initial_safety_score,
        confirmations={user_id: now},
        disputes={},
        is_active=True,
        last_updated=now,
        description=description,
    )
    logger.info(f"Created {alert.alert_type.value} alert {alert.id} in {region_id}")
    return alert


def find_alerts_in_radius(
    position: Position,
    alerts: Iterable[RouteAlert],
    radius: float,
) -> List[RouteAlert]:
    """Alerts whose position is within radius (inclusive) of position."""
    return [alert for alert in alerts if distance(position, alert.position) <= radius]


def get_total_votes(alert: StoredAlert) -> int:
    return len(alert.confirmations) + len(alert.disputes)


def get_alert_color(alert_type: Union[AlertType, str]) -> str:
    """Display color per alert type, gray for unknown types."""
    try:
        return _ALERT_COLORS[AlertType(alert_type)]
    except ValueError:
        return _UNKNOWN_COLOR


def record_vote(
    alert: StoredAlert,
    user_id: str,
    confirm: bool,
    config: Optional[AlertConfig] = None,
    now: Optional[int] = None,
) -> StoredAlert:
    """
    Register a confirmation or dispute and rescore. Mutates and returns alert.

    A reporter holds at most one vote; voting the other way moves it.
    """
    config = config or AlertConfig()
    now = now_ms() if now is None else now

    if confirm:
        alert.disputes.pop(user_id, None)
        alert.confirmations[user_id] = now
    else:
        alert.confirmations.pop(user_id, None)
        alert.disputes[user_id] = now

    alert.safety_score = calculate_safety_score(
        len(alert.confirmations),
        len(alert.disputes),
        config.confirmation_weight,
        config.dispute_weight,
    )
    alert.last_updated = now
    return alert


def active_route_alerts(
    alerts: Sequence[StoredAlert],
    now: Optional[int] = None,
) -> List[RouteAlert]:
    """Unexpired alerts converted for route planning."""
    now = now_ms() if now is None else now
    return [
        alert.to_route_alert()
        for alert in alerts
        if alert.is_active and is_alert_active(alert.expires_at, now)
    ]
