"""Climate notifications: quiet hours, cooldown handling, dispatch decisions."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from flask import current_app

from backend.db import db
from backend.models import ClimateNotification, NotificationPreference
from backend.sweat_risk import SweatRiskResult, classify, risk_severity, should_trigger_alert

logger = logging.getLogger(__name__)

ALERT_TITLE = "🌡️ Climate Alert"


@dataclass
class DispatchOutcome:
    outcome: str  # no_alert | quiet_hours | sent | cooldown
    risk: SweatRiskResult
    severity: str
    triggers: List[str] = field(default_factory=list)
    notification: Optional[ClimateNotification] = None

    def to_dict(self) -> Dict:
        return {
            "outcome": self.outcome,
            "severity": self.severity,
            "triggers": self.triggers,
            "notification": self.notification.to_dict() if self.notification else None,
        }


def _parse_hhmm(value: str) -> dt.time:
    hours, minutes = value.split(":")
    return dt.time(int(hours), int(minutes))


def is_quiet_hours(start: Optional[str], end: Optional[str], now: dt.datetime) -> bool:
    """True when `now` falls in the do-not-disturb window, which may cross midnight."""
    if not start or not end:
        return False
    start_t, end_t = _parse_hhmm(start), _parse_hhmm(end)
    current = now.time().replace(second=0, microsecond=0)
    if start_t == end_t:
        return False
    if start_t < end_t:
        return start_t <= current < end_t
    return current >= start_t or current < end_t


def _within_cooldown(existing: ClimateNotification, now: dt.datetime) -> bool:
    return (now - existing.timestamp).total_seconds() <= current_app.config["ALERT_COOLDOWN"]


def create_or_update_notification(
    user_id: str,
    severity: str,
    risk_level: str,
    body: str,
    triggers: List[str],
    weather_data: Optional[Dict] = None,
    now: Optional[dt.datetime] = None,
) -> Tuple[ClimateNotification, bool]:
    """
    Create a new notification or bump the count of a recent one.
    Returns (notification, created_flag).
    """
    now = now or dt.datetime.utcnow()
    existing = (
        ClimateNotification.query.filter_by(user_id=user_id, severity=severity, dismissed=False)
        .order_by(ClimateNotification.timestamp.desc())
        .first()
    )
    if existing and _within_cooldown(existing, now):
        existing.updated_at = now
        existing.count = (existing.count or 1) + 1
        db.session.commit()
        return existing, False

    notification = ClimateNotification(
        user_id=user_id,
        severity=severity,
        risk_level=risk_level,
        title=ALERT_TITLE,
        body=body,
        triggers=list(triggers),
        weather_data=weather_data,
        timestamp=now,
        updated_at=now,
    )
    db.session.add(notification)
    db.session.commit()
    return notification, True


def _alert_body(triggers: List[str], risk: SweatRiskResult, city: Optional[str]) -> str:
    where = f" in {city}" if city else ""
    return f"{', '.join(triggers)}{where}. {risk.description}"


def dispatch_climate_alert(
    user_id: str,
    reading: Dict,
    prefs: NotificationPreference,
    now: Optional[dt.datetime] = None,
    local_now: Optional[dt.datetime] = None,
) -> DispatchOutcome:
    """
    Evaluate a reading against a user's preferences and record a notification if due.

    `reading` holds temperature, humidity, uv_index and optionally eda and city.
    `now` drives the cooldown (UTC); `local_now` drives quiet hours.
    """
    now = now or dt.datetime.utcnow()
    local_now = local_now or dt.datetime.now()

    risk = classify(reading["temperature"], reading["humidity"], reading["uv_index"], reading.get("eda"))
    severity = risk_severity(risk.level)
    decision = should_trigger_alert(
        reading["temperature"], reading["humidity"], reading["uv_index"], prefs.thresholds()
    )

    if not decision.should_alert:
        return DispatchOutcome("no_alert", risk, severity)

    if is_quiet_hours(prefs.quiet_hours_start, prefs.quiet_hours_end, local_now):
        logger.info("Quiet hours for %s, suppressing %s alert", user_id, severity)
        return DispatchOutcome("quiet_hours", risk, severity, decision.triggers)

    weather_data = {
        "temperature": reading["temperature"],
        "humidity": reading["humidity"],
        "uv_index": reading["uv_index"],
        "city": reading.get("city"),
    }
    notification, created = create_or_update_notification(
        user_id,
        severity,
        risk.level,
        _alert_body(decision.triggers, risk, reading.get("city")),
        decision.triggers,
        weather_data=weather_data,
        now=now,
    )
    if created:
        logger.info("Climate alert for %s: %s (%s)", user_id, risk.level, severity)
    return DispatchOutcome("sent" if created else "cooldown", risk, severity, decision.triggers, notification)
