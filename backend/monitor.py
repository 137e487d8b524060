"""Batch climate monitoring across all users with location-based alerts enabled."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from backend.alerts import dispatch_climate_alert
from backend.db import db
from backend.models import ClimateReading, NotificationPreference
from backend.sweat_risk import heat_index
from backend.weather import WeatherClient, WeatherClientError, get_weather_or_fallback

logger = logging.getLogger(__name__)


def record_reading(user_id: str, reading: Dict, risk_level: str, source: str, now: dt.datetime) -> ClimateReading:
    rec = ClimateReading(
        user_id=user_id,
        timestamp=now,
        temperature=reading["temperature"],
        humidity=reading["humidity"],
        uv_index=reading["uv_index"],
        eda=reading.get("eda"),
        heat_index=heat_index(reading["temperature"], reading["humidity"]),
        risk_level=risk_level,
        source=source,
    )
    db.session.add(rec)
    return rec


def monitor_all_users(client: WeatherClient, now: Optional[dt.datetime] = None, local_now: Optional[dt.datetime] = None) -> Dict:
    """Fetch weather for each monitored user and dispatch alerts. Returns a run summary."""
    now = now or dt.datetime.utcnow()
    logger.info("Starting climate monitoring check at %s", now.isoformat())

    preferences = NotificationPreference.query.filter_by(enabled=True, location_enabled=True).all()
    logger.info("Found %d users to monitor", len(preferences))

    alerts_sent = 0
    skipped = 0
    errors = 0
    for pref in preferences:
        if pref.latitude is None or pref.longitude is None:
            logger.info("Skipping user %s - no stored location", pref.user_id)
            skipped += 1
            continue
        try:
            weather, simulated = get_weather_or_fallback(client, pref.latitude, pref.longitude)
            reading = weather.to_dict()
            outcome = dispatch_climate_alert(pref.user_id, reading, pref, now=now, local_now=local_now)
            record_reading(pref.user_id, reading, outcome.risk.level, "fallback" if simulated else "weather_api", now)
            db.session.commit()
            if outcome.outcome == "sent":
                alerts_sent += 1
        except (SQLAlchemyError, WeatherClientError, KeyError, TypeError, ValueError):
            db.session.rollback()
            logger.exception("Error processing user %s", pref.user_id)
            errors += 1

    logger.info("Monitoring complete: %d alerts sent, %d errors", alerts_sent, errors)
    return {
        "success": True,
        "monitored": len(preferences),
        "alerts_sent": alerts_sent,
        "skipped": skipped,
        "errors": errors,
        "timestamp": now.isoformat(),
    }
