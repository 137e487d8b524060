"""Physiological helpers: fused EDA/palm status and shared EDA readings."""

from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Optional

from flask import current_app

from backend.db import db
from backend.models import EdaReading

logger = logging.getLogger(__name__)

MIN_EDA = 0.0
MAX_EDA = 100.0

MOISTURE_DETECTED = "Moisture detected."
NO_MOISTURE = "No significant moisture."
PALM_RESULTS = (MOISTURE_DETECTED, NO_MOISTURE)

EDA_SOURCES = ("palm-scanner", "climate-alert")

STABLE = "Stable"
EARLY_ALERT = "Early Alert"
EPISODE_LIKELY = "Episode Likely"


@dataclass
class FusedStatus:
    status: str  # Stable | Early Alert | Episode Likely
    explanation: str


def validate_fused_input(eda, palm_result) -> None:
    is_number = isinstance(eda, (int, float)) and not isinstance(eda, bool)
    if not is_number or math.isnan(eda) or eda < MIN_EDA or eda > MAX_EDA:
        raise ValueError(f"EDA must be a number between {MIN_EDA:g} and {MAX_EDA:g}")
    if palm_result not in PALM_RESULTS:
        raise ValueError(f"Palm result must be one of: {', '.join(PALM_RESULTS)}")


def fused_status(eda: float, palm_result: str) -> FusedStatus:
    """Combine an EDA reading with a palm moisture scan into a coarse state."""
    moist = palm_result == MOISTURE_DETECTED
    if eda >= 10.0 or (eda >= 5.0 and moist):
        return FusedStatus(
            EPISODE_LIKELY,
            "High stress indicators detected based on sensor readings and palm scan. "
            "Please take a moment to relax and re-center.",
        )
    if eda >= 5.0 or moist:
        return FusedStatus(
            EARLY_ALERT,
            "Slight elevation in stress indicators detected. "
            "Consider taking a short break or a few deep breaths.",
        )
    return FusedStatus(STABLE, "All clear. Your readings are within the normal range.")


def save_eda(user_id: str, value: float, source: str = "climate-alert") -> EdaReading:
    if source not in EDA_SOURCES:
        raise ValueError(f"source must be one of: {', '.join(EDA_SOURCES)}")
    reading = EdaReading(user_id=user_id, value=float(value), source=source, timestamp=dt.datetime.utcnow())
    db.session.add(reading)
    db.session.commit()
    logger.info("EDA saved for %s: %.2f uS (%s)", user_id, reading.value, source)
    return reading


def latest_fresh_eda(user_id: str, now: Optional[dt.datetime] = None) -> Optional[float]:
    """Latest shared EDA value for the user, or None if missing or stale."""
    now = now or dt.datetime.utcnow()
    latest = EdaReading.query.filter_by(user_id=user_id).order_by(EdaReading.timestamp.desc()).first()
    if latest is None:
        return None
    age = (now - latest.timestamp).total_seconds()
    if age >= current_app.config["EDA_FRESHNESS_SECONDS"]:
        return None
    return latest.value
