"""Database setup and initialization helpers."""

from __future__ import annotations

import datetime as dt

from flask import current_app
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def default_preferences(user_id: str):
    """Build a preference row seeded from the configured defaults."""
    from backend.models import NotificationPreference  # noqa: WPS433

    thresholds = current_app.config["DEFAULT_THRESHOLDS"]
    return NotificationPreference(
        user_id=user_id,
        enabled=True,
        location_enabled=False,
        temperature_threshold=thresholds["temperature"],
        humidity_threshold=thresholds["humidity"],
        uv_threshold=thresholds["uv_index"],
        quiet_hours_start=current_app.config["DEFAULT_QUIET_HOURS_START"],
        quiet_hours_end=current_app.config["DEFAULT_QUIET_HOURS_END"],
    )


def init_db():
    """Create tables and seed a demo user with default preferences if missing."""
    db.create_all()
    from backend.models import NotificationPreference, User  # noqa: WPS433

    if not User.query.filter_by(user_id="U-001").first():
        db.session.add(User(user_id="U-001", name="Demo User", last_seen=dt.datetime.utcnow()))

    if not NotificationPreference.query.filter_by(user_id="U-001").first():
        db.session.add(default_preferences("U-001"))

    db.session.commit()
