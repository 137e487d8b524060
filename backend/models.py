"""SQLAlchemy models for users, climate preferences, readings, notifications, episode logs."""

from __future__ import annotations

import datetime as dt

from backend.db import db
from backend.sweat_risk import Thresholds


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, unique=True, nullable=False)
    name = db.Column(db.String, nullable=False)
    last_seen = db.Column(db.DateTime, default=dt.datetime.utcnow)


class NotificationPreference(db.Model):
    __tablename__ = "notification_preferences"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, unique=True, nullable=False)
    enabled = db.Column(db.Boolean, default=True)
    location_enabled = db.Column(db.Boolean, default=False)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    temperature_threshold = db.Column(db.Float, nullable=False)
    humidity_threshold = db.Column(db.Float, nullable=False)
    uv_threshold = db.Column(db.Float, nullable=False)
    quiet_hours_start = db.Column(db.String, nullable=True)  # HH:MM
    quiet_hours_end = db.Column(db.String, nullable=True)  # HH:MM

    def thresholds(self) -> Thresholds:
        return Thresholds(
            temperature=self.temperature_threshold,
            humidity=self.humidity_threshold,
            uv_index=self.uv_threshold,
        )

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "enabled": self.enabled,
            "location_enabled": self.location_enabled,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "temperature_threshold": self.temperature_threshold,
            "humidity_threshold": self.humidity_threshold,
            "uv_threshold": self.uv_threshold,
            "quiet_hours_start": self.quiet_hours_start,
            "quiet_hours_end": self.quiet_hours_end,
        }


class ClimateReading(db.Model):
    __tablename__ = "climate_readings"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, nullable=False)
    timestamp = db.Column(db.DateTime, default=dt.datetime.utcnow)
    temperature = db.Column(db.Float)
    humidity = db.Column(db.Float)
    uv_index = db.Column(db.Float)
    eda = db.Column(db.Float, nullable=True)
    heat_index = db.Column(db.Float)
    risk_level = db.Column(db.String)
    source = db.Column(db.String)  # manual | weather_api | fallback | simulated

    def to_dict(self):
        return {
            "timestamp": self.timestamp.isoformat(),
            "temperature": self.temperature,
            "humidity": self.humidity,
            "uv_index": self.uv_index,
            "eda": self.eda,
            "heat_index": self.heat_index,
            "risk_level": self.risk_level,
            "source": self.source,
        }


class EdaReading(db.Model):
    __tablename__ = "eda_readings"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, nullable=False)
    timestamp = db.Column(db.DateTime, default=dt.datetime.utcnow)
    value = db.Column(db.Float, nullable=False)
    source = db.Column(db.String)  # palm-scanner | climate-alert


class ClimateNotification(db.Model):
    __tablename__ = "climate_notifications"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, nullable=False)
    timestamp = db.Column(db.DateTime, default=dt.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=dt.datetime.utcnow)
    severity = db.Column(db.String)  # REMINDER | WARNING | CRITICAL
    risk_level = db.Column(db.String)
    title = db.Column(db.String)
    body = db.Column(db.String)
    triggers = db.Column(db.JSON, default=list)
    weather_data = db.Column(db.JSON, nullable=True)
    read = db.Column(db.Boolean, default=False)
    dismissed = db.Column(db.Boolean, default=False)
    count = db.Column(db.Integer, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "severity": self.severity,
            "risk_level": self.risk_level,
            "title": self.title,
            "body": self.body,
            "triggers": self.triggers or [],
            "weather_data": self.weather_data,
            "read": self.read,
            "dismissed": self.dismissed,
            "count": self.count,
        }


class EpisodeLog(db.Model):
    __tablename__ = "episode_logs"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String, nullable=False)
    timestamp = db.Column(db.DateTime, default=dt.datetime.utcnow)
    hdss_level = db.Column(db.Integer, nullable=False)  # 1-4
    temperature = db.Column(db.Float, nullable=True)
    humidity = db.Column(db.Float, nullable=True)
    uv_index = db.Column(db.Float, nullable=True)
    eda = db.Column(db.Float, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "hdss_level": self.hdss_level,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "uv_index": self.uv_index,
            "eda": self.eda,
        }
