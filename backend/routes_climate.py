"""Climate risk endpoints: classification, user checks, preferences, notifications."""

from __future__ import annotations

import datetime as dt
import math

from flask import Blueprint, current_app, jsonify, request

from backend.alerts import dispatch_climate_alert
from backend.db import db, default_preferences
from backend.models import ClimateNotification, ClimateReading, EpisodeLog, NotificationPreference, User
from backend.monitor import monitor_all_users, record_reading
from backend.physio import fused_status, latest_fresh_eda, save_eda, validate_fused_input
from backend.rate_limit import allow as rate_allow
from backend.sweat_risk import Thresholds, classify, effective_temperature, heat_index, risk_severity, should_trigger_alert
from backend.weather import WeatherClient, get_weather_or_fallback

climate_bp = Blueprint("climate", __name__)

READING_FIELDS = ("temperature", "humidity", "uv_index")


def _weather_client() -> WeatherClient:
    return current_app.extensions.get("weather_client") or WeatherClient(
        current_app.config["WEATHER_API_URL"], current_app.config["WEATHER_TIMEOUT"]
    )


def _number(payload: dict, key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_number(payload: dict, key: str):
    if payload.get(key) is None:
        return None
    return _number(payload, key)


def _parse_reading(payload: dict) -> dict:
    missing = [k for k in READING_FIELDS if k not in payload]
    if missing:
        raise ValueError(f"missing fields: {', '.join(missing)}")
    reading = {k: _number(payload, k) for k in READING_FIELDS}
    reading["eda"] = _optional_number(payload, "eda")
    return reading


def _json_object():
    """The request body when it is a JSON object, else None."""
    payload = request.get_json(force=True)
    return payload if isinstance(payload, dict) else None


def _bad_body():
    return jsonify({"error": "request body must be a JSON object"}), 400


def _get_user(user_id: str):
    return User.query.filter_by(user_id=user_id).first()


def _get_prefs(user_id: str) -> NotificationPreference:
    prefs = NotificationPreference.query.filter_by(user_id=user_id).first()
    if prefs is None:
        prefs = default_preferences(user_id)
        db.session.add(prefs)
        db.session.commit()
    return prefs


@climate_bp.route("/risk", methods=["POST"])
def risk():
    payload = _json_object()
    if payload is None:
        return _bad_body()
    try:
        reading = _parse_reading(payload)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    result = classify(reading["temperature"], reading["humidity"], reading["uv_index"], reading["eda"])
    response = result.to_dict()
    response.update(
        {
            "heat_index": round(heat_index(reading["temperature"], reading["humidity"]), 2),
            "effective_temperature": round(effective_temperature(reading["temperature"], reading["humidity"]), 2),
            "severity": risk_severity(result.level),
        }
    )
    return jsonify(response)


@climate_bp.route("/alert-check", methods=["POST"])
def alert_check():
    payload = _json_object()
    if payload is None:
        return _bad_body()
    try:
        reading = _parse_reading(payload)
        thresholds = Thresholds.from_mapping(payload.get("thresholds") or {})
    except (KeyError, TypeError, ValueError) as exc:
        return jsonify({"error": f"invalid request: {exc}"}), 400
    decision = should_trigger_alert(reading["temperature"], reading["humidity"], reading["uv_index"], thresholds)
    return jsonify({"should_alert": decision.should_alert, "triggers": decision.triggers})


@climate_bp.route("/fused-status", methods=["POST"])
def fused():
    payload = _json_object()
    if payload is None:
        return _bad_body()
    eda = payload.get("eda")
    palm_result = payload.get("palm_result")
    try:
        validate_fused_input(eda, palm_result)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    status = fused_status(eda, palm_result)
    return jsonify({"status": status.status, "explanation": status.explanation})


@climate_bp.route("/weather", methods=["GET"])
def weather():
    try:
        lat = float(request.args["lat"])
        lon = float(request.args["lon"])
    except (KeyError, ValueError):
        return jsonify({"error": "lat and lon are required"}), 400
    reading, simulated = get_weather_or_fallback(_weather_client(), lat, lon)
    payload = reading.to_dict()
    payload["simulated"] = simulated
    return jsonify(payload)


@climate_bp.route("/users/<user_id>/preferences", methods=["GET", "PUT"])
def preferences(user_id):
    if not _get_user(user_id):
        return jsonify({"error": "user not found"}), 404
    prefs = _get_prefs(user_id)
    if request.method == "GET":
        return jsonify(prefs.to_dict())

    payload = _json_object()
    if payload is None:
        return _bad_body()
    try:
        for key in ("temperature_threshold", "humidity_threshold", "uv_threshold", "latitude", "longitude"):
            if key in payload:
                setattr(prefs, key, _optional_number(payload, key))
        for key in ("enabled", "location_enabled"):
            if key in payload:
                setattr(prefs, key, bool(payload[key]))
        for key in ("quiet_hours_start", "quiet_hours_end"):
            if key in payload:
                value = payload[key]
                if value:
                    dt.datetime.strptime(value, "%H:%M")
                setattr(prefs, key, value or None)
    except (TypeError, ValueError) as exc:
        db.session.rollback()
        return jsonify({"error": str(exc)}), 400
    if None in (prefs.temperature_threshold, prefs.humidity_threshold, prefs.uv_threshold):
        db.session.rollback()
        return jsonify({"error": "thresholds cannot be null"}), 400
    db.session.commit()
    return jsonify(prefs.to_dict())


@climate_bp.route("/users/<user_id>/eda", methods=["POST"])
def submit_eda(user_id):
    if not _get_user(user_id):
        return jsonify({"error": "user not found"}), 404
    payload = _json_object()
    if payload is None:
        return _bad_body()
    try:
        value = _number(payload, "eda")
        rec = save_eda(user_id, value, payload.get("source", "climate-alert"))
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"eda": rec.value, "source": rec.source, "timestamp": rec.timestamp.isoformat()})


@climate_bp.route("/users/<user_id>/check", methods=["POST"])
def check(user_id):
    user = _get_user(user_id)
    if not user:
        return jsonify({"error": "user not found"}), 404
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return _bad_body()
    if not rate_allow(user_id):
        return jsonify({"error": "rate limit"}), 429

    prefs = _get_prefs(user_id)
    now = dt.datetime.utcnow()

    try:
        supplied = {k: _number(payload, k) for k in READING_FIELDS if k in payload}
        eda = _optional_number(payload, "eda")
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    if len(supplied) == len(READING_FIELDS):
        reading = supplied
        source = "manual"
    elif prefs.latitude is not None and prefs.longitude is not None:
        # Fields sent in the body override the provider's values
        weather_reading, simulated = get_weather_or_fallback(_weather_client(), prefs.latitude, prefs.longitude)
        reading = weather_reading.to_dict()
        reading.update(supplied)
        source = "fallback" if simulated else "weather_api"
    else:
        return jsonify({"error": "readings or a stored location are required"}), 400
    reading["eda"] = eda

    if reading.get("eda") is None:
        reading["eda"] = latest_fresh_eda(user_id, now)

    outcome = dispatch_climate_alert(user_id, reading, prefs, now=now)
    record_reading(user_id, reading, outcome.risk.level, source, now)
    user.last_seen = now
    db.session.commit()

    response = outcome.risk.to_dict()
    response.update(
        {
            "severity": outcome.severity,
            "source": source,
            "reading": {k: reading.get(k) for k in (*READING_FIELDS, "eda")},
            "dispatch": outcome.to_dict(),
        }
    )
    return jsonify(response)


@climate_bp.route("/users/<user_id>/notifications", methods=["GET"])
def notifications(user_id):
    include_dismissed = request.args.get("include_dismissed") == "1"
    query = ClimateNotification.query.filter_by(user_id=user_id)
    if not include_dismissed:
        query = query.filter_by(dismissed=False)
    items = query.order_by(ClimateNotification.timestamp.desc()).all()
    return jsonify([n.to_dict() for n in items])


def _user_notification(user_id: str, notification_id: int):
    notification = db.session.get(ClimateNotification, notification_id)
    if notification is None or notification.user_id != user_id:
        return None
    return notification


@climate_bp.route("/users/<user_id>/notifications/<int:notification_id>/read", methods=["POST"])
def mark_read(user_id, notification_id):
    notification = _user_notification(user_id, notification_id)
    if not notification:
        return jsonify({"error": "notification not found"}), 404
    notification.read = True
    db.session.commit()
    return jsonify({"message": "read"})


@climate_bp.route("/users/<user_id>/notifications/<int:notification_id>/dismiss", methods=["POST"])
def dismiss(user_id, notification_id):
    notification = _user_notification(user_id, notification_id)
    if not notification:
        return jsonify({"error": "notification not found"}), 404
    notification.dismissed = True
    db.session.commit()
    return jsonify({"message": "dismissed"})


@climate_bp.route("/users/<user_id>/notifications", methods=["DELETE"])
def clear_notifications(user_id):
    deleted = ClimateNotification.query.filter_by(user_id=user_id).delete()
    db.session.commit()
    return jsonify({"message": "cleared", "deleted": deleted})


@climate_bp.route("/users/<user_id>/logs", methods=["POST"])
def log_episode(user_id):
    if not _get_user(user_id):
        return jsonify({"error": "user not found"}), 404
    payload = _json_object()
    if payload is None:
        return _bad_body()
    level = payload.get("hdss_level")
    if isinstance(level, bool) or level not in (1, 2, 3, 4):
        return jsonify({"error": "hdss_level must be 1, 2, 3 or 4"}), 400

    latest = (
        ClimateReading.query.filter_by(user_id=user_id).order_by(ClimateReading.timestamp.desc()).first()
    )
    entry = EpisodeLog(
        user_id=user_id,
        timestamp=dt.datetime.utcnow(),
        hdss_level=level,
        temperature=latest.temperature if latest else None,
        humidity=latest.humidity if latest else None,
        uv_index=latest.uv_index if latest else None,
        eda=latest.eda if latest else None,
    )
    db.session.add(entry)
    db.session.commit()
    return jsonify(entry.to_dict()), 201


@climate_bp.route("/monitor", methods=["POST"])
def monitor():
    return jsonify(monitor_all_users(_weather_client()))
