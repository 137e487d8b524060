"""Reporting endpoints: reading history and daily CSV summaries."""

from __future__ import annotations

import datetime as dt
import math
from pathlib import Path

import pandas as pd
from flask import Blueprint, current_app, jsonify, request

from backend.models import ClimateNotification, ClimateReading, EpisodeLog

reports_bp = Blueprint("reports", __name__)


@reports_bp.route("/users/<user_id>/history", methods=["GET"])
def history(user_id):
    try:
        hours = float(request.args.get("hours", 24))
        if not math.isfinite(hours) or hours < 0:
            raise ValueError(hours)
        since = dt.datetime.utcnow() - dt.timedelta(hours=hours)
    except (OverflowError, ValueError):
        return jsonify({"error": "hours must be a finite, non-negative number"}), 400
    readings = (
        ClimateReading.query.filter(ClimateReading.user_id == user_id, ClimateReading.timestamp >= since)
        .order_by(ClimateReading.timestamp.asc())
        .all()
    )
    return jsonify([r.to_dict() for r in readings])


@reports_bp.route("/daily", methods=["GET"])
def daily_report():
    date_str = request.args.get("date")
    try:
        date = dt.datetime.strptime(date_str, "%Y-%m-%d").date() if date_str else dt.date.today()
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400
    start = dt.datetime.combine(date, dt.time.min)
    end = dt.datetime.combine(date, dt.time.max)

    readings = ClimateReading.query.filter(ClimateReading.timestamp >= start, ClimateReading.timestamp <= end).all()
    notifications = ClimateNotification.query.filter(
        ClimateNotification.timestamp >= start, ClimateNotification.timestamp <= end
    ).all()
    episodes = EpisodeLog.query.filter(EpisodeLog.timestamp >= start, EpisodeLog.timestamp <= end).all()

    if not readings:
        return jsonify({"error": "no data"}), 404

    df = pd.DataFrame(
        [
            {
                "user_id": r.user_id,
                "timestamp": r.timestamp,
                "temperature": r.temperature,
                "humidity": r.humidity,
                "uv_index": r.uv_index,
                "heat_index": r.heat_index,
                "risk_level": r.risk_level,
            }
            for r in readings
        ]
    )
    summary_rows = []
    for user_id, group in df.groupby("user_id"):
        total = len(group)
        row = {
            "user_id": user_id,
            "date": date,
            "total_readings": total,
            "total_alerts": len([n for n in notifications if n.user_id == user_id]),
            "episodes_logged": len([e for e in episodes if e.user_id == user_id]),
            "avg_temp": round(group["temperature"].mean(), 2),
            "max_temp": round(group["temperature"].max(), 2),
            "avg_humidity": round(group["humidity"].mean(), 2),
            "max_uv": round(group["uv_index"].max(), 2),
            "max_heat_index": round(group["heat_index"].max(), 2),
        }
        for level in ("safe", "low", "moderate", "high", "extreme"):
            row[f"%{level}"] = round((group["risk_level"] == level).sum() / total * 100, 2)
        summary_rows.append(row)

    reports_dir = Path(current_app.config["REPORTS_DIR"])
    reports_dir.mkdir(parents=True, exist_ok=True)
    report_path = reports_dir / f"daily_report_{date}.csv"
    pd.DataFrame(summary_rows).to_csv(report_path, index=False)

    alerts_path = reports_dir / f"notifications_{date}.csv"
    pd.DataFrame(
        [
            {
                "timestamp": n.timestamp,
                "user_id": n.user_id,
                "severity": n.severity,
                "risk_level": n.risk_level,
                "body": n.body,
                "count": n.count,
                "read": n.read,
                "dismissed": n.dismissed,
            }
            for n in notifications
        ],
        columns=["timestamp", "user_id", "severity", "risk_level", "body", "count", "read", "dismissed"],
    ).to_csv(alerts_path, index=False)

    return jsonify({"summary": str(report_path), "notifications": str(alerts_path), "users": len(summary_rows)})
