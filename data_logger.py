"""
Data logging utilities for climate readings, alerts, episode logs and daily reports.
"""

from __future__ import annotations

import csv
import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

import pandas as pd

READING_HEADER = ["timestamp", "user_id", "temperature", "humidity", "uv_index", "eda", "risk_level"]
ALERT_HEADER = ["timestamp", "user_id", "risk_level", "severity", "reason"]
EPISODE_HEADER = ["timestamp", "user_id", "hdss_level", "temperature", "humidity", "uv_index", "eda"]


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


@dataclass
class DataLogger:
    reading_log_path: Path = Path("logs/climate_readings.csv")
    alert_log_path: Path = Path("logs/alerts.csv")
    episode_log_path: Path = Path("logs/episodes.csv")
    report_path: Path = Path("logs/daily_report.csv")

    def __post_init__(self):
        for path in (self.reading_log_path, self.alert_log_path, self.episode_log_path, self.report_path):
            _ensure_parent(path)
        self._init_file(self.reading_log_path, READING_HEADER)
        self._init_file(self.alert_log_path, ALERT_HEADER)
        self._init_file(self.episode_log_path, EPISODE_HEADER)

    def _init_file(self, path: Path, header: list) -> None:
        if not path.exists():
            with path.open("w", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(header)

    @staticmethod
    def _iso(reading: Dict) -> str:
        return dt.datetime.fromtimestamp(reading["timestamp"]).isoformat()

    def log_reading(self, reading: Dict) -> None:
        row = [
            self._iso(reading),
            reading["user_id"],
            reading["temperature"],
            reading["humidity"],
            reading["uv_index"],
            reading.get("eda"),
            reading.get("risk_level", ""),
        ]
        with self.reading_log_path.open("a", newline="") as f:
            csv.writer(f).writerow(row)

    def log_alert(self, reading: Dict, severity: str, reason: str) -> None:
        row = [
            self._iso(reading),
            reading["user_id"],
            reading.get("risk_level", "unknown"),
            severity,
            reason,
        ]
        with self.alert_log_path.open("a", newline="") as f:
            csv.writer(f).writerow(row)

    def log_episode(self, reading: Dict, hdss_level: int) -> None:
        if hdss_level not in (1, 2, 3, 4):
            raise ValueError("hdss_level must be 1, 2, 3 or 4")
        row = [
            self._iso(reading),
            reading["user_id"],
            hdss_level,
            reading["temperature"],
            reading["humidity"],
            reading["uv_index"],
            reading.get("eda"),
        ]
        with self.episode_log_path.open("a", newline="") as f:
            csv.writer(f).writerow(row)

    def generate_daily_report(self) -> Path:
        """Aggregate the latest day's readings into a report CSV."""
        if not self.reading_log_path.exists():
            return self.report_path

        df = pd.read_csv(self.reading_log_path)
        if df.empty:
            return self.report_path

        df["timestamp"] = pd.to_datetime(df["timestamp"])
        today = pd.Timestamp.now().normalize()
        df_today = df[df["timestamp"] >= today]

        episodes = pd.read_csv(self.episode_log_path)
        episodes["timestamp"] = pd.to_datetime(episodes["timestamp"])

        summary = {
            "date": today.date(),
            "total_readings": len(df_today),
            "mean_temperature": round(df_today["temperature"].mean(), 2),
            "max_temperature": df_today["temperature"].max(),
            "max_humidity": df_today["humidity"].max(),
            "max_uv_index": df_today["uv_index"].max(),
            "high_risk_readings": int(df_today["risk_level"].isin(["high", "extreme"]).sum()),
            "episodes_logged": int((episodes["timestamp"] >= today).sum()),
        }

        self._init_file(self.report_path, list(summary.keys()))
        with self.report_path.open("a", newline="") as f:
            csv.writer(f).writerow(summary.values())
        return self.report_path
