"""
Climate and EDA simulator for the SweatSmart dashboard and CLI.
Generates drifting weather with mode-driven EDA, with optional CSV playback.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

EDA_MODES = {
    "Resting": (2.0, 5.0),
    "Active": (5.0, 9.0),
    "Trigger": (10.0, 15.0),
}

EXPECTED_COLUMNS = {"temperature", "humidity", "uv_index", "eda"}


def _bounded(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


@dataclass
class ClimateSimulator:
    user_id: str
    temperature: float = 25.0
    humidity: float = 60.0
    uv_index: float = 5.0
    mode: str = "Resting"
    dataset: Optional[pd.DataFrame] = None
    dataset_index: int = 0
    rng: random.Random = field(default_factory=random.Random)
    last_timestamp: float = field(default_factory=time.time)

    def set_mode(self, mode: str) -> None:
        if mode not in EDA_MODES:
            raise ValueError(f"Invalid mode. Must be one of: {', '.join(EDA_MODES)}")
        self.mode = mode

    def load_csv_dataset(self, csv_path: Path) -> None:
        """Load dataset from CSV. Expected columns: temperature, humidity, uv_index, eda."""
        self.set_dataset(pd.read_csv(csv_path))

    def set_dataset(self, df: pd.DataFrame) -> None:
        """Attach an in-memory dataset (e.g., from Streamlit upload)."""
        missing = EXPECTED_COLUMNS - set(df.columns)
        if missing:
            raise ValueError(f"Dataset missing columns: {sorted(missing)}")
        self.dataset = df.reset_index(drop=True)
        self.dataset_index = 0

    def _sample_from_dataset(self) -> Dict:
        """Return the next row from dataset, cycling when reaching the end."""
        assert self.dataset is not None
        row = self.dataset.iloc[self.dataset_index]
        self.dataset_index = (self.dataset_index + 1) % len(self.dataset)
        eda = row["eda"]
        return {
            "temperature": float(row["temperature"]),
            "humidity": float(row["humidity"]),
            "uv_index": float(row["uv_index"]),
            "eda": None if pd.isna(eda) else float(eda),
        }

    def _drift_weather(self) -> Dict:
        """Random-walk the current weather one tick."""
        self.temperature += (self.rng.random() - 0.5) * 0.5
        self.humidity = _bounded(self.humidity + (self.rng.random() - 0.5) * 2, 0, 100)
        self.uv_index = _bounded(self.uv_index + (self.rng.random() - 0.5) * 0.2, 0, 11)
        low, high = EDA_MODES[self.mode]
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "uv_index": self.uv_index,
            "eda": round(low + self.rng.random() * (high - low), 2),
        }

    def get_reading(self) -> Dict:
        """
        Get the next reading (dataset-driven if present else simulated drift).
        A timestamp is attached for downstream logging.
        """
        if self.dataset is not None and len(self.dataset) > 0:
            values = self._sample_from_dataset()
        else:
            values = self._drift_weather()

        self.last_timestamp = time.time()
        values["timestamp"] = self.last_timestamp
        values["user_id"] = self.user_id
        return values
