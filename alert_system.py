"""
Alert system handling on-screen climate alerts, sound cue generation, and logging.
"""

from __future__ import annotations

import datetime as dt
import io
import wave
from typing import Dict, Tuple

import numpy as np

from backend.sweat_risk import CRITICAL, WARNING, SweatRiskResult, risk_severity
from data_logger import DataLogger

# Higher pitch for more urgent alerts
TONE_HZ = {WARNING: 660.0, CRITICAL: 880.0}


class AlertSystem:
    def __init__(self, data_logger: DataLogger):
        self.data_logger = data_logger
        self._audio_cache: Dict[float, bytes] = {}

    def _generate_beep(self, seconds: float = 0.35, freq: float = 880.0) -> bytes:
        """Generate a short beep sound."""
        if freq in self._audio_cache:
            return self._audio_cache[freq]
        rate = 44100
        t = np.linspace(0, seconds, int(rate * seconds), False)
        tone = 0.5 * np.sin(freq * 2 * np.pi * t)
        audio = (tone * 32767).astype(np.int16)
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wav_file:
            wav_file.setnchannels(1)
            wav_file.setsampwidth(2)
            wav_file.setframerate(rate)
            wav_file.writeframes(audio.tobytes())
        self._audio_cache[freq] = buf.getvalue()
        return self._audio_cache[freq]

    def should_alert(self, severity: str) -> bool:
        return severity in {WARNING, CRITICAL}

    def handle_alert(self, reading: Dict, risk: SweatRiskResult) -> Tuple[str, bytes]:
        """Persist alert and return message + audio bytes for UI playback."""
        severity = risk_severity(risk.level)
        reading_with_level = dict(reading)
        reading_with_level["risk_level"] = risk.level
        reason = ", ".join(risk.triggers) or risk.message
        self.data_logger.log_alert(reading_with_level, severity, reason)
        timestamp_str = dt.datetime.fromtimestamp(reading["timestamp"]).strftime("%H:%M:%S")
        message = f"{timestamp_str} | {risk.message} | {reason}"
        return message, self._generate_beep(freq=TONE_HZ.get(severity, 440.0))
