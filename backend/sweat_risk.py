"""
Sweat risk classification for hyperhidrosis climate alerts.

Converts ambient temperature, humidity, UV index and an optional EDA reading
into one of five ordered risk levels with human-readable trigger explanations,
and maps levels to notification severities. Everything here is pure and
stateless.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Dict, List, Mapping, Optional, Union

SAFE = "safe"
LOW = "low"
MODERATE = "moderate"
HIGH = "high"
EXTREME = "extreme"

RISK_LEVELS = (SAFE, LOW, MODERATE, HIGH, EXTREME)

REMINDER = "REMINDER"
WARNING = "WARNING"
CRITICAL = "CRITICAL"

HIGH_EDA_US = 5.0
HIGH_UV_INDEX = 8

LEVEL_COLORS = {
    SAFE: "text-green-400",
    LOW: "text-yellow-300",
    MODERATE: "text-yellow-400",
    HIGH: "text-red-400",
    EXTREME: "text-red-500",
}

LEVEL_MESSAGES = {
    SAFE: "Conditions Optimal",
    LOW: "Low Risk",
    MODERATE: "Moderate Risk",
    HIGH: "High Risk",
    EXTREME: "Extreme Risk",
}

# Wide enough for any finite float at one decimal place
_WIDE = Context(prec=400)

_SEVERITY = {
    SAFE: REMINDER,
    LOW: REMINDER,
    MODERATE: WARNING,
    HIGH: CRITICAL,
    EXTREME: CRITICAL,
}


@dataclass
class SweatRiskResult:
    level: str  # safe | low | moderate | high | extreme
    message: str
    description: str
    color: str
    triggers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class Thresholds:
    temperature: float
    humidity: float
    uv_index: float

    @classmethod
    def from_mapping(cls, data: Mapping) -> "Thresholds":
        """Accepts either snake_case or camelCase UV key."""
        uv = data["uv_index"] if "uv_index" in data else data["uvIndex"]
        return cls(
            temperature=float(data["temperature"]),
            humidity=float(data["humidity"]),
            uv_index=float(uv),
        )


@dataclass
class AlertDecision:
    should_alert: bool
    triggers: List[str]


def level_rank(level: str) -> int:
    return RISK_LEVELS.index(level)


def _fixed(value: float, digits: int) -> str:
    """Fixed-point text with ties rounded away from zero on the exact binary value."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        value = 0.0
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE))


def _plain(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def heat_index(temp_c: float, humidity: float) -> float:
    """Feels-like temperature in Celsius (Rothfusz regression, NOAA adjustments)."""
    temp_f = temp_c * 9 / 5 + 32

    if temp_f < 80:
        hi_f = 0.5 * (temp_f + 61.0 + (temp_f - 68.0) * 1.2 + humidity * 0.094)
        return (hi_f - 32) * 5 / 9

    hi_f = (
        -42.379
        + 2.04901523 * temp_f
        + 10.14333127 * humidity
        - 0.22475541 * temp_f * humidity
        - 0.00683783 * temp_f * temp_f
        - 0.05481717 * humidity * humidity
        + 0.00122874 * temp_f * temp_f * humidity
        + 0.00085282 * temp_f * humidity * humidity
        - 0.00000199 * temp_f * temp_f * humidity * humidity
    )

    if humidity < 13 and 80 <= temp_f <= 112:
        hi_f -= ((13 - humidity) / 4) * math.sqrt((17 - abs(temp_f - 95)) / 17)
    elif humidity > 85 and 80 <= temp_f <= 87:
        hi_f += ((humidity - 85) / 10) * ((87 - temp_f) / 5)

    return (hi_f - 32) * 5 / 9


def effective_temperature(temperature: float, humidity: float) -> float:
    return max(temperature, heat_index(temperature, humidity))


def _result(level: str, description: str, triggers: List[str]) -> SweatRiskResult:
    return SweatRiskResult(
        level=level,
        message=LEVEL_MESSAGES[level],
        description=description,
        color=LEVEL_COLORS[level],
        triggers=triggers,
    )


def classify(
    temperature: float,
    humidity: float,
    uv_index: float,
    eda: Optional[float] = None,
) -> SweatRiskResult:
    """
    Classify sweat risk from weather and an optional EDA reading (µS).

    Bands on effective temperature: <24 safe, 24-28 low, 28-32 moderate,
    32-35 high, >=35 extreme. Humidity, UV and EDA escalate inside the
    moderate band only.
    """
    triggers: List[str] = []
    effective = effective_temperature(temperature, humidity)

    is_high_eda = eda is not None and eda > HIGH_EDA_US
    if is_high_eda:
        triggers.append(f"High EDA: {_fixed(eda, 1)} µS")

    is_high_uv = uv_index >= HIGH_UV_INDEX
    if is_high_uv:
        triggers.append(f"High UV: {_fixed(uv_index, 1)}")

    if effective < 24:
        return _result(SAFE, "Comfortable conditions for hyperhidrosis management.", triggers)

    if effective < 28:
        triggers.append(f"Temp: {_fixed(temperature, 1)}°C")
        if humidity >= 75:
            triggers.append(f"High humidity: {_fixed(humidity, 0)}%")
            return _result(LOW, "Mild conditions with high humidity - stay hydrated and monitor.", triggers)
        return _result(LOW, "Mild warmth - consider light clothing and stay hydrated.", triggers)

    if effective < 32:
        triggers.append(f"Temp: {_fixed(temperature, 1)}°C")
        if humidity >= 70:
            triggers.append(f"High humidity: {_fixed(humidity, 0)}%")
            if is_high_eda or is_high_uv:
                return _result(
                    HIGH,
                    "High sweat conditions detected - use cooling aids and consider staying indoors.",
                    triggers,
                )
            return _result(MODERATE, "Sweating likely - prepare cooling aids and antiperspirant.", triggers)
        # Lower humidity: only a high EDA keeps this band at moderate.
        level = MODERATE if is_high_eda else LOW
        return _result(level, "Warm conditions - monitor symptoms and stay cool.", triggers)

    if effective < 35:
        triggers.append(f"High temp: {_fixed(temperature, 1)}°C")
        if humidity >= 60:
            triggers.append(f"Humidity: {_fixed(humidity, 0)}%")
        return _result(
            HIGH,
            "High sweat risk - use cooling devices, stay in AC, consider iontophoresis.",
            triggers,
        )

    triggers.append(f"Extreme temp: {_fixed(temperature, 1)}°C")
    if humidity >= 50:
        triggers.append(f"Humidity: {_fixed(humidity, 0)}%")
    return _result(
        EXTREME,
        "Extreme heat - stay indoors with AC, avoid outdoor activities if possible.",
        triggers,
    )


def risk_severity(level: str) -> str:
    """Notification urgency for a risk level: REMINDER, WARNING or CRITICAL."""
    return _SEVERITY[level]


def should_trigger_alert(
    temperature: float,
    humidity: float,
    uv_index: float,
    thresholds: Union[Thresholds, Mapping],
) -> AlertDecision:
    """
    Decide whether conditions warrant a climate alert for a user.

    The risk band is the primary gate: nothing below moderate alerts, however
    low the user's thresholds are. Above that, exceeded thresholds explain the
    alert, falling back to the classifier's own triggers.
    """
    if not isinstance(thresholds, Thresholds):
        thresholds = Thresholds.from_mapping(thresholds)

    risk = classify(temperature, humidity, uv_index)
    if risk.level in (SAFE, LOW):
        return AlertDecision(should_alert=False, triggers=[])

    triggers: List[str] = []
    if temperature >= thresholds.temperature:
        triggers.append(
            f"🌡️ Temperature: {_fixed(temperature, 1)}°C (threshold: {_plain(thresholds.temperature)}°C)"
        )
    if humidity >= thresholds.humidity:
        triggers.append(f"💧 Humidity: {_fixed(humidity, 0)}% (threshold: {_plain(thresholds.humidity)}%)")
    if uv_index >= thresholds.uv_index:
        triggers.append(f"☀️ UV Index: {_fixed(uv_index, 1)} (threshold: {_plain(thresholds.uv_index)})")

    return AlertDecision(should_alert=True, triggers=triggers or list(risk.triggers))
