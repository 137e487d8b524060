import pytest

from backend.sweat_risk import (
    CRITICAL,
    REMINDER,
    RISK_LEVELS,
    WARNING,
    Thresholds,
    classify,
    heat_index,
    level_rank,
    risk_severity,
    should_trigger_alert,
)


def test_heat_index_below_80f_uses_simple_formula():
    # 25 C = 77 F -> 0.5 * (77 + 61 + 10.8 + 4.7) = 76.75 F
    assert heat_index(25.0, 50.0) == pytest.approx((76.75 - 32) * 5 / 9)


def test_heat_index_hot_humid_exceeds_air_temperature():
    assert heat_index(35.0, 75.0) > 35.0


def test_heat_index_low_humidity_adjustment_lowers_result():
    assert heat_index(38.0, 10.0) < heat_index(38.0, 14.0)


def test_heat_index_high_humidity_adjustment_applies():
    # 28 C = 82.4 F, inside the 80-87 F correction window
    temp_f = 82.4
    rh = 90.0
    base = (
        -42.379 + 2.04901523 * temp_f + 10.14333127 * rh - 0.22475541 * temp_f * rh
        - 0.00683783 * temp_f ** 2 - 0.05481717 * rh ** 2 + 0.00122874 * temp_f ** 2 * rh
        + 0.00085282 * temp_f * rh ** 2 - 0.00000199 * temp_f ** 2 * rh ** 2
    )
    adjusted = base + ((rh - 85) / 10) * ((87 - temp_f) / 5)
    assert heat_index(28.0, 90.0) == pytest.approx((adjusted - 32) * 5 / 9)


def test_heat_index_out_of_range_humidity_does_not_raise():
    assert isinstance(heat_index(30.0, 150.0), float)
    assert isinstance(heat_index(30.0, -20.0), float)


@pytest.mark.parametrize(
    "temperature, humidity, expected",
    [
        (23.99, 0, "safe"),
        (24.0, 0, "low"),
        (27.99, 0, "low"),
        (32.0, 0, "high"),
        (34.99, 0, "high"),
        (35.0, 0, "extreme"),
        (35.0, 50, "extreme"),
    ],
)
def test_band_boundaries(temperature, humidity, expected):
    assert classify(temperature, humidity, 0).level == expected


def test_moderate_band_entered_at_28():
    result = classify(28.0, 0, 0)
    # Dry moderate-band heat without EDA resolves to low but carries the band trigger
    assert result.level == "low"
    assert result.triggers == ["Temp: 28.0°C"]
    assert result.description == "Warm conditions - monitor symptoms and stay cool."


def test_level_monotonic_in_temperature():
    temps = [20, 23.9, 24, 26, 27.9, 28, 30, 31.9, 32, 34, 34.9, 35, 40]
    ranks = [level_rank(classify(t, 0, 0).level) for t in temps]
    assert ranks == sorted(ranks)


def test_humid_heat_pushes_into_higher_band():
    # 32 C at 60% feels like ~37 C
    result = classify(32.0, 60, 0)
    assert result.level == "extreme"
    assert result.triggers == ["Extreme temp: 32.0°C", "Humidity: 60%"]


def test_humid_moderate_band_stays_moderate():
    # 27 C at 72% feels like ~29 C
    result = classify(27, 72, 0)
    assert result.level == "moderate"
    assert result.message == "Moderate Risk"
    assert result.triggers == ["Temp: 27.0°C", "High humidity: 72%"]


def test_humid_moderate_band_escalates_with_uv():
    result = classify(27, 72, 10)
    assert result.level == "high"
    assert result.triggers == ["High UV: 10.0", "Temp: 27.0°C", "High humidity: 72%"]


def test_eda_escalation_without_humidity():
    assert classify(30, 50, 0, 6.0).level == "moderate"
    assert classify(30, 50, 0, 4.0).level == "low"


def test_escalator_triggers_come_first_in_fixed_order():
    result = classify(30, 72, 9, 7.25)
    assert result.triggers[:2] == ["High EDA: 7.3 µS", "High UV: 9.0"]


def test_high_band_dry_heat():
    result = classify(33, 30, 3)
    assert result.level == "high"
    assert result.message == "High Risk"
    assert result.triggers == ["High temp: 33.0°C"]
    assert result.color == "text-red-400"


def test_high_band_reached_through_heat_index():
    # 30 C at 65% feels like ~34 C
    result = classify(30, 65, 3)
    assert result.level == "high"
    assert result.triggers == ["High temp: 30.0°C", "Humidity: 65%"]


def test_hot_humid_afternoon_is_extreme():
    result = classify(33, 65, 3)
    assert result.level == "extreme"
    assert result.message == "Extreme Risk"
    assert result.triggers == ["Extreme temp: 33.0°C", "Humidity: 65%"]


def test_extreme_band_humidity_trigger():
    result = classify(36, 55, 0)
    assert result.level == "extreme"
    assert result.triggers == ["Extreme temp: 36.0°C", "Humidity: 55%"]


def test_low_band_high_humidity_variant():
    result = classify(24.5, 80, 0)
    assert result.level == "low"
    assert result.triggers == ["Temp: 24.5°C", "High humidity: 80%"]
    assert "high humidity" in result.description


def test_safe_has_no_triggers_without_escalators():
    result = classify(18, 40, 2)
    assert result.level == "safe"
    assert result.triggers == []
    assert result.message == "Conditions Optimal"


def test_safe_keeps_escalator_triggers():
    result = classify(18, 40, 9, 6.0)
    assert result.level == "safe"
    assert result.triggers == ["High EDA: 6.0 µS", "High UV: 9.0"]


def test_humidity_rounds_half_away_from_zero():
    assert classify(33, 72.5, 0).triggers[-1] == "Humidity: 73%"


def test_classify_is_pure():
    assert classify(31, 71, 8.5, 5.5) == classify(31, 71, 8.5, 5.5)


def test_severity_mapping_is_total():
    expected = {"safe": REMINDER, "low": REMINDER, "moderate": WARNING, "high": CRITICAL, "extreme": CRITICAL}
    assert {level: risk_severity(level) for level in RISK_LEVELS} == expected


def test_severity_unknown_level_is_contract_violation():
    with pytest.raises(KeyError):
        risk_severity("scorching")


def test_threshold_gate_never_overrides_band_floor():
    floor = Thresholds(temperature=-100, humidity=-100, uv_index=-100)
    for temperature in (15, 20, 25, 27.9, 29):
        decision = should_trigger_alert(temperature, 30, 0, floor)
        assert decision.should_alert is False
        assert decision.triggers == []


def test_threshold_triggers_when_exceeded():
    decision = should_trigger_alert(33, 65, 7, {"temperature": 30, "humidity": 60, "uvIndex": 6.5})
    assert decision.should_alert is True
    assert decision.triggers == [
        "🌡️ Temperature: 33.0°C (threshold: 30°C)",
        "💧 Humidity: 65% (threshold: 60%)",
        "☀️ UV Index: 7.0 (threshold: 6.5)",
    ]


def test_threshold_falls_back_to_risk_triggers():
    decision = should_trigger_alert(33, 65, 3, Thresholds(temperature=40, humidity=90, uv_index=11))
    assert decision.should_alert is True
    assert decision.triggers == ["Extreme temp: 33.0°C", "Humidity: 65%"]
