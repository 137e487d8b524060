import datetime as dt

import pytest

from backend.models import EdaReading
from backend.physio import (
    EARLY_ALERT,
    EPISODE_LIKELY,
    MOISTURE_DETECTED,
    NO_MOISTURE,
    STABLE,
    fused_status,
    latest_fresh_eda,
    save_eda,
    validate_fused_input,
)


@pytest.mark.parametrize(
    "eda, palm, expected",
    [
        (3.0, NO_MOISTURE, STABLE),
        (3.0, MOISTURE_DETECTED, EARLY_ALERT),
        (6.0, NO_MOISTURE, EARLY_ALERT),
        (6.0, MOISTURE_DETECTED, EPISODE_LIKELY),
        (10.0, NO_MOISTURE, EPISODE_LIKELY),
    ],
)
def test_fused_status_rules(eda, palm, expected):
    assert fused_status(eda, palm).status == expected


@pytest.mark.parametrize("eda, palm", [(-1, NO_MOISTURE), (101, NO_MOISTURE), ("5", NO_MOISTURE), (5, "wet")])
def test_validate_fused_input_rejects(eda, palm):
    with pytest.raises(ValueError):
        validate_fused_input(eda, palm)


def test_fresh_eda_is_returned(app):
    rec = save_eda("U-001", 6.5, "palm-scanner")
    assert latest_fresh_eda("U-001", rec.timestamp + dt.timedelta(minutes=4)) == 6.5


def test_stale_eda_is_ignored(app):
    rec = save_eda("U-001", 6.5)
    assert latest_fresh_eda("U-001", rec.timestamp + dt.timedelta(minutes=5)) is None


def test_unknown_eda_source_rejected(app):
    with pytest.raises(ValueError):
        save_eda("U-001", 6.5, "smartwatch")
    assert EdaReading.query.count() == 0
