import datetime as dt
import unittest.mock as mock

import pytest

from backend.db import db, default_preferences
from backend.models import ClimateNotification, ClimateReading, NotificationPreference, User
from backend.weather import WeatherClientError, WeatherReading


def _disable_quiet_hours(client):
    client.put("/climate/users/U-001/preferences", json={"quiet_hours_start": None, "quiet_hours_end": None})


def test_healthz(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}


def test_risk_endpoint(client):
    r = client.post("/climate/risk", json={"temperature": 33, "humidity": 30, "uv_index": 3})
    assert r.status_code == 200
    body = r.get_json()
    assert body["level"] == "high"
    assert body["severity"] == "CRITICAL"
    assert body["triggers"] == ["High temp: 33.0°C"]
    assert body["effective_temperature"] == 33.0


def test_risk_endpoint_validates_input(client):
    r = client.post("/climate/risk", json={"temperature": 33, "humidity": "wet"})
    assert r.status_code == 400
    assert "missing fields" in r.get_json()["error"]

    r = client.post("/climate/risk", json={"temperature": 33, "humidity": "wet", "uv_index": 1})
    assert r.status_code == 400


def test_alert_check_endpoint(client):
    payload = {
        "temperature": 33,
        "humidity": 65,
        "uv_index": 3,
        "thresholds": {"temperature": 30, "humidity": 90, "uv_index": 8},
    }
    body = client.post("/climate/alert-check", json=payload).get_json()
    assert body == {"should_alert": True, "triggers": ["🌡️ Temperature: 33.0°C (threshold: 30°C)"]}

    payload["thresholds"] = {}
    assert client.post("/climate/alert-check", json=payload).status_code == 400


def test_fused_status_endpoint(client):
    r = client.post("/climate/fused-status", json={"eda": 7.0, "palm_result": "Moisture detected."})
    assert r.get_json()["status"] == "Episode Likely"
    r = client.post("/climate/fused-status", json={"eda": 500, "palm_result": "Moisture detected."})
    assert r.status_code == 400


def test_weather_endpoint_falls_back(app, client):
    fake = mock.Mock()
    fake.fetch_current.side_effect = WeatherClientError("down")
    app.extensions["weather_client"] = fake
    body = client.get("/climate/weather?lat=1.5&lon=2.5").get_json()
    assert body["simulated"] is True
    assert body["temperature"] == 22.0
    assert client.get("/climate/weather").status_code == 400


def test_preferences_roundtrip(client):
    body = client.get("/climate/users/U-001/preferences").get_json()
    assert body["temperature_threshold"] == 28.0
    assert body["quiet_hours_start"] == "22:00"

    r = client.put(
        "/climate/users/U-001/preferences",
        json={"temperature_threshold": 31, "latitude": 25.2, "longitude": 55.3, "location_enabled": True},
    )
    assert r.status_code == 200
    assert r.get_json()["temperature_threshold"] == 31.0
    assert r.get_json()["location_enabled"] is True

    assert client.put("/climate/users/U-001/preferences", json={"quiet_hours_end": "7pm"}).status_code == 400
    assert client.put("/climate/users/U-001/preferences", json={"uv_threshold": None}).status_code == 400
    assert client.get("/climate/users/nobody/preferences").status_code == 404


def test_check_with_manual_reading_sends_notification(client):
    _disable_quiet_hours(client)
    r = client.post("/climate/users/U-001/check", json={"temperature": 36, "humidity": 40, "uv_index": 9})
    assert r.status_code == 200
    body = r.get_json()
    assert body["level"] == "extreme"
    assert body["source"] == "manual"
    assert body["dispatch"]["outcome"] == "sent"
    assert ClimateReading.query.count() == 1
    assert ClimateNotification.query.count() == 1


def test_check_uses_fresh_eda(client):
    client.post("/climate/users/U-001/eda", json={"eda": 6.0, "source": "palm-scanner"})
    body = client.post(
        "/climate/users/U-001/check", json={"temperature": 30, "humidity": 50, "uv_index": 0}
    ).get_json()
    assert body["reading"]["eda"] == 6.0
    assert body["level"] == "moderate"
    assert body["triggers"][0] == "High EDA: 6.0 µS"


def test_check_fetches_weather_for_stored_location(app, client):
    prefs = NotificationPreference.query.filter_by(user_id="U-001").first()
    prefs.latitude, prefs.longitude = 25.2, 55.3
    db.session.commit()
    fake = mock.Mock()
    fake.fetch_current.return_value = WeatherReading(18.0, 40.0, 2.0, "Current conditions", "Dubai")
    app.extensions["weather_client"] = fake
    body = client.post("/climate/users/U-001/check", json={}).get_json()
    assert body["source"] == "weather_api"
    assert body["level"] == "safe"
    assert body["dispatch"]["outcome"] == "no_alert"
    fake.fetch_current.assert_called_once_with(25.2, 55.3)


def test_check_merges_partial_body_with_weather(app, client):
    prefs = NotificationPreference.query.filter_by(user_id="U-001").first()
    prefs.latitude, prefs.longitude = 25.2, 55.3
    db.session.commit()
    fake = mock.Mock()
    fake.fetch_current.return_value = WeatherReading(18.0, 40.0, 2.0, "Current conditions")
    app.extensions["weather_client"] = fake

    body = client.post("/climate/users/U-001/check", json={"temperature": 40}).get_json()

    assert body["reading"] == {"temperature": 40.0, "humidity": 40.0, "uv_index": 2.0, "eda": None}
    assert body["source"] == "weather_api"
    assert body["level"] == "extreme"
    assert ClimateReading.query.one().temperature == 40.0


def test_check_rejects_bad_partial_body(client):
    assert client.post("/climate/users/U-001/check", json={"temperature": "hot"}).status_code == 400
    # No stored location to fill in the rest
    assert client.post("/climate/users/U-001/check", json={"temperature": 40}).status_code == 400


def test_check_requires_reading_or_location(client):
    assert client.post("/climate/users/U-001/check", json={}).status_code == 400
    assert client.post("/climate/users/ghost/check", json={}).status_code == 404


def test_check_is_rate_limited(client):
    payload = {"temperature": 20, "humidity": 40, "uv_index": 1}
    codes = [client.post("/climate/users/U-001/check", json=payload).status_code for _ in range(3)]
    assert codes[-1] == 429


def test_notification_lifecycle(client):
    _disable_quiet_hours(client)
    client.post("/climate/users/U-001/check", json={"temperature": 36, "humidity": 40, "uv_index": 9})
    items = client.get("/climate/users/U-001/notifications").get_json()
    assert len(items) == 1
    nid = items[0]["id"]
    assert client.post(f"/climate/users/U-001/notifications/{nid}/read").status_code == 200
    assert client.post(f"/climate/users/U-001/notifications/{nid}/dismiss").status_code == 200
    assert client.get("/climate/users/U-001/notifications").get_json() == []
    assert len(client.get("/climate/users/U-001/notifications?include_dismissed=1").get_json()) == 1
    assert client.post("/climate/users/U-002/notifications/{}/read".format(nid)).status_code == 404
    assert client.delete("/climate/users/U-001/notifications").get_json()["deleted"] == 1


def test_episode_log_snapshots_latest_reading(client):
    client.post("/climate/users/U-001/check", json={"temperature": 29, "humidity": 55, "uv_index": 4})
    r = client.post("/climate/users/U-001/logs", json={"hdss_level": 3})
    assert r.status_code == 201
    assert r.get_json()["temperature"] == 29.0
    assert client.post("/climate/users/U-001/logs", json={"hdss_level": 5}).status_code == 400


def test_monitor_endpoint(app, client):
    client.put(
        "/climate/users/U-001/preferences",
        json={"latitude": 25.2, "longitude": 55.3, "location_enabled": True},
    )
    fake = mock.Mock()
    fake.fetch_current.side_effect = WeatherClientError("down")
    app.extensions["weather_client"] = fake
    body = client.post("/climate/monitor").get_json()
    assert body["success"] is True
    assert body["monitored"] == 1
    assert body["errors"] == 0
    assert ClimateReading.query.filter_by(source="fallback").count() == 1


def test_history_and_daily_report(app, client, tmp_path):
    client.post("/climate/users/U-001/check", json={"temperature": 29, "humidity": 55, "uv_index": 4})
    history = client.get("/reports/users/U-001/history?hours=1").get_json()
    assert len(history) == 1
    assert history[0]["risk_level"] == "low"

    r = client.get(f"/reports/daily?date={dt.datetime.utcnow().date()}")
    assert r.status_code == 200
    assert (tmp_path / "reports").exists()
    assert client.get("/reports/daily?date=1999-01-01").status_code == 404
    assert client.get("/reports/daily?date=yesterday").status_code == 400


def test_history_rejects_unbounded_window(client):
    for hours in ("inf", "nan", "-1", "1e12"):
        assert client.get(f"/reports/users/U-001/history?hours={hours}").status_code == 400


@pytest.mark.parametrize(
    "method, url",
    [
        ("post", "/climate/risk"),
        ("post", "/climate/alert-check"),
        ("post", "/climate/fused-status"),
        ("put", "/climate/users/U-001/preferences"),
        ("post", "/climate/users/U-001/eda"),
        ("post", "/climate/users/U-001/check"),
        ("post", "/climate/users/U-001/logs"),
    ],
)
def test_non_object_body_rejected(client, method, url):
    for body in ([1, 2], 7, "text"):
        r = getattr(client, method)(url, json=body)
        assert r.status_code == 400
        assert r.get_json()["error"] == "request body must be a JSON object"


def test_monitor_continues_after_user_failure(app, client):
    db.session.add(User(user_id="U-002", name="Second User"))
    db.session.add(default_preferences("U-002"))
    for user_id, lat in (("U-001", 1.0), ("U-002", 2.0)):
        prefs = NotificationPreference.query.filter_by(user_id=user_id).first()
        prefs.latitude, prefs.longitude, prefs.location_enabled = lat, 0.0, True
    db.session.commit()

    def fetch(lat, lon):
        if lat == 1.0:
            raise TypeError("unexpected payload")
        return WeatherReading(20.0, 40.0, 1.0)

    fake = mock.Mock()
    fake.fetch_current.side_effect = fetch
    app.extensions["weather_client"] = fake
    body = client.post("/climate/monitor").get_json()

    assert body["monitored"] == 2
    assert body["errors"] == 1
    assert ClimateReading.query.one().user_id == "U-002"
