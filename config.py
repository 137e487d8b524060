"""
Global configuration for the SweatSmart climate risk service.
Adjust alert thresholds and timing windows here if needed.
"""

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_PATH = os.path.join(BASE_DIR, "sweatsmart.db")
SQLALCHEMY_DATABASE_URI = os.environ.get("SWEATSMART_DATABASE_URI", f"sqlite:///{DB_PATH}")
SQLALCHEMY_TRACK_MODIFICATIONS = False
SECRET_KEY = os.environ.get("SWEATSMART_SECRET", "dev-secret-change-me")

# Default per-user alert thresholds
DEFAULT_THRESHOLDS = {
    "temperature": 28.0,
    "humidity": 70.0,
    "uv_index": 6.0,
}

# Do-not-disturb window, local server time (HH:MM)
DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "07:00"

# At most one climate notification per user and severity in this window (seconds)
ALERT_COOLDOWN = 4 * 60 * 60

# Shared EDA readings older than this are ignored (seconds)
EDA_FRESHNESS_SECONDS = 5 * 60

# Rate limiting: max climate checks per user per second
RATE_LIMIT_CHECKS_PER_SEC = 2

# Weather provider
WEATHER_API_URL = os.environ.get("SWEATSMART_WEATHER_URL", "https://api.open-meteo.com/v1/forecast")
WEATHER_TIMEOUT = float(os.environ.get("SWEATSMART_WEATHER_TIMEOUT", "10"))

# Substituted when the weather provider is unavailable
FALLBACK_WEATHER = {
    "temperature": 22.0,
    "humidity": 60.0,
    "uv_index": 4.0,
}

REPORTS_DIR = os.environ.get("SWEATSMART_REPORTS_DIR", "reports")
