"""
Weather provider client.

Fetches current temperature, humidity and UV index from Open-Meteo and
substitutes a fixed fallback reading when the provider is unavailable.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Tuple

import requests

import config

logger = logging.getLogger(__name__)


class WeatherClientError(Exception):
    pass


@dataclass
class WeatherReading:
    temperature: float  # °C
    humidity: float  # %
    uv_index: float
    description: str = ""
    city: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def fallback_reading() -> WeatherReading:
    return WeatherReading(
        temperature=config.FALLBACK_WEATHER["temperature"],
        humidity=config.FALLBACK_WEATHER["humidity"],
        uv_index=config.FALLBACK_WEATHER["uv_index"],
        description="Simulated",
    )


class WeatherClient:
    def __init__(self, base_url: str = config.WEATHER_API_URL, timeout: float = config.WEATHER_TIMEOUT):
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _validate_response(self, response: requests.Response) -> Dict:
        if response.status_code != 200:
            raise WeatherClientError(f"API returned status code {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise WeatherClientError(f"Invalid JSON response: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("current"), dict):
            raise WeatherClientError("Response missing current conditions")
        return data

    def fetch_current(self, latitude: float, longitude: float) -> WeatherReading:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,relative_humidity_2m,uv_index",
        }
        response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        current = self._validate_response(response)["current"]
        try:
            return WeatherReading(
                temperature=float(current["temperature_2m"]),
                humidity=float(current["relative_humidity_2m"]),
                uv_index=float(current.get("uv_index") or 0.0),
                description="Current conditions",
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise WeatherClientError(f"Malformed current conditions: {exc}") from exc


def get_weather_or_fallback(client: WeatherClient, latitude: float, longitude: float) -> Tuple[WeatherReading, bool]:
    """Return (reading, simulated). Provider failures yield the fallback reading."""
    try:
        return client.fetch_current(latitude, longitude), False
    except (WeatherClientError, requests.RequestException) as exc:
        logger.warning("Weather fetch failed for %.4f,%.4f: %s; using fallback", latitude, longitude, exc)
        return fallback_reading(), True
