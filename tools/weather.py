"""Weather lookups against the OpenWeatherMap current-conditions endpoint.

The client issues a single GET per lookup and turns the JSON body into a
``WeatherReading``. Any failure is soft: callers get ``None`` and decide what
to tell the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_WEATHER_URL = "http://api.openweathermap.org/data/2.5/weather"
KELVIN_OFFSET = 273.15


def kelvin_to_celsius(value: float) -> float:
    return value - KELVIN_OFFSET


@dataclass(frozen=True)
class WeatherReading:
    condition_summary: str
    temperature_celsius: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WeatherReading":
        """Parse an OpenWeatherMap body; ``main.temp`` arrives in Kelvin."""
        conditions = payload.get("weather") or []
        if not conditions or not isinstance(conditions[0], Mapping):
            raise ValueError("Weather payload has no conditions.")
        summary = str(conditions[0].get("main") or "").strip()
        main = payload.get("main")
        if not isinstance(main, Mapping) or main.get("temp") is None:
            raise ValueError("Weather payload has no temperature.")
        return cls(
            condition_summary=summary,
            temperature_celsius=kelvin_to_celsius(float(main["temp"])),
        )


class WeatherClient:
    """Fetch current conditions for a city name."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_WEATHER_URL,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout

    def fetch(self, city: str) -> Optional[WeatherReading]:
        """Return the current reading for ``city`` or ``None`` on any failure."""
        params: Dict[str, str] = {"q": city, "appid": self._api_key}
        try:
            # A fresh session per call; the connection is released on exit.
            with requests.Session() as session:
                response = session.get(self._base_url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("Weather request for %r failed: %s", city, exc)
            return None

        if not response.ok:
            logger.info("Weather lookup for %r returned HTTP %s", city, response.status_code)
            return None

        try:
            return WeatherReading.from_payload(response.json())
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Weather payload for %r could not be parsed: %s", city, exc)
            return None


def format_weather_summary(reading: WeatherReading) -> str:
    """Render a reading as ``Clear (20.00 °C)``."""
    return f"{reading.condition_summary} ({reading.temperature_celsius:.2f} °C)"


__all__ = [
    "DEFAULT_WEATHER_URL",
    "WeatherClient",
    "WeatherReading",
    "format_weather_summary",
    "kelvin_to_celsius",
]
