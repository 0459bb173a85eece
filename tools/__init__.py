"""External lookups the bot calls while answering a turn.

Only the OpenWeatherMap client lives here today; it is re-exported so callers
can depend on ``tools`` without knowing the module layout.
"""

from __future__ import annotations

from tools.weather import WeatherClient, WeatherReading, format_weather_summary

__all__ = ["WeatherClient", "WeatherReading", "format_weather_summary"]
