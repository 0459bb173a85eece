"""Centralize defaults and environment lookups for the weather bot."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from core.service_registry import ConfigurationError

load_dotenv()

# ---------------------------------------------------------------------------
# Default configuration values
# ---------------------------------------------------------------------------
_DEFAULT_BOT_CONFIG_PATH = "config/weatherbot.bot"
_DEFAULT_LUIS_SERVICE_NAME = "WeatherBot"
_DEFAULT_WEATHER_URL = "http://api.openweathermap.org/data/2.5/weather"
_DEFAULT_HTTP_TIMEOUT_SECONDS: float = 8.0
_DEFAULT_TYPING_DELAY_MS = 5000
_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_LOGGING_ENABLED: bool = True
_DEFAULT_LOG_DIR = "logs"
_TURN_LOG_FILENAME = "turns.jsonl"
_DEFAULT_LOG_MAX_BYTES = 1_000_000
_DEFAULT_LOG_BACKUP_COUNT = 5
_DEFAULT_WEB_HOST = "127.0.0.1"
_DEFAULT_WEB_PORT = 3978


def _read_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"0", "false", "no", "off"}:
        return False
    if normalized in {"1", "true", "yes", "on"}:
        return True
    return default


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------
def get_bot_config_path(env: Dict[str, str] | None = None) -> Path:
    """Return the path of the ``.bot`` file that lists the NLU services."""

    source = env if env is not None else os.environ
    override = source.get("BOT_CONFIG_PATH")
    return Path(override) if override else Path(_DEFAULT_BOT_CONFIG_PATH)


def get_luis_service_name(env: Dict[str, str] | None = None) -> str:
    """Return the name of the LUIS service the bot recognizes with."""

    source = env if env is not None else os.environ
    return source.get("LUIS_SERVICE_NAME") or _DEFAULT_LUIS_SERVICE_NAME


def get_openweathermap_api_key(env: Dict[str, str] | None = None) -> str:
    """Return the OpenWeatherMap key.

    Raises:
        ConfigurationError: when ``OPENWEATHERMAP_API_KEY`` is not set.
    """

    source = env if env is not None else os.environ
    key = (source.get("OPENWEATHERMAP_API_KEY") or "").strip()
    if not key:
        raise ConfigurationError("OPENWEATHERMAP_API_KEY is required to look up the weather.")
    return key


def get_openweathermap_url(env: Dict[str, str] | None = None) -> str:
    source = env if env is not None else os.environ
    return source.get("OPENWEATHERMAP_URL") or _DEFAULT_WEATHER_URL


def get_http_timeout(env: Dict[str, str] | None = None) -> float:
    """Return the timeout, in seconds, for outbound HTTP calls."""

    source = env if env is not None else os.environ
    raw = source.get("HTTP_TIMEOUT_SECONDS")
    if raw is None:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    return value if value > 0 else _DEFAULT_HTTP_TIMEOUT_SECONDS


def get_typing_delay_ms(env: Dict[str, str] | None = None) -> int:
    """Return the pause, in milliseconds, sent between typing and the reply."""

    source = env if env is not None else os.environ
    raw = source.get("TYPING_DELAY_MS")
    if raw is None:
        return _DEFAULT_TYPING_DELAY_MS
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_TYPING_DELAY_MS
    return max(value, 0)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def get_log_level(env: Dict[str, str] | None = None) -> int:
    source = env if env is not None else os.environ
    raw = (source.get("LOG_LEVEL") or _DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


def is_logging_enabled(env: Dict[str, str] | None = None) -> bool:
    """Determine whether the JSONL turn log is written."""

    source = env if env is not None else os.environ
    return _read_bool(source.get("LOGGING_ENABLED"), _DEFAULT_LOGGING_ENABLED)


def get_log_dir(env: Dict[str, str] | None = None) -> Path:
    source = env if env is not None else os.environ
    override = source.get("LOG_DIR")
    return Path(override) if override else Path(_DEFAULT_LOG_DIR)


def get_turn_log_path(env: Dict[str, str] | None = None) -> Path:
    """Return the full path for the turn log JSONL file."""

    return get_log_dir(env) / _TURN_LOG_FILENAME


def get_log_max_bytes(env: Dict[str, str] | None = None) -> int:
    """Return the maximum size in bytes before rotating the turn log."""

    source = env if env is not None else os.environ
    raw = source.get("LOG_MAX_BYTES")
    if raw is None:
        return _DEFAULT_LOG_MAX_BYTES
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_LOG_MAX_BYTES
    return max(value, 0)


def get_log_backup_count(env: Dict[str, str] | None = None) -> int:
    source = env if env is not None else os.environ
    raw = source.get("LOG_BACKUP_COUNT")
    if raw is None:
        return _DEFAULT_LOG_BACKUP_COUNT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_LOG_BACKUP_COUNT
    return max(value, 0)


# ---------------------------------------------------------------------------
# Web transport
# ---------------------------------------------------------------------------
def get_web_host(env: Dict[str, str] | None = None) -> str:
    source = env if env is not None else os.environ
    return source.get("WEB_HOST", _DEFAULT_WEB_HOST)


def get_web_port(env: Dict[str, str] | None = None) -> int:
    source = env if env is not None else os.environ
    raw = source.get("WEB_PORT")
    if raw is None:
        return _DEFAULT_WEB_PORT
    try:
        value = int(raw)
    except ValueError:
        return _DEFAULT_WEB_PORT
    return value if 0 < value <= 65535 else _DEFAULT_WEB_PORT
