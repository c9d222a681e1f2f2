from __future__ import annotations

"""Weather simulation configuration loaded from environment variables and
``settings.json``.

The module provides a central location for runtime options.  Environment
variables (prefixed with ``WFX_``) take precedence over values stored in the
JSON file found next to this module.  Values are resolved once at import time.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict

# Path to the JSON configuration file shipped next to the simulation
SETTINGS_FILE = Path(__file__).with_name("settings.json")

try:
    with SETTINGS_FILE.open("r", encoding="utf-8") as f:
        _FILE_SETTINGS: Dict[str, Any] = json.load(f)
except Exception:
    # If the settings file is missing or invalid, fall back to defaults
    _FILE_SETTINGS = {}


def _get_bool(env_var: str, key: str, default: bool = False) -> bool:
    """Return a boolean setting from ``env_var`` or ``key`` in the JSON file."""
    value = os.environ.get(env_var)
    if value is not None:
        return value.lower() not in ("0", "false", "")
    return bool(_FILE_SETTINGS.get(key, default))


def _get_str(env_var: str, key: str, default: str) -> str:
    """Return a string setting from ``env_var`` or ``key`` in the JSON file."""
    value = os.environ.get(env_var)
    if value is not None:
        return value
    return str(_FILE_SETTINGS.get(key, default))


def _get_int(env_var: str, key: str, default: int) -> int:
    """Return an integer setting from environment or JSON."""
    value = os.environ.get(env_var)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            return default
    try:
        return int(_FILE_SETTINGS.get(key, default))
    except Exception:
        return default


def _get_float(env_var: str, key: str, default: float) -> float:
    """Return a float setting from environment or JSON."""
    value = os.environ.get(env_var)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            return default
    try:
        return float(_FILE_SETTINGS.get(key, default))
    except Exception:
        return default


# ---------------------------------------------------------------------------
# Public settings
# ---------------------------------------------------------------------------
# OpenWeatherMap API key.  Empty disables every network refresh.
OPENWEATHER_API_KEY: str = _get_str("WFX_OPENWEATHER_API_KEY", "openweather_api_key", "")

# Current-conditions endpoint
OPENWEATHER_URL: str = _get_str(
    "WFX_OPENWEATHER_URL",
    "openweather_url",
    "https://api.openweathermap.org/data/2.5/weather",
)

# Seconds a fetched snapshot stays valid and between background refreshes
REFRESH_INTERVAL: float = _get_float("WFX_REFRESH_INTERVAL", "refresh_interval", 300.0)

# HTTP timeout in seconds
REQUEST_TIMEOUT: float = _get_float("WFX_REQUEST_TIMEOUT", "request_timeout", 10.0)

# Location used when the caller never provides one
DEFAULT_LATITUDE: float = _get_float("WFX_LATITUDE", "latitude", 48.8566)
DEFAULT_LONGITUDE: float = _get_float("WFX_LONGITUDE", "longitude", 2.3522)

# Simulation sizes
RAIN_DROP_COUNT: int = _get_int("WFX_RAIN_DROP_COUNT", "rain_drop_count", 15000)
MAX_PUDDLES: int = _get_int("WFX_MAX_PUDDLES", "max_puddles", 50)
BASE_CLOUD_COUNT: int = _get_int("WFX_BASE_CLOUD_COUNT", "base_cloud_count", 50)

# Puddles and wet-ground friction; disabled leaves friction at 1.0
GROUND_EFFECTS: bool = _get_bool("WFX_GROUND_EFFECTS", "ground_effects", True)

# Game clock speed multiplier (1.0 = real time)
TIME_SCALE: float = _get_float("WFX_TIME_SCALE", "time_scale", 1.0)

# Root logging level used by ``main.py``
LOG_LEVEL: str = _get_str("WFX_LOG_LEVEL", "log_level", "INFO")


__all__ = [
    "OPENWEATHER_API_KEY",
    "OPENWEATHER_URL",
    "REFRESH_INTERVAL",
    "REQUEST_TIMEOUT",
    "DEFAULT_LATITUDE",
    "DEFAULT_LONGITUDE",
    "RAIN_DROP_COUNT",
    "MAX_PUDDLES",
    "BASE_CLOUD_COUNT",
    "GROUND_EFFECTS",
    "TIME_SCALE",
    "LOG_LEVEL",
]
