from __future__ import annotations

"""Current conditions from the OpenWeatherMap API.

:class:`WeatherDataSource` performs one HTTP GET per coordinate and refresh
interval and normalises the JSON answer into an immutable
:class:`WeatherSnapshot`.  Failures never raise: they are logged and reported
as ``None`` so the caller can fall back to a default weather.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import requests

import settings

logger = logging.getLogger(__name__)


class Condition(str, Enum):
    """Provider condition classes."""

    STORM = "storm"
    RAIN = "rain"
    SNOW = "snow"
    FOGGY = "foggy"
    CLEAR = "clear"
    CLOUDY = "cloudy"


def map_condition_code(code: int) -> Condition:
    """Map an OpenWeatherMap condition id to a :class:`Condition`.

    >>> map_condition_code(211)
    <Condition.STORM: 'storm'>
    >>> map_condition_code(804)
    <Condition.CLOUDY: 'cloudy'>
    """
    if 200 <= code < 300:
        return Condition.STORM
    if 300 <= code < 600:
        return Condition.RAIN
    if 600 <= code < 700:
        return Condition.SNOW
    if 700 <= code < 800:
        return Condition.FOGGY
    if code > 800:
        return Condition.CLOUDY
    return Condition.CLEAR


@dataclass(frozen=True)
class WeatherSnapshot:
    condition: Condition
    temperature: float
    humidity: float
    wind_speed: float
    wind_direction: float  # degrees, meteorological convention
    description: str = ""
    code: int = 800

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot from the provider JSON.

        Raises ``KeyError``/``IndexError``/``TypeError``/``ValueError`` when
        required fields are missing or malformed.
        """
        weather = data["weather"][0]
        code = int(weather["id"])
        return cls(
            condition=map_condition_code(code),
            temperature=float(data["main"]["temp"]),
            humidity=float(data["main"]["humidity"]),
            wind_speed=float(data["wind"]["speed"]),
            wind_direction=float(data["wind"].get("deg", 0.0)),
            description=str(weather.get("description", "")),
            code=code,
        )


class WeatherDataSource:
    """Cached access to the provider's current-conditions endpoint.

    ``clock`` returns seconds from a monotonic origin and exists so tests can
    control cache expiry.  Without an ``api_key`` the source is disabled and
    :meth:`fetch` returns ``None`` without touching the network.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        refresh_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api_key = settings.OPENWEATHER_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.OPENWEATHER_URL
        self.refresh_interval = (
            settings.REFRESH_INTERVAL if refresh_interval is None else refresh_interval
        )
        self.timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self.clock = clock
        self.snapshot: Optional[WeatherSnapshot] = None
        self.last_update: Optional[float] = None
        self._coords: Optional[Tuple[float, float]] = None
        self.request_count = 0

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def invalidate(self) -> None:
        """Forget the cached snapshot so the next fetch hits the network."""
        self.snapshot = None
        self.last_update = None
        self._coords = None

    def _cache_valid(self, coords: Tuple[float, float], now: float) -> bool:
        return (
            self.snapshot is not None
            and self.last_update is not None
            and self._coords == coords
            and now - self.last_update < self.refresh_interval
        )

    def fetch(self, latitude: float, longitude: float) -> Optional[WeatherSnapshot]:
        """Return current conditions at ``(latitude, longitude)`` or ``None``."""

        if not self.enabled:
            return None
        coords = (float(latitude), float(longitude))
        now = self.clock()
        if self._cache_valid(coords, now):
            logger.debug("Using cached weather for %s,%s", *coords)
            return self.snapshot

        params = {
            "lat": coords[0],
            "lon": coords[1],
            "appid": self.api_key,
            "units": "metric",
        }
        self.request_count += 1
        try:
            resp = requests.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            snapshot = WeatherSnapshot.from_payload(resp.json())
        except requests.RequestException as exc:
            logger.warning("Weather request failed for %s,%s: %s", coords[0], coords[1], exc)
            return None
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Malformed weather payload for %s,%s: %s", coords[0], coords[1], exc)
            return None

        self.snapshot = snapshot
        self.last_update = now
        self._coords = coords
        logger.info(
            "Weather at %s,%s: %s (%s, %.1f°C)",
            coords[0],
            coords[1],
            snapshot.condition.value,
            snapshot.description,
            snapshot.temperature,
        )
        return snapshot
