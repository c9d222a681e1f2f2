"""Weather state machine.

Four weather types are supported.  Each one is described by a
:class:`WeatherProfile` holding the fixed targets applied when the weather is
entered; :data:`PROFILES` must cover every :class:`WeatherType`.

>>> from core.weather import WeatherState, WeatherType
>>> state = WeatherState()
>>> state.weather
<WeatherType.CLEAR: 'clear'>
>>> state.intensity
0.0
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
import random
from typing import Dict, Optional, Union

import constants
from core.clouds import BurstOptions, CloudField
from core.rain import RainField
from core.time_of_day import DayPhase, GameClock, TimeProvider, day_phase, in_dawn_window
from state.event_bus import EVENT_BUS, ON_WEATHER_CHANGED, EventBus

logger = logging.getLogger(__name__)


class WeatherType(str, Enum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    FOGGY = "foggy"
    STORM = "storm"

    @classmethod
    def parse(cls, value: Union[str, "WeatherType", None]) -> Optional["WeatherType"]:
        """Return the matching type or ``None`` for unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class WeatherProfile:
    """Targets applied when a weather type is entered."""

    fog_density: float
    cloud_opacity: float
    cloud_scale: float
    base_cloud_count: int
    precipitation: bool = False
    burst_count: int = 0
    burst: Optional[BurstOptions] = None
    temperature_shift: float = 0.0
    temperature_floor: Optional[float] = None
    humidity: Optional[float] = None
    humidity_shift: float = 0.0
    humidity_floor: Optional[float] = None


PROFILES: Dict[WeatherType, WeatherProfile] = {
    WeatherType.CLEAR: WeatherProfile(
        fog_density=0.0,
        cloud_opacity=0.8,
        cloud_scale=1.0,
        base_cloud_count=50,
        humidity_shift=-20.0,
        humidity_floor=30.0,
    ),
    WeatherType.CLOUDY: WeatherProfile(
        fog_density=0.2,
        cloud_opacity=1.0,
        cloud_scale=1.2,
        base_cloud_count=50,
        burst_count=20,
        burst=BurstOptions(height_range=(500.0, 700.0), spread=1.0),
    ),
    WeatherType.FOGGY: WeatherProfile(
        fog_density=0.8,
        cloud_opacity=0.6,
        cloud_scale=1.0,
        base_cloud_count=35,
        burst_count=15,
        burst=BurstOptions(
            height_range=(150.0, 300.0),
            scale_multiplier=1.5,
            spread=0.6,
            color=constants.CLOUD_GREY,
        ),
        temperature_shift=-2.0,
        humidity=100.0,
    ),
    WeatherType.STORM: WeatherProfile(
        fog_density=0.4,
        cloud_opacity=1.0,
        cloud_scale=1.4,
        base_cloud_count=50,
        precipitation=True,
        burst_count=30,
        burst=BurstOptions(
            height_range=(400.0, 600.0),
            scale_multiplier=1.3,
            spread=1.2,
            color=constants.CLOUD_DARK,
        ),
        temperature_shift=-5.0,
        temperature_floor=0.0,
        humidity=100.0,
    ),
}


def shifted(value: float, shift: float, floor: Optional[float] = None) -> float:
    """Apply ``shift`` to ``value`` without crossing ``floor``.

    A value already below the floor is left where it is.

    >>> shifted(3.0, -5.0, 0.0), shifted(-4.0, -5.0, 0.0), shifted(60.0, -20.0, 30.0)
    (0.0, -4.0, 40.0)
    """
    result = value + shift
    if floor is not None:
        result = max(min(value, floor), result)
    return result


_missing = set(WeatherType) - set(PROFILES)
if _missing:  # pragma: no cover - guards new weather types
    raise RuntimeError(f"No weather profile for: {sorted(m.value for m in _missing)}")


@dataclass(frozen=True)
class WeatherState:
    """Snapshot of the controller state; replaced whole, never mutated."""

    weather: WeatherType = WeatherType.CLEAR
    intensity: float = 0.0
    transition_duration: float = constants.DEFAULT_TRANSITION
    transition_remaining: float = 0.0
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    temperature: float = 20.0
    humidity: float = 50.0

    @property
    def transitioning(self) -> bool:
        return self.transition_remaining > 0


class WeatherController:
    """Own the current weather and drive clouds, rain and fog towards it.

    ``tick`` must be called once per frame before the clouds and the rain are
    advanced.  Fog and cloud opacity are re-published every frame because the
    time of day modulates them even outside transitions.
    """

    def __init__(
        self,
        clouds: CloudField,
        rain: RainField,
        scene=None,
        time_provider: Optional[TimeProvider] = None,
        rng: Optional[random.Random] = None,
        event_bus: EventBus = EVENT_BUS,
    ) -> None:
        self.clouds = clouds
        self.rain = rain
        self.scene = scene
        self.time_provider = time_provider or GameClock()
        self.rng = rng or random.Random()
        self.event_bus = event_bus
        self._state = WeatherState()
        self._ambient = (self._state.temperature, self._state.humidity)
        self.fog_density = 0.0
        self.fog_near = constants.FOG_NEAR
        self.fog_far = constants.FOG_FAR
        self.cloud_opacity = 0.0
        self.phase = DayPhase.DAY

    @property
    def state(self) -> WeatherState:
        return self._state

    @property
    def weather(self) -> WeatherType:
        return self._state.weather

    @property
    def intensity(self) -> float:
        return self._state.intensity

    @property
    def profile(self) -> WeatherProfile:
        return PROFILES[self._state.weather]

    # ------------------------------------------------------------------
    def set_weather(
        self,
        weather: Union[str, WeatherType],
        duration: float = constants.DEFAULT_TRANSITION,
    ) -> bool:
        """Start a transition to ``weather`` over ``duration`` seconds.

        Legal from any state, including mid-transition.  Unknown types are
        logged and ignored; the return value tells whether the call applied.
        """

        target = WeatherType.parse(weather)
        if target is None:
            logger.warning("Ignoring unknown weather type: %r", weather)
            return False
        profile = PROFILES[target]
        duration = max(0.0, float(duration))
        temperature, humidity = self._ambient
        self._state = replace(
            self._state,
            weather=target,
            intensity=0.0 if duration > 0 else 1.0,
            transition_duration=duration,
            transition_remaining=duration,
            temperature=shifted(
                temperature, profile.temperature_shift, profile.temperature_floor
            ),
            humidity=(
                shifted(humidity, profile.humidity_shift, profile.humidity_floor)
                if profile.humidity is None
                else profile.humidity
            ),
        )
        logger.info("Weather changing to %s over %.1f seconds", target.value, duration)

        self.clouds.clear_burst()
        self.clouds.set_scale(profile.cloud_scale)
        self.clouds.set_visible_base_count(profile.base_cloud_count)
        if profile.precipitation:
            self.rain.enable()
            self.rain.set_intensity(1.0)
            self.set_wind(
                self.rng.uniform(*constants.STORM_WIND_SPEED),
                self.rng.uniform(*constants.STORM_WIND_ANGLE),
            )
        else:
            self.rain.disable()
            self.rain.set_intensity(0.0)
        if profile.burst is not None and profile.burst_count > 0:
            self.clouds.spawn_burst(profile.burst_count, profile.burst)

        self._apply_environment()
        self.event_bus.publish(ON_WEATHER_CHANGED, weather=target, duration=duration)
        return True

    def set_wind(self, speed: float, direction: float) -> None:
        """Store the wind (speed, heading in radians) and push it to the rain."""
        self._state = replace(self._state, wind_speed=speed, wind_direction=direction)
        self.rain.set_wind(speed, direction)

    def apply_conditions(self, temperature: float, humidity: float) -> None:
        """Record measured temperature and humidity."""
        self._ambient = (temperature, humidity)
        self._state = replace(self._state, temperature=temperature, humidity=humidity)

    # ------------------------------------------------------------------
    def tick(self, dt: float) -> None:
        dt = max(0.0, dt)
        state = self._state
        if state.transitioning:
            intensity = min(1.0, state.intensity + dt / state.transition_duration)
            remaining = max(0.0, state.transition_remaining - dt)
            if remaining == 0.0:
                intensity = 1.0
            self._state = replace(state, intensity=intensity, transition_remaining=remaining)
            if self.profile.precipitation:
                self.rain.set_intensity(intensity)
        self._apply_environment()

    def _apply_environment(self) -> None:
        hours = self.time_provider.get_time_of_day()
        profile = self.profile
        factor = 0.5 if in_dawn_window(hours) else 1.0
        intensity = self._state.intensity
        self.fog_density = profile.fog_density * intensity * factor
        self.cloud_opacity = profile.cloud_opacity * intensity * factor
        self.fog_near = constants.FOG_NEAR + self.fog_density * constants.FOG_NEAR_RANGE
        self.fog_far = constants.FOG_FAR - self.fog_density * constants.FOG_FAR_RANGE
        self.phase = day_phase(hours)

        self.clouds.set_opacity(self.cloud_opacity)
        self.clouds.set_emissive(constants.CLOUD_EMISSIVE[self.phase.value])
        if self.scene is not None:
            self.scene.set_fog(
                self.fog_density,
                self.fog_near,
                self.fog_far,
                constants.FOG_COLOURS[self.phase.value],
            )
