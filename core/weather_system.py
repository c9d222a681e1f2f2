from __future__ import annotations

"""Per-frame orchestration of the weather simulation.

:class:`WeatherSystem` wires the controller, the cloud layer, the rain field
and the ground effects together and runs them in a fixed order every frame:

1. results of background weather queries are applied,
2. :class:`~core.weather.WeatherController` advances its transition,
3. clouds drift, rain falls, the ground gets wetter or dries.

The public control surface (``set_weather``, ``set_wind``,
``set_location``) may be called from any thread; it shares a lock with
:meth:`WeatherSystem.update` so it never interleaves with a frame.
"""

import logging
import math
import random
import threading
import time
from typing import Callable, Optional, Tuple, Union

import constants
import settings
from core.clouds import CloudField
from core.ground import GroundEffects, GroundMaterial
from core.rain import RainField
from core.time_of_day import GameClock, TimeProvider
from core.weather import WeatherController, WeatherType
from core.weather_refresh import RefreshResult, WeatherRefresher
from graphics.scene import RecordingScene
from loaders.openweather import Condition, WeatherDataSource, WeatherSnapshot
from state.event_bus import EVENT_BUS, ON_SNAPSHOT_FAILED, ON_SNAPSHOT_RECEIVED, EventBus

logger = logging.getLogger(__name__)

# Provider condition classes folded onto the simulated weather types.
CONDITION_WEATHER = {
    Condition.STORM: WeatherType.STORM,
    Condition.RAIN: WeatherType.STORM,
    Condition.SNOW: WeatherType.CLOUDY,
    Condition.FOGGY: WeatherType.FOGGY,
    Condition.CLEAR: WeatherType.CLEAR,
    Condition.CLOUDY: WeatherType.CLOUDY,
}


class WeatherSystem:
    """Entry point used by the game loop, the renderer and the physics.

    ``data_source`` is optional; without it, or when it has no API key, the
    system never touches the network and keeps whatever weather is set
    through :meth:`set_weather`.
    """

    def __init__(
        self,
        scene=None,
        time_provider: Optional[TimeProvider] = None,
        data_source: Optional[WeatherDataSource] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        rain_count: Optional[int] = None,
        max_puddles: Optional[int] = None,
        base_cloud_count: Optional[int] = None,
        dry_material: Optional[GroundMaterial] = None,
        refresh_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        event_bus: EventBus = EVENT_BUS,
    ) -> None:
        if scene is None:
            logger.info("No scene supplied; recording weather output in memory")
            scene = RecordingScene()
        self.scene = scene
        self.event_bus = event_bus
        self._owns_clock = time_provider is None
        self.time_provider = time_provider or GameClock(time_scale=settings.TIME_SCALE)
        rng = rng or random.Random(seed)

        self.clouds = CloudField(scene, rng)
        self.clouds.populate_base(
            settings.BASE_CLOUD_COUNT if base_cloud_count is None else base_cloud_count
        )
        self.rain = RainField(
            settings.RAIN_DROP_COUNT if rain_count is None else rain_count,
            scene=scene,
            seed=seed,
        )
        self.ground: Optional[GroundEffects] = None
        if settings.GROUND_EFFECTS:
            self.ground = GroundEffects(
                scene,
                dry_material=dry_material,
                max_puddles=settings.MAX_PUDDLES if max_puddles is None else max_puddles,
                rng=rng,
            )
        self.controller = WeatherController(
            self.clouds,
            self.rain,
            scene=scene,
            time_provider=self.time_provider,
            rng=rng,
            event_bus=event_bus,
        )

        self.data_source = data_source
        self.refresher: Optional[WeatherRefresher] = None
        if data_source is not None and data_source.enabled:
            interval = (
                settings.REFRESH_INTERVAL if refresh_interval is None else refresh_interval
            )
            self.refresher = WeatherRefresher(data_source, interval, clock)
        else:
            logger.info("Weather API disabled; running with default weather")

        self.location: Optional[Tuple[float, float]] = None
        self.last_snapshot: Optional[WeatherSnapshot] = None
        self._lock = threading.RLock()
        self.controller.set_weather(WeatherType.CLEAR, constants.DEFAULT_TRANSITION)

    # ------------------------------------------------------------------
    # Control surface
    def set_weather(
        self,
        weather: Union[str, WeatherType],
        duration: float = constants.DEFAULT_TRANSITION,
    ) -> bool:
        with self._lock:
            return self.controller.set_weather(weather, duration)

    def set_wind(self, speed: float, direction: float) -> None:
        with self._lock:
            self.controller.set_wind(speed, direction)

    def set_location(self, latitude: float, longitude: float) -> None:
        """Use ``(latitude, longitude)`` for real weather and query it now."""
        with self._lock:
            self.location = (latitude, longitude)
            if self.refresher is not None:
                self.refresher.request(latitude, longitude)

    @property
    def weather(self) -> WeatherType:
        return self.controller.weather

    @property
    def intensity(self) -> float:
        return self.controller.intensity

    def get_friction_modifier(self) -> float:
        ground = self.ground
        if ground is None:
            return 1.0
        return ground.get_friction_modifier()

    # ------------------------------------------------------------------
    def update(self, dt: float) -> None:
        """Advance the whole simulation by ``dt`` seconds."""

        dt = max(0.0, dt)
        with self._lock:
            if self.refresher is not None:
                for result in self.refresher.drain():
                    self._apply_result(result)
                self.refresher.poll(*self._query_location())
            if self._owns_clock:
                self.time_provider.advance(dt)
            self.controller.tick(dt)
            self.clouds.advance(dt)
            self.rain.advance(dt)
            if self.ground is not None:
                rain = self.rain.intensity if self.rain.enabled else 0.0
                self.ground.update(dt, rain)

    def _query_location(self) -> Tuple[float, float]:
        if self.location is not None:
            return self.location
        return settings.DEFAULT_LATITUDE, settings.DEFAULT_LONGITUDE

    def _apply_result(self, result: RefreshResult) -> None:
        if result.snapshot is None:
            self.event_bus.publish(ON_SNAPSHOT_FAILED, result.latitude, result.longitude)
            if self.controller.weather is not WeatherType.CLEAR:
                logger.warning("No weather data; falling back to clear skies")
                self.controller.set_weather(WeatherType.CLEAR)
            return
        self.apply_snapshot(result.snapshot)

    def apply_snapshot(self, snapshot: WeatherSnapshot) -> None:
        """Drive the simulation from real conditions."""
        with self._lock:
            self.last_snapshot = snapshot
            target = CONDITION_WEATHER[snapshot.condition]
            if target is not self.controller.weather:
                self.controller.set_weather(target)
            self.controller.set_wind(snapshot.wind_speed, math.radians(snapshot.wind_direction))
            self.controller.apply_conditions(snapshot.temperature, snapshot.humidity)
            self.event_bus.publish(ON_SNAPSHOT_RECEIVED, snapshot)

    def close(self) -> None:
        """Stop the refresh worker and restore the ground."""
        with self._lock:
            if self.refresher is not None:
                self.refresher.close()
            if self.ground is not None:
                self.ground.cleanup()
            self.clouds.clear_burst()
