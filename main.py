"""Headless runner for the weather simulation.

Drives :class:`core.weather_system.WeatherSystem` at a fixed frame rate with a
``pygame`` clock and logs the state once per simulated second.  Real weather
is used when an OpenWeatherMap key is configured (``WFX_OPENWEATHER_API_KEY``).
"""

import argparse
import logging
import os

import pygame

import constants
import settings
from core.time_of_day import GameClock
from core.weather_system import WeatherSystem
from loaders.openweather import WeatherDataSource

logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--weather", default=None,
                        help="weather to start with (clear, cloudy, foggy, storm)")
    parser.add_argument("--transition", type=float, default=constants.DEFAULT_TRANSITION,
                        help="transition length in seconds")
    parser.add_argument("--seconds", type=float, default=10.0,
                        help="simulated seconds to run")
    parser.add_argument("--fps", type=int, default=constants.FPS)
    parser.add_argument("--hour", type=float, default=None,
                        help="fixed time of day in hours")
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lon", type=float, default=None)
    parser.add_argument("--realtime", action="store_true",
                        help="sleep between frames instead of running flat out")
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def _log_status(system: WeatherSystem, elapsed: float) -> None:
    ctrl = system.controller
    logger.info(
        "t=%5.1fs %-6s intensity=%.2f fog=%.2f clouds=%d/%.2f rain=%s puddles=%d friction=%.2f",
        elapsed,
        ctrl.weather.value,
        ctrl.intensity,
        ctrl.fog_density,
        len(system.clouds),
        ctrl.cloud_opacity,
        f"{system.rain.intensity:.2f}" if system.rain.enabled else "off",
        len(system.ground) if system.ground is not None else 0,
        system.get_friction_modifier(),
    )


def main(argv=None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    pygame.init()

    clock_provider = GameClock(start_hours=args.hour, time_scale=settings.TIME_SCALE)
    if args.hour is not None:
        clock_provider.pause()
    source = WeatherDataSource()
    system = WeatherSystem(
        time_provider=clock_provider,
        data_source=source,
        seed=args.seed,
    )
    if source.enabled:
        lat = settings.DEFAULT_LATITUDE if args.lat is None else args.lat
        lon = settings.DEFAULT_LONGITUDE if args.lon is None else args.lon
        system.set_location(lat, lon)
    if args.weather:
        system.set_weather(args.weather, args.transition)

    frame_clock = pygame.time.Clock()
    dt = 1.0 / max(1, args.fps)
    elapsed = 0.0
    next_report = 0.0
    try:
        while elapsed < args.seconds:
            if args.realtime:
                frame_clock.tick(args.fps)
            clock_provider.advance(dt)
            system.update(dt)
            elapsed += dt
            if elapsed >= next_report:
                _log_status(system, elapsed)
                next_report += 1.0
    finally:
        system.close()
        pygame.quit()


if __name__ == "__main__":
    main()
