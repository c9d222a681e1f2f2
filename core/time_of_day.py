from __future__ import annotations

"""Time-of-day helpers used to tint fog and clouds.

The weather controller only needs an object exposing
``get_time_of_day() -> float`` returning hours in ``[0, 24)``.  :class:`GameClock`
is the default provider; it follows wall-clock time with an optional time
scale and can be paused or set explicitly, which keeps tests deterministic.
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol

import constants


class TimeProvider(Protocol):
    """Anything able to report the current hour of the day."""

    def get_time_of_day(self) -> float:
        """Return hours in ``[0, 24)``."""


class DayPhase(str, Enum):
    DAWN = "dawn"
    DAY = "day"
    DUSK = "dusk"
    NIGHT = "night"


def _in_range(hours: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= hours < bounds[1]


def day_phase(hours: float) -> DayPhase:
    """Return the colour bucket for ``hours``."""

    hours = hours % 24.0
    if _in_range(hours, constants.DAWN_HOURS):
        return DayPhase.DAWN
    if _in_range(hours, constants.DAY_HOURS):
        return DayPhase.DAY
    if _in_range(hours, constants.DUSK_HOURS):
        return DayPhase.DUSK
    return DayPhase.NIGHT


def in_dawn_window(hours: float) -> bool:
    """``True`` while fog and clouds should be thinned for the night sky."""

    return _in_range(hours % 24.0, constants.DAWN_WINDOW)


def _wall_clock_hours() -> float:
    now = datetime.now()
    return now.hour + now.minute / 60 + now.second / 3600


class GameClock:
    """Scaled clock reporting the hour of the day.

    The clock starts at ``start_hours`` (defaults to the local wall clock) and
    advances by ``dt * time_scale`` on every :meth:`advance` call unless it is
    paused.
    """

    def __init__(
        self,
        start_hours: Optional[float] = None,
        time_scale: float = 1.0,
        now: Callable[[], float] = _wall_clock_hours,
    ) -> None:
        self._hours = (now() if start_hours is None else start_hours) % 24.0
        self.time_scale = time_scale
        self.paused = False

    def advance(self, dt: float) -> None:
        if self.paused or dt <= 0:
            return
        self._hours = (self._hours + dt * self.time_scale / 3600.0) % 24.0

    def set_time(self, hours: float) -> None:
        self._hours = hours % 24.0

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def get_time_of_day(self) -> float:
        return self._hours

    @property
    def phase(self) -> DayPhase:
        return day_phase(self._hours)
