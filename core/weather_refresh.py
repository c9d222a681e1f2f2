from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loaders.openweather import WeatherDataSource, WeatherSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshResult:
    latitude: float
    longitude: float
    snapshot: Optional[WeatherSnapshot]

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


class WeatherRefresher:
    """Query a :class:`WeatherDataSource` on a background thread.

    Requests go through one queue to a daemon worker; results come back
    through a second queue which the frame loop drains with :meth:`drain`
    without ever blocking.  :meth:`poll` enqueues a request whenever
    ``interval`` seconds of wall-clock time have passed since the previous
    one, independent of the frame rate.
    """

    def __init__(
        self,
        source: WeatherDataSource,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.source = source
        self.interval = interval
        self.clock = clock
        self._last_request: Optional[float] = None
        self._requests: "queue.Queue[Optional[Tuple[float, float]]]" = queue.Queue()
        self._results: "queue.Queue[RefreshResult]" = queue.Queue()
        self._thread = threading.Thread(
            target=self._worker, name="weather-refresh", daemon=True
        )
        self._thread.start()

    # ------------------------------------------------------------------
    def _worker(self) -> None:
        while True:
            item = self._requests.get()
            try:
                if item is None:
                    return
                lat, lon = item
                try:
                    snapshot = self.source.fetch(lat, lon)
                except Exception:
                    logger.exception("Weather refresh crashed for %s,%s", lat, lon)
                    snapshot = None
                self._results.put(RefreshResult(lat, lon, snapshot))
            finally:
                self._requests.task_done()

    # ------------------------------------------------------------------
    def request(self, latitude: float, longitude: float) -> None:
        """Queue a fetch right away and restart the cadence."""
        self._last_request = self.clock()
        self._requests.put((latitude, longitude))

    def poll(self, latitude: float, longitude: float) -> bool:
        """Queue a fetch if the refresh interval has elapsed."""
        now = self.clock()
        if self._last_request is not None and now - self._last_request < self.interval:
            return False
        self.request(latitude, longitude)
        return True

    def drain(self) -> List[RefreshResult]:
        """Return every completed result in arrival order."""
        results: List[RefreshResult] = []
        while True:
            try:
                results.append(self._results.get_nowait())
            except queue.Empty:
                return results

    def wait(self) -> None:
        """Block until every queued request was processed."""
        self._requests.join()

    def close(self, timeout: float = 1.0) -> None:
        if self._thread.is_alive():
            self._requests.put(None)
            self._thread.join(timeout)
