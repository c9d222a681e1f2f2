"""Shared fakes for the weather tests."""

import requests


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def owm_payload(code=800, description="clear sky", temp=18.5, humidity=60,
                speed=4.0, deg=90):
    """Minimal OpenWeatherMap current-weather document."""

    return {
        "weather": [{"id": code, "main": "x", "description": description}],
        "main": {"temp": temp, "humidity": humidity},
        "wind": {"speed": speed, "deg": deg},
        "name": "Testville",
    }
