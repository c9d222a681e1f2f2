import os
import random
import sys

import pytest
import requests

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

# Ensure the project root is on the path so modules can be imported in tests
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.time_of_day import GameClock
from graphics.scene import RecordingScene
from state.event_bus import EVENT_BUS
from tests.helpers import FakeClock


@pytest.fixture(autouse=True)
def _reset_event_bus():
    """Isolate global event subscriptions between tests."""

    EVENT_BUS.reset()
    yield
    EVENT_BUS.reset()


@pytest.fixture(autouse=True)
def _no_network(monkeypatch):
    """Fail loudly if a test forgets to fake the HTTP layer."""

    def _blocked(*args, **kwargs):
        raise AssertionError("network access attempted in tests")

    monkeypatch.setattr(requests, "get", _blocked)


@pytest.fixture
def rng():
    """Return a deterministic random number generator."""

    return random.Random(0)


@pytest.fixture
def scene():
    return RecordingScene()


@pytest.fixture
def noon():
    """A paused clock fixed at midday."""

    clock = GameClock(start_hours=12.0)
    clock.pause()
    return clock


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_get(monkeypatch):
    """Install a fake ``requests.get`` returning queued responses.

    Calling the fixture with responses (or exceptions to raise) queues them;
    the returned list records the ``params`` of every request made.
    """

    calls = []
    queued = []

    def _get(url, params=None, timeout=None):
        calls.append(params)
        item = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(item, Exception):
            raise item
        return item

    def _factory(*responses):
        queued.extend(responses)
        monkeypatch.setattr(requests, "get", _get)
        return calls

    return _factory
