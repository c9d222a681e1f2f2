"""Publish/subscribe notifications for weather changes and provider results."""
from __future__ import annotations

from collections import defaultdict
import inspect
from typing import Any, Callable, Dict, List, Union
from weakref import WeakMethod

EventCallback = Callable[..., None]
Subscriber = Union[EventCallback, WeakMethod]


class EventBus:
    """Synchronous event dispatcher.

    Bound methods are stored as weak references so a subscriber going away
    (a HUD widget, an audio cue) does not keep the weather system alive or
    receive events after it was collected.  Callbacks run synchronously on the
    publishing thread.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, event: str, callback: EventCallback) -> None:
        if inspect.ismethod(callback):
            self._subscribers[event].append(WeakMethod(callback))
        else:
            self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: EventCallback) -> None:
        subs = self._subscribers.get(event, [])
        for sub in list(subs):
            target = sub() if isinstance(sub, WeakMethod) else sub
            if target is None or target == callback:
                subs.remove(sub)

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        subs = self._subscribers.get(event, [])
        for cb in list(subs):
            if isinstance(cb, WeakMethod):
                func = cb()
                if func is None:
                    subs.remove(cb)
                    continue
                func(*args, **kwargs)
            else:
                cb(*args, **kwargs)

    def reset(self) -> None:
        """Drop every subscription."""
        self._subscribers.clear()


# Global bus instance ------------------------------------------------------
EVENT_BUS = EventBus()

# Event name constants ---------------------------------------------------
ON_WEATHER_CHANGED = "on_weather_changed"
ON_SNAPSHOT_RECEIVED = "on_snapshot_received"
ON_SNAPSHOT_FAILED = "on_snapshot_failed"
