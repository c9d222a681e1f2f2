import gc

from state.event_bus import EventBus


class Listener:
    def __init__(self):
        self.calls = []

    def on_event(self, *args, **kwargs):
        self.calls.append((args, kwargs))


def test_publish_passes_arguments():
    bus = EventBus()
    listener = Listener()
    bus.subscribe("evt", listener.on_event)
    bus.publish("evt", 1, key="v")
    assert listener.calls == [((1,), {"key": "v"})]


def test_bound_methods_are_weak():
    bus = EventBus()
    listener = Listener()
    bus.subscribe("evt", listener.on_event)
    del listener
    gc.collect()
    bus.publish("evt")
    assert bus._subscribers["evt"] == []


def test_plain_callables_are_kept():
    bus = EventBus()
    seen = []
    bus.subscribe("evt", seen.append)
    bus.subscribe("evt", lambda value: seen.append(value * 2))
    bus.publish("evt", 3)
    assert seen == [3, 6]


def test_unsubscribe_and_reset():
    bus = EventBus()
    listener = Listener()
    seen = []
    bus.subscribe("evt", listener.on_event)
    bus.subscribe("evt", seen.append)
    bus.unsubscribe("evt", listener.on_event)
    bus.publish("evt", 1)
    assert listener.calls == []
    assert seen == [1]
    bus.reset()
    bus.publish("evt", 2)
    assert seen == [1]


def test_publish_without_subscribers():
    EventBus().publish("nothing", 1)
