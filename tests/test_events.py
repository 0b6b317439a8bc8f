"""Tests for the publish/subscribe bus."""

from otolib.events import EventBus, SELECTION_CHANGED, TIMING_CHANGED


def test_emit_reaches_subscribers_in_order():
    bus = EventBus()
    calls = []
    bus.subscribe(TIMING_CHANGED, lambda **d: calls.append(("first", d)))
    bus.subscribe(TIMING_CHANGED, lambda **d: calls.append(("second", d)))
    bus.emit(TIMING_CHANGED, external_origin=True, sample=None)
    assert [c[0] for c in calls] == ["first", "second"]
    assert calls[0][1] == {"external_origin": True, "sample": None}


def test_unsubscribe_and_unknown_events():
    bus = EventBus()
    calls = []

    def handler(**d):
        calls.append(d)

    bus.subscribe(SELECTION_CHANGED, handler)
    bus.unsubscribe(SELECTION_CHANGED, handler)
    bus.unsubscribe(SELECTION_CHANGED, handler)
    bus.emit(SELECTION_CHANGED, sample=None)
    bus.emit("nobody.listens")
    assert calls == []


def test_handler_may_unsubscribe_during_emit():
    bus = EventBus()
    calls = []

    def once(**d):
        calls.append(d)
        bus.unsubscribe(TIMING_CHANGED, once)

    bus.subscribe(TIMING_CHANGED, once)
    bus.emit(TIMING_CHANGED)
    bus.emit(TIMING_CHANGED)
    assert len(calls) == 1


def test_subscribe_returns_unsubscriber():
    bus = EventBus()
    calls = []
    unsubscribe = bus.subscribe(SELECTION_CHANGED, lambda **d: calls.append(d))
    bus.emit(SELECTION_CHANGED, sample="x")
    unsubscribe()
    unsubscribe()
    bus.emit(SELECTION_CHANGED, sample="y")
    assert calls == [{"sample": "x"}]


def test_typed_publishers():
    bus = EventBus()
    timing, selection = [], []
    bus.subscribe(TIMING_CHANGED, lambda **d: timing.append(d))
    bus.subscribe(SELECTION_CHANGED, lambda **d: selection.append(d))
    bus.publish_timing("a")
    bus.publish_timing("b", external_origin=True)
    bus.publish_selection("c")
    assert timing == [
        {"external_origin": False, "sample": "a"},
        {"external_origin": True, "sample": "b"},
    ]
    assert selection == [{"sample": "c"}]
