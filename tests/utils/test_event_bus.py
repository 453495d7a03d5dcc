"""Tests for the sequenced EventBus feed."""

import asyncio

import pytest

from purplesim.utils.event_bus import EventBus, FeedMessage


def _collector():
    received = []

    async def handler(message):
        received.append(message)

    return received, handler


@pytest.mark.asyncio
class TestEventBus:
    async def test_typed_and_wildcard_subscribers(self):
        bus = EventBus()
        typed, typed_handler = _collector()
        everything, wildcard_handler = _collector()
        bus.subscribe("notification", typed_handler)
        bus.subscribe("*", wildcard_handler)

        bus.publish("notification", {"id": "notif-event-1"})
        bus.publish("status_changed", {"status": "running"})
        assert await bus.drain() == 2

        assert [(m.type, m.data) for m in typed] == [("notification", {"id": "notif-event-1"})]
        assert [m.type for m in everything] == ["notification", "status_changed"]

    async def test_sequence_numbers_increase(self):
        bus = EventBus()
        first = bus.publish("simulation_event", {})
        second = bus.publish("event_status_changed", {})
        assert (first.seq, second.seq) == (1, 2)

    async def test_message_dict(self):
        message = EventBus().publish("status_changed", {"status": "paused"})
        data = message.to_dict()
        assert data["seq"] == 1
        assert data["type"] == "status_changed"
        assert data["data"] == {"status": "paused"}
        assert data["timestamp"] == message.published_at.isoformat()

    async def test_unknown_types_rejected(self):
        bus = EventBus()
        _, handler = _collector()
        with pytest.raises(ValueError):
            bus.publish("alert_created", {})
        with pytest.raises(ValueError):
            bus.subscribe("alert_created", handler)

    async def test_unsubscribe(self):
        bus = EventBus()
        received, handler = _collector()
        bus.subscribe("*", handler)
        bus.unsubscribe("*", handler)
        bus.publish("notification", {})
        await bus.drain()
        assert received == []

    async def test_full_queue_drops(self):
        bus = EventBus(queue_size=1)
        assert bus.publish("notification", {}) is not None
        assert bus.publish("notification", {}) is None
        stats = bus.get_stats()
        assert stats["published"] == {"notification": 1}
        assert stats["dropped"] == {"notification": 1}

    async def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        received, handler = _collector()

        async def _boom(message):
            raise RuntimeError("handler down")

        bus.subscribe("*", _boom)
        bus.subscribe("*", handler)
        bus.publish("simulation_event", {"id": "event-1"})
        await bus.drain()
        assert [m.data for m in received] == [{"id": "event-1"}]
        assert bus.get_stats()["handler_failures"] == 1

    async def test_slow_handler_times_out(self):
        bus = EventBus(handler_timeout=0.01)

        async def _slow(message):
            await asyncio.sleep(1)

        bus.subscribe("*", _slow)
        bus.publish("notification", {})
        assert await bus.drain() == 1
        assert bus.get_stats()["handler_failures"] == 1

    async def test_dispatch_loop(self):
        bus = EventBus()
        received, handler = _collector()
        bus.subscribe("status_changed", handler)
        await bus.start()
        assert bus.running
        bus.publish("status_changed", {"status": "paused"})
        for _ in range(50):
            if received:
                break
            await asyncio.sleep(0.01)
        await bus.stop()
        assert [m.data for m in received] == [{"status": "paused"}]
        assert not bus.running
        assert bus.get_stats()["dispatched"] == 1

    async def test_engine_feeds_bus(self, make_engine, clock):
        bus = EventBus()
        received, handler = _collector()
        bus.subscribe("*", handler)
        engine = make_engine(event_bus=bus)
        engine.start()
        clock.advance(3)
        await bus.drain()
        assert [m.type for m in received] == [
            "status_changed",
            "simulation_event",
            "notification",
            "event_status_changed",
            "simulation_event",
            "notification",
        ]
        assert [m.seq for m in received] == sorted(m.seq for m in received)
        assert isinstance(received[0], FeedMessage)
