"""Tests for the WebSocket feed: per-client filters, backpressure and heartbeats."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from purplesim.api.websockets.events import ConnectionManager, parse_type_filter
from purplesim.utils.event_bus import FeedMessage


def _make_ws():
    ws = AsyncMock()
    ws.sent = []

    async def _send_text(text):
        ws.sent.append(json.loads(text))

    ws.send_text.side_effect = _send_text
    return ws


def _message(seq, message_type="simulation_event", data=None):
    return FeedMessage(seq=seq, type=message_type, data=data or {})


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


class TestParseTypeFilter:
    @pytest.mark.parametrize("raw", [None, "", " , "])
    def test_empty_means_everything(self, raw):
        assert parse_type_filter(raw) is None

    def test_parses_list(self):
        assert parse_type_filter("notification, status_changed") == frozenset({"notification", "status_changed"})

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="heartbeat"):
            parse_type_filter("notification,heartbeat")


@pytest.mark.asyncio
class TestConnectionManager:
    async def test_connect_and_publish(self):
        manager = ConnectionManager()
        ws = _make_ws()
        assert await manager.connect(ws) is True
        ws.accept.assert_awaited_once()
        assert manager.connection_count == 1

        await manager.publish(_message(1, "status_changed", {"status": "running"}))
        await _settle()
        assert len(ws.sent) == 1
        assert ws.sent[0]["seq"] == 1
        assert ws.sent[0]["type"] == "status_changed"
        assert ws.sent[0]["data"] == {"status": "running"}
        assert "timestamp" in ws.sent[0]
        await manager.close_all()

    async def test_type_filter(self):
        manager = ConnectionManager()
        everything, only_notifications = _make_ws(), _make_ws()
        await manager.connect(everything)
        await manager.connect(only_notifications, frozenset({"notification"}))

        await manager.publish(_message(1, "simulation_event"))
        await manager.publish(_message(2, "notification"))
        await _settle()
        assert [m["seq"] for m in everything.sent] == [1, 2]
        assert [m["seq"] for m in only_notifications.sent] == [2]
        await manager.close_all()

    async def test_rejects_over_limit(self):
        manager = ConnectionManager(max_connections=1)
        first, second = _make_ws(), _make_ws()
        await manager.connect(first)
        assert await manager.connect(second) is False
        second.close.assert_awaited_once_with(code=1013)
        second.accept.assert_not_awaited()
        await manager.close_all()

    async def test_backpressure_disconnects_slow_client(self):
        manager = ConnectionManager(queue_size=1)
        ws = _make_ws()
        await manager.connect(ws)
        # No yield in between, so the writer never drains
        await manager.publish(_message(1))
        await manager.publish(_message(2))
        assert manager.connection_count == 0
        ws.close.assert_awaited()
        assert manager.get_stats()["backpressure_drops"] == 1

    async def test_send_to_bypasses_filter(self):
        manager = ConnectionManager()
        a, b = _make_ws(), _make_ws()
        await manager.connect(a, frozenset({"notification"}))
        await manager.connect(b)
        assert manager.send_to(a, {"type": "connected"}) is True
        await _settle()
        assert a.sent == [{"type": "connected"}]
        assert b.sent == []
        assert manager.send_to(_make_ws(), {"type": "connected"}) is False
        await manager.close_all()

    async def test_disconnect_unknown_is_noop(self):
        manager = ConnectionManager()
        ws = _make_ws()
        await manager.disconnect(ws)
        ws.close.assert_not_awaited()

    async def test_heartbeat_reports_last_seq(self):
        manager = ConnectionManager(heartbeat_interval=0.01)
        ws = _make_ws()
        await manager.connect(ws)
        await manager.publish(_message(7))
        await asyncio.sleep(0.05)
        heartbeats = [m for m in ws.sent if m["type"] == "heartbeat"]
        assert heartbeats
        assert heartbeats[0]["last_seq"] == 7
        await manager.close_all()

    async def test_stats(self):
        manager = ConnectionManager(max_connections=3)
        await manager.connect(_make_ws())
        assert manager.get_stats() == {"clients": 1, "max_connections": 3, "backpressure_drops": 0}
        await manager.close_all()
        assert manager.connection_count == 0
