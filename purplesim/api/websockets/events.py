"""Live simulation feed over WebSocket.

Each client gets a bounded outbound queue drained by its own writer task, an
optional set of message types it wants, and a heartbeat when the feed is idle.
A client whose queue overflows is dropped rather than slowing everyone down.
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ...dependencies import get_app_config, get_simulation_engine
from ...utils.event_bus import FEED_MESSAGE_TYPES, FeedMessage
from ...utils.logging import get_logger

logger = get_logger("websocket.simulation_feed")

router = APIRouter()

# Close code for "try again later"
CLOSE_OVERLOADED = 1013


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FeedClient:
    websocket: WebSocket
    queue: asyncio.Queue
    types: Optional[frozenset[str]] = None  # None means every message type
    last_seq: int = 0
    writer: Optional[asyncio.Task] = field(default=None, repr=False)

    def wants(self, message_type: str) -> bool:
        return self.types is None or message_type in self.types


def parse_type_filter(raw: Optional[str]) -> Optional[frozenset[str]]:
    """``"simulation_event,notification"`` -> frozenset. Empty or missing means everything."""
    if not raw:
        return None
    wanted = frozenset(t.strip() for t in raw.split(",") if t.strip())
    unknown = wanted - FEED_MESSAGE_TYPES
    if unknown:
        raise ValueError(f"Unknown feed message types: {', '.join(sorted(unknown))}")
    return wanted or None


class ConnectionManager:
    """Tracks feed clients and fans bus messages out to them."""

    def __init__(self, max_connections: int = 50, queue_size: int = 100, heartbeat_interval: float = 30):
        self._clients: dict[WebSocket, FeedClient] = {}
        self._max_connections = max_connections
        self._queue_size = queue_size
        self._heartbeat_interval = heartbeat_interval
        self._backpressure_drops = 0

    @property
    def connection_count(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket, types: Optional[frozenset[str]] = None) -> bool:
        """Accept the client unless the server is full. Returns False when rejected."""
        if len(self._clients) >= self._max_connections:
            await websocket.close(code=CLOSE_OVERLOADED)
            logger.warning("ws_connection_rejected", reason="max_connections", total=len(self._clients))
            return False
        await websocket.accept()
        client = FeedClient(websocket, asyncio.Queue(maxsize=self._queue_size), types)
        client.writer = asyncio.create_task(self._writer(client))
        self._clients[websocket] = client
        logger.info(
            "ws_client_connected",
            total=len(self._clients),
            types=sorted(types) if types else "all",
        )
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        client = self._clients.pop(websocket, None)
        if client is None:
            return
        if client.writer is not None and not client.writer.done():
            client.writer.cancel()
        try:
            await websocket.close()
        except Exception as e:
            logger.debug("ws_close_failed", error=str(e))
        logger.info("ws_client_disconnected", total=len(self._clients), last_seq=client.last_seq)

    def send_to(self, websocket: WebSocket, message: dict) -> bool:
        """Queue a message for one client, bypassing its type filter."""
        client = self._clients.get(websocket)
        if client is None:
            return False
        try:
            client.queue.put_nowait(json.dumps(message))
        except asyncio.QueueFull:
            return False
        return True

    async def publish(self, message: FeedMessage) -> None:
        """Bus subscriber: queue ``message`` for every client that wants it."""
        payload = json.dumps(message.to_dict())
        overloaded = []
        for client in list(self._clients.values()):
            if not client.wants(message.type):
                continue
            try:
                client.queue.put_nowait(payload)
                client.last_seq = message.seq
            except asyncio.QueueFull:
                overloaded.append(client.websocket)
        for websocket in overloaded:
            self._backpressure_drops += 1
            logger.warning("ws_client_backpressure_disconnect", seq=message.seq)
            await self.disconnect(websocket)

    async def close_all(self) -> None:
        for websocket in list(self._clients):
            await self.disconnect(websocket)

    def get_stats(self) -> dict:
        return {
            "clients": len(self._clients),
            "max_connections": self._max_connections,
            "backpressure_drops": self._backpressure_drops,
        }

    async def _writer(self, client: FeedClient) -> None:
        """Send queued messages in order; emit a heartbeat after an idle interval."""
        while True:
            try:
                text = await asyncio.wait_for(client.queue.get(), timeout=self._heartbeat_interval)
            except asyncio.TimeoutError:
                text = json.dumps({"type": "heartbeat", "last_seq": client.last_seq, "timestamp": _now_iso()})
            try:
                await client.websocket.send_text(text)
            except Exception as e:
                logger.debug("ws_send_failed", error=str(e))
                return


_config = get_app_config()
manager = ConnectionManager(
    max_connections=_config.ws_max_connections,
    queue_size=_config.ws_queue_size,
    heartbeat_interval=_config.ws_heartbeat_interval,
)


@router.websocket("/ws/simulation")
async def simulation_feed(websocket: WebSocket, types: Optional[str] = Query(None)):
    """Stream simulation changes as JSON.

    Optional ``?types=simulation_event,notification`` narrows the feed. Every
    client first receives ``{"type": "connected", "data": <state without events>}``;
    feed messages look like ``{"seq", "type", "data", "timestamp"}`` and idle
    periods produce ``{"type": "heartbeat", "last_seq", "timestamp"}``.
    """
    try:
        wanted = parse_type_filter(types)
    except ValueError as e:
        await websocket.close(code=1008, reason=str(e))
        return

    if not await manager.connect(websocket, wanted):
        return

    engine = get_simulation_engine()
    manager.send_to(websocket, {
        "type": "connected",
        "data": engine.get_state().to_dict(include_events=False),
        "timestamp": _now_iso(),
    })

    try:
        while True:
            # Inbound frames are ignored; reading detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.debug("ws_receive_error", error=str(e))
    finally:
        await manager.disconnect(websocket)
