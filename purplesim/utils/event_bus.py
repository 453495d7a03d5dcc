"""EventBus: ordered fan-out of simulation changes to async consumers.

The engine publishes synchronously from its timer callbacks. Each message gets
a sequence number at publish time, so consumers (the WebSocket feed in the live
service) can tell when they missed something. A dispatch task drains the queue
in order and awaits every matching subscriber.
"""

import asyncio
import itertools
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from .logging import get_logger

logger = get_logger("utils.event_bus")

FEED_MESSAGE_TYPES = frozenset({
    "simulation_event",
    "event_status_changed",
    "notification",
    "status_changed",
})

WILDCARD = "*"


@dataclass
class FeedMessage:
    seq: int
    type: str
    data: dict[str, Any]
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "seq": self.seq,
            "type": self.type,
            "data": self.data,
            "timestamp": self.published_at.isoformat(),
        }


Subscriber = Callable[[FeedMessage], Awaitable[None]]


class EventBus:
    """Sequenced publish/subscribe bus for the simulation feed."""

    def __init__(self, queue_size: int = 10000, handler_timeout: float = 5.0):
        self._queue: asyncio.Queue[FeedMessage] = asyncio.Queue(maxsize=queue_size)
        self._handler_timeout = handler_timeout
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)
        self._seq = itertools.count(1)
        self._dispatch_task: asyncio.Task | None = None
        self._published = Counter()
        self._dropped = Counter()
        self._dispatched = 0
        self._handler_failures = 0

    @property
    def running(self) -> bool:
        return self._dispatch_task is not None and not self._dispatch_task.done()

    def subscribe(self, message_type: str, handler: Subscriber) -> None:
        """Register ``handler`` for one message type, or ``'*'`` for the whole feed."""
        if message_type != WILDCARD and message_type not in FEED_MESSAGE_TYPES:
            raise ValueError(f"Unknown feed message type: {message_type!r}")
        handlers = self._subscribers[message_type]
        if handler not in handlers:
            handlers.append(handler)
            logger.info("event_bus_subscriber_added", message_type=message_type)

    def unsubscribe(self, message_type: str, handler: Subscriber) -> None:
        handlers = self._subscribers.get(message_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, message_type: str, data: dict) -> FeedMessage | None:
        """Queue a message without blocking. Returns ``None`` when it had to be dropped."""
        if message_type not in FEED_MESSAGE_TYPES:
            raise ValueError(f"Unknown feed message type: {message_type!r}")
        message = FeedMessage(seq=next(self._seq), type=message_type, data=data)
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self._dropped[message_type] += 1
            logger.warning("event_bus_queue_full", message_type=message_type, seq=message.seq)
            return None
        self._published[message_type] += 1
        return message

    async def start(self) -> None:
        if self.running:
            return
        self._dispatch_task = asyncio.create_task(self._dispatch_loop())
        logger.info("event_bus_started")

    async def stop(self) -> None:
        task, self._dispatch_task = self._dispatch_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("event_bus_stopped", published=sum(self._published.values()), dispatched=self._dispatched)

    async def drain(self) -> int:
        """Dispatch everything currently queued, in order. Returns how many were dispatched."""
        count = 0
        while not self._queue.empty():
            await self._dispatch(self._queue.get_nowait())
            count += 1
        return count

    async def _dispatch_loop(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._dispatch(message)
            except Exception as e:
                logger.error("event_bus_dispatch_error", seq=message.seq, error=str(e))

    async def _dispatch(self, message: FeedMessage) -> None:
        handlers = self._subscribers.get(message.type, []) + self._subscribers.get(WILDCARD, [])
        for handler in list(handlers):
            try:
                await asyncio.wait_for(handler(message), timeout=self._handler_timeout)
            except asyncio.TimeoutError:
                self._handler_failures += 1
                logger.warning("event_bus_handler_timeout", message_type=message.type, seq=message.seq)
            except Exception as e:
                self._handler_failures += 1
                logger.error("event_bus_handler_error", message_type=message.type, seq=message.seq, error=str(e))
        self._dispatched += 1

    def get_stats(self) -> dict:
        return {
            "running": self.running,
            "published": dict(self._published),
            "dropped": dict(self._dropped),
            "dispatched": self._dispatched,
            "handler_failures": self._handler_failures,
            "queued": self._queue.qsize(),
            "subscribers": {k: len(v) for k, v in self._subscribers.items() if v},
        }
