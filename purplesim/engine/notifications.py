"""Notification emitter: short-lived notices derived from simulation events.

Notices live in a capped, most-recent-first list and expire on their own
timers. Those timers sit in a scheduler of their own, so pausing the
exercise does not freeze notices that are already on screen.
"""

from typing import Callable, Optional

from ..models import (
    EventType,
    NotificationData,
    NotificationSeverity,
    NotificationType,
    Severity,
    SimulationEvent,
    SimulationStatus,
)
from ..utils.logging import get_logger
from .clock import Clock
from .scheduler import ChainScheduler

logger = get_logger("engine.notifications")

NOTIFICATION_DURATIONS = {
    EventType.ATTACK: 8.0,
    EventType.DETECTION: 6.0,
    EventType.MITIGATION: 7.0,
    EventType.SYSTEM: 6.0,
}

_TYPE_MAP = {
    EventType.ATTACK: NotificationType.RED_ATTACK,
    EventType.DETECTION: NotificationType.BLUE_DETECTION,
    EventType.MITIGATION: NotificationType.BLUE_MITIGATION,
    EventType.SYSTEM: NotificationType.SYSTEM_ALERT,
}

_ATTACK_SEVERITY_MAP = {
    Severity.CRITICAL: NotificationSeverity.ERROR,
    Severity.HIGH: NotificationSeverity.WARNING,
    Severity.MEDIUM: NotificationSeverity.INFO,
    Severity.LOW: NotificationSeverity.INFO,
}


def _notification_severity(event: SimulationEvent) -> NotificationSeverity:
    if event.type == EventType.ATTACK:
        return _ATTACK_SEVERITY_MAP[event.severity]
    if event.type == EventType.DETECTION:
        return NotificationSeverity.INFO
    if event.type == EventType.MITIGATION:
        return NotificationSeverity.SUCCESS
    return NotificationSeverity.WARNING


def _notification_title(event: SimulationEvent) -> str:
    if event.type == EventType.ATTACK:
        return f"RED TEAM: {event.title}"
    if event.type == EventType.DETECTION:
        return "BLUE TEAM: Detection Alert"
    if event.type == EventType.MITIGATION:
        return "BLUE TEAM: Threat Mitigated"
    return f"SYSTEM: {event.title}"


def derive_notification(event: SimulationEvent) -> NotificationData:
    """Map one event to its notice (type, severity, title, auto-hide duration)."""
    return NotificationData(
        id=f"notif-{event.id}",
        type=_TYPE_MAP[event.type],
        severity=_notification_severity(event),
        title=_notification_title(event),
        message=event.description,
        timestamp=event.timestamp,
        auto_hide=True,
        duration=NOTIFICATION_DURATIONS[event.type],
        event_id=event.id,
    )


class NotificationCenter:
    """Holds the visible notices and their expiry timers."""

    def __init__(self, clock: Clock, max_items: int = 13):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._max_items = max_items
        self._items: list[NotificationData] = []
        self._expiry = ChainScheduler(clock, name="notifications")
        self._subscribers: list[Callable[[NotificationData], None]] = []

    @property
    def max_items(self) -> int:
        return self._max_items

    def list(self) -> list[NotificationData]:
        """Visible notices, most recent first."""
        return list(self._items)

    def get(self, notification_id: str) -> Optional[NotificationData]:
        for item in self._items:
            if item.id == notification_id:
                return item
        return None

    def subscribe(self, handler: Callable[[NotificationData], None]) -> Callable[[], None]:
        """Call ``handler`` for every new notice. Returns an unsubscribe function."""
        if handler not in self._subscribers:
            self._subscribers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return _unsubscribe

    def emit_for_event(self, event: SimulationEvent, simulation_status: SimulationStatus) -> Optional[NotificationData]:
        """Derive and add the notice for ``event``; nothing happens unless running."""
        if simulation_status != SimulationStatus.RUNNING:
            return None
        return self.add(derive_notification(event))

    def add(self, notification: NotificationData) -> NotificationData:
        if self.get(notification.id) is not None:
            self.dismiss(notification.id)

        self._items.insert(0, notification)
        for dropped in self._items[self._max_items:]:
            self._expiry.cancel(dropped.id)
        del self._items[self._max_items:]

        if notification.auto_hide and notification.duration:
            self._expiry.schedule(
                notification.id,
                notification.duration,
                lambda: self._expire(notification.id),
            )

        for handler in list(self._subscribers):
            try:
                handler(notification)
            except Exception as e:
                logger.error("notification_subscriber_failed", notification_id=notification.id, error=str(e))
        return notification

    def dismiss(self, notification_id: str) -> bool:
        self._expiry.cancel(notification_id)
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        return len(self._items) != before

    def clear_all(self) -> int:
        cleared = len(self._items)
        self._expiry.cancel_all()
        self._items = []
        return cleared

    def dispose(self) -> None:
        self.clear_all()
        self._subscribers.clear()

    def _expire(self, notification_id: str) -> None:
        if self.dismiss(notification_id):
            logger.debug("notification_expired", notification_id=notification_id)
