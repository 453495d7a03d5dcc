"""Simulation Engine: owns the exercise state and its lifecycle.

    preparing -> running <-> paused
    running | paused -> completed   (terminal)

The engine is the single writer of ``SimulationState``. Timer callbacks from
the attack chain executor and the three lifecycle commands are the only things
that mutate it, and every callback asks ``current_status()`` before doing so.
"""

import copy
import itertools
import random
from typing import Callable, Optional, Sequence

from ..models import (
    EventStatus,
    EventType,
    Objective,
    ObjectiveStatus,
    Severity,
    SimulationEvent,
    SimulationPhase,
    SimulationState,
    SimulationStatus,
    SystemHealth,
    SystemStatus,
    SystemType,
    ThreatMetrics,
    VALID_EVENT_TRANSITIONS,
)
from ..utils.logging import get_logger
from .chain_executor import AttackChainExecutor
from .clock import AsyncioClock, Clock
from .metrics import compute_metrics
from .notifications import NotificationCenter
from .scenarios import Scenario
from .scheduler import ChainScheduler

logger = get_logger("engine.simulation")

TICK_KEY = "simulation-tick"

Listener = Callable[[str, dict], None]

# id, name, type
SEEDED_SYSTEMS = [
    ("web-server-01", "Web Server 01", SystemType.SERVER),
    ("db-server-01", "Database Server", SystemType.DATABASE),
    ("workstation-01", "Admin Workstation", SystemType.WORKSTATION),
    ("domain-controller", "Domain Controller", SystemType.SERVER),
    ("email-server", "Email Server", SystemType.SERVER),
    ("file-server", "File Server", SystemType.SERVER),
    ("backup-server", "Backup Server", SystemType.SERVER),
    ("vpn-gateway", "VPN Gateway", SystemType.NETWORK),
]


def _seed_red_objectives() -> list[Objective]:
    return [
        Objective(
            id="obj-1",
            title="Initial Access",
            description="Gain initial foothold in the network",
            status=ObjectiveStatus.PENDING,
            points=100,
            requirements=["Compromise at least one system"],
        ),
        Objective(
            id="obj-2",
            title="Lateral Movement",
            description="Move laterally through the network",
            status=ObjectiveStatus.PENDING,
            points=200,
            requirements=["Compromise multiple systems"],
        ),
    ]


def _seed_blue_objectives() -> list[Objective]:
    return [
        Objective(
            id="obj-blue-1",
            title="Threat Detection",
            description="Detect and alert on malicious activities",
            status=ObjectiveStatus.PENDING,
            points=150,
            requirements=["Detect 80% of attacks within 5 minutes"],
        ),
    ]


def _seed_phase() -> SimulationPhase:
    return SimulationPhase(
        id="phase-1",
        name="Initial Reconnaissance",
        description="Red team performs initial reconnaissance",
        duration=15,
        objectives=["obj-1"],
        allowed_techniques=["T1595", "T1590", "T1589"],
    )


class SimulationEngine:
    """Purple team exercise engine with an explicit lifecycle.

    Commands never raise for an invalid source state: they return ``False``
    and leave everything untouched.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        tick_interval: float = 3.5,
        launch_probability: float = 0.6,
        initial_chain_delays: Sequence[float] = (1.0, 3.0, 6.0),
        detection_delay_range: tuple[float, float] = (2.0, 17.0),
        mitigation_delay_range: tuple[float, float] = (10.0, 45.0),
        duration_minutes: int = 60,
        scenarios: Optional[Sequence[Scenario]] = None,
        notification_max_items: int = 13,
        event_bus=None,
    ):
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if not 0.0 <= launch_probability <= 1.0:
            raise ValueError("launch_probability must be between 0 and 1")

        self.clock = clock or AsyncioClock()
        self.rng = rng if rng is not None else random.Random(seed)
        self.tick_interval = tick_interval
        self.launch_probability = launch_probability
        self.initial_chain_delays = tuple(initial_chain_delays)
        self.duration_minutes = duration_minutes

        self._scheduler = ChainScheduler(self.clock, name="chains")
        self._executor = AttackChainExecutor(
            self,
            self._scheduler,
            self.rng,
            scenarios=scenarios,
            detection_delay_range=detection_delay_range,
            mitigation_delay_range=mitigation_delay_range,
        )
        self.notifications = NotificationCenter(self.clock, max_items=notification_max_items)
        self.notifications.subscribe(self._on_notification)

        self._event_bus = event_bus
        self._listeners: list[Listener] = []
        self._event_ids = itertools.count(1)
        self._index: dict[str, SimulationEvent] = {}
        self._disposed = False
        self._state = self._fresh_state()

    @classmethod
    def from_config(cls, config, clock: Optional[Clock] = None, rng: Optional[random.Random] = None,
                    scenarios: Optional[Sequence[Scenario]] = None, event_bus=None) -> "SimulationEngine":
        return cls(
            clock=clock,
            rng=rng,
            seed=config.simulation_seed,
            tick_interval=config.simulation_tick_interval,
            launch_probability=config.simulation_launch_probability,
            initial_chain_delays=config.simulation_initial_chain_delays,
            detection_delay_range=config.detection_delay_range,
            mitigation_delay_range=config.mitigation_delay_range,
            duration_minutes=config.simulation_duration_minutes,
            scenarios=scenarios,
            notification_max_items=config.notification_max_items,
            event_bus=event_bus,
        )

    # ── State ─────────────────────────────────────────────────────

    def _fresh_state(self) -> SimulationState:
        now = self.clock.now()
        return SimulationState(
            id=f"sim-{int(now.timestamp() * 1000)}",
            name=f"APT Simulation - {now.date().isoformat()}",
            status=SimulationStatus.PREPARING,
            start_time=now,
            duration=self.duration_minutes,
            current_phase=_seed_phase(),
            systems=[
                SystemStatus(
                    id=system_id,
                    name=name,
                    type=system_type,
                    status=SystemHealth.HEALTHY,
                    compromise_level=0,
                    last_activity=now,
                )
                for system_id, name, system_type in SEEDED_SYSTEMS
            ],
            red_team_objectives=_seed_red_objectives(),
            blue_team_objectives=_seed_blue_objectives(),
        )

    def current_status(self) -> SimulationStatus:
        return self._state.status

    def get_state(self) -> SimulationState:
        """Consistent snapshot (log, metrics and status together). Safe to mutate."""
        return copy.deepcopy(self._state)

    def get_metrics(self) -> ThreatMetrics:
        return copy.deepcopy(self._state.metrics)

    def get_event(self, event_id: str) -> Optional[SimulationEvent]:
        event = self._index.get(event_id)
        return copy.deepcopy(event) if event is not None else None

    def list_events(
        self,
        event_type: EventType | str | None = None,
        severity: Severity | str | None = None,
        limit: Optional[int] = None,
    ) -> list[SimulationEvent]:
        """Events in log order, optionally filtered. ``limit`` keeps the most recent ones."""
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative")
        wanted_type = EventType(event_type) if event_type is not None else None
        wanted_severity = Severity(severity) if severity is not None else None

        events = [
            e for e in self._state.events
            if (wanted_type is None or e.type == wanted_type)
            and (wanted_severity is None or e.severity == wanted_severity)
        ]
        if limit is not None:
            events = events[-limit:] if limit else []
        return copy.deepcopy(events)

    # ── Lifecycle ─────────────────────────────────────────────────

    def initialize(self, seed: Optional[int] = None) -> SimulationState:
        """Reset to a fresh ``preparing`` state. Event ids keep counting up."""
        self._scheduler.cancel_all()
        self.notifications.clear_all()
        if seed is not None:
            self.rng.seed(seed)
        if self._disposed:
            self.notifications.subscribe(self._on_notification)
        self._index.clear()
        self._state = self._fresh_state()
        self._disposed = False
        logger.info("simulation_initialized", simulation_id=self._state.id, seed=seed)
        self._emit("status_changed", self._status_payload(None))
        return self.get_state()

    def start(self) -> bool:
        status = self._state.status
        if self._disposed or status not in (SimulationStatus.PREPARING, SimulationStatus.PAUSED):
            logger.debug("command_ignored", command="start", status=status.value)
            return False

        if status == SimulationStatus.PREPARING:
            self._state.start_time = self.clock.now()
        self._state.status = SimulationStatus.RUNNING

        self._scheduler.schedule(TICK_KEY, self.tick_interval, self._tick)
        for index, delay in enumerate(self.initial_chain_delays):
            self._scheduler.schedule(f"kickoff-{index}", delay, self._kickoff)

        logger.info(
            "simulation_started",
            simulation_id=self._state.id,
            resumed=status == SimulationStatus.PAUSED,
            initial_chains=len(self.initial_chain_delays),
        )
        self._emit("status_changed", self._status_payload(status))
        return True

    def pause(self) -> bool:
        status = self._state.status
        if status != SimulationStatus.RUNNING:
            logger.debug("command_ignored", command="pause", status=status.value)
            return False

        self._state.status = SimulationStatus.PAUSED
        cancelled = self._scheduler.cancel_all()
        logger.info("simulation_paused", simulation_id=self._state.id, cancelled=cancelled)
        self._emit("status_changed", self._status_payload(status))
        return True

    def stop(self) -> bool:
        status = self._state.status
        if status not in (SimulationStatus.RUNNING, SimulationStatus.PAUSED):
            logger.debug("command_ignored", command="stop", status=status.value)
            return False

        self._state.status = SimulationStatus.COMPLETED
        self._state.end_time = self.clock.now()
        cancelled = self._scheduler.cancel_all()
        logger.info(
            "simulation_stopped",
            simulation_id=self._state.id,
            cancelled=cancelled,
            events=len(self._state.events),
        )
        self._emit("status_changed", self._status_payload(status))
        return True

    def dispose(self) -> None:
        """Cancel every timer and detach all subscribers. ``initialize()`` revives the engine."""
        self._scheduler.cancel_all()
        self.notifications.dispose()
        self._listeners.clear()
        self._disposed = True
        logger.info("simulation_disposed", simulation_id=self._state.id)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(message_type, data)`` synchronously on every change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ── Timer callbacks ───────────────────────────────────────────

    def _tick(self) -> None:
        if self.current_status() != SimulationStatus.RUNNING:
            return
        if self.rng.random() < self.launch_probability:
            self._executor.launch()
        self._scheduler.schedule(TICK_KEY, self.tick_interval, self._tick)

    def _kickoff(self) -> None:
        if self.current_status() != SimulationStatus.RUNNING:
            return
        self._executor.launch()

    # ── Chain host ────────────────────────────────────────────────

    def next_event_id(self) -> str:
        return f"event-{next(self._event_ids)}"

    def record_event(self, event: SimulationEvent) -> None:
        """Append ``event`` and recompute metrics in the same step."""
        self._append(event)
        self._emit("simulation_event", event.to_dict())
        self.notifications.emit_for_event(event, self.current_status())

    def advance_event(
        self,
        event_id: str,
        expected: EventStatus,
        new_status: EventStatus,
        companion_factory: Callable[[SimulationEvent], SimulationEvent],
    ) -> Optional[SimulationEvent]:
        """Move an attack event one step along its lifecycle and append the companion.

        Returns ``None`` without touching anything when the event is unknown,
        not an attack, not in ``expected`` status, or the move is not allowed.
        """
        attack = self._index.get(event_id)
        if attack is None or attack.type != EventType.ATTACK or attack.status != expected:
            return None
        if new_status not in VALID_EVENT_TRANSITIONS.get(attack.status, []):
            logger.warning("invalid_event_transition", event_id=event_id, current=attack.status.value, requested=new_status.value)
            return None

        companion = companion_factory(attack)
        attack.status = new_status
        self._append(companion)

        self._emit("event_status_changed", {
            "event_id": attack.id,
            "previous_status": expected.value,
            "status": new_status.value,
        })
        self._emit("simulation_event", companion.to_dict())
        self.notifications.emit_for_event(companion, self.current_status())
        return companion

    def _append(self, event: SimulationEvent) -> None:
        if event.id in self._index:
            raise ValueError(f"duplicate event id {event.id!r}")
        self._state.events.append(event)
        self._index[event.id] = event
        self._state.metrics = compute_metrics(self._state.events, self.rng)

    # ── Fan-out ───────────────────────────────────────────────────

    def _status_payload(self, previous: Optional[SimulationStatus]) -> dict:
        return {
            "simulation_id": self._state.id,
            "previous_status": previous.value if previous else None,
            "status": self._state.status.value,
            "timestamp": self.clock.now().isoformat(),
        }

    def _on_notification(self, notification) -> None:
        self._emit("notification", notification.to_dict())

    def _emit(self, message_type: str, data: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(message_type, data)
            except Exception as e:
                logger.error("simulation_listener_failed", message_type=message_type, error=str(e))
        if self._event_bus is not None:
            self._event_bus.publish(message_type, data)

    def get_stats(self) -> dict:
        return {
            "simulation_id": self._state.id,
            "status": self._state.status.value,
            "events": len(self._state.events),
            "notifications": len(self.notifications.list()),
            "scheduler": self._scheduler.get_stats(),
            "chains": self._executor.get_stats(),
            "started_at": self._state.start_time.isoformat(),
        }
