"""Simulation data model: events, metrics, systems, objectives and notifications.

Plain dataclasses shared by the engine, the report builder and the API layer.
Each record knows how to turn itself into a JSON-ready dict via ``to_dict()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class EventType(str, Enum):
    ATTACK = "attack"
    DETECTION = "detection"
    MITIGATION = "mitigation"
    SYSTEM = "system"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventStatus(str, Enum):
    ACTIVE = "active"
    DETECTED = "detected"
    MITIGATED = "mitigated"
    RESOLVED = "resolved"  # reserved, no transition reaches it


class SimulationStatus(str, Enum):
    PREPARING = "preparing"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class NotificationType(str, Enum):
    RED_ATTACK = "red-attack"
    BLUE_DETECTION = "blue-detection"
    BLUE_MITIGATION = "blue-mitigation"
    SYSTEM_ALERT = "system-alert"


class NotificationSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class SystemType(str, Enum):
    SERVER = "server"
    WORKSTATION = "workstation"
    NETWORK = "network"
    DATABASE = "database"
    APPLICATION = "application"


class SystemHealth(str, Enum):
    HEALTHY = "healthy"
    COMPROMISED = "compromised"
    SUSPICIOUS = "suspicious"
    OFFLINE = "offline"


class ObjectiveStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


# Forward-only lifecycle of an attack event
STATUS_ORDER = {
    EventStatus.ACTIVE: 0,
    EventStatus.DETECTED: 1,
    EventStatus.MITIGATED: 2,
}

VALID_EVENT_TRANSITIONS = {
    EventStatus.ACTIVE: [EventStatus.DETECTED],
    EventStatus.DETECTED: [EventStatus.MITIGATED],
    EventStatus.MITIGATED: [],
    EventStatus.RESOLVED: [],
}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class RedTeamAction:
    """Simulated offensive detail attached to an attack event."""
    id: str
    technique: str
    tool: str
    target: str
    success: bool
    detection_probability: float
    impact: Severity
    payload: Optional[str] = None
    next_actions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "technique": self.technique,
            "tool": self.tool,
            "target": self.target,
            "payload": self.payload,
            "success": self.success,
            "detection_probability": self.detection_probability,
            "impact": self.impact.value,
            "next_actions": list(self.next_actions),
        }


@dataclass
class BlueTeamResponse:
    """Simulated defender detail attached to a detection event."""
    id: str
    detection_method: str
    response_time: int  # seconds
    analyst: str
    containment_actions: list[str] = field(default_factory=list)
    effectiveness: int = 0  # 0-100
    false_positive: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "detection_method": self.detection_method,
            "response_time": self.response_time,
            "analyst": self.analyst,
            "containment_actions": list(self.containment_actions),
            "effectiveness": self.effectiveness,
            "false_positive": self.false_positive,
        }


@dataclass
class SimulationEvent:
    """A single entry of the simulation event log.

    Everything except ``status`` is fixed at creation. Detection and mitigation
    companions share the ``phase_instance_id`` of the attack they answer.
    """
    id: str
    timestamp: datetime
    type: EventType
    severity: Severity
    status: EventStatus
    title: str
    description: str
    target_system: str
    attack_vector: Optional[str] = None
    source_ip: Optional[str] = None
    destination_ip: Optional[str] = None
    mitre_technique: Optional[str] = None
    phase_instance_id: Optional[str] = None
    red_team_action: Optional[RedTeamAction] = None
    blue_team_response: Optional[BlueTeamResponse] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": _iso(self.timestamp),
            "type": self.type.value,
            "severity": self.severity.value,
            "status": self.status.value,
            "title": self.title,
            "description": self.description,
            "attack_vector": self.attack_vector,
            "target_system": self.target_system,
            "source_ip": self.source_ip,
            "destination_ip": self.destination_ip,
            "mitre_technique": self.mitre_technique,
            "phase_instance_id": self.phase_instance_id,
            "red_team_action": self.red_team_action.to_dict() if self.red_team_action else None,
            "blue_team_response": self.blue_team_response.to_dict() if self.blue_team_response else None,
            "metadata": dict(self.metadata),
        }


@dataclass
class ThreatMetrics:
    total_threats: int = 0
    active_threats: int = 0
    detected_threats: int = 0
    mitigated_threats: int = 0
    average_detection_time: float = 0.0
    average_response_time: float = 0.0
    detection_rate: float = 0.0  # percentage
    mitigation_rate: float = 0.0  # percentage

    def to_dict(self) -> dict:
        return {
            "total_threats": self.total_threats,
            "active_threats": self.active_threats,
            "detected_threats": self.detected_threats,
            "mitigated_threats": self.mitigated_threats,
            "average_detection_time": self.average_detection_time,
            "average_response_time": self.average_response_time,
            "detection_rate": self.detection_rate,
            "mitigation_rate": self.mitigation_rate,
        }


@dataclass
class SystemStatus:
    id: str
    name: str
    type: SystemType
    status: SystemHealth
    compromise_level: int  # 0-100
    last_activity: datetime
    active_threats: list[str] = field(default_factory=list)  # event ids

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "status": self.status.value,
            "compromise_level": self.compromise_level,
            "last_activity": _iso(self.last_activity),
            "active_threats": list(self.active_threats),
        }


@dataclass
class Objective:
    id: str
    title: str
    description: str
    status: ObjectiveStatus
    points: int
    requirements: list[str] = field(default_factory=list)
    time_limit: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "points": self.points,
            "time_limit": self.time_limit,
            "requirements": list(self.requirements),
        }


@dataclass
class SimulationPhase:
    id: str
    name: str
    description: str
    duration: int  # minutes
    objectives: list[str] = field(default_factory=list)  # objective ids
    allowed_techniques: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "objectives": list(self.objectives),
            "allowed_techniques": list(self.allowed_techniques),
        }


@dataclass
class NotificationData:
    """Short-lived user-facing notice derived from one event."""
    id: str
    type: NotificationType
    severity: NotificationSeverity
    title: str
    message: str
    timestamp: datetime
    auto_hide: bool = True
    duration: Optional[float] = None  # seconds
    event_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "timestamp": _iso(self.timestamp),
            "auto_hide": self.auto_hide,
            "duration": self.duration,
            "event_id": self.event_id,
        }


@dataclass
class SimulationState:
    """Top-level aggregate owned by the simulation engine.

    ``events`` is append-only and ``metrics`` is always recomputed from it in
    the same step, so the two never disagree.
    """
    id: str
    name: str
    status: SimulationStatus
    start_time: datetime
    duration: int  # minutes
    current_phase: SimulationPhase
    end_time: Optional[datetime] = None
    events: list[SimulationEvent] = field(default_factory=list)
    metrics: ThreatMetrics = field(default_factory=ThreatMetrics)
    systems: list[SystemStatus] = field(default_factory=list)
    red_team_objectives: list[Objective] = field(default_factory=list)
    blue_team_objectives: list[Objective] = field(default_factory=list)

    def to_dict(self, include_events: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "duration": self.duration,
            "event_count": len(self.events),
            "metrics": self.metrics.to_dict(),
            "systems": [s.to_dict() for s in self.systems],
            "red_team_objectives": [o.to_dict() for o in self.red_team_objectives],
            "blue_team_objectives": [o.to_dict() for o in self.blue_team_objectives],
            "current_phase": self.current_phase.to_dict(),
        }
        if include_events:
            data["events"] = [e.to_dict() for e in self.events]
        return data
