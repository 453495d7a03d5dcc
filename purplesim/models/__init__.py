"""Simulation data model package."""

from .simulation import (
    STATUS_ORDER,
    VALID_EVENT_TRANSITIONS,
    BlueTeamResponse,
    EventStatus,
    EventType,
    NotificationData,
    NotificationSeverity,
    NotificationType,
    Objective,
    ObjectiveStatus,
    RedTeamAction,
    Severity,
    SimulationEvent,
    SimulationPhase,
    SimulationState,
    SimulationStatus,
    SystemHealth,
    SystemStatus,
    SystemType,
    ThreatMetrics,
)

__all__ = [
    "STATUS_ORDER",
    "VALID_EVENT_TRANSITIONS",
    "BlueTeamResponse",
    "EventStatus",
    "EventType",
    "NotificationData",
    "NotificationSeverity",
    "NotificationType",
    "Objective",
    "ObjectiveStatus",
    "RedTeamAction",
    "Severity",
    "SimulationEvent",
    "SimulationPhase",
    "SimulationState",
    "SimulationStatus",
    "SystemHealth",
    "SystemStatus",
    "SystemType",
    "ThreatMetrics",
]
