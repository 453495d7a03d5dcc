"""Bridge contracts: Pydantic models defining API request and response shapes."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..models import EventType, Severity


# ── Simulation ──
class RedTeamActionModel(BaseModel):
    id: str
    technique: str
    tool: str
    target: str
    payload: Optional[str] = None
    success: bool
    detection_probability: float
    impact: str
    next_actions: list[str] = []

class BlueTeamResponseModel(BaseModel):
    id: str
    detection_method: str
    response_time: int
    analyst: str
    containment_actions: list[str] = []
    effectiveness: int = 0
    false_positive: bool = False

class SimulationEventModel(BaseModel):
    id: str
    timestamp: str
    type: str
    severity: str
    status: str
    title: str
    description: str
    attack_vector: Optional[str] = None
    target_system: str
    source_ip: Optional[str] = None
    destination_ip: Optional[str] = None
    mitre_technique: Optional[str] = None
    phase_instance_id: Optional[str] = None
    red_team_action: Optional[RedTeamActionModel] = None
    blue_team_response: Optional[BlueTeamResponseModel] = None
    metadata: dict = {}

class ThreatMetricsModel(BaseModel):
    total_threats: int = 0
    active_threats: int = 0
    detected_threats: int = 0
    mitigated_threats: int = 0
    average_detection_time: float = 0.0
    average_response_time: float = 0.0
    detection_rate: float = 0.0
    mitigation_rate: float = 0.0

class SystemStatusModel(BaseModel):
    id: str
    name: str
    type: str
    status: str
    compromise_level: int
    last_activity: str
    active_threats: list[str] = []

class ObjectiveModel(BaseModel):
    id: str
    title: str
    description: str
    status: str
    points: int
    time_limit: Optional[int] = None
    requirements: list[str] = []

class SimulationPhaseModel(BaseModel):
    id: str
    name: str
    description: str
    duration: int
    objectives: list[str] = []
    allowed_techniques: list[str] = []

class SimulationStateResponse(BaseModel):
    id: str
    name: str
    status: str
    start_time: str
    end_time: Optional[str] = None
    duration: int
    event_count: int = 0
    metrics: ThreatMetricsModel
    systems: list[SystemStatusModel] = []
    red_team_objectives: list[ObjectiveModel] = []
    blue_team_objectives: list[ObjectiveModel] = []
    current_phase: SimulationPhaseModel
    events: list[SimulationEventModel] = []

class CommandResponse(BaseModel):
    changed: bool
    status: str

class InitializeRequest(BaseModel):
    seed: Optional[int] = None

class ScenarioSummary(BaseModel):
    name: str
    phase_count: int
    phases: list[dict] = []


# ── Notifications ──
class NotificationModel(BaseModel):
    id: str
    type: str
    severity: str
    title: str
    message: str
    timestamp: str
    auto_hide: bool = True
    duration: Optional[float] = None
    event_id: Optional[str] = None

class ClearNotificationsResponse(BaseModel):
    cleared: int


# ── Reports ──
ReportClassification = Literal["public", "internal", "confidential", "restricted", "secret"]

class ReportRequest(BaseModel):
    severities: list[Severity] = Field(
        default_factory=lambda: [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]
    )
    event_types: list[EventType] = Field(
        default_factory=lambda: [EventType.ATTACK, EventType.DETECTION, EventType.MITIGATION]
    )
    classification: ReportClassification = "internal"

class ReportDownloadRequest(ReportRequest):
    format: Literal["json", "xml", "html"] = "json"
