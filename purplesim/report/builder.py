"""Report builder: read-only projection of a simulation run.

``build_report`` never touches the state it is given: it filters the event
log, recomputes the filtered counts and applies the recommendation rules.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models import EventType, Severity, SimulationEvent, SimulationState, ThreatMetrics

CLASSIFICATIONS = {
    "public": {
        "label": "PUBLIC",
        "description": "Information that can be shared publicly",
    },
    "internal": {
        "label": "INTERNAL USE ONLY",
        "description": "Information for internal organizational use",
    },
    "confidential": {
        "label": "CONFIDENTIAL",
        "description": "Sensitive information requiring protection",
    },
    "restricted": {
        "label": "RESTRICTED",
        "description": "Highly sensitive organizational information",
    },
    "secret": {
        "label": "SECRET",
        "description": "Classified information requiring highest protection",
    },
}

DEFAULT_SEVERITIES = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]
DEFAULT_EVENT_TYPES = [EventType.ATTACK, EventType.DETECTION, EventType.MITIGATION]

DETECTION_RATE_TARGET = 80.0
DETECTION_TIME_TARGET = 300.0  # seconds
MITIGATION_RATE_TARGET = 90.0
PHISHING_EVENT_THRESHOLD = 3


def classification_info(level: str) -> dict:
    info = CLASSIFICATIONS.get(level)
    if info is None:
        raise ValueError(f"Unknown classification level: {level!r}")
    return {"level": level, **info}


def _vector_contains(event: SimulationEvent, needle: str) -> bool:
    return needle in (event.attack_vector or "").lower()


def generate_recommendations(events: list[SimulationEvent], metrics: ThreatMetrics) -> list[dict]:
    """Rule based advice. Rates come from the whole run, vector rules from ``events``."""
    recommendations = []

    if metrics.detection_rate < DETECTION_RATE_TARGET:
        recommendations.append({
            "priority": "High",
            "category": "Detection",
            "title": "Improve Threat Detection Capabilities",
            "description": "Detection rate is below 80%. Consider enhancing SIEM rules, deploying additional "
                           "sensors, and improving threat intelligence integration.",
            "impact": "Critical",
        })

    if metrics.average_detection_time > DETECTION_TIME_TARGET:
        recommendations.append({
            "priority": "Medium",
            "category": "Response Time",
            "title": "Reduce Detection Time",
            "description": "Average detection time exceeds 5 minutes. Implement automated detection rules "
                           "and enhance monitoring coverage.",
            "impact": "High",
        })

    if metrics.mitigation_rate < MITIGATION_RATE_TARGET:
        recommendations.append({
            "priority": "High",
            "category": "Mitigation",
            "title": "Enhance Incident Response Procedures",
            "description": "Mitigation rate is below 90%. Review and improve incident response playbooks "
                           "and automation capabilities.",
            "impact": "High",
        })

    phishing = [e for e in events if _vector_contains(e, "phishing")]
    if len(phishing) > PHISHING_EVENT_THRESHOLD:
        recommendations.append({
            "priority": "Medium",
            "category": "Training",
            "title": "Strengthen Security Awareness Training",
            "description": "Multiple phishing attempts detected. Implement regular security awareness "
                           "training and phishing simulation exercises.",
            "impact": "Medium",
        })

    if any(_vector_contains(e, "lateral") for e in events):
        recommendations.append({
            "priority": "High",
            "category": "Network Security",
            "title": "Implement Network Segmentation",
            "description": "Lateral movement detected. Deploy network segmentation and zero-trust "
                           "architecture to limit attack spread.",
            "impact": "Critical",
        })

    return recommendations


def _filtered_metrics(events: list[SimulationEvent]) -> dict:
    return {
        "total_events": len(events),
        "attack_events": sum(1 for e in events if e.type == EventType.ATTACK),
        "detection_events": sum(1 for e in events if e.type == EventType.DETECTION),
        "mitigation_events": sum(1 for e in events if e.type == EventType.MITIGATION),
        "critical_events": sum(1 for e in events if e.severity == Severity.CRITICAL),
        "high_events": sum(1 for e in events if e.severity == Severity.HIGH),
        "medium_events": sum(1 for e in events if e.severity == Severity.MEDIUM),
        "low_events": sum(1 for e in events if e.severity == Severity.LOW),
    }


def _executive_summary(metrics: ThreatMetrics) -> dict:
    return {
        "total_threats": metrics.total_threats,
        "active_threats": metrics.active_threats,
        "detected_threats": metrics.detected_threats,
        "mitigated_threats": metrics.mitigated_threats,
        "detection_rate": round(metrics.detection_rate, 2),
        "mitigation_rate": round(metrics.mitigation_rate, 2),
        "average_detection_time": round(metrics.average_detection_time),
        "average_response_time": round(metrics.average_response_time),
    }


def build_report(
    state: SimulationState,
    severities: Optional[Iterable[Severity | str]] = None,
    event_types: Optional[Iterable[EventType | str]] = None,
    classification: str = "internal",
    generated_at: Optional[datetime] = None,
    report_id: Optional[str] = None,
) -> dict:
    """Build the report dict for ``state``.

    Args:
        state: Snapshot to report on. Not modified.
        severities: Severities to keep (default: all four).
        event_types: Event types to keep (default: attack, detection, mitigation).
        classification: One of ``CLASSIFICATIONS``.
        generated_at: Report timestamp, defaults to now (UTC).
        report_id: Defaults to ``RPT-<epoch ms>`` of ``generated_at``.

    Raises:
        ValueError: Unknown classification, severity or event type.
    """
    classification_meta = classification_info(classification)
    wanted_severities = [Severity(s) for s in (severities if severities is not None else DEFAULT_SEVERITIES)]
    wanted_types = [EventType(t) for t in (event_types if event_types is not None else DEFAULT_EVENT_TYPES)]

    generated_at = generated_at or datetime.now(timezone.utc)
    report_id = report_id or f"RPT-{int(generated_at.timestamp() * 1000)}"
    end_time = state.end_time or generated_at
    duration_minutes = max(0, round((end_time - state.start_time).total_seconds() / 60))

    events = [e for e in state.events if e.severity in wanted_severities and e.type in wanted_types]

    return {
        "metadata": {
            "report_id": report_id,
            "generated_at": generated_at.isoformat(),
            "simulation_id": state.id,
            "simulation_name": state.name,
            "start_time": state.start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration": f"{duration_minutes} minutes",
            "duration_minutes": duration_minutes,
            "status": state.status.value,
            "classification": classification_meta,
            "report_filters": {
                "severities": [s.value for s in wanted_severities],
                "event_types": [t.value for t in wanted_types],
            },
        },
        "executive_summary": _executive_summary(state.metrics),
        "filtered_metrics": _filtered_metrics(events),
        "events": [e.to_dict() for e in events],
        "systems_status": [
            {
                "id": s.id,
                "name": s.name,
                "type": s.type.value,
                "status": s.status.value,
                "compromise_level": s.compromise_level,
                "active_threats": len(s.active_threats),
            }
            for s in state.systems
        ],
        "objectives": {
            "red_team": [o.to_dict() for o in state.red_team_objectives],
            "blue_team": [o.to_dict() for o in state.blue_team_objectives],
        },
        "recommendations": generate_recommendations(events, state.metrics),
    }
