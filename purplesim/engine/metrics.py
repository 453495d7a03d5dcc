"""Metrics aggregation over the full event log."""

import random
from typing import Iterable, Optional

from ..models import EventStatus, EventType, SimulationEvent, ThreatMetrics

# Synthetic extra delay between detection and response, inclusive seconds
RESPONSE_OFFSET_RANGE = (20, 139)

_default_rng = random.Random()


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def compute_metrics(events: Iterable[SimulationEvent], rng: Optional[random.Random] = None) -> ThreatMetrics:
    """Derive a fresh ``ThreatMetrics`` snapshot from every event in the log.

    Only attack events count as threats; they are bucketed by their current
    status. Timing comes from the blue team responses on detection events.
    Empty denominators give 0 rather than raising.
    """
    rng = rng or _default_rng
    events = list(events)

    attacks = [e for e in events if e.type == EventType.ATTACK]
    active = sum(1 for e in attacks if e.status == EventStatus.ACTIVE)
    detected = sum(1 for e in attacks if e.status == EventStatus.DETECTED)
    mitigated = sum(1 for e in attacks if e.status == EventStatus.MITIGATED)

    detection_times = [
        e.blue_team_response.response_time
        for e in events
        if e.type == EventType.DETECTION and e.blue_team_response is not None
    ]
    response_times = [t + rng.randint(*RESPONSE_OFFSET_RANGE) for t in detection_times]

    return ThreatMetrics(
        total_threats=len(attacks),
        active_threats=active,
        detected_threats=detected,
        mitigated_threats=mitigated,
        average_detection_time=_mean(detection_times),
        average_response_time=_mean(response_times),
        detection_rate=_percent(detected + mitigated, len(attacks)),
        mitigation_rate=_percent(mitigated, detected + mitigated),
    )
