"""Simulation routes: lifecycle commands, state snapshot and event log."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...bridge.contracts import (
    CommandResponse,
    InitializeRequest,
    ScenarioSummary,
    SimulationEventModel,
    SimulationStateResponse,
    ThreatMetricsModel,
)
from ...dependencies import get_simulation_engine
from ...engine.scenarios import list_scenarios
from ...models import EventType, Severity

router = APIRouter(prefix="/simulation", tags=["simulation"])


def _command_result(engine, changed: bool) -> dict:
    return {"changed": changed, "status": engine.current_status().value}


@router.get("", response_model=SimulationStateResponse)
async def get_simulation(
    include_events: bool = Query(True),
    engine=Depends(get_simulation_engine),
):
    """Current state snapshot: status, metrics, systems, objectives and (optionally) the event log."""
    return engine.get_state().to_dict(include_events=include_events)


@router.post("/initialize", response_model=SimulationStateResponse)
async def initialize_simulation(
    body: Optional[InitializeRequest] = None,
    engine=Depends(get_simulation_engine),
):
    seed = body.seed if body else None
    return engine.initialize(seed=seed).to_dict()


@router.post("/start", response_model=CommandResponse)
async def start_simulation(engine=Depends(get_simulation_engine)):
    return _command_result(engine, engine.start())


@router.post("/pause", response_model=CommandResponse)
async def pause_simulation(engine=Depends(get_simulation_engine)):
    return _command_result(engine, engine.pause())


@router.post("/stop", response_model=CommandResponse)
async def stop_simulation(engine=Depends(get_simulation_engine)):
    return _command_result(engine, engine.stop())


@router.get("/metrics", response_model=ThreatMetricsModel)
async def get_metrics(engine=Depends(get_simulation_engine)):
    return engine.get_metrics().to_dict()


@router.get("/events", response_model=list[SimulationEventModel])
async def list_events(
    type: Optional[EventType] = Query(None),
    severity: Optional[Severity] = Query(None),
    limit: Optional[int] = Query(None, ge=0, le=1000),
    engine=Depends(get_simulation_engine),
):
    events = engine.list_events(event_type=type, severity=severity, limit=limit)
    return [e.to_dict() for e in events]


@router.get("/events/{event_id}", response_model=SimulationEventModel)
async def get_event(event_id: str, engine=Depends(get_simulation_engine)):
    event = engine.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
    return event.to_dict()


@router.get("/scenarios", response_model=list[ScenarioSummary])
async def get_scenarios():
    """The attack scenario catalogue chains are drawn from."""
    return [s.to_dict() for s in list_scenarios()]
