from .chain_executor import AttackChainExecutor, Stage, StagePlan
from .clock import AsyncioClock, ManualClock
from .metrics import compute_metrics
from .notifications import NotificationCenter, derive_notification
from .scenarios import SCENARIOS, Phase, Scenario, get_scenario, list_scenarios, pick_random_scenario
from .scheduler import ChainScheduler, StageKey
from .simulation import SimulationEngine

__all__ = [
    "AsyncioClock",
    "AttackChainExecutor",
    "ChainScheduler",
    "ManualClock",
    "NotificationCenter",
    "Phase",
    "SCENARIOS",
    "Scenario",
    "SimulationEngine",
    "Stage",
    "StageKey",
    "StagePlan",
    "compute_metrics",
    "derive_notification",
    "get_scenario",
    "list_scenarios",
    "pick_random_scenario",
]
