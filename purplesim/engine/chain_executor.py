"""Attack Chain Executor: turns a scenario into scheduled attack/detection/mitigation stages.

Every phase of the chosen scenario gets a finite stage plan::

    attack      phase.delay after chain start         always
    detection   +uniform(detection range) after attack  p = phase.detection_probability
    mitigation  +uniform(mitigation range) after detect p = by severity

One driver walks each plan. A stage is scheduled only once its predecessor
has fired, the roll for it is made at that moment, and every stage checks the
live simulation status before touching state.
"""

import itertools
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from ..models import EventStatus, Severity, SimulationEvent, SimulationStatus
from ..utils.logging import get_logger
from .event_factory import build_attack_event, build_detection_event, build_mitigation_event
from .scenarios import Phase, Scenario, pick_random_scenario
from .scheduler import ChainScheduler, StageKey

logger = get_logger("engine.chain_executor")


class Stage(str, Enum):
    ATTACK = "attack"
    DETECTION = "detection"
    MITIGATION = "mitigation"


MITIGATION_PROBABILITIES = {
    Severity.CRITICAL: 0.98,
    Severity.HIGH: 0.95,
    Severity.MEDIUM: 0.92,
    Severity.LOW: 0.88,
}


@dataclass(frozen=True)
class StagePlan:
    stage: Stage
    delay: float  # seconds after the predecessor fired (chain start for attack)
    probability: float


@dataclass
class PhaseInstance:
    """Runtime record of one phase executing inside one chain."""
    chain_id: str
    phase_index: int
    scenario_name: str
    phase: Phase
    plan: list[StagePlan]
    instance_id: Optional[str] = None
    attack_event_id: Optional[str] = None
    fired: list[Stage] = field(default_factory=list)


class ChainHost(Protocol):
    """What the executor needs from the simulation that owns the event log."""

    def current_status(self) -> SimulationStatus: ...

    def next_event_id(self) -> str: ...

    def record_event(self, event: SimulationEvent) -> None: ...

    def advance_event(
        self,
        event_id: str,
        expected: EventStatus,
        new_status: EventStatus,
        companion_factory: Callable[[SimulationEvent], SimulationEvent],
    ) -> Optional[SimulationEvent]: ...


class AttackChainExecutor:
    """Launches attack chains and drives their stage plans through the scheduler."""

    def __init__(
        self,
        host: ChainHost,
        scheduler: ChainScheduler,
        rng: random.Random,
        scenarios: Optional[Sequence[Scenario]] = None,
        detection_delay_range: tuple[float, float] = (2.0, 17.0),
        mitigation_delay_range: tuple[float, float] = (10.0, 45.0),
        mitigation_probabilities: Optional[dict[Severity, float]] = None,
    ):
        if detection_delay_range[0] > detection_delay_range[1]:
            raise ValueError("detection_delay_range must be (min, max)")
        if mitigation_delay_range[0] > mitigation_delay_range[1]:
            raise ValueError("mitigation_delay_range must be (min, max)")
        self._host = host
        self._scheduler = scheduler
        self.rng = rng
        self._scenarios = list(scenarios) if scenarios is not None else None
        self._detection_delay_range = detection_delay_range
        self._mitigation_delay_range = mitigation_delay_range
        self._mitigation_probabilities = mitigation_probabilities or MITIGATION_PROBABILITIES
        self._chain_ids = itertools.count(1)
        self._chains_launched = 0
        self._stages_fired = {stage: 0 for stage in Stage}

    def plan_phase(self, phase: Phase) -> list[StagePlan]:
        return [
            StagePlan(Stage.ATTACK, phase.delay, 1.0),
            StagePlan(
                Stage.DETECTION,
                self.rng.uniform(*self._detection_delay_range),
                phase.detection_probability,
            ),
            StagePlan(
                Stage.MITIGATION,
                self.rng.uniform(*self._mitigation_delay_range),
                self._mitigation_probabilities.get(phase.severity, MITIGATION_PROBABILITIES[Severity.LOW]),
            ),
        ]

    def launch(self, scenario: Optional[Scenario] = None) -> str:
        """Schedule every phase of ``scenario`` (random pick when omitted). Returns the chain id."""
        scenario = scenario or pick_random_scenario(self.rng, self._scenarios)
        chain_id = f"chain-{next(self._chain_ids)}"

        for index, phase in enumerate(scenario.phases):
            instance = PhaseInstance(
                chain_id=chain_id,
                phase_index=index,
                scenario_name=scenario.name,
                phase=phase,
                plan=self.plan_phase(phase),
            )
            self._schedule_stage(instance, 0)

        self._chains_launched += 1
        logger.info("chain_launched", chain_id=chain_id, scenario=scenario.name, phases=len(scenario.phases))
        return chain_id

    def _schedule_stage(self, instance: PhaseInstance, stage_index: int) -> None:
        plan = instance.plan[stage_index]
        key = StageKey(instance.chain_id, instance.phase_index, plan.stage.value)
        self._scheduler.schedule(key, plan.delay, lambda: self._run_stage(instance, stage_index))

    def _run_stage(self, instance: PhaseInstance, stage_index: int) -> None:
        stage = instance.plan[stage_index].stage
        if self._host.current_status() != SimulationStatus.RUNNING:
            logger.debug("stage_skipped_not_running", chain_id=instance.chain_id, stage=stage.value)
            return

        handlers = {
            Stage.ATTACK: self._fire_attack,
            Stage.DETECTION: self._fire_detection,
            Stage.MITIGATION: self._fire_mitigation,
        }
        if not handlers[stage](instance):
            return

        instance.fired.append(stage)
        self._stages_fired[stage] += 1

        next_index = stage_index + 1
        if next_index >= len(instance.plan):
            return
        next_plan = instance.plan[next_index]
        if self.rng.random() < next_plan.probability:
            self._schedule_stage(instance, next_index)
        else:
            logger.debug(
                "stage_not_triggered",
                chain_id=instance.chain_id,
                phase=instance.phase.title,
                stage=next_plan.stage.value,
            )

    def _now(self):
        return self._scheduler.clock.now()

    def _fire_attack(self, instance: PhaseInstance) -> bool:
        event_id = self._host.next_event_id()
        instance.instance_id = f"{instance.chain_id}-phase-{instance.phase_index}"
        event = build_attack_event(
            event_id=event_id,
            phase=instance.phase,
            scenario_name=instance.scenario_name,
            phase_instance_id=instance.instance_id,
            rng=self.rng,
            now=self._now(),
            metadata={
                "scenario": instance.scenario_name,
                "chain_id": instance.chain_id,
                "phase_index": instance.phase_index,
            },
        )
        self._host.record_event(event)
        instance.attack_event_id = event.id
        return True

    def _fire_detection(self, instance: PhaseInstance) -> bool:
        return self._advance(
            instance,
            EventStatus.ACTIVE,
            EventStatus.DETECTED,
            lambda attack: build_detection_event(attack, self.rng, self._now()),
        )

    def _fire_mitigation(self, instance: PhaseInstance) -> bool:
        return self._advance(
            instance,
            EventStatus.DETECTED,
            EventStatus.MITIGATED,
            lambda attack: build_mitigation_event(attack, self.rng, self._now()),
        )

    def _advance(self, instance, expected, new_status, factory) -> bool:
        if instance.attack_event_id is None:
            return False
        companion = self._host.advance_event(instance.attack_event_id, expected, new_status, factory)
        if companion is None:
            logger.debug(
                "companion_lookup_failed",
                chain_id=instance.chain_id,
                attack_event_id=instance.attack_event_id,
                expected=expected.value,
            )
            return False
        return True

    def get_stats(self) -> dict:
        return {
            "chains_launched": self._chains_launched,
            "stages_fired": {stage.value: count for stage, count in self._stages_fired.items()},
        }
