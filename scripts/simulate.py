#!/usr/bin/env python3
"""PurpleSim fast-forward runner.

Runs a whole exercise on a virtual clock (no waiting), then writes the
report for it.

Exit codes:
    0: report written
    2: invalid arguments

Usage:
    python scripts/simulate.py --minutes 30 --seed 7
    python scripts/simulate.py --format html --classification secret --output report.html
    python scripts/simulate.py --severity critical --severity high --type attack
"""

import argparse
import random
import sys

from purplesim.config import get_config
from purplesim.engine.clock import ManualClock
from purplesim.engine.simulation import SimulationEngine
from purplesim.report import CLASSIFICATIONS, REPORT_FORMATS, build_report, render_report
from purplesim.utils.logging import get_logger, setup_logging

logger = get_logger("scripts.simulate")

# Virtual seconds advanced per step
STEP_SECONDS = 60.0


def run_simulation(
    minutes: float,
    seed: int | None = None,
    severities: list[str] | None = None,
    event_types: list[str] | None = None,
    classification: str = "internal",
    fmt: str = "json",
    config=None,
) -> str:
    """Run ``minutes`` of virtual time and return the rendered report."""
    if minutes < 0:
        raise ValueError("minutes must not be negative")
    config = config or get_config()
    clock = ManualClock()
    engine = SimulationEngine.from_config(config, clock=clock, rng=random.Random(seed))

    engine.initialize()
    engine.start()

    remaining = minutes * 60
    while remaining > 0:
        step = min(STEP_SECONDS, remaining)
        clock.advance(step)
        remaining -= step

    engine.stop()
    state = engine.get_state()
    logger.info(
        "fast_forward_complete",
        simulation_id=state.id,
        minutes=minutes,
        events=len(state.events),
        mitigated=state.metrics.mitigated_threats,
    )

    report = build_report(
        state,
        severities=severities,
        event_types=event_types,
        classification=classification,
        generated_at=clock.now(),
    )
    engine.dispose()
    return render_report(report, fmt)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fast-forward a purple team simulation and write its report")
    parser.add_argument("--minutes", type=float, default=10.0, help="Virtual minutes to simulate (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--format", dest="fmt", choices=sorted(REPORT_FORMATS), default="json")
    parser.add_argument("--output", "-o", default=None, help="Output file (default: stdout)")
    parser.add_argument("--classification", choices=list(CLASSIFICATIONS), default="internal")
    parser.add_argument(
        "--severity", action="append", choices=["critical", "high", "medium", "low"],
        help="Severity to include (repeatable, default: all)",
    )
    parser.add_argument(
        "--type", dest="event_types", action="append", choices=["attack", "detection", "mitigation", "system"],
        help="Event type to include (repeatable, default: attack, detection, mitigation)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--log-dir", default="logs")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(debug=args.verbose, log_dir=args.log_dir, log_file="simulate.log", stream=sys.stderr)

    if args.minutes < 0:
        print("--minutes must not be negative", file=sys.stderr)
        return 2

    content = run_simulation(
        minutes=args.minutes,
        seed=args.seed,
        severities=args.severity,
        event_types=args.event_types,
        classification=args.classification,
        fmt=args.fmt,
    )

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info("report_written", path=args.output, format=args.fmt)
    else:
        sys.stdout.write(content)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
