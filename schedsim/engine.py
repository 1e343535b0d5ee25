from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .algorithms import STRATEGIES
from .errors import ValidationError
from .metrics import compute_metrics, compute_system_metrics
from .models import Algorithm, Process, SimulationResult
from .timeline import TimelineBuilder, TimelineListener

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Sequence[Process]) -> None:
    """
    Check every process before anything is scheduled.

    All problems are collected and raised together so the caller can
    report each bad process at once.
    """
    if not processes:
        raise ValidationError("At least one process is required")

    problems: List[str] = []
    seen: set[str] = set()
    for p in processes:
        if p.pid in seen:
            problems.append(f"{p.pid}: duplicate process id")
        seen.add(p.pid)

        if not _is_int(p.arrival_time) or p.arrival_time < 0:
            problems.append(f"{p.pid}: arrival time must be an integer >= 0, got {p.arrival_time!r}")
        if not _is_int(p.burst_time) or p.burst_time <= 0:
            problems.append(f"{p.pid}: burst time must be an integer > 0, got {p.burst_time!r}")
        if not _is_int(p.priority):
            problems.append(f"{p.pid}: priority must be an integer, got {p.priority!r}")

    if problems:
        raise ValidationError(problems)


def validate_quantum(quantum) -> int:
    if not _is_int(quantum) or quantum <= 0:
        raise ValidationError(f"Round Robin requires a positive integer quantum, got {quantum!r}")
    return quantum


def simulate(
    processes: Sequence[Process],
    algorithm: Algorithm | str,
    quantum: Optional[int] = None,
    listener: Optional[TimelineListener] = None,
) -> SimulationResult:
    """
    Run one scheduling simulation and return the completed snapshot.

    The given processes are validated and then copied; the caller's
    instances are never mutated, so the same list can be simulated again
    under another algorithm.
    """
    try:
        algo = Algorithm.parse(algorithm)
        validate_processes(processes)
        if algo.needs_quantum:
            quantum = validate_quantum(quantum)
        else:
            quantum = None
    except ValidationError as exc:
        logger.info("Simulation rejected: %s", exc)
        raise

    run_set = [p.fresh() for p in processes]
    timeline = TimelineBuilder(listener=listener)

    logger.debug("Running %s on %d process(es)", algo.label, len(run_set))
    STRATEGIES[algo](run_set, timeline, quantum)

    metrics = compute_metrics(run_set)
    system = compute_system_metrics(run_set, timeline)
    logger.info(
        "%s: %d process(es), makespan %d, avg waiting %.2f, avg turnaround %.2f",
        algo.label,
        len(run_set),
        system.makespan,
        metrics.average_waiting_time,
        metrics.average_turnaround_time,
    )

    return SimulationResult(
        algorithm=algo,
        quantum=quantum,
        processes=run_set,
        timeline=timeline.entries,
        metrics=metrics,
        system=system,
    )


def compare(
    processes: Sequence[Process],
    algorithms: Optional[Iterable[Algorithm | str]] = None,
    quantum: int = DEFAULT_QUANTUM,
) -> List[SimulationResult]:
    """
    Run several algorithms on the same workload, each on its own copies.
    """
    selected = [Algorithm.parse(a) for a in algorithms] if algorithms else list(Algorithm)
    return [
        simulate(processes, algo, quantum=quantum if algo.needs_quantum else None)
        for algo in selected
    ]
