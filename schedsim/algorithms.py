from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Set

from .errors import ValidationError
from .models import Algorithm, Process, ProcessState
from .timeline import TimelineBuilder

logger = logging.getLogger(__name__)

Strategy = Callable[[List[Process], TimelineBuilder, Optional[int]], None]


def _admit(processes: List[Process], clock: int) -> None:
    for p in processes:
        if p.state is ProcessState.NOT_ARRIVED and p.arrival_time <= clock:
            p.state = ProcessState.READY


def _next_arrival(processes: List[Process]) -> Optional[int]:
    pending = [p.arrival_time for p in processes if not p.done]
    return min(pending) if pending else None


def _run_in_order(ordered: List[Process], processes: List[Process], timeline: TimelineBuilder) -> None:
    """
    Run each process to completion in the given order, idling until it arrives.
    """
    clock = 0
    for p in ordered:
        if clock < p.arrival_time:
            logger.debug("CPU idle %d-%d", clock, p.arrival_time)
            clock = p.arrival_time

        _admit(processes, clock)
        logger.debug("t=%d dispatch %s for %d", clock, p.pid, p.burst_time)

        clock += p.burst_time
        p.run(p.burst_time, clock)
        timeline.append(p.pid, p.burst_time, clock)


def schedule_fcfs(processes: List[Process], timeline: TimelineBuilder, quantum: Optional[int] = None) -> None:
    """
    First-Come First-Serve (non-preemptive).
    """
    ordered = sorted(processes, key=lambda p: p.arrival_time)
    _run_in_order(ordered, processes, timeline)


def schedule_sjf(processes: List[Process], timeline: TimelineBuilder, quantum: Optional[int] = None) -> None:
    """
    Shortest Job First (non-preemptive).

    The run order is fixed once, before execution, by burst time and then
    arrival time. It is not re-ranked among arrived processes as the clock
    advances; a process that has not arrived yet simply makes the CPU idle.
    """
    ordered = sorted(processes, key=lambda p: (p.burst_time, p.arrival_time))
    _run_in_order(ordered, processes, timeline)


def schedule_priority(processes: List[Process], timeline: TimelineBuilder, quantum: Optional[int] = None) -> None:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Like SJF the order
    is fixed up front, by priority and then arrival time.
    """
    ordered = sorted(processes, key=lambda p: (p.priority, p.arrival_time))
    _run_in_order(ordered, processes, timeline)


def schedule_srtf(processes: List[Process], timeline: TimelineBuilder, quantum: Optional[int] = None) -> None:
    """
    Shortest Remaining Time First (preemptive SJF), one time unit per decision.

    Ties on remaining time go to the process listed first.
    """
    clock = 0
    previous: Optional[Process] = None

    while True:
        _admit(processes, clock)
        ready = [p for p in processes if p.arrival_time <= clock and not p.done]

        if not ready:
            nxt = _next_arrival(processes)
            if nxt is None:
                break
            logger.debug("CPU idle %d-%d", clock, nxt)
            clock = nxt
            continue

        # min() keeps the first of equal keys, i.e. process-set order.
        current = min(ready, key=lambda p: p.remaining_time)
        if previous is not None and previous is not current and not previous.done:
            logger.debug("t=%d %s preempts %s", clock, current.pid, previous.pid)

        clock += 1
        current.run(1, clock)
        timeline.append(current.pid, 1, clock)

        if not current.done:
            current.state = ProcessState.READY
        previous = current


def schedule_rr(processes: List[Process], timeline: TimelineBuilder, quantum: Optional[int] = None) -> None:
    """
    Round Robin scheduling with a fixed time quantum.

    New arrivals are queued in process-set order once per dispatched slice,
    after the previous slice's process has gone back to the tail.
    """
    if quantum is None or quantum <= 0:
        raise ValidationError("Round Robin requires a positive quantum")

    clock = 0
    ready: Deque[Process] = deque()
    queued: Set[str] = set()

    while not all(p.done for p in processes):
        for p in processes:
            if p.arrival_time <= clock and not p.done and p.pid not in queued:
                p.state = ProcessState.READY
                ready.append(p)
                queued.add(p.pid)

        if not ready:
            nxt = _next_arrival(processes)
            logger.debug("CPU idle %d-%d", clock, nxt)
            clock = nxt
            continue

        p = ready.popleft()
        queued.discard(p.pid)

        run_time = min(quantum, p.remaining_time)
        logger.debug("t=%d dispatch %s for %d", clock, p.pid, run_time)

        clock += run_time
        p.run(run_time, clock)
        timeline.append(p.pid, run_time, clock)

        if not p.done:
            p.state = ProcessState.READY
            ready.append(p)
            queued.add(p.pid)


STRATEGIES: Dict[Algorithm, Strategy] = {
    Algorithm.FCFS: schedule_fcfs,
    Algorithm.SJF: schedule_sjf,
    Algorithm.SRTF: schedule_srtf,
    Algorithm.PRIORITY: schedule_priority,
    Algorithm.ROUND_ROBIN: schedule_rr,
}
