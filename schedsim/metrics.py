from __future__ import annotations

from typing import List

from .errors import PreconditionError
from .models import Metrics, Process, SystemMetrics
from .timeline import TimelineBuilder


def compute_metrics(processes: List[Process]) -> Metrics:
    """
    Average waiting, turnaround and response times over a completed process set.
    """
    if not processes:
        raise PreconditionError("Cannot compute metrics for an empty process set")

    unfinished = [p.pid for p in processes if not p.done]
    if unfinished:
        raise PreconditionError(f"Processes not finished: {', '.join(unfinished)}")

    n = len(processes)
    return Metrics(
        average_waiting_time=sum(p.waiting_time for p in processes) / n,
        average_turnaround_time=sum(p.turnaround_time for p in processes) / n,
        average_response_time=sum(p.response_time for p in processes) / n,
    )


def compute_system_metrics(processes: List[Process], timeline: TimelineBuilder) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given completed processes
    and their timeline slices.
    """
    if not processes:
        return SystemMetrics(makespan=0, cpu_busy_time=0, cpu_utilization=0.0, throughput=0.0)

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = timeline.busy_time

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=cpu_utilization,
        throughput=throughput,
    )
