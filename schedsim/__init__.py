"""
CPU scheduling simulator.

Simulates FCFS, SJF, SRTF, Priority and Round Robin scheduling on a
single CPU and reports the execution timeline with averaged timing metrics.
"""

from .engine import compare, simulate
from .errors import PreconditionError, SchedulerError, ValidationError
from .models import Algorithm, Metrics, Process, SimulationResult, TimelineEntry

__all__ = [
    "Algorithm",
    "Metrics",
    "PreconditionError",
    "Process",
    "SchedulerError",
    "SimulationResult",
    "TimelineEntry",
    "ValidationError",
    "compare",
    "simulate",
]
