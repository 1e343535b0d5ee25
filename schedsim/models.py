from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import SchedulerError, ValidationError


class ProcessState(Enum):
    NOT_ARRIVED = "not-arrived"
    READY = "ready"
    RUNNING = "running"
    DONE = "done"


class Algorithm(Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "sjf-preemptive"
    PRIORITY = "priority"
    ROUND_ROBIN = "roundrobin"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def needs_quantum(self) -> bool:
        return self is Algorithm.ROUND_ROBIN

    @classmethod
    def parse(cls, name: str | Algorithm) -> Algorithm:
        """
        Resolve a user-supplied algorithm name (case-insensitive, aliases allowed).
        """
        if isinstance(name, Algorithm):
            return name
        key = str(name).strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ValidationError(f"Unknown algorithm '{name}' (choose from {choices})") from None


_LABELS = {
    Algorithm.FCFS: "FCFS",
    Algorithm.SJF: "SJF (non-preemptive)",
    Algorithm.SRTF: "SRTF (preemptive SJF)",
    Algorithm.PRIORITY: "Priority (non-preemptive)",
    Algorithm.ROUND_ROBIN: "Round Robin",
}

_ALIASES = {
    "fifo": "fcfs",
    "srtf": "sjf-preemptive",
    "sjf_preemptive": "sjf-preemptive",
    "rr": "roundrobin",
    "round-robin": "roundrobin",
    "round_robin": "roundrobin",
}


@dataclass
class Process:
    """
    Timing state of one simulated task.

    Only the active strategy mutates a Process, and only through ``run``
    and ``state`` transitions. ``remaining_time`` starts at ``burst_time``.
    """

    pid: str
    arrival_time: int
    burst_time: int
    priority: int = 0
    remaining_time: Optional[int] = None
    start_time: int = 0
    completion_time: int = 0
    waiting_time: int = 0
    turnaround_time: int = 0
    state: ProcessState = ProcessState.NOT_ARRIVED

    def __post_init__(self) -> None:
        if self.remaining_time is None:
            self.remaining_time = self.burst_time

    @property
    def done(self) -> bool:
        return self.remaining_time == 0

    @property
    def response_time(self) -> int:
        return self.start_time - self.arrival_time

    def fresh(self) -> Process:
        """Copy of the inputs with every runtime field reset."""
        return Process(
            pid=self.pid,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
            priority=self.priority,
        )

    def run(self, units: int, clock_after: int) -> None:
        """
        Apply one execution slice of ``units`` ending at ``clock_after``.

        Finalizes completion, turnaround and waiting times when the
        remaining time reaches zero.
        """
        if units <= 0 or units > self.remaining_time:
            raise SchedulerError(
                f"{self.pid}: cannot run {units} unit(s) with {self.remaining_time} remaining"
            )
        slice_start = clock_after - units
        if slice_start < self.arrival_time:
            raise SchedulerError(f"{self.pid}: ran at {slice_start} before arrival at {self.arrival_time}")

        if self.remaining_time == self.burst_time:
            self.start_time = slice_start

        self.remaining_time -= units
        if self.remaining_time == 0:
            self.completion_time = clock_after
            self.turnaround_time = self.completion_time - self.arrival_time
            self.waiting_time = self.turnaround_time - self.burst_time
            self.state = ProcessState.DONE
        else:
            self.state = ProcessState.RUNNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processId": self.pid,
            "arrivalTime": self.arrival_time,
            "burstTime": self.burst_time,
            "priority": self.priority,
            "startTime": self.start_time,
            "completionTime": self.completion_time,
            "waitingTime": self.waiting_time,
            "turnaroundTime": self.turnaround_time,
        }


@dataclass(frozen=True)
class TimelineEntry:
    """
    One contiguous slice of execution, recorded when it ends.
    """

    pid: str
    slice_length: int
    clock_at_slice_end: int

    @property
    def start(self) -> int:
        return self.clock_at_slice_end - self.slice_length

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processId": self.pid,
            "sliceLength": self.slice_length,
            "clockAtSliceEnd": self.clock_at_slice_end,
        }


@dataclass(frozen=True)
class Metrics:
    average_waiting_time: float
    average_turnaround_time: float
    average_response_time: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "averageWaitingTime": self.average_waiting_time,
            "averageTurnaroundTime": self.average_turnaround_time,
            "averageResponseTime": self.average_response_time,
        }


@dataclass(frozen=True)
class SystemMetrics:
    makespan: int
    cpu_busy_time: int
    cpu_utilization: float
    throughput: float


@dataclass
class SimulationResult:
    algorithm: Algorithm
    quantum: Optional[int]
    processes: List[Process] = field(default_factory=list)
    timeline: Tuple[TimelineEntry, ...] = ()
    metrics: Optional[Metrics] = None
    system: Optional[SystemMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        """Output contract consumed by renderers."""
        return {
            "algorithm": self.algorithm.value,
            "quantum": self.quantum,
            "timeline": [entry.to_dict() for entry in self.timeline],
            "metrics": self.metrics.to_dict() if self.metrics else None,
            "processes": [p.to_dict() for p in self.processes],
        }
