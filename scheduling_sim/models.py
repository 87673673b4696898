from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import SchedulerError


@dataclass
class Process:
    pid: int
    name: str
    arrival_time: int
    burst_time: int
    remaining_time: int = field(init=False)

    start_time: Optional[int] = None
    response_time: Optional[int] = None
    completion_time: Optional[int] = None
    turnaround_time: Optional[int] = None
    waiting_time: Optional[int] = None

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def completed(self) -> bool:
        return self.completion_time is not None

    def fresh_copy(self) -> "Process":
        """
        Return a copy carrying only the static inputs, with run-state reset.
        """
        return Process(
            pid=self.pid,
            name=self.name,
            arrival_time=self.arrival_time,
            burst_time=self.burst_time,
        )

    def mark_started(self, clock: int) -> None:
        if self.start_time is None:
            self.start_time = clock
            self.response_time = clock - self.arrival_time

    def mark_completed(self, clock: int) -> None:
        if self.completed:
            raise SchedulerError(f"Process {self.pid} ({self.name}) already completed at t={self.completion_time}")
        self.completion_time = clock


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    name: str
    start_time: int
    end_time: int

    @property
    def length(self) -> int:
        return self.end_time - self.start_time


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class RunResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[Process] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    system: Optional[SystemMetrics] = None

    @property
    def completion_order(self) -> List[str]:
        return [p.name for p in self.processes]
