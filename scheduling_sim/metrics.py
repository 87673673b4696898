from __future__ import annotations

from typing import List

from .errors import InvalidInputError, SchedulerError
from .models import Process, RunResult, SystemMetrics


def finalize_process(process: Process) -> None:
    """
    Derive turnaround and waiting time from an already recorded completion.

    Must run exactly once per process, after its completion time is set.
    """
    if process.completion_time is None:
        raise SchedulerError(f"Process {process.pid} ({process.name}) has not completed yet")
    if process.turnaround_time is not None:
        raise SchedulerError(f"Metrics for process {process.pid} ({process.name}) were already computed")

    process.turnaround_time = process.completion_time - process.arrival_time
    process.waiting_time = process.turnaround_time - process.burst_time


def _mean(values: List[int], what: str) -> float:
    if not values:
        raise InvalidInputError(f"Cannot average {what} over zero processes")
    return sum(values) / len(values)


def average_waiting_time(processes: List[Process]) -> float:
    return _mean([p.waiting_time for p in processes], "waiting time")


def average_turnaround_time(processes: List[Process]) -> float:
    return _mean([p.turnaround_time for p in processes], "turnaround time")


def compute_system_metrics(result: RunResult) -> SystemMetrics:
    """
    Compute makespan, throughput and CPU utilization given completed processes
    and timeline slices.
    """
    if not result.processes:
        raise InvalidInputError("Cannot compute system metrics for an empty run")

    makespan = max(p.completion_time for p in result.processes)
    cpu_busy_time = sum(slice_.length for slice_ in result.timeline)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[Process]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    return {
        "avg_waiting": average_waiting_time(processes),
        "avg_turnaround": average_turnaround_time(processes),
        "avg_response": _mean([p.response_time for p in processes], "response time"),
    }
