"""
Simulation engine shared by every scheduling policy.

The engine advances one simulated clock over private copies of the caller's
processes. Each iteration admits the processes that have arrived, asks the
policy's ready queue for the next process and the length of its slice, runs
that slice, admits again, and then either requeues the process or records its
completion. With a non-preemptive queue (FCFS, SJF) every slice runs to
completion; Round Robin caps it at the quantum.

Processes arriving during a slice are admitted before the process that was
just running is requeued, so they get the CPU ahead of it.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidInputError
from .metrics import (
    average_turnaround_time,
    average_waiting_time,
    compute_system_metrics,
    finalize_process,
)
from .models import Process, RunResult, ScheduledSlice
from .policies import FCFS, SJF, Policy, RoundRobin, policy_from_name

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Sequence[Process]) -> None:
    """
    Reject input that cannot be simulated. Runs before any clock advances.
    """
    if not processes:
        raise InvalidInputError("Process list is empty; nothing to schedule")

    seen: set[int] = set()
    for p in processes:
        if not _is_int(p.pid) or p.pid <= 0:
            raise InvalidInputError(f"Process id must be a positive integer, got {p.pid!r}")
        if p.pid in seen:
            raise InvalidInputError(f"Duplicate process id {p.pid}")
        seen.add(p.pid)

        if not isinstance(p.name, str) or not p.name.strip():
            raise InvalidInputError(f"Process {p.pid} has an empty name")
        if not _is_int(p.arrival_time) or p.arrival_time < 0:
            raise InvalidInputError(f"Process {p.name} has invalid arrival time {p.arrival_time!r} (must be >= 0)")
        if not _is_int(p.burst_time) or p.burst_time <= 0:
            raise InvalidInputError(f"Process {p.name} has invalid burst time {p.burst_time!r} (must be > 0)")


def simulate(processes: Iterable[Process], policy: Policy) -> RunResult:
    """
    Run ``policy`` over copies of ``processes`` and return the completed run.

    The caller's descriptors are never mutated. Result processes are listed
    in completion order.
    """
    base = list(processes)
    validate_processes(base)

    # Stable sort keeps input order among equal arrivals.
    arrivals = sorted(
        ((order, p.fresh_copy()) for order, p in enumerate(base)),
        key=lambda item: item[1].arrival_time,
    )
    total = len(arrivals)
    orders = {id(proc): order for order, proc in arrivals}

    logger.info(f"Starting {policy.label} run over {total} processes")

    ready = policy.ready_queue()
    clock = 0
    admitted = 0
    timeline: List[ScheduledSlice] = []
    finished: List[Process] = []

    def admit(now: int) -> None:
        nonlocal admitted
        while admitted < total and arrivals[admitted][1].arrival_time <= now:
            order, proc = arrivals[admitted]
            ready.enqueue(proc, order)
            admitted += 1

    while len(finished) < total:
        admit(clock)

        if not ready:
            # CPU idle: jump straight to the next arrival.
            next_arrival = arrivals[admitted][1].arrival_time
            logger.debug(f"t={clock}: idle until t={next_arrival}")
            clock = next_arrival
            continue

        proc = ready.dequeue()
        run_time = ready.slice_for(proc)
        proc.mark_started(clock)

        timeline.append(ScheduledSlice(pid=proc.pid, name=proc.name, start_time=clock, end_time=clock + run_time))
        logger.debug(f"t={clock}: {proc.name} runs for {run_time}")

        proc.remaining_time -= run_time
        clock += run_time

        admit(clock)

        if proc.remaining_time > 0:
            ready.requeue(proc, orders[id(proc)])
        else:
            proc.mark_completed(clock)
            finalize_process(proc)
            finished.append(proc)

    result = RunResult(
        algorithm=policy.label,
        quantum=policy.quantum,
        processes=finished,
        timeline=timeline,
        avg_waiting_time=average_waiting_time(finished),
        avg_turnaround_time=average_turnaround_time(finished),
    )
    compute_system_metrics(result)

    logger.info(
        f"{policy.label} finished at t={clock}: "
        f"avg waiting {result.avg_waiting_time:.2f}, avg turnaround {result.avg_turnaround_time:.2f}"
    )
    return result


def run_fcfs(processes: Iterable[Process]) -> RunResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    return simulate(processes, FCFS())


def run_sjf(processes: Iterable[Process]) -> RunResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time; ties go to the
    process listed first in the input.
    """
    return simulate(processes, SJF())


def run_round_robin(processes: Iterable[Process], quantum: int) -> RunResult:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    return simulate(processes, RoundRobin(quantum))


def run_algorithm(name: str, processes: Iterable[Process], quantum: Optional[int] = None) -> RunResult:
    """
    Dispatch to the requested algorithm by short name (fcfs, sjf, rr).
    """
    return simulate(processes, policy_from_name(name, quantum))
