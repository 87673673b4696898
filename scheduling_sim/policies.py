"""
Scheduling policies.

A policy is one of FCFS, SJF or RoundRobin(quantum). Each one hands the
engine a ready queue that decides which admitted process runs next and for
how long. The simulation loop itself lives in engine.py and is shared.
"""

from __future__ import annotations

import heapq
from collections import deque
from dataclasses import dataclass
from typing import ClassVar, Deque, List, Optional, Tuple, Union

from .errors import InvalidParameterError
from .models import Process


class ReadyQueue:
    """
    Processes that have arrived and are waiting for the CPU.

    ``order`` is the process's position in the caller's input list; only SJF
    uses it, to break ties between equal bursts.
    """

    def enqueue(self, process: Process, order: int) -> None:
        raise NotImplementedError

    def dequeue(self) -> Process:
        raise NotImplementedError

    def requeue(self, process: Process, order: int) -> None:
        self.enqueue(process, order)

    def slice_for(self, process: Process) -> int:
        # Non-preemptive: run to completion.
        return process.remaining_time

    def __len__(self) -> int:
        raise NotImplementedError


class FifoQueue(ReadyQueue):
    def __init__(self) -> None:
        self._queue: Deque[Tuple[Process, int]] = deque()

    def enqueue(self, process: Process, order: int) -> None:
        self._queue.append((process, order))

    def dequeue(self) -> Process:
        process, _ = self._queue.popleft()
        return process

    def __len__(self) -> int:
        return len(self._queue)


class ShortestJobQueue(ReadyQueue):
    """
    Min-heap keyed on (burst_time, input order).
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, Process]] = []

    def enqueue(self, process: Process, order: int) -> None:
        # order is unique, so Process objects are never compared
        heapq.heappush(self._heap, (process.burst_time, order, process))

    def dequeue(self) -> Process:
        _, _, process = heapq.heappop(self._heap)
        return process

    def __len__(self) -> int:
        return len(self._heap)


class RoundRobinQueue(FifoQueue):
    def __init__(self, quantum: int) -> None:
        super().__init__()
        self.quantum = quantum

    def slice_for(self, process: Process) -> int:
        return min(self.quantum, process.remaining_time)


@dataclass(frozen=True)
class FCFS:
    label: ClassVar[str] = "FCFS"
    quantum: ClassVar[Optional[int]] = None

    def ready_queue(self) -> ReadyQueue:
        return FifoQueue()


@dataclass(frozen=True)
class SJF:
    label: ClassVar[str] = "SJF (non-preemptive)"
    quantum: ClassVar[Optional[int]] = None

    def ready_queue(self) -> ReadyQueue:
        return ShortestJobQueue()


@dataclass(frozen=True)
class RoundRobin:
    label: ClassVar[str] = "Round Robin"
    quantum: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a quantum
        if isinstance(self.quantum, bool) or not isinstance(self.quantum, int):
            raise InvalidParameterError(f"Round Robin quantum must be an integer, got {self.quantum!r}")
        if self.quantum <= 0:
            raise InvalidParameterError(f"Round Robin requires a positive quantum, got {self.quantum}")

    def ready_queue(self) -> ReadyQueue:
        return RoundRobinQueue(self.quantum)


Policy = Union[FCFS, SJF, RoundRobin]


POLICY_NAMES = ("fcfs", "sjf", "rr")


def policy_from_name(name: str, quantum: Optional[int] = None) -> Policy:
    """
    Build a policy from its short name. The quantum is used by ``rr`` only.
    """
    key = name.lower()
    if key == "fcfs":
        return FCFS()
    if key == "sjf":
        return SJF()
    if key in {"rr", "round_robin", "round-robin"}:
        if quantum is None:
            raise InvalidParameterError("Round Robin requires a positive quantum (use --quantum)")
        return RoundRobin(quantum)
    raise InvalidParameterError(f"Unknown algorithm '{name}' (choose from {', '.join(POLICY_NAMES)})")
