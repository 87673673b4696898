"""
CPU scheduling simulator.

Runs FCFS, non-preemptive SJF and Round Robin over a list of simulated
processes and reports completion, turnaround and waiting times.
"""

from .engine import run_algorithm, run_fcfs, run_round_robin, run_sjf, simulate
from .errors import InvalidInputError, InvalidParameterError, SchedulerError
from .models import Process, RunResult, ScheduledSlice, SystemMetrics
from .policies import FCFS, SJF, RoundRobin

__all__ = [
    "FCFS",
    "SJF",
    "RoundRobin",
    "Process",
    "RunResult",
    "ScheduledSlice",
    "SystemMetrics",
    "SchedulerError",
    "InvalidInputError",
    "InvalidParameterError",
    "simulate",
    "run_fcfs",
    "run_sjf",
    "run_round_robin",
    "run_algorithm",
]
