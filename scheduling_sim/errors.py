from __future__ import annotations


class SchedulerError(Exception):
    """
    Base class for every error raised by the simulator.
    """


class InvalidInputError(SchedulerError, ValueError):
    """
    The process list (or a workload file) cannot be simulated as given.
    """


class InvalidParameterError(SchedulerError, ValueError):
    """
    A scheduling parameter is out of range, e.g. a non-positive quantum.
    """
