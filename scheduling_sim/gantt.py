from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]
IDLE_STYLE = "dim"


class Segment(NamedTuple):
    """A stretch of the chart: one process running, or the CPU idle (name is None)."""

    name: Optional[str]
    start_time: int
    end_time: int


def merge_adjacent(slices: List[ScheduledSlice]) -> List[ScheduledSlice]:
    """
    Join back-to-back slices of the same process (e.g. a Round Robin process
    that was requeued onto an otherwise empty queue).
    """
    merged: List[ScheduledSlice] = []
    for sl in sorted(slices, key=lambda s: (s.start_time, s.end_time)):
        prev = merged[-1] if merged else None
        if prev is not None and prev.pid == sl.pid and prev.end_time == sl.start_time:
            merged[-1] = ScheduledSlice(pid=prev.pid, name=prev.name, start_time=prev.start_time, end_time=sl.end_time)
        else:
            merged.append(sl)
    return merged


def chart_segments(slices: List[ScheduledSlice]) -> List[Segment]:
    """
    Lay the timeline out from t=0, inserting idle segments wherever the CPU
    had nothing to run.
    """
    segments: List[Segment] = []
    clock = 0
    for sl in merge_adjacent(slices):
        if sl.start_time > clock:
            segments.append(Segment(None, clock, sl.start_time))
        segments.append(Segment(sl.name, sl.start_time, sl.end_time))
        clock = sl.end_time
    return segments


def time_marks(segments: List[Segment]) -> str:
    marks = "0"
    for seg in segments:
        marks += f"{seg.end_time:>3}"
    return marks


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel with one colored bar per process slice (idle time
    dimmed) and the matching string of time marks.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart"), ""

    segments = chart_segments(slices)
    colors: Dict[str, str] = {}

    bar = Text()
    labels = Text()
    for seg in segments:
        width = max(1, seg.end_time - seg.start_time)
        if seg.name is None:
            bar.append("." * width, style=IDLE_STYLE)
            labels.append("idle"[:width].ljust(width), style=IDLE_STYLE)
            continue

        color = colors.setdefault(seg.name, COLORS[len(colors) % len(COLORS)])
        bar.append(" " * width, style=f"on {color}")
        labels.append(seg.name[:width].ljust(width), style=f"bold {color}")

    grid = Table.grid(padding=(0, 0))
    grid.add_row(bar)
    grid.add_row(labels)

    return Panel.fit(grid, title="Gantt Chart"), time_marks(segments)
