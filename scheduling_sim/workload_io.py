from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from .errors import InvalidInputError
from .models import Process


def sample_processes() -> List[Process]:
    """
    The built-in four-process sample workload.
    """
    return [
        Process(1, "P1", arrival_time=0, burst_time=5),
        Process(2, "P2", arrival_time=1, burst_time=3),
        Process(3, "P3", arrival_time=2, burst_time=8),
        Process(4, "P4", arrival_time=3, burst_time=6),
    ]


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    if not path.exists():
        raise InvalidInputError(f"Workload not found: {path}")
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise InvalidInputError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"{path} is not valid JSON: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"Cannot read workload {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise InvalidInputError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry, from_text=False) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise InvalidInputError(f"Cannot read workload {path}: {exc}") from exc

    return [_process_from_mapping(row, from_text=True) for row in rows]


def _int_field(mapping, key: str, from_text: bool) -> int:
    value = mapping[key]
    if from_text:
        return int(value)
    # JSON numbers must already be integers; 2.7 or true are not times.
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer, got {value!r}")
    return value


def _process_from_mapping(mapping, from_text: bool) -> Process:
    try:
        pid = _int_field(mapping, "pid", from_text)
        arrival_time = _int_field(mapping, "arrival_time", from_text)
        burst_time = _int_field(mapping, "burst_time", from_text)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid process entry: {mapping!r}") from exc

    name = mapping.get("name")
    if name in (None, ""):
        name = f"P{pid}"

    return Process(
        pid=pid,
        name=str(name),
        arrival_time=arrival_time,
        burst_time=burst_time,
    )
