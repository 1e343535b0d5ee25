from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from .errors import ValidationError
from .models import Process

_KEYS = {
    "pid": ("id", "pid"),
    "arrival": ("arrival_time", "arrivalTime"),
    "burst": ("burst_time", "burstTime"),
}


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValidationError(f"Unsupported workload format: {suffix or path.name} (use .json or .csv)")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError(f"{path}: not UTF-8 text (bad byte at offset {exc.start})") from exc
    except OSError as exc:
        raise ValidationError(f"{path}: cannot read workload ({exc.strerror or exc})") from exc


def _load_json(path: Path) -> List[Process]:
    try:
        raw = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path}: invalid JSON ({exc.msg} at line {exc.lineno})") from exc

    if not isinstance(raw, list):
        raise ValidationError(f"{path}: JSON workload must be a list of process objects")

    return parse_processes(raw)


def _load_csv(path: Path) -> List[Process]:
    text = _read_text(path)
    try:
        rows = list(csv.DictReader(io.StringIO(text, newline="")))
    except csv.Error as exc:
        raise ValidationError(f"{path}: invalid CSV ({exc})") from exc
    return parse_processes(rows)


def _lookup(mapping: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        value = mapping.get(name)
        if value not in (None, ""):
            return value
    return None


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_processes(entries: Iterable[Any]) -> List[Process]:
    """
    Turn raw process mappings into Process objects.

    Missing ids become ``P1``, ``P2``, ... by position. Every entry is
    checked and all problems are raised together, naming the process.
    """
    processes: List[Process] = []
    problems: List[str] = []

    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, Mapping):
            problems.append(f"Process {index}: expected an object, got {entry!r}")
            continue

        pid = _lookup(entry, _KEYS["pid"])
        pid = str(pid) if pid is not None else f"P{index}"

        arrival = _to_int(_lookup(entry, _KEYS["arrival"]))
        burst = _to_int(_lookup(entry, _KEYS["burst"]))
        priority_raw = entry.get("priority")
        priority = 0 if priority_raw in (None, "") else _to_int(priority_raw)

        if arrival is None or arrival < 0:
            problems.append(f"Process {pid}: arrival time must be an integer >= 0")
        if burst is None or burst <= 0:
            problems.append(f"Process {pid}: burst time must be an integer > 0")
        if priority is None:
            problems.append(f"Process {pid}: priority must be an integer")

        if arrival is not None and burst is not None and priority is not None:
            processes.append(Process(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority))

    if problems:
        raise ValidationError(problems)
    if not processes:
        raise ValidationError("Workload contains no processes")

    seen = set()
    for p in processes:
        if p.pid in seen:
            problems.append(f"Process {p.pid}: duplicate process id")
        seen.add(p.pid)
    if problems:
        raise ValidationError(problems)

    return processes


def parse_process_specs(specs: Iterable[str]) -> List[Process]:
    """
    Parse inline ``ARRIVAL,BURST[,PRIORITY]`` specs; ids are ``P1``, ``P2``, ...
    """
    entries: List[Any] = []
    problems: List[str] = []
    for index, text in enumerate(specs, start=1):
        parts = [part.strip() for part in text.split(",")]
        if len(parts) not in (2, 3):
            problems.append(f"Process P{index}: expected ARRIVAL,BURST[,PRIORITY], got {text!r}")
            continue
        entry = {"id": f"P{index}", "arrival_time": parts[0], "burst_time": parts[1]}
        if len(parts) == 3:
            entry["priority"] = parts[2]
        entries.append(entry)

    if problems:
        raise ValidationError(problems)
    return parse_processes(entries)
