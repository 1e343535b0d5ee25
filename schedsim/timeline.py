from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .errors import SchedulerError
from .models import TimelineEntry

TimelineListener = Callable[[TimelineEntry], None]


class TimelineBuilder:
    """
    Append-only, chronologically ordered record of execution slices.

    An optional ``listener`` sees every entry as soon as it is appended,
    which lets a renderer follow a simulation while it runs.
    """

    def __init__(self, listener: Optional[TimelineListener] = None):
        self._entries: List[TimelineEntry] = []
        self._listener = listener

    def append(self, pid: str, slice_length: int, clock: int) -> TimelineEntry:
        if slice_length <= 0:
            raise SchedulerError(f"Slice for {pid} must be positive, got {slice_length}")
        if clock - slice_length < self.end_time:
            raise SchedulerError(
                f"Slice for {pid} starting at {clock - slice_length} overlaps timeline ending at {self.end_time}"
            )

        entry = TimelineEntry(pid=pid, slice_length=slice_length, clock_at_slice_end=clock)
        self._entries.append(entry)
        if self._listener is not None:
            self._listener(entry)
        return entry

    @property
    def entries(self) -> Tuple[TimelineEntry, ...]:
        return tuple(self._entries)

    @property
    def end_time(self) -> int:
        return self._entries[-1].clock_at_slice_end if self._entries else 0

    @property
    def busy_time(self) -> int:
        return sum(e.slice_length for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def coalesce(entries) -> List[TimelineEntry]:
    """
    Merge adjacent slices of the same process that touch in time.

    SRTF emits one entry per tick; charts read better with runs merged.
    """
    merged: List[TimelineEntry] = []
    for entry in entries:
        last = merged[-1] if merged else None
        if last is not None and last.pid == entry.pid and last.clock_at_slice_end == entry.start:
            merged[-1] = TimelineEntry(
                pid=entry.pid,
                slice_length=last.slice_length + entry.slice_length,
                clock_at_slice_end=entry.clock_at_slice_end,
            )
        else:
            merged.append(entry)
    return merged
