from __future__ import annotations

from itertools import cycle
from typing import Iterable, Iterator, List, NamedTuple, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimelineEntry
from .timeline import coalesce

PALETTE = ("red", "green", "yellow", "blue", "magenta", "cyan")


class Block(NamedTuple):
    """A drawable span: a merged run of one process, or idle time (pid None)."""

    pid: Optional[str]
    start: int
    end: int

    @property
    def width(self) -> int:
        return self.end - self.start

    def label(self) -> str:
        return "" if self.pid is None else self.pid[: self.width].ljust(self.width)


def blocks(entries: Iterable[TimelineEntry]) -> Iterator[Block]:
    """
    Walk a timeline as consecutive blocks from time 0, filling gaps with idle blocks.
    """
    clock = 0
    for entry in coalesce(entries):
        if entry.start > clock:
            yield Block(None, clock, entry.start)
        yield Block(entry.pid, entry.start, entry.clock_at_slice_end)
        clock = entry.clock_at_slice_end


def time_marks(spans: List[Block]) -> str:
    return "0" + "".join(f"{b.end:>3}" for b in spans)


def render_gantt(entries: Iterable[TimelineEntry]) -> str:
    """
    Plain-text Gantt chart; idle time is drawn as dots.
    """
    spans = list(blocks(entries))
    if not spans:
        return "(no execution)"

    bar = "".join(("." if b.pid is None else "=") * b.width for b in spans)
    labels = "".join(b.label() or " " * b.width for b in spans)
    return "\n".join(["Gantt Chart:", f"|{bar}|", f" {labels}".rstrip(), time_marks(spans)])


def build_rich_gantt(entries: Iterable[TimelineEntry]) -> tuple[Panel, str]:
    """
    Colored Gantt chart panel plus the matching time-mark line.
    """
    spans = list(blocks(entries))
    if not spans:
        return Panel("No execution", title="Gantt Chart"), ""

    colors = {}
    palette = cycle(PALETTE)
    bar, labels = Text(), Text()
    for b in spans:
        if b.pid is None:
            bar.append("." * b.width, style="dim")
            labels.append(" " * b.width)
            continue
        if b.pid not in colors:
            colors[b.pid] = next(palette)
        bar.append(" " * b.width, style=f"on {colors[b.pid]}")
        labels.append(b.label(), style="bold")

    grid = Table.grid()
    grid.add_row(bar)
    grid.add_row(labels)
    return Panel.fit(grid, title="Gantt Chart"), time_marks(spans)
