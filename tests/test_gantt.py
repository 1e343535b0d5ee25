from rich.panel import Panel

from schedsim.gantt import Block, blocks, build_rich_gantt, render_gantt
from schedsim.models import TimelineEntry


def test_render_plain():
    chart = render_gantt([
        TimelineEntry("P1", 5, 5),
        TimelineEntry("P2", 3, 8),
    ]).splitlines()
    assert chart[0] == "Gantt Chart:"
    assert chart[1] == "|" + "=" * 8 + "|"
    assert chart[2] == " P1   P2"
    assert chart[3] == "0  5  8"


def test_render_plain_shows_idle_and_merges_ticks():
    chart = render_gantt([
        TimelineEntry("P1", 1, 3),
        TimelineEntry("P1", 1, 4),
    ]).splitlines()
    assert chart[1] == "|..==|"
    assert chart[3] == "0  2  4"


def test_render_empty():
    assert render_gantt([]) == "(no execution)"


def test_rich_gantt_time_marks():
    panel, marks = build_rich_gantt([
        TimelineEntry("P1", 5, 5),
        TimelineEntry("P2", 3, 8),
        TimelineEntry("P3", 8, 16),
    ])
    assert isinstance(panel, Panel)
    assert marks == "0  5  8 16"


def test_rich_gantt_empty():
    panel, marks = build_rich_gantt([])
    assert marks == ""
    assert panel.renderable == "No execution"


def test_blocks_fill_idle_gaps():
    spans = list(blocks([
        TimelineEntry("P1", 2, 4),
        TimelineEntry("P1", 1, 5),
        TimelineEntry("P2", 1, 7),
    ]))
    assert spans == [
        Block(None, 0, 2),
        Block("P1", 2, 5),
        Block(None, 5, 6),
        Block("P2", 6, 7),
    ]
    assert [b.width for b in spans] == [2, 3, 1, 1]
