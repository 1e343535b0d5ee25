import pytest

from schedsim.algorithms import (
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
    schedule_srtf,
)
from schedsim.engine import simulate
from schedsim.errors import ValidationError
from schedsim.models import Process, ProcessState
from schedsim.timeline import TimelineBuilder, coalesce


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _slices(entries):
    return [(e.pid, e.slice_length, e.clock_at_slice_end) for e in entries]


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def test_fcfs_order():
    res = simulate(_procs(), "fcfs")
    assert _slices(res.timeline) == [("P1", 5, 5), ("P2", 3, 8), ("P3", 8, 16)]
    assert [p.waiting_time for p in res.processes] == [0, 4, 6]
    assert res.metrics.average_waiting_time == pytest.approx(3.33, abs=0.01)
    assert res.metrics.average_turnaround_time == pytest.approx(8.67, abs=0.01)


def test_fcfs_ties_keep_input_order():
    procs = [
        Process("B", arrival_time=0, burst_time=2),
        Process("A", arrival_time=0, burst_time=1),
    ]
    res = simulate(procs, "fcfs")
    assert [e.pid for e in res.timeline] == ["B", "A"]


def test_sjf_order_is_fixed_up_front():
    res = simulate(_procs(), "sjf")
    # P2 is shortest, so the CPU idles until it arrives at 1 even though P1 is ready.
    assert _slices(res.timeline) == [("P2", 3, 4), ("P1", 5, 9), ("P3", 8, 17)]
    procs = _by_pid(res)
    assert procs["P2"].start_time == 1
    assert procs["P2"].waiting_time == 0
    assert procs["P1"].waiting_time == 4
    assert procs["P3"].waiting_time == 7
    assert res.metrics.average_waiting_time == pytest.approx(11 / 3)
    assert res.metrics.average_turnaround_time == pytest.approx(9.0)


def test_sjf_breaks_burst_ties_by_arrival():
    procs = [
        Process("P1", arrival_time=4, burst_time=2),
        Process("P2", arrival_time=1, burst_time=2),
    ]
    res = simulate(procs, "sjf")
    assert _slices(res.timeline) == [("P2", 2, 3), ("P1", 2, 6)]


def test_priority_static():
    procs = [
        Process("P1", arrival_time=0, burst_time=5, priority=3),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=2),
    ]
    res = simulate(procs, "priority")
    assert _slices(res.timeline) == [("P2", 3, 4), ("P3", 8, 12), ("P1", 5, 17)]
    assert _by_pid(res)["P1"].waiting_time == 12


def test_priority_ties_by_arrival_and_default_zero():
    procs = [
        Process("P1", arrival_time=3, burst_time=1, priority=1),
        Process("P2", arrival_time=0, burst_time=1, priority=1),
        Process("P3", arrival_time=0, burst_time=1),
    ]
    res = simulate(procs, "priority")
    assert [e.pid for e in res.timeline] == ["P3", "P2", "P1"]


def test_srtf_preemption():
    procs = [
        Process("P1", arrival_time=0, burst_time=7),
        Process("P2", arrival_time=2, burst_time=4),
    ]
    res = simulate(procs, "sjf-preemptive")

    assert all(e.slice_length == 1 for e in res.timeline)
    assert _slices(coalesce(res.timeline)) == [("P1", 2, 2), ("P2", 4, 6), ("P1", 5, 11)]

    by_pid = _by_pid(res)
    assert by_pid["P2"].completion_time == 6
    assert by_pid["P2"].waiting_time == 0
    assert by_pid["P1"].completion_time == 11
    assert by_pid["P1"].waiting_time == 4
    assert by_pid["P1"].start_time == 0


def test_srtf_on_mixed_workload():
    res = simulate(_procs(), "srtf")
    assert _slices(coalesce(res.timeline)) == [
        ("P1", 1, 1),
        ("P2", 3, 4),
        ("P1", 4, 8),
        ("P3", 8, 16),
    ]


def test_srtf_ties_go_to_first_listed():
    procs = [
        Process("P1", arrival_time=0, burst_time=3),
        Process("P2", arrival_time=0, burst_time=3),
    ]
    assert _slices(coalesce(simulate(procs, "srtf").timeline)) == [("P1", 3, 3), ("P2", 3, 6)]
    assert _slices(coalesce(simulate(procs[::-1], "srtf").timeline)) == [("P2", 3, 3), ("P1", 3, 6)]


def test_rr_quantum_2():
    procs = [
        Process("P1", arrival_time=0, burst_time=5),
        Process("P2", arrival_time=1, burst_time=3),
    ]
    res = simulate(procs, "roundrobin", quantum=2)
    # P2 arrives during P1's first slice and joins behind the re-queued P1.
    assert _slices(res.timeline) == [
        ("P1", 2, 2),
        ("P1", 2, 4),
        ("P2", 2, 6),
        ("P1", 1, 7),
        ("P2", 1, 8),
    ]
    by_pid = _by_pid(res)
    assert by_pid["P1"].completion_time == 7
    assert by_pid["P2"].completion_time == 8
    assert by_pid["P2"].waiting_time == 4


def test_rr_refills_in_process_set_order():
    res = simulate(_procs(), "rr", quantum=2)
    assert _slices(res.timeline) == [
        ("P1", 2, 2),
        ("P1", 2, 4),
        ("P2", 2, 6),
        ("P3", 2, 8),
        ("P1", 1, 9),
        ("P2", 1, 10),
        ("P3", 2, 12),
        ("P3", 2, 14),
        ("P3", 2, 16),
    ]


def test_rr_idles_between_arrivals():
    procs = [
        Process("P1", arrival_time=0, burst_time=2),
        Process("P2", arrival_time=5, burst_time=1),
    ]
    res = simulate(procs, "rr", quantum=4)
    assert _slices(res.timeline) == [("P1", 2, 2), ("P2", 1, 6)]


def test_rr_strategy_rejects_missing_quantum():
    with pytest.raises(ValidationError):
        schedule_rr(_procs(), TimelineBuilder(), quantum=None)


@pytest.mark.parametrize(
    "strategy",
    [schedule_fcfs, schedule_sjf, schedule_priority, schedule_srtf],
)
def test_strategies_finish_every_process(strategy):
    procs = _procs()
    timeline = TimelineBuilder()
    strategy(procs, timeline)
    assert all(p.state is ProcessState.DONE for p in procs)
    assert timeline.busy_time == sum(p.burst_time for p in procs)
