from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .engine import DEFAULT_QUANTUM, compare, simulate
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .models import Algorithm, Process, SimulationResult, TimelineEntry
from .workload_io import load_workload, parse_process_specs

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    algorithm_names = ", ".join(a.value for a in Algorithm)

    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log run summaries (-v) or every dispatch decision (-vv) to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one scheduling algorithm.")
    _add_workload_arguments(run_parser)
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({algorithm_names}).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Print each execution slice as the simulation records it.",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the timeline and metrics as JSON instead of tables.",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain ASCII (for logs and pipes).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    _add_workload_arguments(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=[a.value for a in Algorithm],
        help=f"Algorithms to compare (default: {algorithm_names}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round-robin when included (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument(
        "--json",
        action="store_true",
        help="Print every result as JSON instead of a table.",
    )

    return parser


def _add_workload_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    source.add_argument(
        "--process",
        "-p",
        action="append",
        metavar="ARRIVAL,BURST[,PRIORITY]",
        help="Inline process; repeat for each process (ids are P1, P2, ...).",
    )


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    # Root logger is left to the host program.
    package_logger = logging.getLogger("schedsim")
    package_logger.setLevel(level)
    for handler in [h for h in package_logger.handlers if isinstance(h, RichHandler)]:
        package_logger.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=False, log_time_format="[%X]")
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.propagate = False


def _load_processes(args: argparse.Namespace) -> List[Process]:
    if args.workload:
        path = Path(args.workload)
        if not path.exists():
            raise SchedulerError(f"Workload not found: {path}")
        return load_workload(path)
    return parse_process_specs(args.process)


def _print_result(result: SimulationResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False, soft_wrap=True)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    metrics = result.metrics
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{metrics.average_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{metrics.average_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{metrics.average_response_time:.2f}")
    if result.system:
        system = result.system
        sys_table.add_row("Makespan", str(system.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{system.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _print_comparison(results: List[SimulationResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Makespan", justify="right")

    for result in results:
        summary_table.add_row(
            result.algorithm.label,
            "" if result.quantum is None else str(result.quantum),
            f"{result.metrics.average_waiting_time:.2f}",
            f"{result.metrics.average_turnaround_time:.2f}",
            f"{result.metrics.average_response_time:.2f}",
            str(result.system.makespan),
        )

    console.print(summary_table)


def _print_json(payload) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()
    err_console = Console(stderr=True)

    def trace(entry: TimelineEntry) -> None:
        err_console.print(f"t={entry.start:>3}-{entry.clock_at_slice_end:<3} {entry.pid}", markup=False)

    try:
        processes = _load_processes(args)

        if args.command == "run":
            listener = trace if args.trace else None
            result = simulate(processes, args.algorithm, quantum=args.quantum, listener=listener)
            if args.json:
                _print_json(result.to_dict())
            else:
                _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            results = compare(processes, args.algorithms, quantum=args.quantum)
            if args.json:
                _print_json([r.to_dict() for r in results])
            else:
                _print_comparison(results, console)
            return 0
    except SchedulerError as exc:
        logger.debug("Aborted", exc_info=True)
        err_console.print(f"Error: {exc}", style="red", markup=False, highlight=False, soft_wrap=True)
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
