from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .engine import run_algorithm
from .errors import SchedulerError
from .gantt import build_rich_gantt
from .metrics import summarize_process_metrics
from .models import Process, RunResult
from .policies import POLICY_NAMES
from .workload_io import load_workload, sample_processes

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpu-sched",
        description="CPU scheduling simulator (FCFS, SJF, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch and idle period of the simulation.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=POLICY_NAMES,
        help="Algorithm to use (fcfs, sjf, rr).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in sample data).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by FCFS and SJF).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in sample data).",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=POLICY_NAMES,
        default=list(POLICY_NAMES),
        help="Algorithms to compare (default: fcfs sjf rr).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )

    show_parser = subparsers.add_parser("show", help="List the processes of a workload.")
    show_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in sample data).",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu to load processes and run algorithms.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Default quantum to prefill for RR (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load(workload: Optional[str]) -> List[Process]:
    if workload is None:
        return sample_processes()
    return load_workload(workload)


def _print_processes(processes: List[Process], console: Console) -> None:
    table = Table(title="Processes", box=box.SIMPLE_HEAVY)
    table.add_column("PID", justify="center")
    table.add_column("Name", justify="center")
    table.add_column("Arrival", justify="right")
    table.add_column("Burst", justify="right")

    for p in processes:
        table.add_row(str(p.pid), p.name, str(p.arrival_time), str(p.burst_time))

    console.print(table)


def _print_result(result: RunResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Name",
        "Arrival",
        "Burst",
        "Start",
        "Completion",
        "Turnaround",
        "Waiting",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics (completion order)", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Name"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            str(p.pid),
            p.name,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    if result.system:
        sys_table.add_row("Makespan", str(result.system.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{result.system.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{result.system.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _print_comparison(
    processes: List[Process], algorithms: List[str], quantum: int, console: Console, title: str
) -> None:
    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Completion order")

    for alg in algorithms:
        q = quantum if alg == "rr" else None
        result = run_algorithm(alg, processes, quantum=q)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.avg_waiting_time:.2f}",
            f"{result.avg_turnaround_time:.2f}",
            " ".join(result.completion_order),
        )

    console.print(summary_table)


@dataclass
class MenuSession:
    """
    State owned by the interactive menu: the loaded processes and the
    quantum offered by default. Each scheduler run copies the processes, so
    the loaded list is never changed by running an algorithm.
    """

    console: Console
    quantum: int = DEFAULT_QUANTUM
    processes: List[Process] = field(default_factory=list)

    def require_processes(self) -> bool:
        if not self.processes:
            self.console.print("[red]No processes loaded! Load sample data or a workload file first.[/red]")
            return False
        return True

    def load_sample(self) -> None:
        self.processes = sample_processes()
        self.console.print("[green]Sample data loaded.[/green]")

    def load_file(self) -> None:
        path_in = input("Workload path (.json or .csv): ").strip()
        if not path_in:
            return
        self.processes = load_workload(path_in)
        self.console.print(f"[green]Loaded {len(self.processes)} processes from {escape(path_in)}.[/green]")

    def view(self) -> None:
        if self.require_processes():
            _print_processes(self.processes, self.console)

    def run(self, alg: str) -> None:
        if not self.require_processes():
            return

        quantum = None
        if alg == "rr":
            quantum = self.ask_quantum()
            if quantum is None:
                return

        _print_result(run_algorithm(alg, self.processes, quantum=quantum), self.console)

    def compare(self) -> None:
        if not self.require_processes():
            return
        quantum = self.ask_quantum()
        if quantum is None:
            return
        _print_comparison(self.processes, list(POLICY_NAMES), quantum, self.console, "Algorithm comparison")

    def ask_quantum(self) -> Optional[int]:
        q_in = input(f"Time quantum [{self.quantum}]: ").strip()
        if not q_in:
            return self.quantum
        try:
            return int(q_in)
        except ValueError:
            self.console.print(f"[red]Invalid quantum: {escape(q_in)}[/red]")
            return None


MENU_ITEMS = [
    ("1", "Load sample data"),
    ("2", "Load workload file"),
    ("3", "View processes"),
    ("4", "FCFS scheduling"),
    ("5", "SJF scheduling"),
    ("6", "Round Robin scheduling"),
    ("7", "Compare all algorithms"),
    ("q", "Quit"),
]


def _interactive_menu(session: MenuSession) -> None:
    console = session.console
    actions = {
        "1": session.load_sample,
        "2": session.load_file,
        "3": session.view,
        "4": lambda: session.run("fcfs"),
        "5": lambda: session.run("sjf"),
        "6": lambda: session.run("rr"),
        "7": session.compare,
    }

    while True:
        console.print("\n[bold cyan]CPU Scheduling Simulator[/bold cyan]")
        for key, label in MENU_ITEMS:
            console.print(f"  [yellow]{key}[/yellow]. [white]{label}[/white]")

        try:
            choice = input("Enter choice: ").strip().lower()
            if choice in {"q", "quit", "exit"}:
                break

            action = actions.get(choice)
            if action is None:
                console.print("[red]Invalid choice![/red]")
                continue

            action()
        except SchedulerError as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
        except (EOFError, KeyboardInterrupt):
            # Ctrl-D / Ctrl-C at any prompt ends the session.
            console.print()
            break

    console.print("Thank you!")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = _load(args.workload)
            result = run_algorithm(args.algorithm, processes, quantum=args.quantum)
            _print_result(result, console)
            return 0

        if args.command == "compare":
            processes = _load(args.workload)
            _print_comparison(processes, args.algorithms, args.quantum, console, "Algorithm comparison")
            return 0

        if args.command == "show":
            _print_processes(_load(args.workload), console)
            return 0

        if args.command == "menu":
            _interactive_menu(MenuSession(console=console, quantum=args.quantum))
            return 0
    except SchedulerError as exc:
        logger.debug("Run aborted", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
