"""Change the scheduling priority of selected processes."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, Optional, Sequence

import psutil

from .priority import Priority, PriorityError
from .snice_action import (
    ActionResult,
    SelectedTarget,
    TargetKind,
    _normalize_tty,
    perform_action,
)

ALL_SIGNALS = [
    "EXIT", "HUP", "INT", "QUIT", "ILL", "TRAP", "ABRT", "BUS", "FPE", "KILL", "USR1", "SEGV",
    "USR2", "PIPE", "ALRM", "TERM", "STKFLT", "CHLD", "CONT", "STOP", "TSTP", "TTIN", "TTOU",
    "URG", "XCPU", "XFSZ", "VTALRM", "PROF", "WINCH", "POLL", "PWR", "SYS",
]


def _chunks(items: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def format_signal_list(signals: Sequence[str]) -> str:
    """Return the signal names after the first, sixteen to a line."""
    return "\n".join(" ".join(chunk) for chunk in _chunks(list(signals[1:]), 16))


def format_signal_table(signals: Sequence[str]) -> str:
    """Return the numbered signal names after the first, seven to a line."""
    cells = [f"{number:>2} {name:<8}" for number, name in enumerate(signals[1:], start=1)]
    return "\n".join("".join(chunk).rstrip() for chunk in _chunks(cells, 7))


def collect_pids(targets: Iterable[SelectedTarget]) -> list[int]:
    """Return the distinct pids selected by the targets, in ascending order."""
    return sorted({pid for target in targets for pid in target.to_pids()})


def _describe_process(pid: int) -> Optional[tuple[str, str, str]]:
    try:
        proc = psutil.Process(pid)
        tty = _normalize_tty(proc.terminal())
    except (psutil.Error, OSError):
        return None
    try:
        user = proc.username()
    except (psutil.Error, OSError, KeyError):
        user = "?"
    try:
        exe = proc.exe()
    except (psutil.Error, OSError):
        exe = ""
    command = os.path.basename(exe) if exe else "?"
    return tty, user, command


def verbose_report(
    pids: Sequence[int], results: Sequence[Optional[ActionResult]]
) -> str:
    """Return a table of terminal, user, pid, command and result per process."""
    rows = []
    for pid, result in zip(pids, results):
        if result is None:
            continue
        described = _describe_process(pid)
        if described is None:
            continue
        tty, user, command = described
        rows.append([tty, user, str(pid), command, str(result)])
    if not rows:
        return ""
    widths = [max(len(row[column]) for row in rows) for column in range(len(rows[0]))]
    lines = [
        " ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in rows
    ]
    return "\n".join(lines).strip()


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="snice", description="Change the priority of processes")
    parser.add_argument("priority", nargs="?")
    parser.add_argument("-l", "--list", action="store_true", help="list all signal names")
    parser.add_argument(
        "-L", "--table", action="store_true", help="list all signal names in a nice table"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="explain what is being done"
    )
    parser.add_argument(
        "-c", "--command", action="append", default=[], metavar="command",
        help="expression is a command name",
    )
    parser.add_argument(
        "-p", "--pid", action="append", default=[], type=int, metavar="pid",
        help="expression is a process id number",
    )
    parser.add_argument(
        "-t", "--tty", action="append", default=[], metavar="tty",
        help="expression is a terminal",
    )
    parser.add_argument(
        "-u", "--user", action="append", default=[], metavar="username",
        help="expression is a username",
    )
    return parser


def _strip_equals(value: str) -> str:
    return value[1:] if value.startswith("=") else value


def _targets(args: argparse.Namespace) -> list[SelectedTarget]:
    targets = [SelectedTarget(TargetKind.COMMAND, _strip_equals(c)) for c in args.command]
    targets += [SelectedTarget(TargetKind.PID, pid) for pid in args.pid]
    targets += [SelectedTarget(TargetKind.TTY, _strip_equals(t)) for t in args.tty]
    targets += [SelectedTarget(TargetKind.USER, _strip_equals(u)) for u in args.user]
    return targets


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        return 1
    args = parser.parse_args(argv)

    try:
        priority = Priority.default() if args.priority is None else Priority.parse(args.priority)
    except PriorityError as err:
        print(f"snice: {err}", file=sys.stderr)
        return 1

    if args.table or args.list:
        if os.name == "posix":
            if args.table:
                print(format_signal_table(ALL_SIGNALS))
            else:
                print(format_signal_list(ALL_SIGNALS))
        return 0

    targets = _targets(args)
    if targets:
        pids = collect_pids(targets)
        results = perform_action(pids, priority)
        if not results or all(result is None for result in results):
            print("snice: no process selection criteria", file=sys.stderr)
            return 1
        if args.verbose:
            print(verbose_report(pids, results))
    return 0


if __name__ == "__main__":
    sys.exit(main())