"""Show who is logged on and what they are doing."""

from __future__ import annotations

import argparse
import os
import re
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

import psutil

PROC_ROOT = "/proc"
DEV_ROOT = "/dev"

_U64_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_LOGIN_FORMATS = ("%Y-%m-%d %H:%M:%S.%f %z", "%Y-%m-%d %H:%M:%S %z")


@dataclass
class UserInfo:
    """One line of output: a logged-in user and what runs on their terminal."""

    user: str
    terminal: str
    login_time: str
    idle_time: str
    jcpu: str
    pcpu: str
    command: str


def _clock_tick() -> int:
    try:
        return os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        return 100


def _parse_unsigned(token: str) -> int:
    if not _UNSIGNED.fullmatch(token):
        return 0
    value = int(token)
    return value if value <= _U64_MAX else 0


def _parse_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def _float_text(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _stat_fields(pid: int) -> list[str]:
    path = Path(PROC_ROOT) / str(pid) / "stat"
    return path.read_text(encoding="utf-8", errors="replace").split()


def fetch_terminal_number(pid: int) -> int:
    """Return the controlling terminal number of ``pid`` (0 if unreadable)."""
    return _parse_unsigned(_stat_fields(pid)[6])


def fetch_pcpu_time(pid: int) -> float:
    """Return the user plus system CPU time of ``pid`` in seconds."""
    fields = _stat_fields(pid)
    utime = _parse_float(fields[13])
    stime = _parse_float(fields[14])
    return (utime + stime) / _clock_tick()


def fetch_cmdline(pid: int) -> str:
    """Return the raw command line of ``pid``, NUL separators included."""
    path = Path(PROC_ROOT) / str(pid) / "cmdline"
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def fetch_terminal_jcpu() -> dict[int, float]:
    """Return the total CPU time of all processes, keyed by terminal number."""
    totals: dict[int, float] = {}
    for entry in os.scandir(PROC_ROOT):
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        try:
            pid = int(entry.name)
        except ValueError:
            continue
        try:
            terminal = fetch_terminal_number(pid)
            cpu = fetch_pcpu_time(pid)
        except (FileNotFoundError, ProcessLookupError):
            # The process exited while the table was being read.
            continue
        totals[terminal] = totals.get(terminal, 0.0) + cpu
    return totals


def _parse_login(text: str) -> datetime:
    for layout in _LOGIN_FORMATS:
        try:
            return datetime.strptime(text, layout)
        except ValueError:
            continue
    raise ValueError(f"invalid login time: {text!r}")


def format_time(text: str, now: Optional[datetime] = None) -> str:
    """Format a login time as ``HH:MM`` today, or as weekday and day otherwise.

    ``text`` looks like ``2024-03-15 09:05:33.123456 +01:00:00``; the seconds
    of the offset are dropped before parsing. Raise ValueError if it does not
    parse.
    """
    cut = text.rfind(":")
    if cut != -1:
        text = text[:cut]
    moment = _parse_login(text)
    current = now if now is not None else datetime.now().astimezone()
    if current.day == moment.day:
        return moment.strftime("%H:%M")
    return f"{_WEEKDAYS[moment.weekday()]}{moment.day:02}"


def _login_string(started: float) -> str:
    moment = datetime.fromtimestamp(started).astimezone()
    offset = moment.utcoffset()
    total = int(offset.total_seconds()) if offset is not None else 0
    sign = "-" if total < 0 else "+"
    hours, rest = divmod(abs(total), 3600)
    minutes, seconds = divmod(rest, 60)
    return (
        f"{moment:%Y-%m-%d %H:%M:%S.%f} "
        f"{sign}{hours:02}:{minutes:02}:{seconds:02}"
    )


def _format_idle(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    whole = int(seconds)
    if whole < 3600:
        minutes, secs = divmod(whole, 60)
        return f"{minutes}:{secs:02}"
    if whole < 86400:
        hours, rest = divmod(whole, 3600)
        return f"{hours}:{rest // 60:02}m"
    return f"{whole // 86400}days"


def _idle_time(terminal: str) -> str:
    if not terminal:
        return "?"
    try:
        atime = os.stat(os.path.join(DEV_ROOT, terminal)).st_atime
    except OSError:
        return "?"
    return _format_idle(max(time.time() - atime, 0.0))


def fetch_user_info() -> list[UserInfo]:
    """Return one record per logged-in user session; empty off Linux."""
    if not sys.platform.startswith("linux"):
        return []

    jcpu_by_terminal = fetch_terminal_jcpu()
    records = []
    for entry in psutil.users():
        pid = getattr(entry, "pid", None)
        terminal = entry.terminal or ""
        jcpu = 0.0
        pcpu = 0.0
        command = ""
        if pid is not None:
            try:
                jcpu = jcpu_by_terminal.get(fetch_terminal_number(pid), 0.0)
            except (OSError, IndexError):
                pass
            try:
                pcpu = fetch_pcpu_time(pid)
            except (OSError, IndexError):
                pass
            try:
                command = fetch_cmdline(pid)
            except (OSError, ValueError):
                pass
        try:
            login = format_time(_login_string(entry.started))
        except (ValueError, OverflowError, OSError):
            login = ""
        records.append(
            UserInfo(
                user=entry.name,
                terminal=terminal,
                login_time=login,
                idle_time=_idle_time(terminal),
                jcpu=f"{jcpu:.2f}",
                pcpu=_float_text(pcpu),
                command=command,
            )
        )
    return records


def format_rows(users: Iterable[UserInfo], short: bool = False, header: bool = True) -> list[str]:
    """Return the output lines, with a header line first unless ``header`` is false."""
    lines = []
    if header:
        if short:
            lines.append(f"{'USER':<9}{'TTY':<9}{'IDLE':<7}WHAT")
        else:
            lines.append(
                f"{'USER':<9}{'TTY':<9}{'LOGIN@':<9}{'IDLE':<6} {'JCPU':<7}{'PCPU':<5}WHAT"
            )
    for info in users:
        if short:
            lines.append(
                f"{info.user:<9}{info.terminal:<9}{info.idle_time:<7}{info.command}"
            )
        else:
            lines.append(
                f"{info.user:<9}{info.terminal:<9}{info.login_time:<9}"
                f"{info.idle_time:<6} {info.jcpu:<7}{info.pcpu:<5}{info.command}"
            )
    return lines


class _Formatter(argparse.HelpFormatter):
    def add_usage(self, usage, actions, groups, prefix=None):
        super().add_usage(usage, actions, groups, "Usage: " if prefix is None else prefix)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="w",
        description="Show who is logged on and what they are doing",
        add_help=False,
        formatter_class=_Formatter,
    )
    options = parser.add_argument_group("Options")
    options.add_argument("--help", action="help", help="Print help information")
    flags = [
        ("-h", "--no-header", "do not print header"),
        ("-u", "--no-current", "ignore current process username"),
        ("-s", "--short", "short format"),
        ("-f", "--from", "show remote hostname field"),
        ("-o", "--old-style", "old style output"),
        ("-i", "--ip-addr", "display IP address instead of hostname (if possible)"),
        ("-p", "--pids", "show the PID(s) of processes in WHAT"),
    ]
    for short, long, text in flags:
        options.add_argument(short, long, action="store_true", help=text)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        args = _build_parser().parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code is None else int(exc.code)

    try:
        users = fetch_user_info()
    except OSError as err:
        print(f"w: failed to fetch user info: {err.strerror or err}", file=sys.stderr)
        return 1

    for line in format_rows(users, short=args.short, header=not args.no_header):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())