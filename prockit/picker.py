"""Per-process column values for top."""

from __future__ import annotations

import os
import sys
import threading
import time
from typing import Callable, Optional, Sequence

import psutil

Picker = Callable[[int], str]

_UNKNOWN_VALUE = "?"

_STATUS_LETTERS = {
    psutil.STATUS_RUNNING: "R",
    psutil.STATUS_SLEEPING: "S",
    psutil.STATUS_DISK_SLEEP: "U",
    psutil.STATUS_STOPPED: "S",
    psutil.STATUS_TRACING_STOP: "T",
    psutil.STATUS_ZOMBIE: "Z",
    psutil.STATUS_DEAD: "D",
    psutil.STATUS_WAKE_KILL: "W",
    psutil.STATUS_WAKING: "W",
    psutil.STATUS_IDLE: "I",
    psutil.STATUS_LOCKED: "L",
    psutil.STATUS_WAITING: "W",
    psutil.STATUS_PARKED: "P",
}


class _Snapshot:
    """Processes and their CPU usage as seen at the last refresh."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.processes: dict[int, psutil.Process] = {}
        self.cpu: dict[int, float] = {}
        self.loaded = False

    def refresh(self) -> None:
        processes: dict[int, psutil.Process] = {}
        cpu: dict[int, float] = {}
        with self._lock:
            for proc in psutil.process_iter():
                try:
                    cpu[proc.pid] = proc.cpu_percent(None)
                except psutil.Error:
                    continue
                processes[proc.pid] = proc
            self.processes = processes
            self.cpu = cpu
            self.loaded = True

    def ensure(self) -> None:
        if not self.loaded:
            self.refresh()


_SNAPSHOT = _Snapshot()


def _refresh() -> None:
    _SNAPSHOT.refresh()


def _pids() -> list[int]:
    _SNAPSHOT.ensure()
    return sorted(_SNAPSHOT.processes)


def _process(pid: int) -> Optional[psutil.Process]:
    _SNAPSHOT.ensure()
    return _SNAPSHOT.processes.get(pid)


def format_time_plus(seconds: int) -> str:
    """Format a running time as hours, minutes and seconds (``H:MM.SS``)."""
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02}.{secs:02}"


def _pid(pid: int) -> str:
    return str(pid)


def _cpu(pid: int) -> str:
    if _process(pid) is None:
        return "0.0"
    return f"{_SNAPSHOT.cpu.get(pid, 0.0):.2f}"


def _user(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "0.0"
    try:
        return proc.username()
    except (psutil.Error, KeyError, OSError):
        return "?"


def _pr(pid: int) -> str:
    if not hasattr(os, "getpriority"):
        return "0"
    try:
        return str(os.getpriority(os.PRIO_PROCESS, pid))
    except (OSError, OverflowError):
        return "0"


def _ni(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "0"
    try:
        return str(proc.nice())
    except psutil.Error:
        return "0"


def _memory_kib(attribute: str) -> Picker:
    def pick(pid: int) -> str:
        proc = _process(pid)
        if proc is None:
            return "0"
        try:
            info = proc.memory_info()
        except psutil.Error:
            return "0"
        return str(getattr(info, attribute, 0) // 1024)

    return pick


def _status(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "?"
    try:
        status = proc.status()
    except psutil.Error:
        return "?"
    return _STATUS_LETTERS.get(status, status[:1].upper() or "?")


def _time_plus(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "0:00.00"
    try:
        started = proc.create_time()
    except psutil.Error:
        return "0:00.00"
    return format_time_plus(int(time.time() - started))


def _mem(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "0.0"
    try:
        rss = proc.memory_info().rss
    except psutil.Error:
        return "0.0"
    total = psutil.virtual_memory().total
    return f"{rss / total:.1f}" if total else "0.0"


def _status_name(pid: int) -> str:
    try:
        with open(f"/proc/{pid}/status", encoding="utf-8") as handle:
            first = handle.readline()
    except OSError:
        return ""
    parts = first.split(":")
    return parts[1].strip() if len(parts) > 1 else ""


def _command(pid: int) -> str:
    proc = _process(pid)
    if proc is None:
        return "?"
    try:
        exe = proc.exe()
    except (psutil.Error, OSError):
        exe = ""
    if exe:
        return os.path.basename(exe)
    try:
        cmdline = proc.cmdline()
    except (psutil.Error, OSError):
        cmdline = []
    result = " ".join(cmdline).strip()
    if not result and sys.platform.startswith("linux"):
        return _status_name(pid)
    return result


_PICKERS: dict[str, Picker] = {
    "PID": _pid,
    "USER": _user,
    "PR": _pr,
    "NI": _ni,
    "VIRT": _memory_kib("vms"),
    "RES": _memory_kib("rss"),
    "SHR": _memory_kib("shared"),
    "S": _status,
    "%CPU": _cpu,
    "TIME+": _time_plus,
    "%MEM": _mem,
    "COMMAND": _command,
}


def pickers(fields: Sequence[str]) -> list[Picker]:
    """Return, for each field name, a function from pid to the column text.

    Fields without a known picker show a placeholder value.
    """
    return [
        _PICKERS.get(name, lambda _pid: _UNKNOWN_VALUE) for name in fields
    ]