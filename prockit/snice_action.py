"""Selecting processes and changing their scheduling priority."""

from __future__ import annotations

import enum
import errno
import os
import sys
from dataclasses import dataclass
from typing import Iterable, Optional, Union

import psutil

from .priority import Priority

try:
    import pwd
except ImportError:  # pragma: no cover - non-unix platforms
    pwd = None


class TargetKind(enum.Enum):
    COMMAND = "command"
    PID = "pid"
    TTY = "tty"
    USER = "user"


def _normalize_tty(name: Optional[str]) -> str:
    """Return a terminal name without the /dev/ prefix, or '?' for none."""
    if not name:
        return "?"
    return name[len("/dev/"):] if name.startswith("/dev/") else name


def _pids_by_name(command: str) -> list[int]:
    pids = []
    for proc in psutil.process_iter(["name"]):
        name = proc.info.get("name") or ""
        if command in name:
            pids.append(proc.pid)
    return pids


def _pids_by_tty(tty: str) -> list[int]:
    if not sys.platform.startswith("linux"):
        return []
    wanted = _normalize_tty(tty)
    return [
        proc.pid
        for proc in psutil.process_iter(["terminal"])
        if _normalize_tty(proc.info.get("terminal")) == wanted
    ]


def _pids_by_user(user: str) -> list[int]:
    if pwd is None:
        return []
    try:
        uid = pwd.getpwnam(user).pw_uid
    except KeyError:
        return []
    pids = []
    for proc in psutil.process_iter(["uids"]):
        uids = proc.info.get("uids")
        if uids is not None and uids.real == uid:
            pids.append(proc.pid)
    return pids


@dataclass(frozen=True)
class SelectedTarget:
    """An expression that selects processes: a command, pid, terminal or user."""

    kind: TargetKind
    value: Union[str, int]

    def to_pids(self) -> list[int]:
        """Return the ids of the processes this expression selects."""
        if self.kind is TargetKind.PID:
            return [int(self.value)]
        if self.kind is TargetKind.COMMAND:
            return _pids_by_name(str(self.value))
        if self.kind is TargetKind.TTY:
            return _pids_by_tty(str(self.value))
        return _pids_by_user(str(self.value))


class ActionResult(enum.Enum):
    PERMISSION_DENIED = "Permission Denied"
    SUCCESS = "Success"

    def __str__(self) -> str:
        return self.value


def _as_i32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def set_priority(pid: int, priority: Priority) -> Optional[ActionResult]:
    """Change the priority of ``pid``.

    Return None when the outcome is unknown, for instance when the process
    cannot be queried or the platform is not supported.
    """
    if not sys.platform.startswith("linux"):
        return None
    try:
        current = os.getpriority(os.PRIO_PROCESS, pid)
    except (OSError, OverflowError):
        return None

    target = _as_i32(priority.apply(current))
    try:
        os.setpriority(os.PRIO_PROCESS, pid, target)
    except OSError as err:
        if err.errno == errno.ESRCH:
            return ActionResult.PERMISSION_DENIED
        return None
    return ActionResult.SUCCESS


def perform_action(
    pids: Iterable[int], priority: Priority
) -> list[Optional[ActionResult]]:
    """Apply ``priority`` to every pid and return one result per pid."""
    return [set_priority(pid, priority) for pid in pids]