"""Show a table of running processes."""

from __future__ import annotations

import argparse
import enum
import re
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

import psutil

from .picker import _pids, _process, _refresh, pickers
from .topfields import fields as known_fields

try:
    import pwd
except ImportError:  # pragma: no cover - non-unix platforms
    pwd = None

_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class FilterKind(enum.Enum):
    PID = "pid"
    USER = "user"
    EUSER = "euser"


@dataclass(frozen=True)
class Filter:
    """Restricts the listed processes to some pids, or to a (effective) uid."""

    kind: FilterKind
    value: Union[tuple[int, ...], str]


def _parse_u32(text: str) -> Optional[int]:
    if not _UNSIGNED.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def apply_width(text: str, width: int) -> str:
    """Cut ``text`` to ``width`` characters or pad it with spaces to that width."""
    text = str(text)
    if len(text) > width:
        return text[:width]
    return text + " " * (width - len(text))


def try_into_uid(text: str) -> str:
    """Return ``text`` if it is a uid, else the uid of the user of that name.

    Raise ValueError when no such user exists.
    """
    text = str(text)
    if _parse_u32(text) is not None:
        return text
    if pwd is not None:
        try:
            return str(pwd.getpwnam(text).pw_uid)
        except KeyError:
            pass
    raise ValueError("Invalid user")


def selected_fields() -> list[str]:
    return ["PID", "USER", "PR", "NI", "VIRT", "RES", "SHR", "S", "%CPU", "%MEM", "TIME+", "COMMAND"]


def _uid_matches(pid: int, wanted: str, effective: bool) -> bool:
    proc = _process(pid)
    if proc is None:
        return False
    try:
        uids = proc.uids()
    except (psutil.Error, AttributeError):
        return False
    uid = uids.effective if effective else uids.real
    return str(uid) == wanted


def construct_filter(filter: Optional[Filter]) -> Callable[[int], bool]:
    """Return a predicate on pids for the given filter; None accepts all."""
    if filter is None:
        return lambda pid: True
    if filter.kind is FilterKind.PID:
        wanted = frozenset(filter.value)
        return lambda pid: pid in wanted
    effective = filter.kind is FilterKind.EUSER
    uid = str(filter.value)
    return lambda pid: _uid_matches(pid, uid, effective)


def collect(filter: Optional[Filter], fields: Sequence[str]) -> list[list[str]]:
    """Return one row of column texts per selected process."""
    column_pickers = pickers(fields)
    accept = construct_filter(filter)
    return [[pick(pid) for pick in column_pickers] for pid in _pids() if accept(pid)]


def render_table(rows: Sequence[Sequence[str]], width: Optional[int] = None) -> str:
    """Lay rows out in left-aligned columns, optionally cutting each line to ``width``."""
    if not rows:
        return ""
    columns = max(len(row) for row in rows)
    widths = [
        max((len(row[column]) for row in rows if column < len(row)), default=0)
        for column in range(columns)
    ]
    lines = []
    for row in rows:
        line = "".join(f" {cell:<{size}} " for cell, size in zip(row, widths))
        lines.append(line if width is None else apply_width(line, width))
    return "\n".join(lines)


def _header() -> str:
    memory = psutil.virtual_memory()
    return (
        f"Tasks: {len(_pids())} total\n"
        f"MiB Mem : {memory.total / 1048576:.1f} total, "
        f"{memory.available / 1048576:.1f} avail"
    )


def _strip_equals(text: str) -> str:
    return text[1:] if text.startswith("=") else text


def _pid_list(text: str) -> list[int]:
    pids = [_parse_u32(part) for part in _strip_equals(text).split(",")]
    if any(pid is None for pid in pids):
        raise argparse.ArgumentTypeError(f"invalid value '{text}'")
    return pids


def _width(text: str) -> int:
    text = _strip_equals(text)
    if not _UNSIGNED.fullmatch(text):
        raise argparse.ArgumentTypeError(f"invalid value '{text}'")
    return int(text)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="top", description="Display Linux processes")
    parser.add_argument(
        "-O", "--list-fields", action="store_true", help="output all field names, then exit"
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-p", "--pid", action="append", type=_pid_list, metavar="PIDLIST",
        help="monitor only the tasks in PIDLIST",
    )
    group.add_argument(
        "-U", "--filter-any-user", type=_strip_equals, metavar="USER",
        help="show only processes owned by USER",
    )
    group.add_argument(
        "-u", "--filter-only-euser", type=_strip_equals, metavar="EUSER",
        help="show only processes owned by USER",
    )
    parser.add_argument(
        "-w", "--width", type=_width, metavar="COLUMNS", help="change print width [,use COLUMNS]"
    )
    return parser


def _filter_from(args: argparse.Namespace) -> Optional[Filter]:
    if args.pid:
        return Filter(FilterKind.PID, tuple(pid for group in args.pid for pid in group))
    if args.filter_any_user is not None:
        return Filter(FilterKind.USER, try_into_uid(args.filter_any_user))
    if args.filter_only_euser is not None:
        return Filter(FilterKind.EUSER, try_into_uid(args.filter_only_euser))
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.list_fields:
        for name in sorted(known_fields()):
            print(name)
        return 0

    # CPU usage is measured between two refreshes.
    _refresh()
    time.sleep(0.2)
    _refresh()

    try:
        selection = _filter_from(args)
    except ValueError as err:
        print(f"top: {err}", file=sys.stderr)
        return 1

    fields = selected_fields()
    rows = [fields, *collect(selection, fields)]

    print(_header())
    print("\n")
    print(render_table(rows, args.width))
    return 0


if __name__ == "__main__":
    sys.exit(main())