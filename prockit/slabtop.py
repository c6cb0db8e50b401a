"""Display kernel slab cache information."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .slabinfo import SlabInfo


def to_kb(size: int) -> float:
    return size / 1024.0


def percentage(numerator: int, denominator: int) -> float:
    """Return numerator as a percentage of denominator, 0.0 when it is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100.0


def format_header(info: SlabInfo) -> str:
    """Return the five summary lines shown above the cache list."""
    lines = [
        " Active / Total Objects (% used)    : {} / {} ({:.1f}%)".format(
            info.total_active_objs(),
            info.total_objs(),
            percentage(info.total_active_objs(), info.total_objs()),
        ),
        " Active / Total Slabs (% used)      : {} / {} ({:.1f}%)".format(
            info.total_active_slabs(),
            info.total_slabs(),
            percentage(info.total_active_slabs(), info.total_slabs()),
        ),
        " Active / Total Caches (% used)     : {} / {} ({:.1f}%)".format(
            info.total_active_cache(),
            info.total_cache(),
            percentage(info.total_active_cache(), info.total_cache()),
        ),
        " Active / Total Size (% used)       : {:.2f}K / {:.2f}K ({:.1f}%)".format(
            to_kb(info.total_active_size()),
            to_kb(info.total_size()),
            percentage(info.total_active_size(), info.total_size()),
        ),
        " Minimum / Average / Maximum Object : {:.2f}K / {:.2f}K / {:.2f}K".format(
            to_kb(info.object_minimum()),
            to_kb(info.object_avg()),
            to_kb(info.object_maximum()),
        ),
    ]
    return "\n".join(lines)


def format_list(info: SlabInfo) -> str:
    """Return the title line followed by one line per cache."""
    lines = [
        f"{'OBJS':>6} {'ACTIVE':>6} {'USE':>4} {'OBJ SIZE':>8} {'SLABS':>6} "
        f"{'OBJ/SLAB':>8} {'CACHE SIZE':>10} {'NAME'}"
    ]
    for name in info.names():
        objs = info.fetch(name, "num_objs") or 0
        active = info.fetch(name, "active_objs") or 0
        used = f"{percentage(active, objs):.0f}%"
        objsize_kb = to_kb(info.fetch(name, "objsize") or 0)
        slabs = info.fetch(name, "num_slabs") or 0
        obj_per_slab = info.fetch(name, "objperslab") or 0
        cache_size = int(objsize_kb * objs)
        objsize = f"{objsize_kb:.2f}"
        lines.append(
            f"{objs:>6} {active:>6} {used:>4} {objsize:>7}K {slabs:>6} "
            f"{obj_per_slab:>8} {cache_size:>10} {name}"
        )
    return "\n".join(lines)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="slabtop",
        description="Display kernel slab cache information in real time",
    )
    parser.add_argument(
        "-o", "--once", action="store_true", help="only display once, then exit"
    )
    parser.add_argument(
        "-s",
        "--sort",
        metavar="char",
        default="o",
        help="specify sort criteria by character",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    sort_flag = args.sort[0] if args.sort else "o"

    try:
        info = SlabInfo.from_proc().sort(sort_flag, False)
    except OSError as err:
        print(f"slabtop: {err.strerror or err}", file=sys.stderr)
        return 1
    except ValueError as err:
        print(f"slabtop: {err}", file=sys.stderr)
        return 1

    print(format_header(info))
    print()
    print(format_list(info))
    return 0


if __name__ == "__main__":
    sys.exit(main())