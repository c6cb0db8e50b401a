"""Read and write kernel parameters under /proc/sys."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Iterator, Optional, Sequence

PROC_SYS_ROOT = "/proc/sys"


class SysctlError(OSError):
    """A kernel parameter could not be read or written."""


def _root(root: Optional[str]) -> str:
    return PROC_SYS_ROOT if root is None else root


def _describe(err: OSError) -> str:
    return err.strerror or str(err)


def normalize_var(var: str) -> str:
    """Turn a slash-separated path into dotted notation."""
    return var.replace("/", ".")


def variable_path(var: str, root: Optional[str] = None) -> Path:
    """Return the file that holds the dotted variable ``var``."""
    return Path(_root(root)) / var.replace(".", "/")


def get_sysctl(var: str, root: Optional[str] = None) -> str:
    """Return the value of ``var`` without trailing whitespace."""
    return variable_path(var, root).read_text(encoding="utf-8").rstrip()


def set_sysctl(var: str, value: str, root: Optional[str] = None) -> None:
    """Write ``value`` to ``var``."""
    variable_path(var, root).write_text(value, encoding="utf-8")


def handle_one_arg(
    arg: str, quiet: bool = False, root: Optional[str] = None
) -> Optional[tuple[str, str]]:
    """Read ``VAR`` or write ``VAR=VALUE``.

    Return the variable and the value to print, or None when a write is quiet.
    Raise SysctlError when the file cannot be read or written.
    """
    name, sep, value = arg.partition("=")
    var = normalize_var(name)

    if sep:
        try:
            set_sysctl(var, value, root)
        except OSError as err:
            raise SysctlError(f"error writing key '{var}': {_describe(err)}") from err
        return None if quiet else (var, value)

    try:
        current = get_sysctl(var, root)
    except OSError as err:
        raise SysctlError(f"error reading key '{var}': {_describe(err)}") from err
    return var, current


def _walk_files(directory: str) -> Iterator[str]:
    try:
        entries = list(os.scandir(directory))
    except OSError as err:
        print(f"sysctl: {directory}: {_describe(err)}", file=sys.stderr)
        return
    for entry in entries:
        try:
            if entry.is_file(follow_symlinks=False):
                yield entry.path
            elif entry.is_dir(follow_symlinks=False):
                yield from _walk_files(entry.path)
        except OSError as err:
            print(f"sysctl: {entry.path}: {_describe(err)}", file=sys.stderr)


def all_variables(root: Optional[str] = None) -> list[str]:
    """Return the paths of every file below the root, relative to it."""
    base = _root(root)
    return [os.path.relpath(path, base) for path in _walk_files(base)]


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="sysctl", description="Show or modify kernel parameters at runtime")
    parser.add_argument("variables", nargs="*", metavar="VARIABLE[=VALUE]")
    parser.add_argument(
        "-a", "-A", "-X", "--all", dest="all", action="store_true",
        help="Display all variables",
    )
    parser.add_argument("-N", "--names", action="store_true", help="Only print names")
    parser.add_argument("-n", "--values", action="store_true", help="Only print values")
    parser.add_argument("-e", "--ignore", action="store_true", help="Ignore errors")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Do not print when setting variables"
    )
    parser.add_argument("-o", dest="noop_o", help="Does nothing, for BSD compatibility")
    parser.add_argument("-x", dest="noop_x", help="Does nothing, for BSD compatibility")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not sys.platform.startswith("linux"):
        print("sysctl: `sysctl` currently only supports Linux.", file=sys.stderr)
        return 1

    if args.all:
        variables = all_variables()
    elif args.variables:
        variables = args.variables
    else:
        parser.print_help()
        return 0

    status = 0
    for arg in variables:
        try:
            result = handle_one_arg(arg, args.quiet)
        except SysctlError as err:
            if not args.ignore:
                print(f"sysctl: {err}", file=sys.stderr)
                status = 1
            continue
        if result is None:
            continue
        var, value = result
        for line in value.split("\n"):
            if args.names:
                print(var)
            elif args.values:
                print(line)
            else:
                print(f"{var} = {line}")
    return status


if __name__ == "__main__":
    sys.exit(main())