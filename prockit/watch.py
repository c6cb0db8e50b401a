"""Run a command periodically."""

from __future__ import annotations

import argparse
import os
import re
import subprocess
import sys
import time
from datetime import timedelta
from typing import Optional, Sequence, Union

_U64_MAX = 2**64 - 1
_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")
_MINIMUM_INTERVAL = timedelta(milliseconds=100)
DEFAULT_INTERVAL = "2"


def _parse_unsigned(token: str, limit: int) -> int:
    if not _UNSIGNED.fullmatch(token):
        raise ValueError(f"invalid number: {token!r}")
    value = int(token)
    if value > limit:
        raise ValueError(f"number too large: {token!r}")
    return value


def _duration(seconds: int, nanos: int = 0) -> timedelta:
    try:
        return timedelta(seconds=seconds, microseconds=nanos / 1000)
    except OverflowError as err:
        raise ValueError("interval out of range") from err


def parse_interval(text: str) -> timedelta:
    """Parse seconds with an optional ``.`` or ``,`` fraction.

    A whole number is taken as is; an interval with a fraction is never
    shorter than 0.1 seconds. Raise ValueError on malformed input.
    """
    index = next((i for i, char in enumerate(text) if char in ",."), None)
    if index is None:
        return _duration(_parse_unsigned(text, _U64_MAX))

    seconds = _parse_unsigned(text[:index], _U64_MAX) if index > 0 else 0

    fraction = text[index + 1:]
    if not fraction:
        nanos = 0
    elif len(fraction) <= 9:
        nanos = _parse_unsigned(fraction, _U32_MAX) * 10 ** (9 - len(fraction))
    else:
        if not all(char.isnumeric() for char in fraction):
            raise ValueError(f"invalid number: {fraction!r}")
        # Only nine digits of precision are kept.
        nanos = _parse_unsigned(fraction[:9], _U32_MAX)

    return max(_duration(seconds, nanos), _MINIMUM_INTERVAL)


def _shell_command(command: str) -> list[str]:
    if os.name == "nt":
        return [os.environ.get("COMSPEC", "cmd.exe"), "/c", command]
    return ["sh", "-c", command]


def _describe_status(code: int) -> str:
    if code < 0:
        return f"signal: {-code}"
    return f"exit status: {code}"


def run_watch(command: str, interval: Union[timedelta, float]) -> int:
    """Run ``command`` through the shell until it fails; return its exit code."""
    delay = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
    while True:
        completed = subprocess.run(_shell_command(command))
        if completed.returncode != 0:
            print(
                f"watch: command failed: {_describe_status(completed.returncode)}",
                file=sys.stderr,
            )
            return completed.returncode
        time.sleep(delay)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="watch",
        description="Execute a program periodically, showing output fullscreen",
    )
    parser.add_argument("command", help="Command to be executed")
    parser.add_argument(
        "-n",
        "--interval",
        default=DEFAULT_INTERVAL,
        metavar="SECONDS",
        help="Seconds to wait between updates",
    )
    options = [
        ("-b", "--beep", None, "Beep if command has a non-zero exit"),
        ("-c", "--color", None, "Interpret ANSI color and style sequences"),
        ("-C", "--no-color", None, "Do not interpret ANSI color and style sequences"),
        ("-d", "--differences", "permanent", "Highlight changes between updates"),
        ("-e", "--errexit", None, "Exit if command has a non-zero exit"),
        ("-g", "--chgexit", None, "Exit when output from command changes"),
        ("-q", "--equexit", "CYCLES", "Exit when output from command does not change"),
        ("-p", "--precise", None, "Attempt to run command in precise intervals"),
        ("-r", "--no-rerun", None, "Do not rerun program on window resize"),
        ("-t", "--no-title", None, "Turn off header"),
        ("-w", "--no-wrap", None, "Turn off line wrapping"),
        ("-x", "--exec", None, "Pass command to exec instead of 'sh -c'"),
    ]
    for short, long, metavar, text in options:
        parser.add_argument(short, long, metavar=metavar, help=text)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        interval = parse_interval(args.interval)
    except ValueError:
        print(
            f"watch: failed to parse argument: '{args.interval}': Invalid argument",
            file=sys.stderr,
        )
        return 1

    try:
        run_watch(args.command, interval)
    except OSError as err:
        print(f"watch: {err.strerror or err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())