"""Parsing and summarising of the kernel slab allocator statistics."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable, Optional

DEFAULT_PATH = "/proc/slabinfo"

_U64_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")

_SORT_COLUMNS = {
    "a": "active_objs",
    "b": "objperslab",
    "c": "objsize",
    "l": "num_slabs",
    "v": "active_slabs",
    "p": "pagesperslab",
    "s": "objsize",
}


def _parse_unsigned(token: str) -> Optional[int]:
    if not _UNSIGNED.fullmatch(token):
        return None
    value = int(token)
    return value if value <= _U64_MAX else None


def parse_version(line: str) -> Optional[str]:
    """Return the version from the first slabinfo line, or None if it is blank."""
    parts = line.replace(":", " ").split()
    return parts[-1] if parts else None


def parse_meta(line: str) -> list[str]:
    """Return the column names listed in angle brackets on the header line."""
    cleaned = line.replace("#", " ").replace(":", " ")
    return [
        token.replace("<", "").replace(">", "")
        for token in cleaned.split()
        if token.startswith("<") and token.endswith(">")
    ]


def parse_data(line: str) -> Optional[tuple[str, list[int]]]:
    """Split a data line into the cache name and its numeric values."""
    tokens = line.replace(":", " ").split()
    if not tokens:
        return None
    values = [v for v in (_parse_unsigned(t) for t in tokens) if v is not None]
    return tokens[0], values


def _compare(a, b) -> int:
    return (a > b) - (a < b)


@dataclass
class SlabInfo:
    """Column names and per-cache values read from a slabinfo table."""

    meta: list[str] = field(default_factory=list)
    data: list[tuple[str, list[int]]] = field(default_factory=list)

    @classmethod
    def from_proc(cls, path: str = DEFAULT_PATH) -> "SlabInfo":
        """Read and parse the slabinfo file; reading usually needs root."""
        with open(path, encoding="utf-8") as handle:
            content = handle.read()
        return cls.parse(content)

    @classmethod
    def parse(cls, content: str) -> "SlabInfo":
        """Parse slabinfo text; raise ValueError if its layout is not recognised."""
        lines = content.splitlines()
        if len(lines) < 2 or parse_version(lines[0]) is None:
            raise ValueError("unsupported slabinfo format")
        meta = parse_meta(lines[1])
        data = [entry for entry in map(parse_data, lines[2:]) if entry is not None]
        return cls(meta=meta, data=data)

    def _offset(self, meta: str) -> Optional[int]:
        try:
            return self.meta.index(meta)
        except ValueError:
            return None

    def _column(self, meta: str) -> Iterable[int]:
        offset = self._offset(meta)
        if offset is None:
            return []
        return [values[offset] for _, values in self.data if offset < len(values)]

    def fetch(self, name: str, meta: str) -> Optional[int]:
        """Return the value of column ``meta`` for cache ``name``, if present."""
        offset = self._offset(meta)
        if offset is None:
            return None
        for key, values in self.data:
            if key == name:
                return values[offset] if offset < len(values) else None
        return None

    def names(self) -> list[str]:
        return [name for name, _ in self.data]

    def sort(self, by: str = "o", ascending: bool = False) -> "SlabInfo":
        """Sort the caches in place by the criterion letter and return self."""
        sign = 1 if ascending else -1

        if by == "n":
            self.data.sort(key=lambda entry: entry[0], reverse=not ascending)
            return self

        if by == "u":
            active = self._offset("active_objs")
            total = self._offset("num_objs")
            if active is None or total is None:
                return self

            def utilisation(values: list[int]) -> Optional[float]:
                if active >= len(values) or total >= len(values):
                    return None
                numerator, denominator = values[active], values[total]
                if denominator == 0:
                    return math.nan if numerator == 0 else math.inf
                return numerator / denominator

            def by_utilisation(first, second) -> int:
                cu1, cu2 = utilisation(first[1]), utilisation(second[1])
                if cu1 is None or cu2 is None or math.isnan(cu1) or math.isnan(cu2):
                    return 0
                return sign * _compare(cu1, cu2)

            self.data.sort(key=cmp_to_key(by_utilisation))
            return self

        offset = self._offset(_SORT_COLUMNS.get(by, "num_objs"))
        if offset is None:
            return self

        def by_column(first, second) -> int:
            values1, values2 = first[1], second[1]
            if offset >= len(values1) or offset >= len(values2):
                return 0
            return sign * _compare(values1[offset], values2[offset])

        self.data.sort(key=cmp_to_key(by_column))
        return self

    def _total(self, meta: str) -> int:
        return sum(self._column(meta))

    def _product_total(self, first: str, second: str) -> int:
        return sum(
            (self.fetch(name, first) or 0) * (self.fetch(name, second) or 0)
            for name in self.names()
        )

    def object_minimum(self) -> int:
        return min(self._column("objsize"), default=0)

    def object_maximum(self) -> int:
        return max(self._column("objsize"), default=0)

    def object_avg(self) -> int:
        sizes = list(self._column("objsize"))
        return sum(sizes) // len(sizes) if sizes else 0

    def total_active_objs(self) -> int:
        return self._total("active_objs")

    def total_objs(self) -> int:
        return self._total("num_objs")

    def total_active_slabs(self) -> int:
        return self._total("active_slabs")

    def total_slabs(self) -> int:
        return self._total("num_slabs")

    def total_active_size(self) -> int:
        return self._product_total("active_objs", "objsize")

    def total_size(self) -> int:
        return self._product_total("num_objs", "objsize")

    def total_active_cache(self) -> int:
        return self._product_total("objsize", "active_objs")

    def total_cache(self) -> int:
        return self._product_total("objsize", "num_objs")