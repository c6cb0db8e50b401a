"""Priority adjustments accepted by snice."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

_U32_MAX = 2**32 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class PriorityError(ValueError):
    """Raised when a priority argument cannot be parsed."""

    def __init__(self, value: str):
        super().__init__(f"failed to parse argument: '{value}'")
        self.value = value


class PriorityKind(enum.Enum):
    INCREASE = "+"
    DECREASE = "-"
    TO = ""


@dataclass(frozen=True)
class Priority:
    """A relative or absolute niceness change."""

    kind: PriorityKind
    value: int

    @classmethod
    def parse(cls, value: str) -> "Priority":
        """Parse ``+N``, ``-N`` or ``N``; raise PriorityError otherwise."""
        if value.startswith("-"):
            kind, digits = PriorityKind.DECREASE, value[1:]
        elif value.startswith("+"):
            kind, digits = PriorityKind.INCREASE, value[1:]
        else:
            kind, digits = PriorityKind.TO, value
        if not _UNSIGNED.fullmatch(digits):
            raise PriorityError(value)
        number = int(digits)
        if number > _U32_MAX:
            raise PriorityError(value)
        return cls(kind, number)

    @classmethod
    def default(cls) -> "Priority":
        return cls(PriorityKind.INCREASE, 4)

    def apply(self, current: int) -> int:
        """Return the new priority given the current one."""
        if self.kind is PriorityKind.INCREASE:
            return current + self.value
        if self.kind is PriorityKind.DECREASE:
            return current - self.value
        return self.value

    def __str__(self) -> str:
        return f"{self.kind.value}{self.value}"