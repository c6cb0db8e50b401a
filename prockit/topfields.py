"""Names and descriptions of the columns that top can display."""

from __future__ import annotations

from types import MappingProxyType
from typing import Optional

_FIELDS = MappingProxyType(
    {
        "%CPU": "CPU Usage",
        "%CUC": "CPU Utilization",
        "%CUU": "CPU Utilization",
        "%MEM": "Memory Usage (RES)",
        "AGID": "Autogroup Identifier",
        "AGNI": "Autogroup Nice Value",
        "CGNAME": "Control Group Name",
        "CGROUPS": "Control Groups",
        "CODE": "Code Size (KiB)",
        "COMMAND": "Command Name or Command Line",
        "DATA": "Data + Stack Size (KiB)",
        "ELAPSED": "Elapsed Running Time",
        "ENVIRON": "Environment variables",
        "EXE": "Executable Path",
        "Flags": "Task Flags",
        "GID": "Group Id",
        "GROUP": "Group Name",
        "LOGID": "Login User Id",
        "LXC": "Lxc Container Name",
        "NI": "Nice Value",
        "NU": "Last known NUMA node",
        "OOMa": "Out of Memory Adjustment Factor",
        "OOMs": "Out of Memory Score",
        "P": "Last used CPU (SMP)",
        "PGRP": "Process Group Id",
        "PID": "Process Id",
        "PPID": "Parent Process Id",
        "PR": "Priority",
        "PSS": "Proportional Resident Memory, smaps (KiB)",
    }
)


def fields() -> set[str]:
    """Return the names of all known fields."""
    return set(_FIELDS)


def description_of(field: str) -> Optional[str]:
    """Return the description of ``field``, or None if it is unknown."""
    return _FIELDS.get(str(field))