"""Process and kernel inspection tools: slabtop, snice, sysctl, top, w and watch."""

__version__ = "0.1.0"