"""Trace package."""

from .trace import SKIPPED, Trace, TraceEntry

__all__ = ["Trace", "TraceEntry", "SKIPPED"]
