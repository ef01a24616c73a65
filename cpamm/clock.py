"""Logical time sources for deadline checks.

Deadlines are compared against clock.now() once, at the start of an
operation. Nothing ever waits on a clock.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that reports the current time as an integer timestamp."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time in whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Used by the harness and tests."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int = 1) -> int:
        """Move time forward and return the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Cannot move a clock backwards by {seconds}")
        self._now += seconds
        return self._now
