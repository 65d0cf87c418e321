"""Clock capability injected into pools.

The pool samples `now()` exactly once per call; tests drive time with
`ManualClock` instead of patching a global clock.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """
    Wall-clock seconds since the epoch.

    Readings never decrease: a wall clock stepped backwards repeats the last
    value seen until it catches up.
    """

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(time.time()))
        return self._last


@dataclass
class ManualClock:
    timestamp: int = 0

    def now(self) -> int:
        return self.timestamp

    def set_time(self, timestamp: int) -> None:
        if timestamp < self.timestamp:
            raise ValueError(f"clock must be monotonic: {timestamp} < {self.timestamp}")
        self.timestamp = timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"seconds must be non-negative: {seconds}")
        self.timestamp += seconds
        return self.timestamp
