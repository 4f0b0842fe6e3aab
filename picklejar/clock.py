"""Clock abstraction for testable dump timing."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of time for the dump engine.  Inject a fake in tests."""

    def monotonic(self) -> float: ...

    def time(self) -> float: ...


class SystemClock:
    """Default clock backed by the real system time."""

    def monotonic(self) -> float:
        return time.monotonic()

    def time(self) -> float:
        return time.time()
