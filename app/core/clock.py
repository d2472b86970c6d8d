# app/core/clock.py
from __future__ import annotations

import time
from typing import Protocol

from app.core.errors import InvalidArgument


class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """
    Wall-clock seconds. Never reports a value lower than one it already reported.
    """

    def __init__(self):
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(time.time()))
        return self._last


class ManualClock:
    """
    Hand-driven clock for simulations and tests.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise InvalidArgument("Clock cannot start before zero.")
        self._t = int(start)

    def now(self) -> int:
        return self._t

    def set(self, t: int) -> None:
        if t < self._t:
            raise InvalidArgument(f"Clock cannot move backwards ({t} < {self._t}).")
        self._t = int(t)

    def advance(self, dt: int) -> None:
        if dt < 0:
            raise InvalidArgument("Clock cannot move backwards.")
        self._t += int(dt)


_SYSTEM_CLOCK = SystemClock()


def get_clock() -> Clock:
    return _SYSTEM_CLOCK
