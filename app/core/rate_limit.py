# app/core/rate_limit.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FreezeWindow:
    """
    One action per `window` seconds per key.

    The last successful action timestamp lives with the caller (the
    creator_activity table); this only evaluates it against the clock.
    """
    window: int

    def next_allowed_at(self, last_ts: Optional[int]) -> int:
        if last_ts is None:
            return 0
        return last_ts + self.window

    def allows(self, last_ts: Optional[int], now: int) -> bool:
        return now >= self.next_allowed_at(last_ts)
