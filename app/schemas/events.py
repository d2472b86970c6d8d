from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel


class MarketEventOut(BaseModel):
    seq: int
    event_type: str
    block_time: int
    args: Dict[str, Any]
    entry_hash: str


class MarketEventList(BaseModel):
    events: List[MarketEventOut]
    chain_valid: bool
