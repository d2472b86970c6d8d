#app/models/event_log.py
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import BigInteger, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class MarketEvent(Base):
    """
    Append-only hash-chained notification log.

    entry_hash = SHA256(prev_hash + canonical(payload_json))
    """

    __tablename__ = "market_events"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    block_time: Mapped[int] = mapped_column(BigInteger, nullable=False)

    prev_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    entry_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    payload_json: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_market_events_type", "event_type"),
    )
