#app/services/event_service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.hashing import GENESIS_HASH, build_entry, entry_hash
from app.models.event_log import MarketEvent


class EventService:
    """
    Append-only notification log consumed by external indexers.

    Events are written inside the caller's transaction, so a rolled back
    operation leaves no notification behind.
    """

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def _get_last_entry(self, db: Session) -> Optional[MarketEvent]:
        return db.execute(
            select(MarketEvent).order_by(MarketEvent.seq.desc()).limit(1)
        ).scalar_one_or_none()

    # ─────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────

    def emit(
        self,
        db: Session,
        *,
        event_type: str,
        block_time: int,
        payload: Dict[str, Any],
    ) -> MarketEvent:
        last = self._get_last_entry(db)

        prev_hash = last.entry_hash if last else GENESIS_HASH
        seq = 1 if not last else last.seq + 1

        entry = build_entry(seq, event_type, block_time, payload)

        row = MarketEvent(
            seq=seq,
            event_type=event_type,
            block_time=block_time,
            prev_hash=prev_hash,
            entry_hash=entry_hash(prev_hash, entry),
            payload_json=entry,
        )
        db.add(row)
        db.flush()
        return row

    # ─────────────────────────────────────────────
    # READ-ONLY HELPERS
    # ─────────────────────────────────────────────

    def list_events(
        self,
        db: Session,
        *,
        event_type: Optional[str] = None,
        since_seq: int = 0,
    ) -> List[MarketEvent]:
        q = select(MarketEvent).where(MarketEvent.seq > since_seq)
        if event_type:
            q = q.where(MarketEvent.event_type == event_type)
        return list(db.execute(q.order_by(MarketEvent.seq.asc())).scalars().all())

    def verify_chain(self, db: Session) -> bool:
        """
        Recomputes every hash from genesis.
        """
        prev_hash = GENESIS_HASH
        for e in self.list_events(db):
            if e.prev_hash != prev_hash:
                return False
            if e.entry_hash != entry_hash(prev_hash, e.payload_json):
                return False
            prev_hash = e.entry_hash
        return True
