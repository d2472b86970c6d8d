# app/services/artist_edition_controls_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import Inactive, SoldOut, Unauthorized
from app.core.types import normalize_address
from app.db.session import atomic
from app.services.access_control_service import get_market_state
from app.services.edition_registry_service import EditionRegistryService
from app.services.event_service import EventService

logger = logging.getLogger(__name__)


class ArtistEditionControlsService:
    """
    Lets an artist withdraw the unsold part of their own edition.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.registry = EditionRegistryService(self.clock)
        self.events = EventService()

    def deactivate_or_reduce_edition_supply(
        self, db: Session, *, caller: str, number: int
    ) -> str:
        """
        Nothing minted yet: deactivate and zero the supply.
        Otherwise: cap the supply at what was minted, edition stays active.

        Returns the emitted event name.
        """
        now = self.clock.now()
        with atomic(db):
            caller = normalize_address(caller)
            edition = self.registry.get_edition(db, number)

            if edition.artist != caller:
                raise Unauthorized("Only from the edition artist account")
            if not edition.active:
                raise Inactive("Only when edition is active")
            if edition.remaining == 0:
                raise SoldOut("Only when edition not sold out")

            state = get_market_state(db)
            if edition.minted == 0:
                event_type = "EditionDeactivated"
                edition.active = False
                new_total = 0
            else:
                event_type = "EditionSupplyReduced"
                new_total = edition.minted

            state.total_number_available += new_total - edition.total_available
            edition.total_available = new_total
            db.flush()

            self.events.emit(
                db,
                event_type=event_type,
                block_time=now,
                payload={"_editionNumber": number},
            )
        logger.info("[artist-controls] edition=%s %s", number, event_type)
        return event_type
