# app/services/access_control_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.errors import InvalidArgument, NotFound
from app.core.types import is_zero, normalize_address
from app.db.session import atomic
from app.models.enums import Role
from app.models.market_state import MarketState
from app.models.role_grant import RoleGrant
from app.policies.rbac import Principal, require_action, require_owner
from app.services.event_service import EventService

logger = logging.getLogger(__name__)


def get_market_state(db: Session) -> MarketState:
    state = db.get(MarketState, 1)
    if state is None:
        raise NotFound("Market has not been bootstrapped.")
    return state


class AccessControlService:
    """
    Role grants per address plus the single privileged owner.
    Every other service resolves its caller through principal_for().
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or get_clock()
        self.events = EventService()

    # ---------------------------
    # READS
    # ---------------------------

    def owner(self, db: Session) -> str:
        return get_market_state(db).owner

    def roles_of(self, db: Session, address: str) -> List[Role]:
        address = normalize_address(address)
        rows = db.execute(
            select(RoleGrant.role).where(RoleGrant.address == address)
        ).scalars().all()
        return sorted((Role(r) for r in rows), key=lambda r: r.value)

    def has_role(self, db: Session, address: str, role: Role) -> bool:
        return role in self.roles_of(db, address)

    def principal_for(self, db: Session, address: str) -> Principal:
        address = normalize_address(address)
        return Principal(
            address=address,
            roles=frozenset(self.roles_of(db, address)),
            is_owner=address == self.owner(db),
        )

    def require_owner(self, db: Session, caller: str) -> Principal:
        principal = self.principal_for(db, caller)
        require_owner(principal)
        return principal

    def require_action(self, db: Session, caller: str, action: str) -> Principal:
        principal = self.principal_for(db, caller)
        require_action(principal, action)
        return principal

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def add_address_to_access_control(
        self, db: Session, *, caller: str, address: str, role: Role
    ) -> None:
        with atomic(db):
            self.require_owner(db, caller)
            address = normalize_address(address)
            if is_zero(address):
                raise InvalidArgument("Cannot grant a role to the zero address.")

            existing = db.execute(
                select(RoleGrant).where(
                    RoleGrant.address == address, RoleGrant.role == role.value
                )
            ).scalar_one_or_none()
            if existing:
                return

            db.add(RoleGrant(address=address, role=role.value))
            db.flush()
            self.events.emit(
                db,
                event_type="RoleAdded",
                block_time=self.clock.now(),
                payload={"operator": address, "role": role.value},
            )
        logger.info("[access] granted %s to %s", role.value, address)

    def remove_address_from_access_control(
        self, db: Session, *, caller: str, address: str, role: Role
    ) -> None:
        with atomic(db):
            self.require_owner(db, caller)
            address = normalize_address(address)

            existing = db.execute(
                select(RoleGrant).where(
                    RoleGrant.address == address, RoleGrant.role == role.value
                )
            ).scalar_one_or_none()
            if not existing:
                raise NotFound(f"{address} does not hold role {role.value}.")

            db.delete(existing)
            db.flush()
            self.events.emit(
                db,
                event_type="RoleRemoved",
                block_time=self.clock.now(),
                payload={"operator": address, "role": role.value},
            )
        logger.info("[access] revoked %s from %s", role.value, address)

    def transfer_ownership(self, db: Session, *, caller: str, new_owner: str) -> None:
        with atomic(db):
            self.require_owner(db, caller)
            new_owner = normalize_address(new_owner)
            if is_zero(new_owner):
                raise InvalidArgument("New owner cannot be the zero address.")

            state = get_market_state(db)
            previous = state.owner
            state.owner = new_owner
            db.flush()
            self.events.emit(
                db,
                event_type="OwnershipTransferred",
                block_time=self.clock.now(),
                payload={"previousOwner": previous, "newOwner": new_owner},
            )
        logger.info("[access] ownership %s -> %s", previous, new_owner)
