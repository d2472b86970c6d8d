# app/services/fungible_ledger_service.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import InsufficientFunds, InvalidArgument
from app.core.types import is_zero, normalize_address
from app.db.session import atomic
from app.models.fungible import FungibleAllowance, FungibleBalance

logger = logging.getLogger(__name__)


class FungibleLedgerService:
    """
    Opaque ERC20-style balance ledger used for every value movement.

    Methods join the caller's transaction; a failed movement aborts the
    whole market operation around it.
    """

    # ─────────────────────────────────────────────
    # INTERNAL HELPERS
    # ─────────────────────────────────────────────

    def _balance_row(self, db: Session, address: str) -> FungibleBalance:
        row = db.get(FungibleBalance, address)
        if row is None:
            row = FungibleBalance(address=address, balance=0)
            db.add(row)
            db.flush()
        return row

    def _allowance_row(
        self, db: Session, owner: str, spender: str
    ) -> Optional[FungibleAllowance]:
        return db.execute(
            select(FungibleAllowance).where(
                FungibleAllowance.owner == owner,
                FungibleAllowance.spender == spender,
            )
        ).scalar_one_or_none()

    def _move(self, db: Session, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise InvalidArgument("Transfer amount cannot be negative.")
        if is_zero(to):
            raise InvalidArgument("Cannot transfer to the zero address.")

        src = self._balance_row(db, sender)
        if src.balance < amount:
            raise InsufficientFunds(
                f"Transfer amount exceeds balance of {sender} ({src.balance} < {amount})."
            )
        dst = self._balance_row(db, to)
        src.balance = src.balance - amount
        dst.balance = dst.balance + amount
        db.flush()

    # ─────────────────────────────────────────────
    # PUBLIC API
    # ─────────────────────────────────────────────

    def mint(self, db: Session, *, to: str, amount: int) -> int:
        """
        Issues new units to `to`. Faucet for simulations and tests.
        """
        with atomic(db):
            to = normalize_address(to)
            if amount <= 0:
                raise InvalidArgument("Mint amount must be positive.")
            if is_zero(to):
                raise InvalidArgument("Cannot mint to the zero address.")
            row = self._balance_row(db, to)
            row.balance = row.balance + amount
            db.flush()
            new_balance = row.balance
        logger.info("[fungible] minted %s to %s", amount, to)
        return new_balance

    def transfer(self, db: Session, *, sender: str, to: str, amount: int) -> None:
        with atomic(db):
            self._move(db, normalize_address(sender), normalize_address(to), amount)

    def approve(self, db: Session, *, owner: str, spender: str, amount: int) -> None:
        with atomic(db):
            owner = normalize_address(owner)
            spender = normalize_address(spender)
            if amount < 0:
                raise InvalidArgument("Allowance cannot be negative.")
            if is_zero(spender):
                raise InvalidArgument("Cannot approve the zero address.")

            row = self._allowance_row(db, owner, spender)
            if row is None:
                row = FungibleAllowance(owner=owner, spender=spender, amount=amount)
                db.add(row)
            else:
                row.amount = amount
            db.flush()

    def transfer_from(
        self,
        db: Session,
        *,
        spender: str,
        owner: str,
        to: str,
        amount: int,
    ) -> None:
        """
        Moves `amount` from `owner` to `to`, consuming `spender`'s allowance.
        """
        with atomic(db):
            spender = normalize_address(spender)
            owner = normalize_address(owner)
            to = normalize_address(to)

            row = self._allowance_row(db, owner, spender)
            granted = row.amount if row else 0
            if granted < amount:
                raise InsufficientFunds(
                    f"Transfer amount exceeds allowance of {spender} ({granted} < {amount})."
                )
            self._move(db, owner, to, amount)
            if row is not None:
                row.amount = granted - amount
                db.flush()

    # ─────────────────────────────────────────────
    # READS
    # ─────────────────────────────────────────────

    def balance_of(self, db: Session, address: str) -> int:
        row = db.get(FungibleBalance, normalize_address(address))
        return row.balance if row else 0

    def allowance(self, db: Session, *, owner: str, spender: str) -> int:
        row = self._allowance_row(db, normalize_address(owner), normalize_address(spender))
        return row.amount if row else 0

    def total_supply(self, db: Session) -> int:
        return sum(db.execute(select(FungibleBalance.balance)).scalars().all())
