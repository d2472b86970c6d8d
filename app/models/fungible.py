# app/models/fungible.py
from __future__ import annotations

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import Uint256


class FungibleBalance(Base):
    __tablename__ = "fungible_balances"

    address: Mapped[str] = mapped_column(String(42), primary_key=True)
    balance: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)


class FungibleAllowance(Base):
    __tablename__ = "fungible_allowances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    spender: Mapped[str] = mapped_column(String(42), nullable=False)
    amount: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("owner", "spender", name="uq_fungible_allowance"),
    )
