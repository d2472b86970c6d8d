# app/models/market_state.py
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import Uint256


class MarketState(Base):
    """
    Single-row platform state: ownership, pause flag and the global
    edition counters.
    """

    __tablename__ = "market_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)

    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    commission_account: Mapped[str] = mapped_column(String(42), nullable=False)
    market_address: Mapped[str] = mapped_column(String(42), nullable=False)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    token_base_uri: Mapped[str] = mapped_column(String(512), nullable=False)

    highest_edition_number: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_number_available: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_number_minted: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_purchase_value_in_wei: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)
