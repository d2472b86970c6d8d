# app/models/auction.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import Uint256


class EditionAuction(Base):
    """
    Per-edition English auction slot.
    highest_bidder == zero address means no bid is held.
    """

    __tablename__ = "edition_auctions"

    edition_number: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    # order of first enable; null until the edition is enabled
    seq: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    controller: Mapped[str] = mapped_column(String(42), nullable=False)
    highest_bidder: Mapped[str] = mapped_column(String(42), nullable=False)
    highest_bid: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)


class AuctionSettings(Base):
    __tablename__ = "auction_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    escrow_address: Mapped[str] = mapped_column(String(42), nullable=False)
    commission_account: Mapped[str] = mapped_column(String(42), nullable=False)
    min_bid_amount: Mapped[int] = mapped_column(Uint256, nullable=False)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
