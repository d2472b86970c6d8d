# app/models/edition.py
from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    Index,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import Uint256


class Edition(Base):
    """
    A numbered run of near-identical tokens.

    number, data and edition_type never change after creation
    (edition_type only through the explicit admin update).
    Invariant: minted <= total_available.
    """

    __tablename__ = "editions"

    number: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    edition_type: Mapped[int] = mapped_column(Integer, nullable=False)

    start_date: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    end_date: Mapped[int] = mapped_column(BigInteger, nullable=False)

    artist: Mapped[str] = mapped_column(String(42), nullable=False)
    artist_commission: Mapped[int] = mapped_column(Integer, nullable=False)
    optional_commission_rate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    optional_commission_recipient: Mapped[str] = mapped_column(String(42), nullable=False)

    price_in_wei: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)
    token_uri_suffix: Mapped[str] = mapped_column(String(512), nullable=False)

    minted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_available: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def remaining(self) -> int:
        return max(0, self.total_available - self.minted)


class EditionListing(Base):
    """
    Positional edition lists grouped by type or by artist.
    A moved edition leaves edition_number=0 behind in its old slot.
    """

    __tablename__ = "edition_listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    key: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    edition_number: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("kind", "key", "position", name="uq_edition_listing_slot"),
        Index("ix_edition_listing_scope", "kind", "key"),
    )


class EditionTokenSlot(Base):
    """
    Ordered token ids minted against an edition. token_id=0 marks a burnt slot.
    """

    __tablename__ = "edition_token_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    edition_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    token_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("edition_number", "position", name="uq_edition_token_slot"),
    )
