# app/models/self_service.py
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import Uint256


class CurationSettings(Base):
    __tablename__ = "curation_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    open_to_all: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_edition_size: Mapped[int] = mapped_column(Integer, nullable=False)
    edition_block: Mapped[int] = mapped_column(Integer, nullable=False)
    min_price_in_wei: Mapped[int] = mapped_column(Uint256, nullable=False, default=0)
    freeze_window: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class AllowedArtist(Base):
    __tablename__ = "allowed_artists"

    address: Mapped[str] = mapped_column(String(42), primary_key=True)
    allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class CreatorActivity(Base):
    """
    Last successful self-service creation per creator, for the freeze window.
    """

    __tablename__ = "creator_activity"

    address: Mapped[str] = mapped_column(String(42), primary_key=True)
    last_created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
