# app/models/token.py
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Token(Base):
    """
    One minted unit. Burnt tokens keep their row with owner=zero and
    edition_number=0 so the id is never reissued.
    """

    __tablename__ = "tokens"

    token_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    edition_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    owner: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    token_uri_suffix: Mapped[str] = mapped_column(String(512), nullable=False)
    burnt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class OperatorApproval(Base):
    __tablename__ = "operator_approvals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    operator: Mapped[str] = mapped_column(String(42), nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("owner", "operator", name="uq_operator_approval"),
    )
