# app/services/commission.py
from __future__ import annotations

from dataclasses import dataclass

from app.core.errors import InvalidArgument


@dataclass(frozen=True)
class CommissionSplit:
    artist_share: int
    optional_share: int
    platform_share: int

    @property
    def total(self) -> int:
        return self.artist_share + self.optional_share + self.platform_share


def split(amount: int, artist_rate: int, optional_rate: int = 0) -> CommissionSplit:
    """
    artist   = floor(amount * artist_rate / 100)
    optional = floor(amount * optional_rate / 100)
    platform = amount - artist - optional

    Integer-division remainders always land on the platform share, so the
    three shares sum to `amount` exactly.
    """
    if amount < 0:
        raise InvalidArgument("Amount cannot be negative.")
    if artist_rate < 0 or optional_rate < 0:
        raise InvalidArgument("Commission rates cannot be negative.")
    if artist_rate + optional_rate > 100:
        raise InvalidArgument("Total commission exceeds 100")

    artist_share = amount * artist_rate // 100
    optional_share = amount * optional_rate // 100
    return CommissionSplit(
        artist_share=artist_share,
        optional_share=optional_share,
        platform_share=amount - artist_share - optional_share,
    )
