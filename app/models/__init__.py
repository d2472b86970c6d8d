# app/models/__init__.py
# Importing every model registers its table on Base.metadata.
from app.models.market_state import MarketState  # noqa: F401
from app.models.role_grant import RoleGrant  # noqa: F401
from app.models.fungible import FungibleBalance, FungibleAllowance  # noqa: F401
from app.models.edition import Edition, EditionListing, EditionTokenSlot  # noqa: F401
from app.models.token import Token, OperatorApproval  # noqa: F401
from app.models.auction import EditionAuction, AuctionSettings  # noqa: F401
from app.models.self_service import (  # noqa: F401
    CurationSettings,
    AllowedArtist,
    CreatorActivity,
)
from app.models.event_log import MarketEvent  # noqa: F401
