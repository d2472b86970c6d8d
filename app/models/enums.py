#app/models/enums.py
from __future__ import annotations
from enum import Enum


class Role(str, Enum):
    CREATOR = "CREATOR"  # edition creation and administration
    MINTER = "MINTER"


class ListingKind(str, Enum):
    # grouping lists kept per edition attribute
    BY_TYPE = "BY_TYPE"
    BY_ARTIST = "BY_ARTIST"
