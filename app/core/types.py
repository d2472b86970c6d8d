# app/core/types.py
from __future__ import annotations

import re

from app.core.errors import InvalidArgument

ZERO_ADDRESS = "0x" + "0" * 40
MAX_UINT32 = 4294967295

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(value: str) -> str:
    """
    Accepts a 0x-prefixed 20-byte hex address, returns it lowercased.
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise InvalidArgument(f"Invalid address: {value!r}")
    return value.lower()


def is_zero(address: str) -> bool:
    return address == ZERO_ADDRESS
