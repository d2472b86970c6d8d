from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BeforeValidator, Field

from app.core.types import normalize_address


def _hex_to_bytes(v):
    if isinstance(v, (bytes, bytearray)):
        return bytes(v)
    if isinstance(v, str):
        s = v[2:] if v.startswith("0x") else v
        try:
            return bytes.fromhex(s)
        except ValueError:
            raise ValueError(f"Invalid hex payload: {v!r}")
    raise ValueError("Edition data must be a hex string.")


# --- Structural primitives ---
Address = Annotated[str, AfterValidator(normalize_address)]
Wei = Annotated[int, Field(ge=0, description="Amount in wei (integer)")]
NonNegInt = Annotated[int, Field(ge=0)]
Percent = Annotated[int, Field(ge=0, le=100)]
HexData = Annotated[bytes, BeforeValidator(_hex_to_bytes)]
