#app/core/auth_deps.py
from __future__ import annotations

from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.core.errors import InvalidArgument
from app.core.logging import caller_var
from app.core.types import normalize_address


async def get_caller(request: Request) -> str:
    """
    Implicit caller identity for every market call.

    Key custody and signing are outside the simulation; the caller's
    address arrives as a plain header.
    """
    header = get_settings().caller_header
    raw = request.headers.get(header)
    if not raw:
        raise HTTPException(status_code=401, detail=f"Missing {header} header.")

    try:
        caller = normalize_address(raw)
    except InvalidArgument:
        raise HTTPException(status_code=400, detail=f"Invalid {header} header.")

    # visible to handlers and to every log line of this call
    request.state.caller = caller
    caller_var.set(caller)
    return caller
