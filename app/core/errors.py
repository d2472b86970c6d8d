# app/core/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MarketError(Exception):
    """
    Base for every failure a market operation can report.
    A raised MarketError always means the operation was rolled back.
    """

    kind = "MarketError"
    status_code = 409

    def __init__(self, reason: str = ""):
        super().__init__(reason or self.kind)
        self.reason = reason or self.kind


class InvalidArgument(MarketError, ValueError):
    kind = "InvalidArgument"
    status_code = 400


class NotFound(MarketError, LookupError):
    kind = "NotFound"
    status_code = 404


class Unauthorized(MarketError, PermissionError):
    kind = "Unauthorized"
    status_code = 403


class Inactive(MarketError):
    kind = "Inactive"


class NotStarted(MarketError):
    kind = "NotStarted"


class Ended(MarketError):
    kind = "Ended"


class SoldOut(MarketError):
    kind = "SoldOut"


class Paused(MarketError):
    kind = "Paused"


class InvariantViolation(MarketError):
    kind = "InvariantViolation"


class InsufficientBid(MarketError):
    kind = "InsufficientBid"


class InsufficientFunds(MarketError):
    kind = "InsufficientFunds"
    status_code = 402


class Throttled(MarketError):
    kind = "Throttled"
    status_code = 429


async def _market_error_handler(request: Request, exc: MarketError) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    logger.warning(
        "[api] %s %s rejected kind=%s reason=%s request_id=%s",
        request.method, request.url.path, exc.kind, exc.reason, rid,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.reason, "kind": exc.kind},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketError, _market_error_handler)
