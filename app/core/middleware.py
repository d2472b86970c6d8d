# app/core/middleware.py
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import caller_var, request_id_var


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tags each market call with an id that shows up on every log line the
    call produces and in the error body's logs. Echoed back as a header.
    """

    def __init__(self, app, header_name: str = "X-Request-Id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = rid

        rid_token = request_id_var.set(rid)
        caller_token = caller_var.set(None)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(rid_token)
            caller_var.reset(caller_token)

        response.headers[self.header_name] = rid
        return response
