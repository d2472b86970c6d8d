# app/core/logging.py
import logging
import sys
from contextvars import ContextVar
from typing import Optional

from pythonjsonlogger import jsonlogger

from app.core.config import Settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
caller_var: ContextVar[Optional[str]] = ContextVar("caller", default=None)


class MarketContextFilter(logging.Filter):
    """
    Stamps every record with the request id and caller address of the
    market call being served (None outside of a request).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.caller = caller_var.get()
        return True


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # clear handlers if reloaded
    root.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(MarketContextFilter())
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(request_id)s %(caller)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
            static_fields={"service": settings.app_name, "env": settings.environment},
        )
    )
    root.addHandler(handler)

    # SQL echo drowns out the market log lines
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
