# app/main.py
from app.core.config import get_settings
from app.core.errors import install_error_handlers
from app.core.logging import configure_logging
from app.core.middleware import RequestIdMiddleware
from app.api.v1.router import v1_router
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.market_service import bootstrap_market

from app import models  # noqa: F401  (table registration)

from fastapi import FastAPI
import logging

logger = logging.getLogger(__name__)


def init_db() -> None:
    """
    Creates tables and the platform singletons if missing.
    """
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        bootstrap_market(db)
    finally:
        db.close()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # Market errors -> JSON responses
    install_error_handlers(app)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    init_db()
    logger.info("[app] started environment=%s", settings.environment)
    return app


app = create_app()
