import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

# FORCE model registration
import app.models  # noqa

from app.core.clock import ManualClock, get_clock
from app.db.base import Base
from app.db.session import build_engine, get_db
from app.services.market_service import bootstrap_market
from app.tests.factories import OWNER, START


@pytest.fixture(scope="function")
def engine():
    eng = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(eng)
        eng.dispose()


@pytest.fixture(scope="function")
def db(engine):
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = SessionLocal()
    bootstrap_market(session, owner=OWNER)

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def clock():
    return ManualClock(start=START)


@pytest.fixture(scope="function")
def client(db, clock):
    from app.main import create_app

    application = create_app()

    def _override_db():
        yield db

    application.dependency_overrides[get_db] = _override_db
    application.dependency_overrides[get_clock] = lambda: clock

    with TestClient(application) as c:
        yield c

    application.dependency_overrides.clear()
