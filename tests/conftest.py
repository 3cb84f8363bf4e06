"""Shared fixtures: in-memory SQLite database, a controllable clock and an app wired to both."""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app import crud, schemas
from app.auth import get_current_user
from app.config import settings
from app.context import ServiceContext
from app.database import Database
from app.llm.client import LLMClient
from app.services.ledger_service import LedgerService


TEST_USER_ID = "user-1"


class FakeClock:
    """Callable returning a fixed UTC instant that tests move forward explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def user(db):
    return crud.create_user(db, TEST_USER_ID, "user1@example.com", "Test User")


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(db, clock):
    return LedgerService(db, clock=clock)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def service_context(database):
    return ServiceContext(
        settings=settings,
        database=database,
        llm_client=LLMClient(api_key=None),
    )


@pytest.fixture
def client(service_context, user):
    from app.main import create_app

    app = create_app(service_context)
    app.dependency_overrides[get_current_user] = lambda: schemas.CurrentUser(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        timezone=user.timezone,
    )
    with TestClient(app) as test_client:
        yield test_client
