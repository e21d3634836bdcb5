"""Test configuration."""
import os
from datetime import datetime, timedelta, UTC
from typing import Generator

import pytest

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Import after environment setup
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wordjungle.models.base import init_db


class FakeClock:
    """Manually advanced clock for time dependent tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def now() -> datetime:
    """A fixed point in time."""
    return datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FakeClock:
    """Create a clock starting at ``now``."""
    return FakeClock(now)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
