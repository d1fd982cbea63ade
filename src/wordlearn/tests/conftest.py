"""Test configuration."""
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable, Generator

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from wordlearn.models.base import init_db
from wordlearn.models.domain import WordItem

fake = Faker()


class FakeClock:
    """Controllable replacement for the wall clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at a fixed afternoon."""
    return FakeClock(datetime(2024, 3, 15, 14, 0, tzinfo=UTC))


@pytest.fixture
def make_word() -> Callable[..., WordItem]:
    """Factory for words with unique headwords."""
    counter = iter(range(1_000_000))

    def _make_word(**kwargs) -> WordItem:
        index = next(counter)
        kwargs.setdefault("headword", f"{fake.word()}-{index}")
        kwargs.setdefault("translation", f"{fake.word()} {index}")
        kwargs.setdefault("part_of_speech", "n.")
        return WordItem(**kwargs)

    return _make_word


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
