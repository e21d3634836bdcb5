"""Tests for application wiring."""
import logging
from typing import Generator

import pytest
from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from wordjungle.__main__ import main
from wordjungle.app import WordJungle
from wordjungle.models.base import SessionLocal, engine as default_engine

fake = Faker()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an in-memory engine."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def app(engine: Engine) -> Generator[WordJungle, None, None]:
    """Create and start an application instance."""
    app = WordJungle(engine)
    app.start()
    yield app
    app.stop()


def test_start_wires_services(app: WordJungle) -> None:
    """Starting builds one shared tracker for the practice service."""
    assert app.running is True
    assert app.practice.tracker is app.tracker
    assert app.practice.word_service is app.words
    assert app.practice.scheduler is app.scheduler

    # Starting again is a no-op
    tracker = app.tracker
    app.start()
    assert app.tracker is tracker


def test_practice_through_app(app: WordJungle) -> None:
    """A category can be practiced end to end."""
    words = [app.words.add_word(text, "colors") for text in ("red", "blue")]

    session = app.practice.start_category("colors")
    assert len(session) == 2

    for word in words:
        app.practice.rate_word(word.id, "easy")

    assert app.tracker.get_category_completion_count("colors") == 1


def test_stop_exits_unfinished_session(app: WordJungle) -> None:
    """Stopping leaves the category without completing it."""
    words = [app.words.add_word(text, "colors") for text in ("red", "blue")]
    app.practice.start_category("colors")
    app.practice.rate_word(words[0].id, "medium")
    tracker = app.tracker

    app.stop()

    assert app.running is False
    assert tracker.current_category is None
    assert tracker.get_category_completion_count("colors") == 0


@pytest.fixture
def root_logging() -> Generator[None, None, None]:
    """Restore root logger handlers replaced by setup_logging."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_default_engine_uses_configured_session_factory() -> None:
    """Without an injected engine the configured SessionLocal is used."""
    app = WordJungle()
    assert app.engine is default_engine
    assert app.session_factory is SessionLocal

    app.start()
    try:
        assert app.db.get_bind() is default_engine
    finally:
        app.stop()


def test_main_lists_due_words(capsys: pytest.CaptureFixture, root_logging: None) -> None:
    """The entry point prints the due words of a category."""
    category = f"cat-{fake.uuid4()}"
    app = WordJungle()
    app.start()
    try:
        app.words.add_word("parrot", category)
    finally:
        app.stop()

    assert main([category, f"empty-{fake.uuid4()}"]) == 0

    output = capsys.readouterr().out
    assert f"{category}: 1 word(s) due" in output
    assert "parrot - mastery 0%" in output
    assert "all caught up" in output


def test_main_without_category(capsys: pytest.CaptureFixture, root_logging: None) -> None:
    """The entry point asks for a category."""
    assert main([]) == 2
    assert "usage" in capsys.readouterr().out
