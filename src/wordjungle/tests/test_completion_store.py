"""Tests for the SQL completion store."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from wordjungle.models.learning_models import CategoryProgress, CompletionStats
from wordjungle.models.models import CategoryCompletion
from wordjungle.services.category_tracker import CategorySessionTracker
from wordjungle.services.completion_store import SqlCompletionStore


@pytest.fixture
def store(db: Session) -> SqlCompletionStore:
    """Create a store on the test database."""
    return SqlCompletionStore(db)


def make_stats(category_id: str, completed_at: datetime) -> CompletionStats:
    return CompletionStats(
        category_id=category_id,
        words_reviewed=5,
        total_words=5,
        accuracy=100.0,
        time_spent=3.5,
        completion_date=completed_at,
        correct_words=4,
        reported_minutes=2.0,
    )


def test_record_and_count_completions(store: SqlCompletionStore, db: Session, now: datetime) -> None:
    """Every recorded completion adds one row and one to the count."""
    assert store.get_completion_count("animals") == 0

    store.record_completion(make_stats("animals", now))
    store.record_completion(make_stats("animals", now + timedelta(days=1)))
    store.record_completion(make_stats("plants", now))

    assert store.get_completion_count("animals") == 2
    assert store.get_completion_count("plants") == 1
    assert db.query(CategoryCompletion).count() == 3


def test_completion_history(store: SqlCompletionStore, now: datetime) -> None:
    """History returns stats oldest first with aware dates."""
    store.record_completion(make_stats("animals", now))
    store.record_completion(make_stats("plants", now + timedelta(hours=1)))

    history = store.get_completion_history()
    animals = store.get_completion_history("animals")

    assert [stats.category_id for stats in history] == ["animals", "plants"]
    assert len(animals) == 1
    assert animals[0].completion_date == now
    assert animals[0].correct_words == 4
    assert animals[0].time_spent == pytest.approx(3.5)


def test_progress_snapshot_is_replaced(store: SqlCompletionStore, now: datetime) -> None:
    """Saving progress twice keeps only the latest snapshot."""
    assert store.get_progress("animals") is None

    store.save_progress(CategoryProgress("animals", 3, {1}, {1}, 1.0, now))
    store.save_progress(CategoryProgress("animals", 3, {1, 2}, {1}, 2.5, now))

    progress = store.get_progress("animals")
    assert progress.reviewed_word_ids == {1, 2}
    assert progress.correct_word_ids == {1}
    assert progress.time_spent == pytest.approx(2.5)
    assert progress.last_reviewed == now


def test_clear(store: SqlCompletionStore, now: datetime) -> None:
    """Clear removes completions and snapshots."""
    store.record_completion(make_stats("animals", now))
    store.save_progress(CategoryProgress("animals", 3, {1}))
    store.clear()
    assert store.get_completion_count("animals") == 0
    assert store.get_progress("animals") is None


def test_tracker_with_sql_store(store: SqlCompletionStore, clock) -> None:
    """The tracker persists its ledger through the SQL store."""
    tracker = CategorySessionTracker(store=store, clock=clock)
    tracker.start_category_session("animals", 2)
    tracker.track_word_review(1)
    tracker.track_word_review(2)

    restarted = CategorySessionTracker(store=store, clock=clock)
    assert restarted.get_category_completion_count("animals") == 1
    assert restarted.has_category_been_completed("animals") is True


if __name__ == "__main__":
    pytest.main([__file__])
