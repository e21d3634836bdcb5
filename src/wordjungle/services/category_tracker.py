"""Category session tracking with completion events and switch locking."""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Callable, Deque, List, Optional, Set

from wordjungle import monitoring
from wordjungle.models.learning_models import CategoryProgress, CompletionStats
from wordjungle.services.completion_store import CompletionStore, InMemoryCompletionStore

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[CompletionStats], None]


@dataclass
class _CategorySession:
    """State of the one category being studied."""
    category_id: str
    total_words: int
    start_time: datetime
    reviewed_word_ids: Set[int] = field(default_factory=set)
    correct_word_ids: Set[int] = field(default_factory=set)
    reported_minutes: float = 0.0
    last_reviewed: Optional[datetime] = None
    completion: Optional[CompletionStats] = None

    @property
    def is_completed(self) -> bool:
        return self.completion is not None

    @property
    def progress(self) -> float:
        if self.total_words == 0:
            return 100.0
        return len(self.reviewed_word_ids) / self.total_words * 100


class CategorySessionTracker:
    """Tracks progress through one category at a time.

    The tracker is Inactive until ``start_category_session`` is called, then
    Active until every word of the category has been reviewed, at which
    point it becomes Completed and announces the completion exactly once.
    Leaving through ``exit_category_session``, ``force_unlock_category`` or
    ``reset_current_session`` returns it to Inactive without an event.

    One tracker is constructed per application and passed to whatever needs
    it. State changes and completion callbacks run under a re-entrant lock,
    so callbacks may call back into the tracker.
    """

    def __init__(
        self,
        store: Optional[CompletionStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the tracker with a completion store and a clock."""
        self.store = store if store is not None else InMemoryCompletionStore()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._session: Optional[_CategorySession] = None
        self._callbacks: List[CompletionCallback] = []
        self._pending: Deque[CompletionStats] = deque()
        self._dispatching = False
        self._lock = threading.RLock()

    @property
    def current_category(self) -> Optional[str]:
        """Category of the current session, completed or not."""
        session = self._session
        return session.category_id if session else None

    @property
    def is_active(self) -> bool:
        """True while a session is running and not yet completed."""
        session = self._session
        return session is not None and not session.is_completed

    @property
    def is_completed(self) -> bool:
        session = self._session
        return session is not None and session.is_completed

    def start_category_session(self, category_id: str, total_words: int) -> None:
        """Start a new session, replacing any existing one.

        An unfinished previous session is dropped without completion credit.

        Raises:
            ValueError: if ``category_id`` is empty or ``total_words`` is negative.
        """
        if not isinstance(category_id, str) or not category_id:
            raise ValueError("category_id must be a non-empty string")
        if total_words < 0:
            raise ValueError("total_words cannot be negative")

        with self._lock:
            previous = self._session
            if previous is not None and not previous.is_completed and previous.reviewed_word_ids:
                logger.info(
                    "Abandoning category %s at %.1f%% to start %s",
                    previous.category_id,
                    previous.progress,
                    category_id,
                )

            self._session = _CategorySession(
                category_id=category_id,
                total_words=total_words,
                start_time=self._clock(),
            )
            monitoring.category_sessions.labels(category_id=category_id).inc()
            logger.info("Started category session %s with %d word(s)", category_id, total_words)

            if total_words == 0:
                self._complete()

    def track_word_review(self, word_id: int, success: bool = True) -> None:
        """Record that a word was reviewed in the current session.

        Reviewing the same word twice counts once. ``success`` is remembered
        per word but does not change the accuracy figure, which counts
        reviewed words. Calls with no active session are ignored.
        """
        with self._lock:
            session = self._session
            if session is None or session.is_completed:
                logger.debug("Ignoring review of word %s: no active category session", word_id)
                return

            session.reviewed_word_ids.add(word_id)
            if success:
                session.correct_word_ids.add(word_id)
            session.last_reviewed = self._clock()

            self._save_progress(session)

            if len(session.reviewed_word_ids) >= session.total_words:
                self._complete()

    def track_time_spent(self, minutes: float) -> None:
        """Add a fixed time increment reported by the UI."""
        if minutes < 0:
            raise ValueError("minutes cannot be negative")

        with self._lock:
            session = self._session
            if session is None or session.is_completed:
                logger.debug("Ignoring %.2f minute(s): no active category session", minutes)
                return
            session.reported_minutes += minutes

    def get_category_progress(self) -> float:
        """Percentage of the current category reviewed, 0 with no session."""
        session = self._session
        return session.progress if session else 0.0

    def get_current_category_stats(self) -> Optional[CompletionStats]:
        """Live statistics of the current session.

        ``completion_date`` is only set once the session has completed.
        """
        with self._lock:
            session = self._session
            if session is None:
                return None
            if session.completion is not None:
                return session.completion
            return self._build_stats(session, completion_date=None)

    def is_word_reviewed(self, word_id: int) -> bool:
        session = self._session
        return session is not None and word_id in session.reviewed_word_ids

    def is_word_completed(self, word_id: int) -> bool:
        """Check if a word was reviewed successfully in the current session."""
        session = self._session
        return session is not None and word_id in session.correct_word_ids

    def should_prevent_category_switch(self) -> bool:
        """True once a session is started but not yet completed."""
        session = self._session
        if session is None:
            return False
        return bool(session.reviewed_word_ids) and not session.is_completed

    def get_locked_category(self) -> Optional[str]:
        """Category that should be continued before switching, if any."""
        with self._lock:
            if not self.should_prevent_category_switch():
                return None
            return self._session.category_id

    def force_unlock_category(self) -> None:
        """End the current session without completion (user chose to leave)."""
        with self._lock:
            session = self._session
            if session is None:
                return
            self._save_progress(session)
            monitoring.forced_unlocks.labels(category_id=session.category_id).inc()
            logger.info(
                "Force unlocked category %s at %.1f%%",
                session.category_id,
                session.progress,
            )
            self._session = None

    def exit_category_session(self) -> None:
        """Leave the current session, keeping its partial progress snapshot."""
        with self._lock:
            session = self._session
            if session is None:
                return
            if not session.is_completed:
                self._save_progress(session)
            logger.info("Exited category session %s", session.category_id)
            self._session = None

    def reset_current_session(self) -> None:
        """Drop the current session."""
        with self._lock:
            self._session = None

    def on_category_completion(self, callback: CompletionCallback) -> None:
        """Register a callback invoked with the stats of each completion."""
        with self._lock:
            self._callbacks.append(callback)

    def remove_completion_callback(self, callback: CompletionCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def get_category_completion_count(self, category_id: str) -> int:
        return self.store.get_completion_count(category_id)

    def has_category_been_completed(self, category_id: str) -> bool:
        return self.get_category_completion_count(category_id) > 0

    def get_completion_history(self, category_id: Optional[str] = None) -> List[CompletionStats]:
        return self.store.get_completion_history(category_id)

    def reset_all_progress(self) -> None:
        """Forget every completion and snapshot, and drop the current session."""
        with self._lock:
            self.store.clear()
            self._session = None
            logger.info("Reset all category progress")

    def _elapsed_minutes(self, session: _CategorySession) -> float:
        return max(0.0, (self._clock() - session.start_time).total_seconds() / 60)

    def _build_stats(
        self, session: _CategorySession, completion_date: Optional[datetime]
    ) -> CompletionStats:
        return CompletionStats(
            category_id=session.category_id,
            words_reviewed=len(session.reviewed_word_ids),
            total_words=session.total_words,
            accuracy=session.progress,
            time_spent=self._elapsed_minutes(session),
            completion_date=completion_date,
            correct_words=len(session.correct_word_ids),
            reported_minutes=session.reported_minutes,
        )

    def _save_progress(self, session: _CategorySession) -> None:
        self.store.save_progress(
            CategoryProgress(
                category_id=session.category_id,
                total_words=session.total_words,
                reviewed_word_ids=set(session.reviewed_word_ids),
                correct_word_ids=set(session.correct_word_ids),
                time_spent=self._elapsed_minutes(session),
                last_reviewed=session.last_reviewed,
            )
        )

    def _complete(self) -> None:
        """Move the current session to Completed and notify subscribers.

        Must be called with the lock held.
        """
        session = self._session
        if session is None or session.is_completed:
            return

        stats = self._build_stats(session, completion_date=self._clock())
        # Completed only once the ledger has recorded it
        self.store.record_completion(stats)
        session.completion = stats

        monitoring.category_completions.labels(category_id=session.category_id).inc()
        monitoring.session_duration.observe(stats.time_spent)
        logger.info(
            "Completed category %s: %d/%d words in %.1f minute(s)",
            stats.category_id,
            stats.words_reviewed,
            stats.total_words,
            stats.time_spent,
        )

        self._pending.append(stats)
        self._dispatch()

    def _dispatch(self) -> None:
        """Deliver queued completions one at a time, in order.

        A completion raised from inside a callback is queued and delivered
        after every callback has seen the current one.
        """
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._pending:
                stats = self._pending.popleft()
                for callback in list(self._callbacks):
                    try:
                        callback(stats)
                    except Exception:
                        monitoring.completion_callback_errors.inc()
                        logger.exception("Error in category completion callback")
        finally:
            self._dispatching = False
