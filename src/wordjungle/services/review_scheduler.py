"""Spaced repetition scheduling for individual words."""
import logging
from dataclasses import replace
from datetime import datetime, timedelta, UTC
from typing import Iterable, Optional, Union

from wordjungle import monitoring
from wordjungle.config import settings
from wordjungle.models.learning_models import Rating, ReviewSession, WordProgress

logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class ReviewScheduler:
    """Decides which words are due and how ratings move mastery.

    The scheduler holds no per-word state. Every method takes the word
    records it works on and returns new data; writing updated records back
    to storage is the caller's job.
    """

    def __init__(self, session_word_limit: Optional[int] = None):
        """Initialize the scheduler with the default review session cap."""
        if session_word_limit is None:
            session_word_limit = settings.learning.session_word_limit
        if session_word_limit < 0:
            raise ValueError("session_word_limit cannot be negative")
        self.session_word_limit = session_word_limit

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return datetime.now(UTC) if now is None else _utc(now)

    def is_due(self, word: WordProgress, now: Optional[datetime] = None) -> bool:
        """Check whether a word should be reviewed.

        Words that were never reviewed, or have no schedule, are always due.
        """
        if word.last_reviewed is None or word.next_review is None:
            return True
        return self._now(now) >= _utc(word.next_review)

    @staticmethod
    def next_interval_days(mastery_level: int, rating: Union[Rating, str]) -> int:
        """Days until the next review for a post-rating mastery level."""
        rating = Rating(rating)
        if rating is Rating.EASY:
            return max(1, (mastery_level // 10) * 2)
        if rating is Rating.MEDIUM:
            return max(1, mastery_level // 20)
        if rating is Rating.HARD:
            return 1  # always back tomorrow
        raise ValueError(f"Unsupported rating: {rating!r}")

    def rate(
        self,
        word: WordProgress,
        rating: Union[Rating, str],
        now: Optional[datetime] = None,
    ) -> WordProgress:
        """Apply a rating and return the updated progress record.

        Raises:
            ValueError: if ``rating`` is not one of easy, medium or hard.
        """
        rating = Rating(rating)
        now = self._now(now)

        learning = settings.learning
        mastery = word.mastery_level + learning.mastery_deltas[rating.value]
        mastery = min(learning.max_mastery, max(learning.min_mastery, mastery))

        interval = self.next_interval_days(mastery, rating)
        updated = replace(
            word,
            mastery_level=mastery,
            last_reviewed=now,
            next_review=now + timedelta(days=interval),
        )

        monitoring.words_rated.labels(rating=rating.value).inc()
        logger.debug(
            "Rated word %d as %s: mastery %d -> %d, next review in %d day(s)",
            word.id,
            rating.value,
            word.mastery_level,
            mastery,
            interval,
        )
        return updated

    def build_session(
        self,
        pool: Iterable[WordProgress],
        now: Optional[datetime] = None,
        cap: Optional[int] = None,
    ) -> ReviewSession:
        """Compose a review session from the due words of a pool.

        Due words are ordered weakest first; words with equal mastery keep
        their pool order. At most ``cap`` words are returned.
        """
        if cap is None:
            cap = self.session_word_limit
        if cap < 0:
            raise ValueError("cap cannot be negative")
        now = self._now(now)

        due_words = [word for word in pool if self.is_due(word, now)]
        # sorted() is stable, so ties stay in pool order
        due_words = sorted(due_words, key=lambda w: w.mastery_level)[:cap]

        monitoring.review_sessions_built.inc()
        logger.info("Built review session with %d due word(s)", len(due_words))
        return ReviewSession(words=due_words)
