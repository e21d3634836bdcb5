"""Service tying word ratings to the category session."""
import logging
from datetime import datetime
from typing import Optional, Union

from wordjungle.models.learning_models import Rating, ReviewSession, WordProgress
from wordjungle.services.category_tracker import CategorySessionTracker
from wordjungle.services.review_scheduler import ReviewScheduler
from wordjungle.services.word_service import WordNotFoundError, WordService

logger = logging.getLogger(__name__)


class CategoryLockedError(RuntimeError):
    """Raised when switching away from an unfinished category."""

    def __init__(self, locked_category: str, requested_category: str):
        super().__init__(
            f"Category {locked_category} is in progress; cannot switch to {requested_category}"
        )
        self.locked_category = locked_category
        self.requested_category = requested_category


class PracticeService:
    """Runs practice for a category: due words, ratings and session tracking."""

    def __init__(
        self,
        word_service: WordService,
        tracker: CategorySessionTracker,
        scheduler: Optional[ReviewScheduler] = None,
    ):
        """Initialize the service with its collaborators."""
        self.word_service = word_service
        self.tracker = tracker
        self.scheduler = scheduler or ReviewScheduler()

    def due_words(self, category: str, now: Optional[datetime] = None) -> ReviewSession:
        """Get the review session of due words for a category."""
        words = self.word_service.get_words_by_category(category)
        return self.scheduler.build_session(words, now=now)

    def start_category(
        self, category: str, force: bool = False, now: Optional[datetime] = None
    ) -> ReviewSession:
        """Start a category session and return its due words.

        Raises:
            CategoryLockedError: if another category is in progress and
                ``force`` is False.
        """
        locked = self.tracker.get_locked_category()
        if locked is not None and locked != category:
            if not force:
                raise CategoryLockedError(locked, category)
            self.tracker.force_unlock_category()

        words = self.word_service.get_words_by_category(category)
        if locked != category:
            self.tracker.start_category_session(category, len(words))
        else:
            logger.info("Continuing locked category %s", category)

        return self.scheduler.build_session(words, now=now)

    def rate_word(
        self,
        word_id: int,
        rating: Union[Rating, str],
        now: Optional[datetime] = None,
    ) -> WordProgress:
        """Rate a word, store the result and count it in the category session.

        A "hard" rating is tracked as an unsuccessful review.
        """
        rating = Rating(rating)
        word = self.word_service.get_word(word_id)
        if word is None:
            raise WordNotFoundError(word_id)

        updated = self.scheduler.rate(word, rating, now=now)
        self.word_service.save_progress(updated)

        if word.category == self.tracker.current_category:
            self.tracker.track_word_review(word_id, success=rating is not Rating.HARD)
        else:
            logger.debug(
                "Word %d belongs to %s, not the current category %s",
                word_id,
                word.category,
                self.tracker.current_category,
            )
        return updated
