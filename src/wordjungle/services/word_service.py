"""Service for managing words and their stored review progress."""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from wordjungle.models.base import as_utc
from wordjungle.models.learning_models import WordProgress
from wordjungle.models.models import Word

logger = logging.getLogger(__name__)


class WordNotFoundError(ValueError):
    """Raised when a word id does not exist in the word database."""

    def __init__(self, word_id: int):
        super().__init__(f"Word {word_id} not found")
        self.word_id = word_id


def to_progress(word: Word) -> WordProgress:
    """Convert a database row into a scheduler record."""
    return WordProgress(
        id=word.id,
        mastery_level=word.mastery_level or 0,
        last_reviewed=as_utc(word.last_reviewed),
        next_review=as_utc(word.next_review),
        category=word.category,
        text=word.text,
    )


class WordService:
    """Service for managing words in the system."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_word(self, word_id: int) -> Optional[WordProgress]:
        """Get a word by its ID."""
        word = self.db.get(Word, word_id)
        return to_progress(word) if word else None

    def get_words_by_category(self, category: str) -> List[WordProgress]:
        """Get all words of a category in insertion order."""
        words = (
            self.db.query(Word)
            .filter(Word.category == category)
            .order_by(Word.id)
            .all()
        )
        return [to_progress(word) for word in words]

    def count_words(self, category: str) -> int:
        """Count the words of a category."""
        return (
            self.db.query(func.count(Word.id))
            .filter(Word.category == category)
            .scalar()
        ) or 0

    def add_word(self, text: str, category: str) -> WordProgress:
        """Create a new, never reviewed word."""
        if not text or not category:
            raise ValueError("Word text and category are required")

        word = Word(text=text, category=category, mastery_level=0)
        self.db.add(word)
        self.db.commit()
        self.db.refresh(word)
        logger.info("Added word %r to category %s", text, category)
        return to_progress(word)

    def save_progress(self, progress: WordProgress) -> None:
        """Write back the scheduler fields of a rated word."""
        word = self.db.get(Word, progress.id)
        if not word:
            raise WordNotFoundError(progress.id)

        word.mastery_level = progress.mastery_level
        word.last_reviewed = progress.last_reviewed
        word.next_review = progress.next_review
        self.db.commit()
