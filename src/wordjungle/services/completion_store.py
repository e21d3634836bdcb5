"""Storage for category completion history and partial progress."""
import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from wordjungle.models.base import as_utc
from wordjungle.models.learning_models import CategoryProgress, CompletionStats
from wordjungle.models.models import CategoryCompletion, CategoryProgressRecord

logger = logging.getLogger(__name__)


class CompletionStore(ABC):
    """Persistence capability used by the category session tracker."""

    @abstractmethod
    def get_completion_count(self, category_id: str) -> int:
        """Number of times a category has been completed."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def record_completion(self, stats: CompletionStats) -> None:
        """Append a completion, incrementing that category's count by one."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def get_completion_history(self, category_id: Optional[str] = None) -> List[CompletionStats]:
        """Completed sessions, oldest first, optionally for one category."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def save_progress(self, progress: CategoryProgress) -> None:
        """Store the latest partial progress snapshot of a category."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def get_progress(self, category_id: str) -> Optional[CategoryProgress]:
        """Latest partial progress snapshot of a category, if any."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def clear(self) -> None:
        """Remove all completions and progress snapshots."""
        raise NotImplementedError("Subclasses must implement this method")


class InMemoryCompletionStore(CompletionStore):
    """Process-local store, used by tests and for guest profiles."""

    def __init__(self):
        self._completions: List[CompletionStats] = []
        self._progress: Dict[str, CategoryProgress] = {}

    def get_completion_count(self, category_id: str) -> int:
        return sum(1 for stats in self._completions if stats.category_id == category_id)

    def record_completion(self, stats: CompletionStats) -> None:
        self._completions.append(deepcopy(stats))

    def get_completion_history(self, category_id: Optional[str] = None) -> List[CompletionStats]:
        return [
            deepcopy(stats)
            for stats in self._completions
            if category_id is None or stats.category_id == category_id
        ]

    def save_progress(self, progress: CategoryProgress) -> None:
        self._progress[progress.category_id] = deepcopy(progress)

    def get_progress(self, category_id: str) -> Optional[CategoryProgress]:
        progress = self._progress.get(category_id)
        return deepcopy(progress) if progress else None

    def clear(self) -> None:
        self._completions.clear()
        self._progress.clear()


class SqlCompletionStore(CompletionStore):
    """Store backed by the category_completions and category_progress tables."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_completion_count(self, category_id: str) -> int:
        return (
            self.db.query(func.count(CategoryCompletion.id))
            .filter(CategoryCompletion.category_id == category_id)
            .scalar()
        ) or 0

    def record_completion(self, stats: CompletionStats) -> None:
        completion = CategoryCompletion(
            category_id=stats.category_id,
            words_reviewed=stats.words_reviewed,
            correct_words=stats.correct_words,
            total_words=stats.total_words,
            accuracy=stats.accuracy,
            time_spent=stats.time_spent,
            reported_minutes=stats.reported_minutes,
            completion_date=stats.completion_date,
        )
        self.db.add(completion)
        self.db.commit()
        logger.debug("Stored completion of category %s", stats.category_id)

    def get_completion_history(self, category_id: Optional[str] = None) -> List[CompletionStats]:
        query = self.db.query(CategoryCompletion)
        if category_id is not None:
            query = query.filter(CategoryCompletion.category_id == category_id)

        return [
            CompletionStats(
                category_id=row.category_id,
                words_reviewed=row.words_reviewed,
                total_words=row.total_words,
                accuracy=row.accuracy,
                time_spent=row.time_spent,
                completion_date=as_utc(row.completion_date),
                correct_words=row.correct_words,
                reported_minutes=row.reported_minutes,
            )
            for row in query.order_by(CategoryCompletion.id).all()
        ]

    def save_progress(self, progress: CategoryProgress) -> None:
        record = self.db.get(CategoryProgressRecord, progress.category_id)
        if record is None:
            record = CategoryProgressRecord(category_id=progress.category_id)
            self.db.add(record)

        record.total_words = progress.total_words
        record.reviewed_word_ids = sorted(progress.reviewed_word_ids)
        record.correct_word_ids = sorted(progress.correct_word_ids)
        record.time_spent = progress.time_spent
        record.last_reviewed = progress.last_reviewed
        self.db.commit()

    def get_progress(self, category_id: str) -> Optional[CategoryProgress]:
        record = self.db.get(CategoryProgressRecord, category_id)
        if record is None:
            return None

        return CategoryProgress(
            category_id=record.category_id,
            total_words=record.total_words,
            reviewed_word_ids=set(record.reviewed_word_ids or []),
            correct_word_ids=set(record.correct_word_ids or []),
            time_spent=record.time_spent or 0.0,
            last_reviewed=as_utc(record.last_reviewed),
        )

    def clear(self) -> None:
        self.db.query(CategoryCompletion).delete()
        self.db.query(CategoryProgressRecord).delete()
        self.db.commit()
