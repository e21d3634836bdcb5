"""Models for scheduler and category session data structures."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Set


class Rating(Enum):
    """How well the learner knew a word."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class WordProgress:
    """Spaced repetition state of one learnable word."""
    id: int
    mastery_level: int = 0  # 0-100
    last_reviewed: Optional[datetime] = None
    next_review: Optional[datetime] = None
    category: Optional[str] = None
    text: Optional[str] = None


@dataclass
class ReviewSession:
    """Bounded batch of due words for one practice sitting, weakest first."""
    words: List[WordProgress] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when nothing is due ("all caught up")."""
        return not self.words

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[WordProgress]:
        return iter(self.words)


@dataclass
class CompletionStats:
    """Snapshot emitted when a category session finishes."""
    category_id: str
    words_reviewed: int
    total_words: int
    accuracy: float  # percentage of the category reviewed
    time_spent: float  # wall clock minutes since the session started
    completion_date: Optional[datetime] = None
    correct_words: int = 0
    reported_minutes: float = 0.0  # sum of track_time_spent increments

    @property
    def is_completed(self) -> bool:
        return self.completion_date is not None


@dataclass
class CategoryProgress:
    """Persisted partial progress of a category session."""
    category_id: str
    total_words: int
    reviewed_word_ids: Set[int] = field(default_factory=set)
    correct_word_ids: Set[int] = field(default_factory=set)
    time_spent: float = 0.0  # in minutes
    last_reviewed: Optional[datetime] = None
