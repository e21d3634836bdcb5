"""Database models for the learning core."""
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    Integer,
    String,
)

from wordjungle.models.base import Base, TimestampMixin


class Word(Base, TimestampMixin):
    """Word model with its spaced repetition progress."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    text = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    mastery_level = Column(Integer, default=0, nullable=False)  # 0-100
    last_reviewed = Column(DateTime(timezone=True))
    next_review = Column(DateTime(timezone=True))


class CategoryCompletion(Base, TimestampMixin):
    """One completed category session."""

    __tablename__ = "category_completions"

    id = Column(Integer, primary_key=True)
    category_id = Column(String, nullable=False, index=True)
    words_reviewed = Column(Integer, nullable=False)
    correct_words = Column(Integer, default=0)
    total_words = Column(Integer, nullable=False)
    accuracy = Column(Float, nullable=False)
    time_spent = Column(Float, default=0.0)  # in minutes
    reported_minutes = Column(Float, default=0.0)
    completion_date = Column(DateTime(timezone=True), nullable=False)


class CategoryProgressRecord(Base, TimestampMixin):
    """Latest partial progress snapshot of a category."""

    __tablename__ = "category_progress"

    category_id = Column(String, primary_key=True)
    total_words = Column(Integer, nullable=False)
    reviewed_word_ids = Column(JSON, default=list)
    correct_word_ids = Column(JSON, default=list)
    time_spent = Column(Float, default=0.0)  # in minutes
    last_reviewed = Column(DateTime(timezone=True))
