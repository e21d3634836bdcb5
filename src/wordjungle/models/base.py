"""Base model configuration."""
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import Column, DateTime, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from wordjungle.config import settings

# Create SQLAlchemy engine
engine = create_engine(settings.database.url, echo=settings.database.echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base class
Base = declarative_base()


class TimestampMixin:
    """Mixin to add timestamp columns to models."""
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database."""
    # Import models so their tables are registered on the metadata
    from wordjungle.models import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
