"""Application wiring for the learning core."""
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from wordjungle.config import settings
from wordjungle.models.base import SessionLocal, engine as default_engine, init_db
from wordjungle.monitoring import start_monitoring
from wordjungle.services.category_tracker import CategorySessionTracker
from wordjungle.services.completion_store import SqlCompletionStore
from wordjungle.services.practice_service import PracticeService
from wordjungle.services.review_scheduler import ReviewScheduler
from wordjungle.services.word_service import WordService


class WordJungle:
    """Owns one set of services for the lifetime of the application.

    Presentation code receives the instance (or its ``tracker``) by reference
    instead of reaching for a global, so there is exactly one category
    session per application.
    """

    def __init__(self, engine: Optional[Engine] = None):
        """Initialize the application on the configured database or ``engine``."""
        if engine is None:
            self.engine = default_engine
            self.session_factory = SessionLocal
        else:
            self.engine = engine
            self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self.db: Optional[Session] = None
        self.scheduler: Optional[ReviewScheduler] = None
        self.words: Optional[WordService] = None
        self.tracker: Optional[CategorySessionTracker] = None
        self.practice: Optional[PracticeService] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        init_db(self.engine)
        self.db = self.session_factory()
        self.logger.info("Database initialized")

        self.scheduler = ReviewScheduler()
        self.words = WordService(self.db)
        self.tracker = CategorySessionTracker(store=SqlCompletionStore(self.db))
        self.practice = PracticeService(self.words, self.tracker, self.scheduler)

        if settings.monitoring.enabled:
            start_monitoring(settings.monitoring.port)
            self.logger.info("Metrics server listening on port %d", settings.monitoring.port)

        self.running = True
        self.logger.info("Application started")

    def stop(self) -> None:
        """Stop the application, ending any unfinished category session."""
        if not self.running:
            return

        self.tracker.exit_category_session()
        self.db.close()
        self.running = False
        self.logger.info("Application stopped")
