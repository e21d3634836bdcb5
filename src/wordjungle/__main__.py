"""Main entry point: show the due words of a category."""
import logging
import sys
from typing import List, Optional

from wordjungle.app import WordJungle
from wordjungle.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Print the review session and completion count of each given category."""
    if argv is None:
        argv = sys.argv[1:]

    setup_logging("Starting wordjungle ...")

    if not argv:
        print("usage: python -m wordjungle CATEGORY [CATEGORY ...]")
        return 2

    app = WordJungle()
    app.start()
    try:
        for category in argv:
            session = app.practice.due_words(category)
            completed = app.tracker.get_category_completion_count(category)
            if session.is_empty:
                print(f"{category}: all caught up (completed {completed} time(s))")
                continue

            print(f"{category}: {len(session)} word(s) due (completed {completed} time(s))")
            for word in session:
                print(f"  {word.text} - mastery {word.mastery_level}%")
    finally:
        logger.info("Cleaning up...")
        app.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
