"""Monitoring configuration for the learning core."""
from prometheus_client import Counter, Histogram, start_http_server

# Scheduler metrics
words_rated = Counter(
    "wordjungle_words_rated_total",
    "Total number of word ratings applied by the review scheduler",
    ["rating"],
)

review_sessions_built = Counter(
    "wordjungle_review_sessions_built_total",
    "Total number of review sessions composed from a word pool",
)

# Category session metrics
category_sessions = Counter(
    "wordjungle_category_sessions_total",
    "Total number of category sessions started",
    ["category_id"],
)

category_completions = Counter(
    "wordjungle_category_completions_total",
    "Total number of category sessions completed",
    ["category_id"],
)

forced_unlocks = Counter(
    "wordjungle_forced_unlocks_total",
    "Total number of category sessions abandoned through a forced unlock",
    ["category_id"],
)

completion_callback_errors = Counter(
    "wordjungle_completion_callback_errors_total",
    "Total number of completion callbacks that raised an exception",
)

session_duration = Histogram(
    "wordjungle_category_session_minutes",
    "Wall clock duration of completed category sessions in minutes",
    buckets=[1, 5, 10, 20, 30, 60],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
