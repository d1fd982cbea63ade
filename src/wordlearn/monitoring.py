"""Prometheus metrics for the scheduler."""
from prometheus_client import Counter, Histogram

# Session metrics
sessions_started = Counter(
    "wordlearn_sessions_started_total",
    "Total number of study sessions started",
    ["kind"],
)

sessions_completed = Counter(
    "wordlearn_sessions_completed_total",
    "Total number of study sessions finalized",
    ["kind"],
)

session_duration = Histogram(
    "wordlearn_session_duration_seconds",
    "Duration of study sessions in seconds",
    ["kind"],
    buckets=[60, 300, 600, 1800, 3600],  # 1min, 5min, 10min, 30min, 1hour
)

# Learning metrics
answers_submitted = Counter(
    "wordlearn_answers_submitted_total",
    "Total number of answers submitted",
    ["result"],
)

words_mastered = Counter(
    "wordlearn_words_mastered_total",
    "Total number of words that reached mastery",
)

# Repository metrics
repository_errors = Counter(
    "wordlearn_repository_errors_total",
    "Total number of persistence errors",
    ["operation"],
)
