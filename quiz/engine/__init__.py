"""Quiz Engines - Logica de reconciliacao."""

from .dedup_engine import (
    QuizDeduplicationEngine,
    content_fingerprint,
    count_matching_questions,
    normalize,
    prefer_newer,
)
from .sync_engine import QuizReconciliationEngine

__all__ = [
    "QuizDeduplicationEngine",
    "QuizReconciliationEngine",
    "content_fingerprint",
    "count_matching_questions",
    "normalize",
    "prefer_newer",
]
