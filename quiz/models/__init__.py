"""Quiz Models - Enums e Schemas."""

from .enums import QuizCategory, StorageBackend
from .schemas import (
    CleanupResponse,
    DeleteResponse,
    QuizAttempt,
    QuizCreate,
    QuizQuestion,
    QuizRecord,
    QuizUpdate,
    SyncRequest,
)

__all__ = [
    # Enums
    "QuizCategory",
    "StorageBackend",
    # Schemas
    "QuizQuestion",
    "QuizAttempt",
    "QuizCreate",
    "QuizUpdate",
    "QuizRecord",
    "SyncRequest",
    "DeleteResponse",
    "CleanupResponse",
]
