"""Quiz Storage - Backends de persistencia."""

from .base import QuizStorage, QuizStorageError
from .memory_store import MemoryQuizStorage
from .quiz_store import QuizStore
from .sqlite_store import SQLiteQuizStorage

__all__ = [
    "QuizStorage",
    "QuizStorageError",
    "MemoryQuizStorage",
    "SQLiteQuizStorage",
    "QuizStore",
]
