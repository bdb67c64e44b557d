"""Quiz Module - Armazenamento, sincronizacao e deduplicacao de quizzes.

Arquitetura:
- models/: Enums e Schemas Pydantic
- engine/: QuizDeduplicationEngine, QuizReconciliationEngine
- storage/: QuizStorage (memoria, SQLite, AgentFS)
- config.py: QuizConfig (variaveis de ambiente)
- router.py: FastAPI endpoints
"""

from .config import QuizConfig
from .engine import QuizDeduplicationEngine, QuizReconciliationEngine
from .models import QuizCreate, QuizQuestion, QuizRecord, QuizUpdate
from .storage import MemoryQuizStorage, QuizStorage, QuizStore, SQLiteQuizStorage

__all__ = [
    # Config
    "QuizConfig",
    # Models
    "QuizQuestion",
    "QuizCreate",
    "QuizUpdate",
    "QuizRecord",
    # Engines
    "QuizDeduplicationEngine",
    "QuizReconciliationEngine",
    # Storage
    "QuizStorage",
    "MemoryQuizStorage",
    "SQLiteQuizStorage",
    "QuizStore",
]
