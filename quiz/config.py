"""Quiz Config - Configuracao centralizada via variaveis de ambiente."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .models.enums import StorageBackend

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5000",
]


@dataclass
class QuizConfig:
    """Configuracao do backend de quizzes.

    Attributes:
        storage_backend: Backend de persistencia (memory, sqlite, agentfs)
        db_path: Caminho do arquivo SQLite
        agentfs_id: ID da instancia AgentFS
        similarity_ratio: Fracao minima de questoes coincidentes (deduplicacao fuzzy)
        environment: development, test ou production
        log_level: Nivel de log do logger raiz
        cors_origins: Origens permitidas pelo CORS
        port: Porta HTTP do servidor
    """

    storage_backend: StorageBackend = StorageBackend.MEMORY
    db_path: Path = field(default_factory=lambda: Path.cwd() / "data" / "quizzes.db")
    agentfs_id: str = "quiz-sync"
    similarity_ratio: float = 0.8
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    port: int = 5000

    @classmethod
    def from_env(cls) -> "QuizConfig":
        """Cria configuracao a partir das variaveis de ambiente."""
        backend = os.getenv("QUIZ_STORAGE_BACKEND", StorageBackend.MEMORY.value).lower()
        try:
            storage_backend = StorageBackend(backend)
        except ValueError:
            raise ValueError(
                f"QUIZ_STORAGE_BACKEND invalido: '{backend}' "
                f"(use {', '.join(b.value for b in StorageBackend)})"
            ) from None

        db_path = os.getenv("QUIZ_DB_PATH")
        origins = os.getenv("CORS_ORIGINS")

        return cls(
            storage_backend=storage_backend,
            db_path=Path(db_path) if db_path else Path.cwd() / "data" / "quizzes.db",
            agentfs_id=os.getenv("QUIZ_AGENTFS_ID", "quiz-sync"),
            similarity_ratio=float(os.getenv("QUIZ_SIMILARITY_RATIO", "0.8")),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else list(DEFAULT_CORS_ORIGINS)
            ),
            port=int(os.getenv("PORT", "5000")),
        )
