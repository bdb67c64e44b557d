"""Quiz Storage - Contrato comum dos backends de persistencia."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from ..models.schemas import QuizCreate, QuizRecord, QuizUpdate

# Campos que podem ser explicitamente limpos (None) numa atualizacao parcial
NULLABLE_FIELDS = frozenset({"history", "lastTaken", "password", "createdBy"})


class QuizStorageError(Exception):
    """Falha do backend de persistencia (I/O, conexao, integridade)."""


def as_utc(value: datetime | None) -> datetime | None:
    """Normaliza datetime para timezone-aware (UTC quando naive)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def build_record(quiz_id: int, quiz: QuizCreate) -> QuizRecord:
    """Monta registro novo aplicando defaults de criacao.

    - uniqueId gerado (uuid4) quando ausente
    - version = enviada ou 1
    - createdAt = enviado ou agora (UTC)
    - password = None quando ausente
    """
    data = quiz.model_dump()
    data["id"] = quiz_id
    data["uniqueId"] = quiz.uniqueId or str(uuid.uuid4())
    data["version"] = quiz.version or 1
    data["createdAt"] = as_utc(quiz.createdAt) or datetime.now(timezone.utc)
    data["password"] = quiz.password
    return QuizRecord.model_validate(data)


def merge_record(existing: QuizRecord, update: QuizUpdate | QuizCreate) -> QuizRecord:
    """Aplica atualizacao parcial sobre registro existente.

    Apenas campos enviados pelo cliente sao considerados. O id nunca muda
    e a versao e sempre incrementada em 1 (ou vira 1 se ausente).
    """
    changes = {
        key: value
        for key, value in update.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }

    data = existing.model_dump()
    data.update(changes)
    data["id"] = existing.id
    data["version"] = existing.version + 1 if existing.version else 1
    if data.get("createdAt") is not None:
        data["createdAt"] = as_utc(data["createdAt"])
    return QuizRecord.model_validate(data)


class QuizStorage(ABC):
    """Primitivas CRUD sobre as quais o motor de reconciliacao opera.

    Cada chamada e atomica isoladamente; nao ha transacoes multi-registro.
    Lookups sem resultado retornam None/False em vez de levantar excecao.
    Falhas do backend sao levantadas como QuizStorageError.
    """

    @abstractmethod
    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        """Busca quiz pelo id local."""

    @abstractmethod
    async def get_quiz_by_unique_id(self, unique_id: str) -> QuizRecord | None:
        """Busca quiz pelo uniqueId (menor id em caso de duplicatas)."""

    @abstractmethod
    async def get_all_quizzes(self) -> list[QuizRecord]:
        """Lista todos os quizzes, ordenados por id."""

    async def get_public_quizzes(self) -> list[QuizRecord]:
        """Lista quizzes publicos, ordenados por id."""
        return [quiz for quiz in await self.get_all_quizzes() if quiz.isPublic]

    @abstractmethod
    async def create_quiz(self, quiz: QuizCreate) -> QuizRecord:
        """Cria quiz atribuindo id e defaults (uniqueId, version, createdAt)."""

    @abstractmethod
    async def update_quiz(
        self, quiz_id: int, update: QuizUpdate | QuizCreate
    ) -> QuizRecord | None:
        """Atualiza parcialmente; retorna None se o id nao existir."""

    @abstractmethod
    async def delete_quiz(self, quiz_id: int) -> bool:
        """Remove quiz; retorna True se algo foi removido."""

    @abstractmethod
    async def delete_private_quizzes(self) -> int:
        """Remove todos os quizzes privados; retorna quantidade removida."""

    async def close(self) -> None:
        """Libera recursos do backend."""
