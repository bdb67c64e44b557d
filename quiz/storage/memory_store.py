"""Memory Store - Backend em memoria (testes e desenvolvimento)."""

import logging

from ..models.schemas import QuizCreate, QuizRecord, QuizUpdate
from .base import QuizStorage, build_record, merge_record

logger = logging.getLogger(__name__)


class MemoryQuizStorage(QuizStorage):
    """Armazena quizzes num dict local (id -> QuizRecord).

    Cada instancia tem sua propria colecao e contador de ids. Nenhum metodo
    cede o event loop no meio de uma mutacao, portanto cada chamada e atomica.
    Registros sao copiados na entrada e na saida para evitar aliasing.

    Example:
        >>> storage = MemoryQuizStorage()
        >>> quiz = await storage.create_quiz(QuizCreate(title="Math", questions=[]))
        >>> quiz.id, quiz.version
        (1, 1)
    """

    def __init__(self, quizzes: list[QuizRecord] | None = None):
        """Inicializa storage, opcionalmente com registros pre-existentes.

        Args:
            quizzes: Registros ja persistidos (mantidos como estao, inclusive
                sem uniqueId, como em dados legados)
        """
        self._quizzes: dict[int, QuizRecord] = {
            quiz.id: quiz.model_copy(deep=True) for quiz in quizzes or []
        }
        self._next_id = max(self._quizzes, default=0) + 1

    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        quiz = self._quizzes.get(quiz_id)
        return quiz.model_copy(deep=True) if quiz else None

    async def get_quiz_by_unique_id(self, unique_id: str) -> QuizRecord | None:
        for quiz_id in sorted(self._quizzes):
            quiz = self._quizzes[quiz_id]
            if quiz.uniqueId == unique_id:
                return quiz.model_copy(deep=True)
        return None

    async def get_all_quizzes(self) -> list[QuizRecord]:
        return [self._quizzes[i].model_copy(deep=True) for i in sorted(self._quizzes)]

    async def create_quiz(self, quiz: QuizCreate) -> QuizRecord:
        record = build_record(self._next_id, quiz)
        self._quizzes[record.id] = record
        self._next_id += 1
        logger.debug(f"Quiz criado em memoria: {record.id} ({record.uniqueId})")
        return record.model_copy(deep=True)

    async def update_quiz(
        self, quiz_id: int, update: QuizUpdate | QuizCreate
    ) -> QuizRecord | None:
        existing = self._quizzes.get(quiz_id)
        if existing is None:
            return None

        updated = merge_record(existing, update)
        self._quizzes[quiz_id] = updated
        return updated.model_copy(deep=True)

    async def delete_quiz(self, quiz_id: int) -> bool:
        return self._quizzes.pop(quiz_id, None) is not None

    async def delete_private_quizzes(self) -> int:
        private_ids = [i for i, quiz in self._quizzes.items() if not quiz.isPublic]
        for quiz_id in private_ids:
            del self._quizzes[quiz_id]

        logger.info(f"Removidos {len(private_ids)} quizzes privados do servidor")
        return len(private_ids)
