"""Quiz Reconciliation Engine - Sincronizacao e limpeza de quizzes."""

from __future__ import annotations

import asyncio
import logging
import time

from ..models.schemas import QuizCreate, QuizRecord
from ..storage.base import QuizStorage
from .dedup_engine import QuizDeduplicationEngine

logger = logging.getLogger(__name__)


class QuizReconciliationEngine:
    """Reconcilia lotes enviados pelos clientes com o estado do servidor.

    Opera sobre qualquer QuizStorage. As operacoes leem a colecao inteira,
    calculam um plano e depois mutam o storage, por isso rodam sob um
    asyncio.Lock unico (um escritor por vez).

    Example:
        >>> engine = QuizReconciliationEngine(MemoryQuizStorage())
        >>> public = await engine.sync_and_deduplicate(request.quizzes)
    """

    def __init__(
        self,
        storage: QuizStorage,
        dedup: QuizDeduplicationEngine | None = None,
    ):
        """Inicializa engine.

        Args:
            storage: Backend de persistencia
            dedup: Planejador de deduplicacao (default: ratio 0.8)
        """
        self.storage = storage
        self.dedup = dedup or QuizDeduplicationEngine()
        self._lock = asyncio.Lock()

    async def sync(self, quizzes: list[QuizCreate]) -> list[QuizRecord]:
        """Mescla lote do cliente no storage.

        - Quizzes publicos com uniqueId sao atualizados (se existirem) ou criados
        - Quizzes publicos sem uniqueId sao ignorados
        - Quizzes que chegaram privados sao removidos do servidor
        - Todos os privados restantes sao removidos ao final

        Nao executa deduplicacao; use sync_and_deduplicate para o fluxo completo.

        Args:
            quizzes: Lote enviado pelo cliente

        Returns:
            Quizzes publicos armazenados apos a sincronizacao
        """
        async with self._lock:
            return await self._sync(quizzes)

    async def remove_duplicates(self) -> int:
        """Remove quizzes duplicados do storage.

        Returns:
            Quantidade de quizzes efetivamente removidos
        """
        async with self._lock:
            return await self._remove_duplicates()

    async def sync_and_deduplicate(self, quizzes: list[QuizCreate]) -> list[QuizRecord]:
        """Sincroniza o lote e em seguida remove duplicatas, na mesma secao critica."""
        async with self._lock:
            await self._sync(quizzes)
            removed = await self._remove_duplicates()
            if removed:
                logger.info(f"Sync removeu {removed} quizzes duplicados")
            return await self.storage.get_public_quizzes()

    async def _sync(self, quizzes: list[QuizCreate]) -> list[QuizRecord]:
        public = [quiz for quiz in quizzes if quiz.isPublic]
        logger.info(f"Processando {len(public)} quizzes publicos de {len(quizzes)} recebidos")

        for quiz in public:
            if not quiz.uniqueId:
                logger.warning(f"Ignorando quiz sem uniqueId: '{quiz.title}'")
                continue

            existing = await self.storage.get_quiz_by_unique_id(quiz.uniqueId)
            if existing:
                logger.info(f"Atualizando quiz publico: '{quiz.title}' (uniqueId: {quiz.uniqueId})")
                await self.storage.update_quiz(existing.id, quiz)
            else:
                logger.info(f"Criando quiz publico: '{quiz.title}' (uniqueId: {quiz.uniqueId})")
                await self.storage.create_quiz(quiz)

        for quiz in quizzes:
            if quiz.isPublic or not quiz.uniqueId:
                continue

            existing = await self.storage.get_quiz_by_unique_id(quiz.uniqueId)
            if existing:
                logger.info(f"Quiz '{quiz.title}' agora e privado - removendo do servidor")
                await self.storage.delete_quiz(existing.id)

        await self.storage.delete_private_quizzes()
        return await self.storage.get_public_quizzes()

    async def _remove_duplicates(self) -> int:
        start = time.perf_counter()
        logger.info("Executando deteccao de quizzes duplicados...")

        to_remove = self.dedup.plan(await self.storage.get_all_quizzes())

        removed = 0
        for quiz in to_remove:
            logger.info(
                f"Removendo duplicata: '{quiz.title}' "
                f"(id: {quiz.id}, uniqueId: {quiz.uniqueId or 'none'})"
            )
            if await self.storage.delete_quiz(quiz.id):
                removed += 1

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Removidos {removed} quizzes duplicados em {elapsed_ms:.2f}ms")
        return removed
