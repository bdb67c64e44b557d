"""Quiz Store - Abstração sobre AgentFS para persistência de quizzes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..models.schemas import QuizCreate, QuizRecord, QuizUpdate
from .base import QuizStorage, QuizStorageError, build_record, merge_record

logger = logging.getLogger(__name__)


class QuizStore(QuizStorage):
    """Backend de quizzes sobre o KV store do AgentFS.

    Estrutura de chaves:
        - quiz:record:{id} -> Registro completo do quiz (QuizRecord)
        - quiz:next_id -> Próximo id a ser atribuído

    Um asyncio.Lock serializa as operações de escrita, pois cada uma
    envolve múltiplas chamadas ao KV.

    Example:
        >>> store = QuizStore(agentfs)
        >>> quiz = await store.create_quiz(QuizCreate(title="Math", questions=[]))
        >>> loaded = await store.get_quiz(quiz.id)
    """

    KEY_PREFIX = "quiz"

    def __init__(self, agentfs: AgentFS):
        """Inicializa store com instância do AgentFS.

        Args:
            agentfs: Instância configurada do AgentFS
        """
        self.agentfs = agentfs
        self._lock = asyncio.Lock()

    def _record_key(self, quiz_id: int) -> str:
        """Gera chave para registro do quiz."""
        return f"{self.KEY_PREFIX}:record:{quiz_id}"

    def _counter_key(self) -> str:
        """Chave do contador de ids."""
        return f"{self.KEY_PREFIX}:next_id"

    async def _kv(self, action: str, call, *args, **kwargs):
        """Executa chamada ao KV, convertendo falhas em QuizStorageError."""
        try:
            return await call(*args, **kwargs)
        except Exception as e:
            logger.error(f"Erro no AgentFS KV ({action}): {e}")
            raise QuizStorageError(f"Falha no AgentFS ({action}): {e}") from e

    async def _save(self, record: QuizRecord) -> None:
        await self._kv(
            "set", self.agentfs.kv.set, self._record_key(record.id), record.model_dump(mode="json")
        )

    async def _load(self, quiz_id: int) -> QuizRecord | None:
        data = await self._kv("get", self.agentfs.kv.get, self._record_key(quiz_id))
        if not data:
            return None
        return QuizRecord.model_validate(data)

    async def _delete(self, quiz_id: int) -> None:
        await self._kv("delete", self.agentfs.kv.delete, self._record_key(quiz_id))

    async def _list_ids(self) -> list[int]:
        """Lista ids armazenados, em ordem crescente."""
        prefix = f"{self.KEY_PREFIX}:record:"
        entries = await self._kv("list", self.agentfs.kv.list, prefix=prefix)

        ids = set()
        for entry in entries:
            key = entry.get("key", "") if isinstance(entry, dict) else str(entry)
            suffix = key[len(prefix):]
            if suffix.isdigit():
                ids.add(int(suffix))

        return sorted(ids)

    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        return await self._load(quiz_id)

    async def get_quiz_by_unique_id(self, unique_id: str) -> QuizRecord | None:
        for quiz in await self.get_all_quizzes():
            if quiz.uniqueId == unique_id:
                return quiz
        logger.debug(f"Quiz não encontrado por uniqueId: {unique_id}")
        return None

    async def get_all_quizzes(self) -> list[QuizRecord]:
        quizzes = []
        for quiz_id in await self._list_ids():
            quiz = await self._load(quiz_id)
            if quiz is not None:
                quizzes.append(quiz)
        return quizzes

    async def create_quiz(self, quiz: QuizCreate) -> QuizRecord:
        async with self._lock:
            next_id = await self._kv("get", self.agentfs.kv.get, self._counter_key()) or 1
            record = build_record(int(next_id), quiz)
            await self._save(record)
            await self._kv("set", self.agentfs.kv.set, self._counter_key(), record.id + 1)

        logger.debug(f"Quiz salvo no AgentFS: {record.id} ({record.uniqueId})")
        return record

    async def update_quiz(
        self, quiz_id: int, update: QuizUpdate | QuizCreate
    ) -> QuizRecord | None:
        async with self._lock:
            existing = await self._load(quiz_id)
            if existing is None:
                logger.debug(f"Quiz não encontrado para update: {quiz_id}")
                return None

            updated = merge_record(existing, update)
            await self._save(updated)

        return updated

    async def delete_quiz(self, quiz_id: int) -> bool:
        async with self._lock:
            if await self._load(quiz_id) is None:
                return False
            await self._delete(quiz_id)

        logger.info(f"Quiz deletado: {quiz_id}")
        return True

    async def delete_private_quizzes(self) -> int:
        count = 0
        async with self._lock:
            for quiz_id in await self._list_ids():
                quiz = await self._load(quiz_id)
                if quiz is not None and not quiz.isPublic:
                    await self._delete(quiz_id)
                    count += 1

        logger.info(f"Removidos {count} quizzes privados do servidor")
        return count

    async def close(self) -> None:
        await self.agentfs.close()
