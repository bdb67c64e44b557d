"""SQLite Store - Backend persistente em arquivo SQLite."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path

from ..models.schemas import QuizCreate, QuizRecord, QuizUpdate
from .base import QuizStorage, QuizStorageError, build_record, merge_record

logger = logging.getLogger(__name__)

# Maior valor aceito por INTEGER PRIMARY KEY (signed 64-bit)
MAX_ROW_ID = 2**63 - 1


class SQLiteQuizStorage(QuizStorage):
    """Persiste quizzes numa tabela SQLite.

    Estrutura da tabela ``quizzes``:
        - id -> INTEGER PRIMARY KEY AUTOINCREMENT
        - unique_id -> TEXT NOT NULL UNIQUE
        - is_public -> INTEGER (0/1), usado no sweep de privados
        - payload -> JSON com o registro completo (QuizRecord)

    Cada metodo executa numa transacao propria (``with conn``) protegida
    por lock, de modo que nenhuma escrita parcial fica visivel.

    Example:
        >>> storage = SQLiteQuizStorage(Path("data/quizzes.db"))
        >>> await storage.get_public_quizzes()
        []
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS quizzes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            unique_id TEXT NOT NULL UNIQUE,
            is_public INTEGER NOT NULL DEFAULT 1,
            payload TEXT NOT NULL
        )
    """

    def __init__(self, db_path: Path | str):
        """Abre (ou cria) o banco e garante o schema.

        Args:
            db_path: Caminho do arquivo SQLite
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.execute(self.SCHEMA)
        except sqlite3.Error as e:
            logger.error(f"Erro ao abrir banco de quizzes {self.db_path}: {e}")
            raise QuizStorageError(f"Falha ao abrir banco: {e}") from e

        logger.info(f"SQLite quiz storage pronto: {self.db_path}")

    @staticmethod
    def _to_record(row: sqlite3.Row) -> QuizRecord:
        data = json.loads(row["payload"])
        data["id"] = row["id"]
        return QuizRecord.model_validate(data)

    @staticmethod
    def _payload(record: QuizRecord) -> str:
        return json.dumps(record.model_dump(mode="json", exclude={"id"}))

    def _fetch(self, sql: str, params: tuple = ()) -> list[QuizRecord]:
        with self._lock:
            try:
                rows = self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise QuizStorageError(f"Falha na leitura de quizzes: {e}") from e
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _valid_id(quiz_id: int) -> bool:
        """Ids fora do range do SQLite nunca existem no banco."""
        return -MAX_ROW_ID - 1 <= quiz_id <= MAX_ROW_ID

    async def get_quiz(self, quiz_id: int) -> QuizRecord | None:
        if not self._valid_id(quiz_id):
            return None
        rows = self._fetch("SELECT * FROM quizzes WHERE id = ?", (quiz_id,))
        return rows[0] if rows else None

    async def get_quiz_by_unique_id(self, unique_id: str) -> QuizRecord | None:
        rows = self._fetch("SELECT * FROM quizzes WHERE unique_id = ?", (unique_id,))
        return rows[0] if rows else None

    async def get_all_quizzes(self) -> list[QuizRecord]:
        return self._fetch("SELECT * FROM quizzes ORDER BY id")

    async def get_public_quizzes(self) -> list[QuizRecord]:
        return self._fetch("SELECT * FROM quizzes WHERE is_public = 1 ORDER BY id")

    async def create_quiz(self, quiz: QuizCreate) -> QuizRecord:
        with self._lock:
            try:
                with self._conn:
                    # id provisório; o definitivo vem do AUTOINCREMENT
                    record = build_record(0, quiz)
                    cursor = self._conn.execute(
                        "INSERT INTO quizzes (unique_id, is_public, payload) VALUES (?, ?, ?)",
                        (record.uniqueId, int(record.isPublic), self._payload(record)),
                    )
                    record.id = cursor.lastrowid
            except sqlite3.Error as e:
                logger.error(f"Erro ao criar quiz '{quiz.title}': {e}")
                raise QuizStorageError(f"Falha ao criar quiz: {e}") from e

        logger.debug(f"Quiz criado no SQLite: {record.id} ({record.uniqueId})")
        return record

    async def update_quiz(
        self, quiz_id: int, update: QuizUpdate | QuizCreate
    ) -> QuizRecord | None:
        if not self._valid_id(quiz_id):
            return None

        with self._lock:
            try:
                with self._conn:
                    row = self._conn.execute(
                        "SELECT * FROM quizzes WHERE id = ?", (quiz_id,)
                    ).fetchone()
                    if row is None:
                        return None

                    updated = merge_record(self._to_record(row), update)
                    self._conn.execute(
                        "UPDATE quizzes SET unique_id = ?, is_public = ?, payload = ? WHERE id = ?",
                        (updated.uniqueId, int(updated.isPublic), self._payload(updated), quiz_id),
                    )
            except sqlite3.Error as e:
                logger.error(f"Erro ao atualizar quiz {quiz_id}: {e}")
                raise QuizStorageError(f"Falha ao atualizar quiz: {e}") from e

        return updated

    async def delete_quiz(self, quiz_id: int) -> bool:
        if not self._valid_id(quiz_id):
            return False

        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute("DELETE FROM quizzes WHERE id = ?", (quiz_id,))
            except sqlite3.Error as e:
                raise QuizStorageError(f"Falha ao remover quiz: {e}") from e

        return cursor.rowcount > 0

    async def delete_private_quizzes(self) -> int:
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute("DELETE FROM quizzes WHERE is_public = 0")
            except sqlite3.Error as e:
                raise QuizStorageError(f"Falha ao remover quizzes privados: {e}") from e

        logger.info(f"Removidos {cursor.rowcount} quizzes privados do servidor")
        return cursor.rowcount

    async def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.info("SQLite quiz storage fechado")
