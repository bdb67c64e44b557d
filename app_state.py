"""Core module - shared state and helper functions."""

from __future__ import annotations

import logging
from typing import Optional

from quiz.config import QuizConfig
from quiz.engine import QuizDeduplicationEngine, QuizReconciliationEngine
from quiz.models.enums import StorageBackend
from quiz.storage import (
    MemoryQuizStorage,
    QuizStorage,
    QuizStorageError,
    QuizStore,
    SQLiteQuizStorage,
)

logger = logging.getLogger(__name__)

# =============================================================================
# GLOBAL STATE
# =============================================================================

config: Optional[QuizConfig] = None
storage: Optional[QuizStorage] = None
engine: Optional[QuizReconciliationEngine] = None


def get_config() -> QuizConfig:
    """Get config (lido do ambiente na primeira chamada)."""
    global config
    if config is None:
        config = QuizConfig.from_env()
    return config


async def _open_storage(cfg: QuizConfig) -> QuizStorage:
    """Cria o backend configurado."""
    if cfg.storage_backend == StorageBackend.SQLITE:
        return SQLiteQuizStorage(cfg.db_path)

    if cfg.storage_backend == StorageBackend.AGENTFS:
        from agentfs_sdk import AgentFS, AgentFSOptions

        try:
            agentfs = await AgentFS.open(AgentFSOptions(id=cfg.agentfs_id))
        except Exception as e:
            raise QuizStorageError(f"Falha ao abrir AgentFS '{cfg.agentfs_id}': {e}") from e
        return QuizStore(agentfs)

    return MemoryQuizStorage()


async def get_storage() -> QuizStorage:
    """Get storage instance (criado sob demanda)."""
    global storage
    if storage is None:
        cfg = get_config()
        storage = await _open_storage(cfg)
        logger.info(f"Quiz storage inicializado: {cfg.storage_backend.value}")
    return storage


async def get_engine() -> QuizReconciliationEngine:
    """Get reconciliation engine (compartilhado para manter um unico lock)."""
    global engine
    if engine is None:
        engine = QuizReconciliationEngine(
            await get_storage(),
            QuizDeduplicationEngine(similarity_ratio=get_config().similarity_ratio),
        )
    return engine


async def cleanup():
    """Cleanup resources on shutdown."""
    global config, storage, engine
    if storage is not None:
        try:
            await storage.close()
            logger.info("Quiz storage fechado")
        except Exception as e:
            logger.warning(f"Erro ao fechar storage: {e}")
    config = None
    storage = None
    engine = None
