"""Quiz Router - Endpoints FastAPI de CRUD e sincronizacao."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

import app_state

from .engine.sync_engine import QuizReconciliationEngine
from .models.schemas import (
    CleanupResponse,
    DeleteResponse,
    QuizCreate,
    QuizRecord,
    QuizUpdate,
    SyncRequest,
)
from .storage.base import QuizStorage, QuizStorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quizzes", tags=["Quiz"])

NOT_FOUND = "Quiz não encontrado"


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


async def get_storage() -> QuizStorage:
    """Dependency para obter o storage configurado."""
    return await app_state.get_storage()


async def get_engine() -> QuizReconciliationEngine:
    """Dependency para obter o motor de reconciliacao."""
    return await app_state.get_engine()


def parse_quiz_id(quiz_id: str) -> int:
    """Converte id da rota, respondendo 400 se nao for composto so de digitos."""
    if not (quiz_id.isascii() and quiz_id.isdigit()):
        raise HTTPException(status_code=400, detail="ID de quiz inválido")
    return int(quiz_id)


# =============================================================================
# READ ENDPOINTS
# =============================================================================


@router.get("", response_model=list[QuizRecord])
async def list_public_quizzes(storage: QuizStorage = Depends(get_storage)):
    """Lista todos os quizzes publicos."""
    try:
        return await storage.get_public_quizzes()
    except QuizStorageError as e:
        logger.error(f"Erro ao listar quizzes: {e}")
        raise HTTPException(status_code=500, detail="Falha ao buscar quizzes") from e


@router.get("/unique/{unique_id}", response_model=QuizRecord)
async def get_quiz_by_unique_id(unique_id: str, storage: QuizStorage = Depends(get_storage)):
    """Busca quiz pelo uniqueId (identidade entre dispositivos)."""
    try:
        quiz = await storage.get_quiz_by_unique_id(unique_id)
    except QuizStorageError as e:
        logger.error(f"Erro ao buscar quiz por uniqueId {unique_id}: {e}")
        raise HTTPException(status_code=500, detail="Falha ao buscar quiz") from e

    if quiz is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return quiz


@router.get("/{quiz_id}", response_model=QuizRecord)
async def get_quiz(quiz_id: str, storage: QuizStorage = Depends(get_storage)):
    """Busca quiz pelo id local."""
    quiz_pk = parse_quiz_id(quiz_id)
    try:
        quiz = await storage.get_quiz(quiz_pk)
    except QuizStorageError as e:
        logger.error(f"Erro ao buscar quiz {quiz_pk}: {e}")
        raise HTTPException(status_code=500, detail="Falha ao buscar quiz") from e

    if quiz is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return quiz


# =============================================================================
# WRITE ENDPOINTS
# =============================================================================


@router.post("", response_model=QuizRecord, status_code=201)
async def create_quiz(request: QuizCreate, storage: QuizStorage = Depends(get_storage)):
    """Cria quiz.

    - id sempre atribuido pelo servidor
    - uniqueId gerado se ausente
    - version inicia em 1 se ausente
    """
    try:
        quiz = await storage.create_quiz(request)
    except QuizStorageError as e:
        logger.error(f"Erro ao criar quiz: {e}")
        raise HTTPException(status_code=500, detail="Falha ao criar quiz") from e

    logger.info(f"Quiz criado: '{quiz.title}' (id: {quiz.id}, uniqueId: {quiz.uniqueId})")
    return quiz


@router.put("/{quiz_id}", response_model=QuizRecord)
async def update_quiz(
    quiz_id: str,
    request: QuizUpdate,
    storage: QuizStorage = Depends(get_storage),
):
    """Atualiza parcialmente um quiz e incrementa sua versao."""
    quiz_pk = parse_quiz_id(quiz_id)
    try:
        quiz = await storage.update_quiz(quiz_pk, request)
    except QuizStorageError as e:
        logger.error(f"Erro ao atualizar quiz {quiz_pk}: {e}")
        raise HTTPException(status_code=500, detail="Falha ao atualizar quiz") from e

    if quiz is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return quiz


@router.delete("/unique/{unique_id}", response_model=DeleteResponse)
async def delete_quiz_by_unique_id(unique_id: str, storage: QuizStorage = Depends(get_storage)):
    """Remove quiz pelo uniqueId."""
    try:
        quiz = await storage.get_quiz_by_unique_id(unique_id)
        if quiz is None:
            raise HTTPException(status_code=404, detail=NOT_FOUND)
        success = await storage.delete_quiz(quiz.id)
    except QuizStorageError as e:
        logger.error(f"Erro ao remover quiz por uniqueId {unique_id}: {e}")
        raise HTTPException(status_code=500, detail="Falha ao remover quiz") from e

    if not success:
        raise HTTPException(status_code=500, detail="Falha ao remover quiz")
    return DeleteResponse(success=True)


@router.delete("/{quiz_id}", response_model=DeleteResponse)
async def delete_quiz(quiz_id: str, storage: QuizStorage = Depends(get_storage)):
    """Remove quiz pelo id local."""
    quiz_pk = parse_quiz_id(quiz_id)
    try:
        success = await storage.delete_quiz(quiz_pk)
    except QuizStorageError as e:
        logger.error(f"Erro ao remover quiz {quiz_pk}: {e}")
        raise HTTPException(status_code=500, detail="Falha ao remover quiz") from e

    if not success:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return DeleteResponse(success=True)


# =============================================================================
# RECONCILIATION ENDPOINTS
# =============================================================================


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_duplicates(engine: QuizReconciliationEngine = Depends(get_engine)):
    """Remove quizzes duplicados (uniqueId, conteudo e similaridade)."""
    try:
        removed = await engine.remove_duplicates()
    except QuizStorageError as e:
        logger.error(f"Erro na limpeza de duplicatas: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Falha ao limpar quizzes duplicados"},
        )

    if removed > 0:
        message = f"Removidos {removed} quizzes duplicados"
    else:
        message = "Nenhum quiz duplicado encontrado"

    return CleanupResponse(success=True, message=message, removedCount=removed)


@router.post("/sync", response_model=list[QuizRecord])
async def sync_quizzes(
    request: SyncRequest,
    engine: QuizReconciliationEngine = Depends(get_engine),
):
    """Sincroniza quizzes do dispositivo com o servidor.

    - Cria/atualiza quizzes publicos por uniqueId
    - Remove quizzes que se tornaram privados
    - Remove duplicatas ao final
    - Retorna todos os quizzes publicos
    """
    try:
        return await engine.sync_and_deduplicate(request.quizzes)
    except QuizStorageError as e:
        logger.error(f"Erro ao sincronizar quizzes: {e}")
        raise HTTPException(status_code=500, detail="Falha ao sincronizar quizzes") from e
