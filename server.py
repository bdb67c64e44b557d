"""
Quiz Sync Server

FastAPI server with:
- Quiz CRUD API (memory, SQLite or AgentFS storage)
- Cross-device sync with duplicate cleanup
- CORS and request logging
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app_state
from quiz.router import router as quiz_router
from quiz.storage import QuizStorageError

logging.basicConfig(
    level=app_state.get_config().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("server")

# Linhas de log de request maiores que isso sao truncadas
MAX_LOG_LINE = 80


# =============================================================================
# FASTAPI APP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    cfg = app_state.get_config()
    logger.info(f"Iniciando Quiz Sync (storage: {cfg.storage_backend.value})")
    await app_state.get_storage()
    yield
    await app_state.cleanup()
    logger.info("Quiz Sync finalizado")


app = FastAPI(
    title="Quiz Sync",
    description="Armazenamento, sincronizacao e deduplicacao de quizzes",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_state.get_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    """Registra metodo, rota, status e duracao das chamadas /api."""
    start = time.perf_counter()
    response = await call_next(request)

    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        line = f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        if len(line) > MAX_LOG_LINE:
            line = line[: MAX_LOG_LINE - 1] + "…"
        logger.info(line)

    return response


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Remove campos nao serializaveis (ctx com excecoes) dos erros."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Rejeita payloads malformados com 400 antes de chegar ao storage."""
    logger.warning(f"Payload invalido em {request.url.path}: {len(exc.errors())} erro(s)")
    return JSONResponse(
        status_code=400,
        content={"detail": "Dados de quiz inválidos", "errors": jsonable_errors(exc)},
    )


app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(quiz_router)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    """Health check."""
    return {
        "status": "ok",
        "message": "Quiz Sync API",
        "storage": app_state.get_config().storage_backend.value,
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    cfg = app_state.get_config()
    storage_ok = True
    try:
        storage = await app_state.get_storage()
        total = len(await storage.get_all_quizzes())
    except QuizStorageError as e:
        logger.error(f"Health check falhou: {e}")
        storage_ok = False
        total = None

    return {
        "status": "healthy" if storage_ok else "degraded",
        "environment": cfg.environment,
        "storage": cfg.storage_backend.value,
        "total_quizzes": total,
    }


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app_state.get_config().port)
