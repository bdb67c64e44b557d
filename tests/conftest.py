# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza mocks, factories de quiz e configurações comuns
# =============================================================================

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Configura ambiente de testes globalmente."""
    env_vars = {
        "ENVIRONMENT": "test",
        "QUIZ_STORAGE_BACKEND": "memory",
        "LOG_LEVEL": "ERROR",  # Reduzir logs em testes
    }
    with patch.dict(os.environ, env_vars):
        yield


@pytest.fixture
def clean_env():
    """Limpa variáveis de ambiente para testes isolados."""
    with patch.dict(os.environ, {}, clear=True):
        yield


# =============================================================================
# FIXTURES DO FASTAPI
# =============================================================================


@pytest.fixture
def client():
    """Cliente de teste FastAPI com storage em memória limpo."""
    from fastapi.testclient import TestClient

    import app_state
    from quiz.config import QuizConfig
    from quiz.storage import MemoryQuizStorage
    from server import app

    app_state.config = QuizConfig()
    app_state.storage = MemoryQuizStorage()
    app_state.engine = None

    yield TestClient(app)

    app_state.config = None
    app_state.storage = None
    app_state.engine = None


# =============================================================================
# FIXTURES DO AGENTFS
# =============================================================================


@pytest.fixture
def mock_agentfs():
    """Mock completo do AgentFS."""
    mock = MagicMock()

    # KV Store
    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()
    mock.kv.list = AsyncMock(return_value=[])

    # Lifecycle
    mock.close = AsyncMock()

    return mock


@pytest.fixture
def mock_agentfs_with_data():
    """Mock do AgentFS com KV funcional em memória."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    async def mock_list(prefix=""):
        return [{"key": k} for k in _storage if k.startswith(prefix)]

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock.kv.list = mock_list
    mock._storage = _storage

    mock.close = AsyncMock()

    return mock


# =============================================================================
# FIXTURES DO QUIZ
# =============================================================================


@pytest.fixture
def make_question():
    """Factory de QuizQuestion."""
    from quiz.models.schemas import QuizQuestion

    def _make(prompt: str, answer: str, options: list[str] | None = None):
        return QuizQuestion(
            question=prompt,
            options=options if options is not None else [answer, "Outra", "Nenhuma"],
            correctAnswer=answer,
        )

    return _make


@pytest.fixture
def make_quiz(make_question):
    """Factory de QuizCreate (payload enviado pelo cliente)."""
    from quiz.models.schemas import QuizCreate

    def _make(title: str = "Math Quiz", questions=None, **fields):
        if questions is None:
            questions = [make_question("2 + 2?", "4"), make_question("3 x 3?", "9")]
        return QuizCreate(title=title, questions=questions, **fields)

    return _make


@pytest.fixture
def make_record(make_question):
    """Factory de QuizRecord (registro já persistido)."""
    from quiz.models.schemas import QuizRecord

    def _make(quiz_id: int, title: str = "Math Quiz", questions=None, **fields):
        if questions is None:
            questions = [make_question("2 + 2?", "4"), make_question("3 x 3?", "9")]
        return QuizRecord(id=quiz_id, title=title, questions=questions, **fields)

    return _make


@pytest.fixture
def five_question_pair(make_question):
    """Dois conjuntos de 5 questões com respostas coincidentes nas 4 primeiras."""
    first = [make_question(f"Pergunta A{i}?", f"resposta {i}") for i in range(5)]
    second = [make_question(f"Pergunta B{i}?", f"resposta {i}") for i in range(4)]
    second.append(make_question("Pergunta B4?", "resposta diferente"))
    return first, second


@pytest.fixture
def memory_storage():
    """Storage em memória vazio."""
    from quiz.storage import MemoryQuizStorage

    return MemoryQuizStorage()


@pytest.fixture
def sqlite_storage(tmp_path):
    """Storage SQLite em arquivo temporário."""
    from quiz.storage import SQLiteQuizStorage

    return SQLiteQuizStorage(tmp_path / "quizzes.db")


@pytest.fixture
def fixed_time():
    """Instante fixo para comparações de createdAt."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# FIXTURES DE LOGGING
# =============================================================================


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificação em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
