"""Quiz Schemas - Modelos Pydantic para request/response."""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import QuizCategory


class QuizQuestion(BaseModel):
    """Questao do quiz com alternativas e imagens associadas."""

    question: str = Field(..., description="Enunciado da questao")
    answerDescription: str = Field(default="", description="Explicacao da resposta")
    options: list[str] = Field(..., description="Alternativas (ordem livre)")
    correctAnswer: str = Field(..., description="Texto da alternativa correta")
    questionImages: list[str] = Field(default=[], description="Imagens do enunciado")
    answerImages: list[str] = Field(default=[], description="Imagens da resposta")


class QuizAttempt(BaseModel):
    """Tentativa registrada no historico do quiz."""

    date: datetime
    score: float
    totalQuestions: int
    timeSpent: float


class QuizCreate(BaseModel):
    """Dados para criacao de quiz (id atribuido pelo storage)."""

    uniqueId: str | None = Field(
        default=None, description="Identidade entre dispositivos (gerada se ausente)"
    )
    title: str = Field(..., description="Titulo do quiz")
    description: str = Field(default="", description="Descricao do conteudo")
    questions: list[QuizQuestion] = Field(..., description="Lista de questoes")
    timer: int = Field(default=0, ge=0, description="Tempo limite em segundos")
    category: str = Field(
        default=QuizCategory.CUSTOM.value,
        min_length=1,
        max_length=50,
        description="Categoria (pre-definida ou livre)",
    )
    history: list[QuizAttempt] | None = Field(default=None, description="Historico")
    createdAt: datetime | None = Field(default=None, description="Data de criacao")
    lastTaken: datetime | None = Field(default=None, description="Ultima tentativa")
    password: str | None = Field(default=None, description="Senha opcional")
    isPublic: bool = Field(default=True, description="Se o quiz e compartilhado")
    createdBy: int | None = Field(default=None, description="ID do autor")
    version: int | None = Field(default=None, ge=1, description="Versao (default 1)")


class QuizUpdate(BaseModel):
    """Atualizacao parcial de quiz (apenas campos enviados sao aplicados)."""

    uniqueId: str | None = None
    title: str | None = None
    description: str | None = None
    questions: list[QuizQuestion] | None = None
    timer: int | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, min_length=1, max_length=50)
    history: list[QuizAttempt] | None = None
    createdAt: datetime | None = None
    lastTaken: datetime | None = None
    password: str | None = None
    isPublic: bool | None = None
    createdBy: int | None = None
    version: int | None = Field(default=None, ge=1)


class QuizRecord(QuizCreate):
    """Quiz persistido, com id atribuido pelo storage."""

    id: int = Field(..., description="ID local atribuido pelo storage")


class SyncRequest(BaseModel):
    """Lote de quizzes enviados pelo cliente para sincronizacao."""

    quizzes: list[QuizCreate] = Field(..., description="Quizzes do dispositivo")


class DeleteResponse(BaseModel):
    """Resultado de remocao."""

    success: bool


class CleanupResponse(BaseModel):
    """Resultado da deduplicacao."""

    success: bool
    message: str
    removedCount: int = Field(..., description="Quantidade de quizzes removidos")
