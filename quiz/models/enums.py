"""Quiz Enums - Categorias e backends de armazenamento."""

from enum import Enum


class QuizCategory(str, Enum):
    """Categorias pre-definidas de quiz (strings livres tambem sao aceitas)."""

    GENERAL_KNOWLEDGE = "General Knowledge"
    MATHEMATICS = "Mathematics"
    SCIENCE = "Science"
    REASONING = "Reasoning"
    CUSTOM = "Custom"


class StorageBackend(str, Enum):
    """Backends de persistencia suportados."""

    MEMORY = "memory"  # Testes e desenvolvimento local
    SQLITE = "sqlite"  # Persistencia em arquivo
    AGENTFS = "agentfs"  # KV store do AgentFS
