"""Quiz Deduplication Engine - Deteccao de quizzes duplicados."""

import json
import logging
from collections import defaultdict

from ..models.schemas import QuizRecord
from ..storage.base import as_utc

logger = logging.getLogger(__name__)

OPTION_SEPARATOR = "|"


def normalize(text: str | None) -> str:
    """Normaliza texto para comparacao (trim + lowercase)."""
    return text.strip().lower() if isinstance(text, str) else ""


def content_fingerprint(quiz: QuizRecord) -> str:
    """Gera fingerprint deterministico do conteudo do quiz.

    Independe da ordem das questoes e da ordem das alternativas, de modo
    que dois quizzes com mesmo titulo e mesmo conjunto de
    (enunciado, alternativas, resposta) geram o mesmo fingerprint.

    Args:
        quiz: Quiz a ser analisado

    Returns:
        String no formato ``titulo:quantidade:json_das_questoes``
    """
    rows = [
        {
            "question": normalize(q.question),
            "options": OPTION_SEPARATOR.join(sorted(normalize(opt) for opt in q.options)),
            "correctAnswer": normalize(q.correctAnswer),
        }
        for q in quiz.questions
    ]
    rows.sort(key=lambda row: row["question"])

    return f"{normalize(quiz.title)}:{len(rows)}:{json.dumps(rows, ensure_ascii=False)}"


def prefer_newer(a: QuizRecord, b: QuizRecord) -> QuizRecord:
    """Decide qual de dois quizzes duplicados manter.

    Mantem ``a`` se tiver versao maior (ambos versionados) ou se tiver
    createdAt estritamente mais recente (ambos com data). Caso contrario
    mantem ``b``.
    """
    if a.version and b.version and a.version > b.version:
        return a

    a_created, b_created = as_utc(a.createdAt), as_utc(b.createdAt)
    if a_created and b_created and a_created > b_created:
        return a

    return b


def count_matching_questions(quiz1: QuizRecord, quiz2: QuizRecord) -> int:
    """Conta questoes de quiz1 com correspondente em quiz2.

    Uma questao corresponde se o enunciado ou a resposta correta
    normalizados forem iguais. Cada questao de quiz1 conta no maximo uma vez.
    """
    candidates = [(normalize(q.question), normalize(q.correctAnswer)) for q in quiz2.questions]

    matches = 0
    for q1 in quiz1.questions:
        prompt, answer = normalize(q1.question), normalize(q1.correctAnswer)
        if any(prompt == p2 or answer == a2 for p2, a2 in candidates):
            matches += 1

    return matches


class QuizDeduplicationEngine:
    """Planeja a remocao de quizzes duplicados em tres passadas.

    1. Por uniqueId: registros com mesmo uniqueId sao versoes do mesmo quiz.
    2. Por fingerprint de conteudo: apenas registros sem uniqueId.
    3. Por similaridade: registros de mesmo titulo com ao menos
       ``similarity_ratio`` das questoes coincidentes.

    Cada passada considera apenas os registros mantidos pelas anteriores.
    Os registros sao percorridos em ordem crescente de id, o que torna o
    resultado deterministico quando o desempate cai no caso padrao.

    Example:
        >>> engine = QuizDeduplicationEngine()
        >>> to_remove = engine.plan(await storage.get_all_quizzes())
    """

    def __init__(self, similarity_ratio: float = 0.8):
        self.similarity_ratio = similarity_ratio

    def plan(self, quizzes: list[QuizRecord]) -> list[QuizRecord]:
        """Calcula quais quizzes devem ser removidos.

        Args:
            quizzes: Colecao completa de quizzes

        Returns:
            Quizzes a remover, na ordem em que foram descartados
        """
        ordered = sorted(quizzes, key=lambda quiz: quiz.id)
        kept: set[int] = set()
        removed: list[QuizRecord] = []

        self._dedup_by_unique_id(ordered, kept, removed)
        self._dedup_by_content(ordered, kept, removed)
        self._dedup_by_similarity(ordered, kept, removed)

        return removed

    def _dedup_by_unique_id(
        self, quizzes: list[QuizRecord], kept: set[int], removed: list[QuizRecord]
    ) -> None:
        winners: dict[str, QuizRecord] = {}

        for quiz in quizzes:
            if not quiz.uniqueId:
                kept.add(quiz.id)
                continue

            current = winners.get(quiz.uniqueId)
            if current is None:
                winners[quiz.uniqueId] = quiz
                kept.add(quiz.id)
            elif prefer_newer(quiz, current) is quiz:
                logger.info(f"Substituindo duplicata por uniqueId: '{current.title}' (id {current.id})")
                kept.discard(current.id)
                kept.add(quiz.id)
                winners[quiz.uniqueId] = quiz
                removed.append(current)
            else:
                logger.info(f"Ignorando duplicata mais antiga por uniqueId: '{quiz.title}' (id {quiz.id})")
                removed.append(quiz)

    def _dedup_by_content(
        self, quizzes: list[QuizRecord], kept: set[int], removed: list[QuizRecord]
    ) -> None:
        winners: dict[str, QuizRecord] = {}

        for quiz in quizzes:
            if quiz.id not in kept or quiz.uniqueId:
                continue

            fingerprint = content_fingerprint(quiz)
            current = winners.get(fingerprint)
            if current is None:
                winners[fingerprint] = quiz
                continue

            loser = current if prefer_newer(quiz, current) is quiz else quiz
            winners[fingerprint] = quiz if loser is current else current
            kept.discard(loser.id)
            removed.append(loser)
            logger.info(f"Duplicata por conteudo: '{loser.title}' (id {loser.id})")

    def _dedup_by_similarity(
        self, quizzes: list[QuizRecord], kept: set[int], removed: list[QuizRecord]
    ) -> None:
        by_title: dict[str, list[QuizRecord]] = defaultdict(list)
        for quiz in quizzes:
            if quiz.id in kept:
                by_title[normalize(quiz.title)].append(quiz)

        for title, group in by_title.items():
            if len(group) < 2:
                continue

            logger.debug(f"{len(group)} quizzes com titulo '{title}' - verificando similaridade")

            for i, quiz1 in enumerate(group):
                if quiz1.id not in kept:
                    continue

                for quiz2 in group[i + 1:]:
                    if quiz2.id not in kept or not self._is_similar(quiz1, quiz2):
                        continue

                    logger.info(f"Duplicata por similaridade de questoes: '{title}'")
                    if prefer_newer(quiz1, quiz2) is quiz1:
                        kept.discard(quiz2.id)
                        removed.append(quiz2)
                    else:
                        kept.discard(quiz1.id)
                        removed.append(quiz1)
                        break

    def _is_similar(self, quiz1: QuizRecord, quiz2: QuizRecord) -> bool:
        # uniqueIds distintos identificam quizzes diferentes
        if quiz1.uniqueId and quiz2.uniqueId and quiz1.uniqueId != quiz2.uniqueId:
            return False

        count1, count2 = len(quiz1.questions), len(quiz2.questions)
        if abs(count1 - count2) > 1 or count1 == count2 == 0:
            return False

        threshold = self.similarity_ratio * min(count1, count2)
        return count_matching_questions(quiz1, quiz2) >= threshold
