# =============================================================================
# TESTES - Sync Engine Module
# =============================================================================
# Testes unitarios para sincronizacao e limpeza de duplicatas
# =============================================================================

import pytest


@pytest.fixture(params=["memory_storage", "sqlite_storage"])
def storage(request):
    """Executa o teste contra cada backend local."""
    return request.getfixturevalue(request.param)


@pytest.fixture
def engine(storage):
    """Engine de reconciliacao sobre o storage parametrizado."""
    from quiz.engine.sync_engine import QuizReconciliationEngine

    return QuizReconciliationEngine(storage)


class TestSync:
    """Testes para sincronizacao de lotes."""

    @pytest.mark.asyncio
    async def test_sync_then_get(self, engine, storage, make_quiz):
        """Quiz novo sincronizado inicia na versao 1."""
        await engine.sync([make_quiz(uniqueId="u1")])

        quiz = await storage.get_quiz_by_unique_id("u1")

        assert quiz is not None
        assert quiz.version == 1
        assert quiz.id >= 1

    @pytest.mark.asyncio
    async def test_resync_bumps_version(self, engine, storage, make_quiz):
        """Reenviar o mesmo uniqueId atualiza e incrementa a versao."""
        await engine.sync([make_quiz(uniqueId="u1")])
        await engine.sync([make_quiz(title="Math Quiz v2", uniqueId="u1", version=1)])

        quiz = await storage.get_quiz_by_unique_id("u1")
        all_quizzes = await storage.get_all_quizzes()

        assert quiz.version == 2
        assert quiz.title == "Math Quiz v2"
        assert len(all_quizzes) == 1

    @pytest.mark.asyncio
    async def test_resync_keeps_id(self, engine, storage, make_quiz):
        """Atualizacao via sync preserva o id local."""
        await engine.sync([make_quiz(uniqueId="u1")])
        original = await storage.get_quiz_by_unique_id("u1")

        await engine.sync([make_quiz(title="Outro", uniqueId="u1")])
        updated = await storage.get_quiz_by_unique_id("u1")

        assert updated.id == original.id

    @pytest.mark.asyncio
    async def test_private_quiz_is_removed(self, engine, storage, make_quiz):
        """Quiz que se tornou privado sai do servidor."""
        await engine.sync([make_quiz(uniqueId="u1")])
        await engine.sync([make_quiz(uniqueId="u1", isPublic=False)])

        assert await storage.get_quiz_by_unique_id("u1") is None

    @pytest.mark.asyncio
    async def test_public_quiz_without_unique_id_is_skipped(self, engine, storage, make_quiz):
        """Quiz publico sem uniqueId nunca e persistido."""
        result = await engine.sync([make_quiz(title="Sem id")])

        assert result == []
        assert await storage.get_all_quizzes() == []

    @pytest.mark.asyncio
    async def test_sweeps_private_quizzes(self, engine, storage, make_quiz):
        """Privados criados diretamente sao removidos no sync."""
        await storage.create_quiz(make_quiz(title="Privado", isPublic=False))
        await storage.create_quiz(make_quiz(title="Publico"))

        result = await engine.sync([])

        assert [q.title for q in result] == ["Publico"]
        assert len(await storage.get_all_quizzes()) == 1

    @pytest.mark.asyncio
    async def test_returns_public_set(self, engine, make_quiz):
        """Retorna todos os quizzes publicos armazenados."""
        result = await engine.sync(
            [
                make_quiz(title="A", uniqueId="a"),
                make_quiz(title="B", uniqueId="b"),
                make_quiz(title="C", uniqueId="c", isPublic=False),
            ]
        )

        assert sorted(q.uniqueId for q in result) == ["a", "b"]
        assert all(q.isPublic for q in result)

    @pytest.mark.asyncio
    async def test_new_quiz_keeps_submitted_version(self, engine, storage, make_quiz):
        """Quiz criado via sync mantem a versao enviada."""
        await engine.sync([make_quiz(uniqueId="u1", version=4)])

        quiz = await storage.get_quiz_by_unique_id("u1")

        assert quiz.version == 4


class TestSyncDoesNotDeduplicate:
    """Sync e deduplicacao sao etapas separadas."""

    @pytest.mark.asyncio
    async def test_sync_leaves_duplicates(self, make_record, make_quiz):
        """Duplicatas pre-existentes sobrevivem ao sync isolado."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        storage = MemoryQuizStorage(
            [
                make_record(1, uniqueId="u1", version=1),
                make_record(2, uniqueId="u1", version=2),
            ]
        )
        engine = QuizReconciliationEngine(storage)

        await engine.sync([])
        assert len(await storage.get_all_quizzes()) == 2

        removed = await engine.remove_duplicates()
        remaining = await storage.get_all_quizzes()

        assert removed == 1
        assert [q.id for q in remaining] == [2]

    @pytest.mark.asyncio
    async def test_sync_and_deduplicate(self, make_record, make_quiz):
        """Fluxo completo colapsa duplicatas apos o sync."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        storage = MemoryQuizStorage([make_record(1, uniqueId="u1", version=1)])
        engine = QuizReconciliationEngine(storage)

        result = await engine.sync_and_deduplicate(
            [make_quiz(title="Math Quiz", uniqueId="u1"), make_quiz(title="Other", uniqueId="u2")]
        )

        assert sorted(q.uniqueId for q in result) == ["u1", "u2"]
        assert (await storage.get_quiz_by_unique_id("u1")).version == 2


class TestRemoveDuplicates:
    """Testes end-to-end da limpeza."""

    @pytest.mark.asyncio
    async def test_fuzzy_match_merges(self, make_record, five_question_pair):
        """4 de 5 respostas em comum: sobra um quiz."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        first, second = five_question_pair
        storage = MemoryQuizStorage(
            [
                make_record(1, title="Math Quiz", questions=first, version=1),
                make_record(2, title="Math Quiz", questions=second, version=1),
            ]
        )

        removed = await QuizReconciliationEngine(storage).remove_duplicates()

        assert removed == 1
        assert len(await storage.get_all_quizzes()) == 1

    @pytest.mark.asyncio
    async def test_fuzzy_below_threshold_keeps_both(self, make_record, make_question):
        """3 de 5 respostas em comum: ambos permanecem."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        first = [make_question(f"A{i}?", f"r{i}") for i in range(5)]
        second = [make_question(f"B{i}?", f"r{i}") for i in range(3)]
        second += [make_question("B3?", "x"), make_question("B4?", "y")]
        storage = MemoryQuizStorage(
            [
                make_record(1, title="Math Quiz", questions=first),
                make_record(2, title="Math Quiz", questions=second),
            ]
        )

        removed = await QuizReconciliationEngine(storage).remove_duplicates()

        assert removed == 0
        assert len(await storage.get_all_quizzes()) == 2

    @pytest.mark.asyncio
    async def test_second_run_removes_nothing(self, make_record, five_question_pair):
        """Deduplicacao e idempotente."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        first, second = five_question_pair
        storage = MemoryQuizStorage(
            [
                make_record(1, uniqueId="u1", version=1),
                make_record(2, uniqueId="u1", version=2),
                make_record(3, uniqueId="u1", version=3),
                make_record(4, title="Fuzzy", questions=first),
                make_record(5, title="Fuzzy", questions=second),
            ]
        )
        engine = QuizReconciliationEngine(storage)

        assert await engine.remove_duplicates() == 3
        assert await engine.remove_duplicates() == 0

    @pytest.mark.asyncio
    async def test_distinct_quizzes_untouched(self, engine, storage, make_quiz):
        """Quizzes criados com uniqueIds distintos nao sao removidos."""
        await storage.create_quiz(make_quiz(title="Math Quiz"))
        await storage.create_quiz(make_quiz(title="Math Quiz"))

        assert await engine.remove_duplicates() == 0
        assert len(await storage.get_all_quizzes()) == 2

    @pytest.mark.asyncio
    async def test_logs_removed_count(self, make_record, capture_logs):
        """Registra quantidade removida no log."""
        from quiz.engine.sync_engine import QuizReconciliationEngine
        from quiz.storage import MemoryQuizStorage

        storage = MemoryQuizStorage(
            [make_record(1, uniqueId="u1", version=1), make_record(2, uniqueId="u1", version=2)]
        )

        await QuizReconciliationEngine(storage).remove_duplicates()

        assert "Removidos 1 quizzes duplicados" in capture_logs.text
