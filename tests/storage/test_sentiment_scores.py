"""
Tests for the SQLAlchemy sentiment score repository.

Runs against in-memory SQLite.
"""

import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError, ProgrammingError

from sentiment.batch import BatchProcessor
from sentiment.models import ScoredItem, TextItem
from storage import (
    PersistenceError,
    SentimentScoreRecord,
    SentimentScoreRepository,
    get_engine,
    get_session_factory,
    init_db,
    session_scope,
)
from storage.repositories.exceptions import ConnectionError, QueryError


@pytest.fixture
def session_factory():
    engine = get_engine("sqlite://")
    init_db(engine)
    yield get_session_factory(engine)
    engine.dispose()


@pytest.fixture
def session(session_factory):
    with session_scope(session_factory) as session:
        yield session


def _scored(mock_clock, score=0.5, text_key="key"):
    return ScoredItem(text_key, score, score, score, min(1.0, abs(score) * 1.2), mock_clock.now())


class TestSentimentScoreRepository:
    """Tests for SentimentScoreRepository."""

    def test_save_inserts_row(self, session, mock_clock):
        repo = SentimentScoreRepository(session)
        item = TextItem("n1", "Headline", content="x" * 1500)

        repo.save(item, _scored(mock_clock, 0.5))

        record = repo.get("n1")
        assert record.final_score == 0.5
        assert record.label == "positive"
        assert record.category == "positive"
        assert len(record.analysis_text) == 1000
        assert repo.count() == 1

    def test_save_overwrites_existing_row(self, session, mock_clock):
        repo = SentimentScoreRepository(session)
        item = TextItem("n1", "Headline")

        repo.save(item, _scored(mock_clock, 0.5))
        repo.save(item, _scored(mock_clock, -0.15))

        record = repo.get("n1")
        assert record.final_score == -0.15
        assert record.label == "negative"
        assert record.category == "neutral"
        assert repo.count() == 1

    def test_get_many_and_list_by_category(self, session, mock_clock):
        repo = SentimentScoreRepository(session)
        repo.save(TextItem("a", "A"), _scored(mock_clock, 0.9))
        repo.save(TextItem("b", "B"), _scored(mock_clock, -0.9))
        repo.save(TextItem("c", "C"), _scored(mock_clock, 0.5))

        assert set(repo.get_many(["a", "b", "zzz"])) == {"a", "b"}
        assert repo.get_many([]) == {}
        assert [r.item_id for r in repo.list_by_category("positive")] == ["a", "c"]

    def test_session_scope_commits(self, session_factory, mock_clock):
        with session_scope(session_factory) as session:
            SentimentScoreRepository(session).save(TextItem("a", "A"), _scored(mock_clock))

        with session_scope(session_factory) as session:
            assert session.get(SentimentScoreRecord, "a") is not None

    def test_session_scope_rolls_back_on_error(self, session_factory, mock_clock):
        with pytest.raises(RuntimeError):
            with session_scope(session_factory) as session:
                SentimentScoreRepository(session).save(TextItem("a", "A"), _scored(mock_clock))
                raise RuntimeError("abort")

        with session_scope(session_factory) as session:
            assert session.get(SentimentScoreRecord, "a") is None

    def test_database_errors_are_wrapped(self):
        session = MagicMock()
        session.get.side_effect = OperationalError("SELECT", {}, Exception("db gone"))
        repo = SentimentScoreRepository(session)

        with pytest.raises(ConnectionError) as exc_info:
            repo.get("a")

        assert isinstance(exc_info.value, PersistenceError)
        assert exc_info.value.operation == "get"

    def test_query_errors_are_wrapped(self):
        session = MagicMock()
        session.execute.side_effect = ProgrammingError("SELECT", {}, Exception("bad sql"))

        with pytest.raises(QueryError):
            SentimentScoreRepository(session).count()


class TestRepositoryAsSink:

    @pytest.mark.asyncio
    async def test_batch_processor_persists_scores(self, session, engine):
        repo = SentimentScoreRepository(session)
        items = [TextItem("a", "Great results"), TextItem("b", "Terrible crash")]

        result = await BatchProcessor(engine, sink=repo).process(items)

        assert result.succeeded == 2
        assert repo.count() == 2
        assert repo.get("a").final_score == result.scored["a"].final_score

    @pytest.mark.asyncio
    async def test_failed_upsert_keeps_earlier_rows(self, session_factory, engine):
        items = [
            TextItem("n1", "Great results"),
            TextItem(None, "Broken row"),
            TextItem("n3", "Terrible crash"),
        ]

        with session_scope(session_factory) as session:
            repo = SentimentScoreRepository(session)
            result = await BatchProcessor(engine, max_concurrency=1, sink=repo).process(items)

        assert sorted(result.scored) == ["n1", "n3"]
        assert [f.item_id for f in result.failures] == [None]
        assert "persist failed" in result.failures[0].error_reason

        with session_scope(session_factory) as session:
            persisted = SentimentScoreRepository(session).get_many(["n1", "n3"])
            assert sorted(persisted) == ["n1", "n3"]

    def test_save_failure_does_not_discard_session(self, session, mock_clock):
        repo = SentimentScoreRepository(session)
        repo.save(TextItem("a", "A"), _scored(mock_clock, 0.5))

        with pytest.raises(PersistenceError):
            repo.save(TextItem(None, "B"), _scored(mock_clock, 0.5))

        repo.save(TextItem("c", "C"), _scored(mock_clock, -0.5))
        assert set(repo.get_many(["a", "c"])) == {"a", "c"}
        assert repo.count() == 2
