"""
Sentiment Score Repository.

Persistence sink for the batch processor: one row per item,
rescoring overwrites the previous row.
"""

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sentiment.interfaces import PersistenceSink
from sentiment.models import ScoredItem, TextItem
from storage.models.sentiment import SentimentScoreRecord
from storage.repositories.base import BaseRepository


class SentimentScoreRepository(BaseRepository[SentimentScoreRecord], PersistenceSink):
    """
    Upserts fused scores keyed by item id.

    Usage:
        with session_scope(factory) as session:
            repo = SentimentScoreRepository(session)
            processor = BatchProcessor(engine, sink=repo)
            await processor.process(items)
    """

    def __init__(self, session: Session, auto_commit: bool = False) -> None:
        super().__init__(session, SentimentScoreRecord, "SentimentScoreRepository")
        self._auto_commit = auto_commit

    async def upsert_score(self, item: TextItem, scored: ScoredItem) -> None:
        self.save(item, scored)

    def save(self, item: TextItem, scored: ScoredItem) -> SentimentScoreRecord:
        """
        Insert or overwrite the row for item.item_id.

        Runs inside a SAVEPOINT: a failed upsert rolls back only its
        own row, earlier rows in the same session are kept.
        """
        try:
            with self._session.begin_nested():
                record = self._get(item.item_id)
                if record is None:
                    record = SentimentScoreRecord(item_id=item.item_id)
                    self._session.add(record)
                    self._logger.debug(f"Inserting score for {item.item_id}")
                else:
                    self._logger.debug(f"Updating score for {item.item_id}")

                record.apply(scored, item.analysis_text)
                self._flush("upsert")
        except SQLAlchemyError as e:
            raise self._wrap_db_error(e, "upsert") from e

        if self._auto_commit:
            self._commit()
        return record

    def get(self, item_id: str) -> Optional[SentimentScoreRecord]:
        return self._get(item_id)

    def get_many(self, item_ids: Iterable[str]) -> dict[str, SentimentScoreRecord]:
        ids = list(item_ids)
        if not ids:
            return {}
        stmt = select(SentimentScoreRecord).where(SentimentScoreRecord.item_id.in_(ids))
        return {record.item_id: record for record in self._execute_query(stmt)}

    def list_by_category(self, category: str, limit: int = 100) -> List[SentimentScoreRecord]:
        stmt = (
            select(SentimentScoreRecord)
            .where(SentimentScoreRecord.category == category)
            .order_by(SentimentScoreRecord.scored_at.desc(), SentimentScoreRecord.item_id)
            .limit(limit)
        )
        return self._execute_query(stmt)

    def count(self) -> int:
        return self._count()
