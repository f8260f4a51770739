"""
Batch Processor - Scores many pending items with bounded concurrency.

A fixed-size semaphore keeps the learned model's runtime from being
flooded. A failing item never aborts the batch: its
(item_id, error_reason) is collected and the remaining items
continue.
"""

import asyncio
import logging
from typing import Iterable, Optional, Union

from core.config import EngineConfig

from .fusion import FusionEngine
from .interfaces import PersistenceSink, TextSource
from .models import BatchFailure, BatchResult, ScoredItem, TextItem


logger = logging.getLogger(__name__)

# item_id reported when the source itself could not be read
SOURCE_FAILURE_ID = "<source>"


class BatchProcessor:
    """
    Runs the fusion engine over a batch of items.

    Usage:
        processor = BatchProcessor(engine, max_concurrency=4, sink=repo)
        result = await processor.process(items)
        for failure in result.failures:
            print(failure.item_id, failure.error_reason)
    """

    DEFAULT_CONCURRENCY = 4

    def __init__(
        self,
        engine: FusionEngine,
        max_concurrency: int = DEFAULT_CONCURRENCY,
        sink: Optional[PersistenceSink] = None,
        use_cache: bool = True,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._engine = engine
        self._max_concurrency = max_concurrency
        self._sink = sink
        self._use_cache = use_cache

    @classmethod
    def from_config(
        cls,
        engine: FusionEngine,
        config: EngineConfig,
        sink: Optional[PersistenceSink] = None,
    ) -> "BatchProcessor":
        return cls(engine, max_concurrency=config.batch_concurrency, sink=sink)

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def process(self, items: Iterable[TextItem]) -> BatchResult:
        """
        Score every item, isolating per-item failures.

        Results are reported in input order.
        """
        items = list(items)
        if not items:
            return BatchResult()

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(item: TextItem) -> Union[ScoredItem, BatchFailure]:
            async with semaphore:
                return await self._process_one(item)

        outcomes = await asyncio.gather(*(run(item) for item in items))

        result = BatchResult()
        for item, outcome in zip(items, outcomes):
            if isinstance(outcome, BatchFailure):
                result.failures.append(outcome)
            else:
                result.scored[item.item_id] = outcome

        logger.info(
            f"Batch processed {result.processed} items: "
            f"{result.succeeded} scored, {len(result.failures)} failed"
        )
        return result

    async def process_pending(self, source: TextSource, limit: int = 10) -> BatchResult:
        """Pull up to `limit` unscored items from a source and score them."""
        try:
            items = await source.fetch_unscored(limit)
        except Exception as e:
            logger.error(f"Error fetching pending items: {e}")
            return BatchResult(
                failures=[BatchFailure(SOURCE_FAILURE_ID, f"fetch failed: {type(e).__name__}: {e}")]
            )

        if not items:
            return BatchResult()

        logger.info(f"Processing {len(items)} pending items...")
        return await self.process(items)

    async def _process_one(self, item: TextItem) -> Union[ScoredItem, BatchFailure]:
        try:
            scored = await self._engine.analyze(item.analysis_text, use_cache=self._use_cache)
        except Exception as e:
            logger.warning(f"Scoring failed for item {item.item_id}: {e}")
            return BatchFailure(item.item_id, f"scoring failed: {type(e).__name__}: {e}")

        if self._sink is not None:
            try:
                await self._sink.upsert_score(item, scored)
            except Exception as e:
                logger.warning(f"Persisting score failed for item {item.item_id}: {e}")
                return BatchFailure(item.item_id, f"persist failed: {type(e).__name__}: {e}")

        return scored
