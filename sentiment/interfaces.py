"""
Collaborator Interfaces - What the engine consumes and writes to.

The engine never fetches or stores raw articles itself:
- A TextSource (fetcher/persistence layer) hands over items.
- A PersistenceSink optionally receives computed ScoredItems,
  upserted by item id.
"""

from abc import ABC, abstractmethod

from .models import ScoredItem, TextItem


class TextSource(ABC):
    """Provides items that still need a sentiment score."""

    @abstractmethod
    async def fetch_unscored(self, limit: int) -> list[TextItem]:
        """Return up to `limit` items without a stored score."""
        pass


class PersistenceSink(ABC):
    """Receives computed scores. Implementations may raise on failure."""

    @abstractmethod
    async def upsert_score(self, item: TextItem, scored: ScoredItem) -> None:
        """Insert or replace the score stored for item.item_id."""
        pass
