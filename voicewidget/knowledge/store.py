"""
Knowledge Store

Holds the files and URLs connected to a widget session and answers queries
against them. The store is an explicit instance owned by a WidgetSession;
nothing is shared between sessions and nothing survives a restart.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from ..errors import QueryError
from .models import (
    FileDescriptor,
    FileItem,
    KnowledgeItem,
    KnowledgeStats,
    QueryMatch,
    QueryResult,
    UrlItem,
)
from .rankers import BaseRanker, RandomRanker
from .validation import validate_urls

logger = logging.getLogger(__name__)

ANSWER_TEMPLATE = (
    'Based on information from "{label}", the answer to your query about "{query}" '
    "would be provided here. This is a simulated response that would be generated "
    "from the actual content of your knowledge base in a real implementation."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KnowledgeItemsView:
    """Restartable view over the store; every iteration sees current contents"""

    def __init__(self, store: 'KnowledgeStore'):
        self._store = store

    def __iter__(self) -> Iterator[KnowledgeItem]:
        return iter(self._store._snapshot())

    def __len__(self) -> int:
        return len(self._store)


class KnowledgeStore:
    """In-memory collection of knowledge items with pluggable ranking"""

    def __init__(self,
                 ranker: Optional[BaseRanker] = None,
                 top_k: int = 1,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the store

        Args:
            ranker: Ranking strategy for queries (random pick if None)
            top_k: Maximum number of matches per query
            clock: Timestamp source, UTC now by default
        """
        if top_k <= 0:
            raise ValueError("top_k must be positive")

        self.ranker = ranker or RandomRanker()
        self.top_k = top_k
        self._clock = clock or _utcnow
        self._items: Dict[str, KnowledgeItem] = {}
        self._issued_ids = set()
        self._last_added_at: Optional[datetime] = None
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _snapshot(self) -> List[KnowledgeItem]:
        with self._lock:
            return list(self._items.values())

    def _next_id(self) -> str:
        # Ids stay unique for the store's lifetime, including after remove/clear
        while True:
            item_id = uuid.uuid4().hex[:12]
            if item_id not in self._issued_ids:
                self._issued_ids.add(item_id)
                return item_id

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_added_at is not None and now < self._last_added_at:
            now = self._last_added_at
        self._last_added_at = now
        return now

    def add_files(self, descriptors: Iterable[FileDescriptor]) -> List[FileItem]:
        """Register one FileItem per descriptor, in input order"""
        with self._lock:
            created = []
            for descriptor in descriptors:
                item = FileItem(
                    id=self._next_id(),
                    added_at=self._next_timestamp(),
                    name=descriptor.name,
                    mime_type=descriptor.mime_type,
                    size_bytes=descriptor.size_bytes,
                )
                self._items[item.id] = item
                created.append(item)

            logger.info(f"Added {len(created)} file(s) to knowledge base")
            return created

    def add_urls(self, urls: Iterable[str]) -> List[UrlItem]:
        """
        Register one UrlItem per URL, in input order

        Raises:
            InvalidUrlError: if any URL is malformed; nothing is added then
        """
        valid_urls = validate_urls(list(urls))

        with self._lock:
            created = []
            for url in valid_urls:
                item = UrlItem(id=self._next_id(), added_at=self._next_timestamp(), url=url)
                self._items[item.id] = item
                created.append(item)

            logger.info(f"Added {len(created)} URL(s) to knowledge base")
            return created

    def get(self, item_id: str) -> Optional[KnowledgeItem]:
        with self._lock:
            return self._items.get(item_id)

    def remove(self, item_id: str) -> bool:
        """Remove an item if present; unknown ids are not an error"""
        with self._lock:
            removed = self._items.pop(item_id, None) is not None

        if removed:
            logger.info(f"Removed knowledge item {item_id}")
        else:
            logger.debug(f"Remove ignored, no knowledge item {item_id}")
        return removed

    def clear(self) -> None:
        """Remove every item"""
        with self._lock:
            count = len(self._items)
            self._items.clear()
        logger.info(f"Cleared knowledge base ({count} item(s))")

    def list_items(self) -> KnowledgeItemsView:
        """All items in insertion order, as a lazy restartable view"""
        return KnowledgeItemsView(self)

    def query(self, text: str) -> QueryResult:
        """
        Answer a query from the connected sources

        Raises:
            QueryError: if ranking fails unexpectedly
        """
        items = self._snapshot()
        if not items:
            return QueryResult(query=text)

        try:
            ranked = self.ranker.rank(text, items)
        except Exception as e:
            logger.error(f"Ranker {self.ranker.name} failed for query {text!r}: {e}")
            raise QueryError(f"Knowledge query failed: {e}") from e

        matches = tuple(
            QueryMatch(
                source_id=item.id,
                source_label=item.label,
                content=ANSWER_TEMPLATE.format(label=item.label, query=text),
            )
            for item in ranked[:self.top_k]
        )
        return QueryResult(query=text, matches=matches)

    def stats(self) -> KnowledgeStats:
        items = self._snapshot()
        file_count = sum(1 for item in items if isinstance(item, FileItem))
        url_count = sum(1 for item in items if isinstance(item, UrlItem))

        return KnowledgeStats(
            total_items=len(items),
            file_count=file_count,
            url_count=url_count,
            last_updated_at=max((item.added_at for item in items), default=None),
        )
