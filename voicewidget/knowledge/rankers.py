"""
Ranking strategies for knowledge queries

A ranker orders the connected knowledge items for a query, best first.
The store keeps the query contract and delegates the choice of sources here.
"""

import random
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import KnowledgeItem


_WORD_RE = re.compile(r"[a-z0-9]+")


def _words(text: str) -> List[str]:
    return _WORD_RE.findall(text.lower())


class BaseRanker(ABC):
    """Abstract base class for knowledge rankers"""

    name = "base"

    @abstractmethod
    def rank(self, query: str, items: Sequence[KnowledgeItem]) -> List[KnowledgeItem]:
        """Return the items ordered by relevance to the query"""
        raise NotImplementedError


class RandomRanker(BaseRanker):
    """Demo ranker: any connected source is as good as another"""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def rank(self, query: str, items: Sequence[KnowledgeItem]) -> List[KnowledgeItem]:
        ranked = list(items)
        self.rng.shuffle(ranked)
        return ranked


class KeywordRanker(BaseRanker):
    """Scores items by how many query words appear in their label"""

    name = "keyword"

    def score(self, query: str, item: KnowledgeItem) -> int:
        label_words = set(_words(item.label))
        return sum(1 for word in set(_words(query)) if word in label_words)

    def rank(self, query: str, items: Sequence[KnowledgeItem]) -> List[KnowledgeItem]:
        # sorted() is stable, so ties keep insertion order
        return sorted(items, key=lambda item: -self.score(query, item))


def create_ranker(name: str, **kwargs) -> BaseRanker:
    """Create a ranker by name"""
    if name == "random":
        return RandomRanker(**kwargs)
    elif name == "keyword":
        return KeywordRanker()
    else:
        raise ValueError(f"Unknown ranker: {name}")
