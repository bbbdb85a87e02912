# Knowledge store components

from .models import (
    FileDescriptor, KnowledgeItem, FileItem, UrlItem,
    QueryMatch, QueryResult, KnowledgeStats,
)
from .rankers import BaseRanker, RandomRanker, KeywordRanker, create_ranker
from .store import KnowledgeStore
from .validation import validate_url, validate_urls, validate_file, partition_files

__all__ = [
    'FileDescriptor', 'KnowledgeItem', 'FileItem', 'UrlItem',
    'QueryMatch', 'QueryResult', 'KnowledgeStats',
    'BaseRanker', 'RandomRanker', 'KeywordRanker', 'create_ranker',
    'KnowledgeStore',
    'validate_url', 'validate_urls', 'validate_file', 'partition_files',
]
