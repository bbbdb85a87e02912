"""
Knowledge data model

Items registered as context sources (files and URLs), the descriptors
callers hand in, and the shapes returned by queries and statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class FileDescriptor:
    """Caller-side description of a file to register"""
    name: str
    mime_type: str
    size_bytes: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileDescriptor':
        """Create a descriptor from browser-style JSON (name/type/size)"""
        size = data.get("sizeBytes", data.get("size", 0))
        return cls(
            name=str(data.get("name", "")),
            mime_type=str(data.get("mimeType", data.get("type", ""))),
            size_bytes=int(size),
        )


@dataclass(frozen=True)
class KnowledgeItem:
    """Base class for a connected knowledge source"""
    id: str
    added_at: datetime

    kind = "item"

    @property
    def label(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "label": self.label,
            "addedAt": self.added_at.isoformat(),
        }


@dataclass(frozen=True)
class FileItem(KnowledgeItem):
    name: str = ""
    mime_type: str = ""
    size_bytes: int = 0

    kind = "file"

    @property
    def label(self) -> str:
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "name": self.name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
        })
        return data


@dataclass(frozen=True)
class UrlItem(KnowledgeItem):
    url: str = ""

    kind = "url"

    @property
    def label(self) -> str:
        return self.url

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["url"] = self.url
        return data


@dataclass(frozen=True)
class QueryMatch:
    source_id: str
    source_label: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "sourceLabel": self.source_label,
            "content": self.content,
        }


@dataclass(frozen=True)
class QueryResult:
    query: str
    matches: Tuple[QueryMatch, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "matches": [match.to_dict() for match in self.matches],
        }


@dataclass(frozen=True)
class KnowledgeStats:
    total_items: int
    file_count: int
    url_count: int
    last_updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "fileCount": self.file_count,
            "urlCount": self.url_count,
            "lastUpdatedAt": self.last_updated_at.isoformat() if self.last_updated_at else None,
        }
