"""
Conversation Transcript

Ordered, append-only record of the user and assistant turns in a widget
session. Turns are never edited, removed or reordered once recorded.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """Represents a single conversation turn"""
    role: str  # 'user', 'assistant'
    content: str
    timestamp: datetime = field(default_factory=_utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary for serialization"""
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Message':
        """Create message from dictionary"""
        return cls(
            role=data["role"],
            content=data["content"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            metadata=data.get("metadata", {}),
        )


class Transcript:
    """Append-only conversation transcript"""

    ROLES = ("user", "assistant")

    def __init__(self):
        self._messages: List[Message] = []

    def _append(self, role: str, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        if role not in self.ROLES:
            raise ValueError(f"Unknown role: {role}")
        message = Message(role=role, content=content, metadata=dict(metadata or {}))
        self._messages.append(message)
        return message

    def add_user_message(self, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        return self._append("user", content, metadata)

    def add_assistant_message(self, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        return self._append("assistant", content, metadata)

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def get_last_user_message(self) -> Optional[str]:
        """Get the last user message content"""
        for msg in reversed(self._messages):
            if msg.role == "user":
                return msg.content
        return None

    def get_last_assistant_message(self) -> Optional[str]:
        """Get the last assistant message content"""
        for msg in reversed(self._messages):
            if msg.role == "assistant":
                return msg.content
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"messages": [msg.to_dict() for msg in self._messages]}
