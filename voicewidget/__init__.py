"""
Voice Widget Backend

Backend for an embeddable AI assistant chat widget:
- In-memory knowledge base of files and URLs with pluggable ranking
- Text-to-Speech replies through ElevenLabs (or gTTS)
- Voice/text chat flow with an append-only transcript
- Dashboard data and embed snippet generation
"""

__version__ = "1.0.0"

from .errors import (
    WidgetError, ValidationError, InvalidUrlError, SynthesisError,
    QueryError, CaptureError, ChatStateError,
)

__all__ = [
    'WidgetError', 'ValidationError', 'InvalidUrlError', 'SynthesisError',
    'QueryError', 'CaptureError', 'ChatStateError',
]
