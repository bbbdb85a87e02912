"""
Error Taxonomy

Every failure the widget backend reports derives from WidgetError, so the
HTTP layer and the chat loop can degrade to a textual reply instead of
crashing the interaction.
"""

from typing import Optional


class WidgetError(Exception):
    """Base class for all widget backend errors"""


class ValidationError(WidgetError):
    """Bad caller input: malformed URL, oversized or unsupported file"""


class InvalidUrlError(ValidationError):
    """A URL could not be parsed as an absolute http(s)-style URL"""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Invalid URL: {url!r}")


class SynthesisError(WidgetError):
    """Remote text-to-speech call failed"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class QueryError(WidgetError):
    """Unexpected failure while answering a knowledge query"""


class CaptureError(WidgetError):
    """Voice capture is unavailable or was denied"""


class ChatStateError(WidgetError):
    """An input operation was issued in a state that cannot accept it"""
