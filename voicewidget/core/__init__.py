# Chat flow and session lifecycle

from .capture import CaptureSession, CaptureState
from .chat_session import ChatSession, ChatState, ChatExchange
from .session import WidgetSession, SessionManager, DEFAULT_SESSION_ID

__all__ = [
    'CaptureSession', 'CaptureState',
    'ChatSession', 'ChatState', 'ChatExchange',
    'WidgetSession', 'SessionManager', 'DEFAULT_SESSION_ID',
]
