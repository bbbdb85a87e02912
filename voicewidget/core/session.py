"""
Widget Session Management

A WidgetSession owns everything one visitor's widget works with: the
knowledge store, the chat flow and the dashboard settings. Sessions are
created on first use and discarded on reset, after sitting idle past the
configured TTL, or when the session cap forces out the least recently used
one. Nothing is written to disk.
"""

import logging
import random
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from ..config.settings import WidgetAppConfig
from ..dashboard import Dashboard
from ..knowledge.rankers import create_ranker
from ..knowledge.store import KnowledgeStore
from ..services.tts_service import TTSService
from .chat_session import ChatSession

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


@dataclass
class WidgetSession:
    """Per-session store, chat flow and dashboard"""
    session_id: str
    store: KnowledgeStore
    chat: ChatSession
    dashboard: Dashboard
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls,
               session_id: str,
               config: WidgetAppConfig,
               tts_service: Optional[TTSService] = None,
               rng: Optional[random.Random] = None) -> 'WidgetSession':
        """Build a fresh session from configuration"""
        ranker_kwargs = {"rng": rng} if config.knowledge.ranker == "random" and rng else {}
        store = KnowledgeStore(
            ranker=create_ranker(config.knowledge.ranker, **ranker_kwargs),
            top_k=config.knowledge.top_k,
        )
        dashboard = Dashboard(store, rng=rng)
        chat = ChatSession(
            store,
            tts_service=tts_service,
            config=config.chat,
            speak_enabled=lambda: dashboard.settings.auto_speak,
        )
        return cls(session_id=session_id, store=store, chat=chat, dashboard=dashboard)

    def info(self) -> Dict[str, object]:
        return {
            "sessionId": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "items": len(self.store),
            "messages": len(self.chat.transcript),
            "state": self.chat.state.value,
        }


class SessionManager:
    """Creates, resets and discards widget sessions by id

    Sessions idle for longer than ``server.session_ttl`` seconds are dropped,
    and at most ``server.max_sessions`` are held; the least recently used
    session goes first when the cap is reached.
    """

    def __init__(self,
                 config: WidgetAppConfig,
                 tts_service: Optional[TTSService] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize session manager

        Args:
            config: Application configuration used for every new session
            tts_service: Shared speech synthesis service
            rng: Random source for demo ranking and analytics
            clock: Monotonic seconds source for idle expiry
        """
        self.config = config
        self.tts_service = tts_service
        self.rng = rng
        self._clock = clock or time.monotonic
        # session id -> (session, last access), least recently used first
        self._sessions: "OrderedDict[str, Tuple[WidgetSession, float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_expired(self, now: float) -> None:
        ttl = self.config.server.session_ttl
        while self._sessions:
            session_id, (_, last_seen) = next(iter(self._sessions.items()))
            if now - last_seen <= ttl:
                break
            self._sessions.popitem(last=False)
            logger.info(f"Expired idle widget session {session_id}")

    def get_or_create(self, session_id: str = DEFAULT_SESSION_ID) -> WidgetSession:
        now = self._clock()
        self._evict_expired(now)

        entry = self._sessions.pop(session_id, None)
        if entry is None:
            while len(self._sessions) >= self.config.server.max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info(f"Evicted widget session {evicted_id} (limit {self.config.server.max_sessions})")
            session = WidgetSession.create(session_id, self.config, self.tts_service, self.rng)
            logger.info(f"Started widget session {session_id}")
        else:
            session = entry[0]

        self._sessions[session_id] = (session, now)
        return session

    def reset(self, session_id: str = DEFAULT_SESSION_ID) -> WidgetSession:
        """Discard the session's state and start it over"""
        self.discard(session_id)
        return self.get_or_create(session_id)

    def discard(self, session_id: str) -> bool:
        entry = self._sessions.pop(session_id, None)
        if entry is not None:
            logger.info(f"Discarded widget session {session_id}")
        return entry is not None

    def list_sessions(self) -> List[Dict[str, object]]:
        self._evict_expired(self._clock())
        return [session.info() for session, _ in self._sessions.values()]

    async def close(self) -> None:
        """End every session and release the shared TTS resources"""
        self._sessions.clear()
        if self.tts_service:
            await self.tts_service.close()
