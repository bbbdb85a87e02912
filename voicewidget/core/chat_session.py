"""
Chat Session

Orchestrates one widget conversation: voice or text input, the knowledge
lookup, optional speech synthesis, and the transcript.

States run Idle -> (Listening) -> Sending -> AwaitingReply -> Idle. Every
user-facing failure ends as a textual assistant reply and the session always
returns to Idle.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..config.settings import ChatConfig
from ..errors import CaptureError, ChatStateError, SynthesisError
from ..knowledge.store import KnowledgeStore
from ..memory.transcript import Message, Transcript
from ..services.tts_service import TTSService
from .capture import CaptureSession

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = "\n\nSource: "


class ChatState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    SENDING = "sending"
    AWAITING_REPLY = "awaiting_reply"


@dataclass
class ChatExchange:
    """Result of one completed user/assistant exchange"""
    user_message: Message
    assistant_message: Message
    audio: Optional[bytes] = None
    sources: List[str] = field(default_factory=list)
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user_message.to_dict(),
            "assistant": self.assistant_message.to_dict(),
            "audio": base64.b64encode(self.audio).decode("ascii") if self.audio else None,
            "sources": list(self.sources),
            "failed": self.failed,
        }


class ChatSession:
    """Main chat flow that ties store, synthesis and transcript together"""

    def __init__(self,
                 store: KnowledgeStore,
                 tts_service: Optional[TTSService] = None,
                 config: Optional[ChatConfig] = None,
                 capture: Optional[CaptureSession] = None,
                 speak_enabled: Optional[Callable[[], bool]] = None):
        """
        Initialize the chat session

        Args:
            store: Knowledge store to query
            tts_service: Speech synthesis (replies stay text-only if None)
            config: Chat behaviour settings
            capture: Voice capture session (created from config if None)
            speak_enabled: Per-session switch for spoken replies, read on every reply
        """
        self.store = store
        self.tts_service = tts_service
        self.config = config or ChatConfig()
        self.capture = capture or CaptureSession(available=self.config.voice_available)
        self.speak_enabled = speak_enabled
        self.transcript = Transcript()
        self.state = ChatState.IDLE

    @property
    def voice_available(self) -> bool:
        return self.capture.available

    def _require_state(self, *states: ChatState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise ChatStateError(f"Cannot do that while {self.state.value} (expected {allowed})")

    # Voice input
    def start_voice(self) -> bool:
        """Idle -> Listening; returns False when capture is not offered"""
        self._require_state(ChatState.IDLE)
        try:
            self.capture.start()
        except CaptureError as e:
            logger.info(f"Voice input not offered: {e}")
            return False

        self.state = ChatState.LISTENING
        return True

    def update_voice(self, text: str) -> None:
        """Interim transcript while listening; never changes state"""
        if self.state == ChatState.LISTENING:
            self.capture.update(text)

    def handle_voice_end(self) -> bool:
        """Recognizer ended on its own; True if capture keeps going"""
        if self.state != ChatState.LISTENING:
            return False
        return self.capture.handle_end()

    async def stop_voice(self) -> Optional[ChatExchange]:
        """Listening -> Sending with the captured text, or -> Idle if nothing was heard"""
        self._require_state(ChatState.LISTENING)
        text = self.capture.stop()
        self.state = ChatState.IDLE

        if not text:
            return None
        return await self._run_exchange(text)

    def cancel_voice(self) -> None:
        """Listening -> Idle, captured text discarded"""
        self._require_state(ChatState.LISTENING)
        self.capture.cancel()
        self.state = ChatState.IDLE

    # Text input
    async def submit_text(self, text: str) -> Optional[ChatExchange]:
        """Idle -> Sending; blank input is ignored"""
        self._require_state(ChatState.IDLE)
        text = (text or "").strip()
        if not text:
            return None
        return await self._run_exchange(text)

    async def _run_exchange(self, text: str) -> ChatExchange:
        self.state = ChatState.SENDING
        user_message = self.transcript.add_user_message(text)

        try:
            try:
                result = self.store.query(text)
            except Exception as e:
                logger.error(f"Error processing message: {e}")
                assistant_message = self.transcript.add_assistant_message(
                    self.config.error_message, {"failed": True}
                )
                return ChatExchange(user_message, assistant_message, failed=True)

            sources = [match.source_label for match in result.matches]
            if result.matches:
                best = result.matches[0]
                spoken_text = best.content
                reply = f"{best.content}{SOURCE_SEPARATOR}{best.source_label}"
            else:
                spoken_text = reply = self.config.fallback_message

            self.state = ChatState.AWAITING_REPLY
            audio = await self._synthesize(spoken_text)

            assistant_message = self.transcript.add_assistant_message(
                reply, {"sources": sources, "audio": audio is not None}
            )
            return ChatExchange(user_message, assistant_message, audio=audio, sources=sources)
        finally:
            self.state = ChatState.IDLE

    async def _synthesize(self, text: str) -> Optional[bytes]:
        """Best-effort speech for a reply; any failure leaves the reply text-only"""
        if not self.config.auto_speak or self.tts_service is None:
            return None
        if self.speak_enabled is not None and not self.speak_enabled():
            return None

        try:
            audio = await asyncio.wait_for(
                self.tts_service.synthesize(text), timeout=self.config.synthesis_timeout
            )
        except SynthesisError as e:
            logger.warning(f"Error with text-to-speech: {e}")
            return None
        except asyncio.TimeoutError:
            logger.warning(f"Text-to-speech timed out after {self.config.synthesis_timeout}s")
            return None
        except Exception as e:
            logger.warning(f"Unexpected text-to-speech failure: {e}")
            return None

        return audio or None

    def get_state(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "voiceAvailable": self.voice_available,
            "captureState": self.capture.state.value,
            "interimText": self.capture.text,
        }
