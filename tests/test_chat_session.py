from __future__ import annotations

import asyncio
import base64

import pytest

from voicewidget.config.settings import ChatConfig
from voicewidget.core.capture import CaptureSession, CaptureState
from voicewidget.core.chat_session import SOURCE_SEPARATOR, ChatSession, ChatState
from voicewidget.errors import ChatStateError, SynthesisError
from voicewidget.knowledge.rankers import BaseRanker
from voicewidget.knowledge.store import KnowledgeStore

from .conftest import FakeTTSService


def test_text_exchange_cites_the_source(store, faq_file, fake_tts) -> None:
    store.add_files([faq_file])
    chat = ChatSession(store, tts_service=fake_tts)

    exchange = asyncio.run(chat.submit_text("refund policy"))

    assert exchange.user_message.content == "refund policy"
    assert exchange.assistant_message.content.endswith(f"{SOURCE_SEPARATOR}faq.pdf")
    assert exchange.sources == ["faq.pdf"]
    assert exchange.audio == fake_tts.audio
    assert chat.state is ChatState.IDLE


def test_spoken_text_excludes_source_citation(store, faq_file, fake_tts) -> None:
    store.add_files([faq_file])
    chat = ChatSession(store, tts_service=fake_tts)

    asyncio.run(chat.submit_text("refund policy"))

    assert len(fake_tts.calls) == 1
    assert "Source:" not in fake_tts.calls[0]
    assert "refund policy" in fake_tts.calls[0]


def test_empty_store_gives_fallback_reply(store, fake_tts) -> None:
    config = ChatConfig()
    chat = ChatSession(store, tts_service=fake_tts, config=config)

    exchange = asyncio.run(chat.submit_text("hello"))

    assert exchange.assistant_message.content == config.fallback_message
    assert exchange.sources == []
    assert not exchange.failed


def test_blank_text_is_ignored(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts)

    assert asyncio.run(chat.submit_text("   ")) is None
    assert len(chat.transcript) == 0
    assert fake_tts.calls == []


def test_synthesis_failure_keeps_text_reply(store, faq_file) -> None:
    store.add_files([faq_file])
    tts = FakeTTSService(error=SynthesisError("quota exceeded", status=401))
    chat = ChatSession(store, tts_service=tts)

    exchange = asyncio.run(chat.submit_text("refund policy"))

    assert exchange.audio is None
    assert "faq.pdf" in exchange.assistant_message.content
    assert exchange.assistant_message.metadata["audio"] is False
    assert chat.state is ChatState.IDLE


def test_synthesis_timeout_keeps_text_reply(store, faq_file) -> None:
    store.add_files([faq_file])
    tts = FakeTTSService(delay=1.0)
    chat = ChatSession(store, tts_service=tts, config=ChatConfig(synthesis_timeout=0.01))

    exchange = asyncio.run(chat.submit_text("refund policy"))

    assert exchange.audio is None
    assert [m.role for m in chat.transcript] == ["user", "assistant"]
    assert chat.state is ChatState.IDLE


def test_auto_speak_off_skips_synthesis(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts, config=ChatConfig(auto_speak=False))

    exchange = asyncio.run(chat.submit_text("hello"))

    assert exchange.audio is None
    assert fake_tts.calls == []


def test_query_failure_appends_error_reply(fake_tts) -> None:
    class BrokenRanker(BaseRanker):
        name = "broken"

        def rank(self, query, items):
            raise RuntimeError("boom")

    store = KnowledgeStore(ranker=BrokenRanker())
    store.add_urls(["https://example.com"])
    config = ChatConfig()
    chat = ChatSession(store, tts_service=fake_tts, config=config)

    exchange = asyncio.run(chat.submit_text("hello"))

    assert exchange.failed
    assert exchange.assistant_message.content == config.error_message
    assert exchange.assistant_message.metadata == {"failed": True}
    assert chat.state is ChatState.IDLE
    assert fake_tts.calls == []


def test_transcript_alternates_user_and_assistant(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts)

    async def talk():
        for text in ("one", "two", "three"):
            await chat.submit_text(text)

    asyncio.run(talk())

    messages = chat.transcript.messages
    assert [m.role for m in messages] == ["user", "assistant"] * 3
    assert [m.content for m in messages if m.role == "user"] == ["one", "two", "three"]


def test_voice_flow_submits_captured_text(store, faq_file, fake_tts) -> None:
    store.add_files([faq_file])
    chat = ChatSession(store, tts_service=fake_tts)

    assert chat.start_voice() is True
    assert chat.state is ChatState.LISTENING
    chat.update_voice("refund")
    chat.update_voice("refund policy ")
    assert chat.get_state()["interimText"] == "refund policy "

    exchange = asyncio.run(chat.stop_voice())

    assert exchange.user_message.content == "refund policy"
    assert chat.state is ChatState.IDLE
    assert chat.capture.state is CaptureState.STOPPED


def test_voice_stop_without_speech_returns_to_idle(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts)
    chat.start_voice()

    assert asyncio.run(chat.stop_voice()) is None
    assert chat.state is ChatState.IDLE
    assert len(chat.transcript) == 0


def test_voice_cancel_discards_text(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts)
    chat.start_voice()
    chat.update_voice("never mind")

    chat.cancel_voice()

    assert chat.state is ChatState.IDLE
    assert chat.capture.state is CaptureState.CANCELLED
    assert len(chat.transcript) == 0


def test_recognizer_end_restarts_while_listening(store) -> None:
    chat = ChatSession(store)
    assert chat.handle_voice_end() is False

    chat.start_voice()
    assert chat.handle_voice_end() is True
    assert chat.handle_voice_end() is True
    assert chat.capture.restarts == 2
    assert chat.state is ChatState.LISTENING


def test_voice_unavailable_stays_idle(store) -> None:
    chat = ChatSession(store, capture=CaptureSession(available=False))

    assert chat.start_voice() is False
    assert chat.state is ChatState.IDLE
    assert chat.get_state()["voiceAvailable"] is False


def test_text_rejected_while_listening(store) -> None:
    chat = ChatSession(store)
    chat.start_voice()

    with pytest.raises(ChatStateError):
        asyncio.run(chat.submit_text("hello"))
    assert chat.state is ChatState.LISTENING


def test_stop_voice_rejected_when_idle(store) -> None:
    chat = ChatSession(store)

    with pytest.raises(ChatStateError):
        asyncio.run(chat.stop_voice())
    with pytest.raises(ChatStateError):
        chat.cancel_voice()


def test_state_is_awaiting_reply_during_synthesis(store) -> None:
    seen = []

    class RecordingTTS(FakeTTSService):
        async def synthesize(self, text, voice_id=None):
            seen.append(chat.state)
            return b"audio"

    chat = ChatSession(store, tts_service=RecordingTTS())
    asyncio.run(chat.submit_text("hello"))

    assert seen == [ChatState.AWAITING_REPLY]


def test_exchange_to_dict_encodes_audio(store, fake_tts) -> None:
    chat = ChatSession(store, tts_service=fake_tts)

    data = asyncio.run(chat.submit_text("hello")).to_dict()

    assert base64.b64decode(data["audio"]) == fake_tts.audio
    assert data["user"]["role"] == "user"
    assert data["assistant"]["role"] == "assistant"


def test_unexpected_synthesis_error_keeps_text_reply(store, faq_file) -> None:
    store.add_files([faq_file])
    chat = ChatSession(store, tts_service=FakeTTSService(error=RuntimeError("boom")))

    exchange = asyncio.run(chat.submit_text("refund policy"))

    assert exchange.audio is None
    assert "faq.pdf" in exchange.assistant_message.content
    assert [m.role for m in chat.transcript] == ["user", "assistant"]
    assert chat.state is ChatState.IDLE
