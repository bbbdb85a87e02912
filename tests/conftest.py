from __future__ import annotations

import asyncio
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from voicewidget.config.settings import ChatConfig, TTSConfig, WidgetAppConfig
from voicewidget.knowledge.models import FileDescriptor
from voicewidget.knowledge.store import KnowledgeStore


class FakeTTSService:
    """Stands in for TTSService; records what it was asked to speak."""

    def __init__(self, audio: bytes = b"ID3-fake-audio", error: Optional[Exception] = None,
                 delay: float = 0.0):
        self.audio = audio
        self.error = error
        self.delay = delay
        self.calls: List[str] = []
        self.closed = False

    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.audio

    async def list_voices(self) -> List[Dict[str, Any]]:
        return [{"voice_id": "21m00Tcm4TlvDq8ikWAM", "name": "Rachel"}]

    def get_provider_info(self) -> Dict[str, Any]:
        return {"provider": "fake", "configured": True}

    async def close(self) -> None:
        self.closed = True


class SteppingClock:
    """Deterministic clock; a negative step makes it run backwards."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def fake_tts() -> FakeTTSService:
    return FakeTTSService()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def store(rng) -> KnowledgeStore:
    from voicewidget.knowledge.rankers import RandomRanker
    return KnowledgeStore(ranker=RandomRanker(rng))


@pytest.fixture
def faq_file() -> FileDescriptor:
    return FileDescriptor(name="faq.pdf", mime_type="application/pdf", size_bytes=2048)


@pytest.fixture
def app_config() -> WidgetAppConfig:
    return WidgetAppConfig(
        tts=TTSConfig(api_key="test-key"),
        chat=ChatConfig(synthesis_timeout=2.0),
    )
