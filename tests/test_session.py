from __future__ import annotations

import asyncio
import random

from voicewidget.config.settings import KnowledgeConfig, WidgetAppConfig
from voicewidget.core.session import DEFAULT_SESSION_ID, SessionManager, WidgetSession
from voicewidget.knowledge.rankers import KeywordRanker, RandomRanker


def test_get_or_create_returns_same_session(app_config, fake_tts) -> None:
    manager = SessionManager(app_config, tts_service=fake_tts)

    first = manager.get_or_create()
    second = manager.get_or_create(DEFAULT_SESSION_ID)

    assert first is second
    assert first.chat.store is first.store
    assert first.dashboard.store is first.store


def test_sessions_do_not_share_knowledge(app_config) -> None:
    manager = SessionManager(app_config)

    manager.get_or_create("a").store.add_urls(["https://example.com"])

    assert len(manager.get_or_create("b").store) == 0
    assert len(manager.list_sessions()) == 2


def test_reset_starts_over(app_config) -> None:
    manager = SessionManager(app_config)
    old = manager.get_or_create("a")
    old.store.add_urls(["https://example.com"])

    new = manager.reset("a")

    assert new is not old
    assert len(new.store) == 0
    assert manager.get_or_create("a") is new


def test_discard_unknown_session(app_config) -> None:
    manager = SessionManager(app_config)

    assert manager.discard("missing") is False


def test_close_releases_tts(app_config, fake_tts) -> None:
    manager = SessionManager(app_config, tts_service=fake_tts)
    manager.get_or_create()

    asyncio.run(manager.close())

    assert fake_tts.closed
    assert manager.list_sessions() == []


def test_session_uses_configured_ranker() -> None:
    config = WidgetAppConfig(knowledge=KnowledgeConfig(ranker="keyword", top_k=2))

    session = WidgetSession.create("s", config)

    assert isinstance(session.store.ranker, KeywordRanker)
    assert session.store.top_k == 2


def test_session_passes_rng_to_random_ranker(app_config) -> None:
    rng = random.Random(3)

    session = WidgetSession.create("s", app_config, rng=rng)

    assert isinstance(session.store.ranker, RandomRanker)
    assert session.store.ranker.rng is rng


def test_info_reports_counts(app_config) -> None:
    session = WidgetSession.create("s", app_config)
    session.store.add_urls(["https://example.com"])

    info = session.info()

    assert info["sessionId"] == "s"
    assert info["items"] == 1
    assert info["messages"] == 0
    assert info["state"] == "idle"


class _ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_idle_sessions_expire(app_config) -> None:
    app_config.server.session_ttl = 60
    clock = _ManualClock()
    manager = SessionManager(app_config, clock=clock)
    old = manager.get_or_create("a")
    old.store.add_urls(["https://example.com"])

    clock.now = 30
    manager.get_or_create("b")
    clock.now = 61

    assert [info["sessionId"] for info in manager.list_sessions()] == ["b"]
    fresh = manager.get_or_create("a")
    assert fresh is not old
    assert len(fresh.store) == 0


def test_access_keeps_a_session_alive(app_config) -> None:
    app_config.server.session_ttl = 60
    clock = _ManualClock()
    manager = SessionManager(app_config, clock=clock)
    first = manager.get_or_create("a")

    for clock.now in (50, 100, 150):
        assert manager.get_or_create("a") is first


def test_least_recently_used_session_is_evicted_at_cap(app_config) -> None:
    app_config.server.max_sessions = 3
    manager = SessionManager(app_config)
    for session_id in ("a", "b", "c"):
        manager.get_or_create(session_id)
    manager.get_or_create("a")

    manager.get_or_create("d")

    assert len(manager) == 3
    assert {info["sessionId"] for info in manager.list_sessions()} == {"a", "c", "d"}


def test_dashboard_auto_speak_is_read_per_reply(app_config, fake_tts) -> None:
    session = WidgetSession.create("s", app_config, tts_service=fake_tts)

    session.dashboard.update_settings({"autoSpeak": False})
    muted = asyncio.run(session.chat.submit_text("hello"))
    session.dashboard.reset_settings()
    spoken = asyncio.run(session.chat.submit_text("hello again"))

    assert muted.audio is None
    assert spoken.audio == fake_tts.audio
    assert fake_tts.calls == [spoken.assistant_message.content]
