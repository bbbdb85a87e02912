from __future__ import annotations

import asyncio

from voicewidget.text_assistant import TextAssistant


def _assistant(app_config, fake_tts) -> TextAssistant:
    return TextAssistant(app_config, tts_service=fake_tts)


def test_add_list_and_stats(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)

    added = asyncio.run(assistant.handle_line("add https://example.com/docs"))
    listing = asyncio.run(assistant.handle_line("list"))
    stats = asyncio.run(assistant.handle_line("stats"))

    assert "https://example.com/docs" in added
    assert "https://example.com/docs" in listing
    assert stats.startswith("Items: 1 (files: 0, urls: 1)")


def test_invalid_url_reports_error(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)

    output = asyncio.run(assistant.handle_line("add not-a-url"))

    assert output.startswith("❌")
    assert len(assistant.session.store) == 0


def test_remove_and_clear(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)
    item = assistant.session.store.add_urls(["https://a.example.com", "https://b.example.com"])[0]

    asyncio.run(assistant.handle_line(f"remove {item.id}"))
    assert len(assistant.session.store) == 1

    asyncio.run(assistant.handle_line("clear"))
    assert asyncio.run(assistant.handle_line("list")) == "Knowledge base is empty."


def test_free_text_is_a_chat_message(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)
    assistant.session.store.add_urls(["https://example.com/faq"])

    output = asyncio.run(assistant.handle_line("What are your opening hours?"))

    assert "Source: https://example.com/faq" in output
    assert f"{len(fake_tts.audio)} bytes of audio" in output
    assert fake_tts.calls


def test_embed_command(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)

    markup = asyncio.run(assistant.handle_line("embed"))
    plugin = asyncio.run(assistant.handle_line("embed wordpress"))
    bad = asyncio.run(assistant.handle_line("embed vue"))

    assert markup.startswith("<!-- AI Assistant Widget -->")
    assert plugin.startswith("<?php")
    assert bad.startswith("❌")


def test_exit_and_help(app_config, fake_tts) -> None:
    assistant = _assistant(app_config, fake_tts)
    assistant.conversation_active = True

    assert "Available Commands" in asyncio.run(assistant.handle_line("help"))
    assert asyncio.run(assistant.handle_line("quit")).startswith("Goodbye")
    assert assistant.conversation_active is False
    assert asyncio.run(assistant.handle_line("   ")) == ""
