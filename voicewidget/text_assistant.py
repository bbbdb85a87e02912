#!/usr/bin/env python3
"""
Text Assistant

Console version of the chat widget for trying the knowledge flow without a
browser. Replies are synthesized when a TTS provider is configured, but the
audio is only reported, not played.
"""

import asyncio
import logging

from .config.settings import WidgetAppConfig, create_config_from_env
from .core.session import WidgetSession
from .embed.generator import generate
from .errors import ValidationError, WidgetError
from .services.tts_service import TTSService

logger = logging.getLogger(__name__)

HELP_TEXT = """
=== Available Commands ===
Conversation:
  Just type naturally to ask the assistant
Knowledge base:
  add <url> [url ...]  - Connect one or more URLs
  list                 - Show connected items
  stats                - Show knowledge base statistics
  remove <id>          - Remove an item
  clear                - Remove every item
Embedding:
  embed [markup|component|plugin] - Print an embed snippet
Control:
  help                 - Show this help
  exit/quit            - End session
==========================
"""


class TextAssistant:
    """Text-based widget session for the console"""

    def __init__(self, config: WidgetAppConfig = None, tts_service: TTSService = None):
        self.config = config or create_config_from_env()
        self.tts_service = tts_service or TTSService(self.config.tts)
        self.session = WidgetSession.create("console", self.config, self.tts_service)
        self.conversation_active = False

    async def handle_line(self, line: str) -> str:
        """Process one line of input and return what to print"""
        words = line.split()
        if not words:
            return ""

        command, args = words[0].lower(), words[1:]
        store = self.session.store

        if command in ("exit", "quit"):
            self.conversation_active = False
            return "Goodbye! Thanks for chatting!"

        if command == "help":
            return HELP_TEXT.strip()

        if command == "add" and args:
            try:
                added = store.add_urls(args)
            except ValidationError as e:
                return f"❌ {e}"
            return "\n".join(f"✓ Added {item.url} ({item.id})" for item in added)

        if command == "list":
            items = [f"  {item.id}  {item.kind:<4}  {item.label}" for item in store.list_items()]
            return "\n".join(items) if items else "Knowledge base is empty."

        if command == "stats":
            stats = store.stats()
            updated = stats.last_updated_at.isoformat() if stats.last_updated_at else "never"
            return (f"Items: {stats.total_items} (files: {stats.file_count}, "
                    f"urls: {stats.url_count}), last updated: {updated}")

        if command == "remove" and len(args) == 1:
            store.remove(args[0])
            return f"✓ Removed {args[0]}"

        if command == "clear":
            store.clear()
            return "✓ Knowledge base cleared"

        if command == "embed" and len(args) <= 1:
            try:
                config = self.session.dashboard.settings.to_embed_config()
                return generate(args[0] if args else "markup", config,
                                script_url=self.config.server.loader_url)
            except ValidationError as e:
                return f"❌ {e}"

        exchange = await self.session.chat.submit_text(line)
        if exchange is None:
            return ""
        reply = f"🤖 {exchange.assistant_message.content}"
        if exchange.audio:
            reply += f"\n🔊 ({len(exchange.audio)} bytes of audio)"
        return reply

    async def run(self) -> None:
        """Main conversation loop"""
        print("=== ⌨️  Widget Text Assistant ===")
        print("Type 'help' for commands, 'exit' to quit.\n")
        print(f"🤖 {self.session.dashboard.settings.welcome_message}\n")

        self.conversation_active = True
        loop = asyncio.get_running_loop()
        try:
            while self.conversation_active:
                try:
                    line = await loop.run_in_executor(None, input, "👤 You: ")
                except EOFError:
                    break
                try:
                    output = await self.handle_line(line.strip())
                except WidgetError as e:
                    output = f"❌ {e}"
                if output:
                    print(f"{output}\n")
        finally:
            await self.tts_service.close()


def main():
    """Main entry point"""
    config = create_config_from_env()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    try:
        asyncio.run(TextAssistant(config).run())
    except KeyboardInterrupt:
        print("\n👋 Text assistant interrupted. Goodbye!")


if __name__ == "__main__":
    main()
