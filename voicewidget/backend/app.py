import logging
import random
from typing import Optional

from aiohttp import web

from ..config.settings import WidgetAppConfig, create_config_from_env
from ..core.session import SessionManager
from ..services.tts_service import TTSService
from .widget_backend import (
    CONFIG_KEY,
    SESSIONS_KEY,
    TTS_KEY,
    SESSION_HEADER,
    handle_add_files,
    handle_add_urls,
    handle_chat_message,
    handle_clear_knowledge,
    handle_dashboard,
    handle_embed,
    handle_health_check,
    handle_knowledge_stats,
    handle_list_knowledge,
    handle_list_voices,
    handle_loader_script,
    handle_query,
    handle_remove_item,
    handle_reset_settings,
    handle_session_reset,
    handle_transcript,
    handle_update_settings,
    handle_voice_cancel,
    handle_voice_interim,
    handle_voice_start,
    handle_voice_stop,
)

logger = logging.getLogger("voicewidget")


def create_app(config: Optional[WidgetAppConfig] = None,
               tts_service: Optional[TTSService] = None,
               rng: Optional[random.Random] = None) -> web.Application:
    """Create the widget backend application"""
    config = config or create_config_from_env()
    config.validate()

    app = web.Application(client_max_size=config.server.client_max_size)

    tts_service = tts_service or TTSService(config.tts)
    app[CONFIG_KEY] = config
    app[TTS_KEY] = tts_service
    app[SESSIONS_KEY] = SessionManager(config, tts_service=tts_service, rng=rng)

    async def close_sessions(app):
        await app[SESSIONS_KEY].close()

    app.on_cleanup.append(close_sessions)

    # Knowledge base
    app.router.add_get('/api/knowledge', handle_list_knowledge)
    app.router.add_delete('/api/knowledge', handle_clear_knowledge)
    app.router.add_get('/api/knowledge/stats', handle_knowledge_stats)
    app.router.add_post('/api/knowledge/files', handle_add_files)
    app.router.add_post('/api/knowledge/urls', handle_add_urls)
    app.router.add_post('/api/knowledge/query', handle_query)
    app.router.add_delete('/api/knowledge/{item_id}', handle_remove_item)

    # Chat
    app.router.add_post('/api/chat/message', handle_chat_message)
    app.router.add_post('/api/chat/voice/start', handle_voice_start)
    app.router.add_post('/api/chat/voice/interim', handle_voice_interim)
    app.router.add_post('/api/chat/voice/stop', handle_voice_stop)
    app.router.add_post('/api/chat/voice/cancel', handle_voice_cancel)
    app.router.add_get('/api/chat/transcript', handle_transcript)
    app.router.add_get('/api/tts/voices', handle_list_voices)

    # Dashboard and embedding
    app.router.add_get('/api/dashboard', handle_dashboard)
    app.router.add_put('/api/dashboard/settings', handle_update_settings)
    app.router.add_post('/api/dashboard/settings/reset', handle_reset_settings)
    app.router.add_post('/api/embed', handle_embed)
    app.router.add_get('/widget-loader.js', handle_loader_script)

    app.router.add_post('/api/session/reset', handle_session_reset)
    app.router.add_get('/api/health', handle_health_check)

    cors_headers = {
        'Access-Control-Allow-Origin': config.server.cors_origin,
        'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, OPTIONS',
        'Access-Control-Allow-Headers': f'Content-Type, {SESSION_HEADER}',
    }

    # Enable CORS for API endpoints
    @web.middleware
    async def cors_handler(request, handler):
        response = await handler(request)
        if request.path.startswith('/api/') or request.path == '/widget-loader.js':
            response.headers.update(cors_headers)
        return response

    app.middlewares.append(cors_handler)

    # Handle OPTIONS requests for CORS
    async def options_handler(request):
        return web.Response(headers=cors_headers)

    app.router.add_route('OPTIONS', '/api/{path:.*}', options_handler)

    return app


def main():
    config = create_config_from_env()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    if not config.tts.api_key and config.tts.provider == "elevenlabs":
        logger.warning("ELEVENLABS_API_KEY is not set; replies will be text-only")

    logger.info(f"Starting widget backend on {config.server.host}:{config.server.port}")
    web.run_app(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
