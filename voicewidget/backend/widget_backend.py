"""
Widget Backend Handlers

HTTP endpoints behind the chat widget and the admin dashboard: knowledge
management, the chat flow (text and voice), speech voices, dashboard data,
and embed snippet generation. Every handler answers with a JSON envelope
carrying "success"; failures never take the server down.
"""

import json
import logging
from typing import Any, Dict, List

from aiohttp import hdrs, web

from ..config.settings import WidgetAppConfig
from ..core.session import DEFAULT_SESSION_ID, SessionManager, WidgetSession
from ..embed.generator import EmbedConfig, EmbedFormat, generate
from ..embed.loader import render_loader_script
from ..errors import ChatStateError, SynthesisError, ValidationError
from ..knowledge.models import FileDescriptor
from ..knowledge.validation import partition_files
from ..services.tts_service import TTSService

logger = logging.getLogger("voicewidget.backend")

SESSION_HEADER = "X-Widget-Session"

CONFIG_KEY = web.AppKey("config", WidgetAppConfig)
SESSIONS_KEY = web.AppKey("sessions", SessionManager)
TTS_KEY = web.AppKey("tts", TTSService)


def _error_response(e: Exception, where: str) -> web.Response:
    """Translate an exception into the JSON error envelope"""
    if isinstance(e, ValidationError):
        status = 400
    elif isinstance(e, ChatStateError):
        status = 409
    elif isinstance(e, SynthesisError):
        status = 502
    else:
        status = 500

    if status == 500:
        logger.error(f"Error in {where}: {e}")
    else:
        logger.info(f"{where} rejected request ({status}): {e}")

    return web.json_response({'success': False, 'error': str(e)}, status=status)


async def _read_json(request: web.Request) -> Dict[str, Any]:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid JSON body: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data


def _session(request: web.Request) -> WidgetSession:
    session_id = request.headers.get(SESSION_HEADER) or DEFAULT_SESSION_ID
    return request.app[SESSIONS_KEY].get_or_create(session_id)


async def _read_upload_descriptors(request: web.Request) -> List[FileDescriptor]:
    """File descriptors from a multipart upload; content is measured, not parsed"""
    descriptors = []
    reader = await request.multipart()
    async for part in reader:
        if getattr(part, "filename", None) is None:
            continue
        size = 0
        while True:
            chunk = await part.read_chunk()
            if not chunk:
                break
            size += len(chunk)
        mime_type = part.headers.get(hdrs.CONTENT_TYPE, "")
        descriptors.append(FileDescriptor(name=part.filename, mime_type=mime_type, size_bytes=size))
    return descriptors


# Knowledge base
async def handle_list_knowledge(request):
    """List connected knowledge items"""
    try:
        session = _session(request)
        return web.json_response({
            'success': True,
            'items': [item.to_dict() for item in session.store.list_items()],
            'stats': session.store.stats().to_dict(),
        })
    except Exception as e:
        return _error_response(e, "handle_list_knowledge")


async def handle_knowledge_stats(request):
    try:
        session = _session(request)
        return web.json_response({'success': True, 'stats': session.store.stats().to_dict()})
    except Exception as e:
        return _error_response(e, "handle_knowledge_stats")


async def handle_add_files(request):
    """Register uploaded files; oversized or unsupported files are rejected individually"""
    try:
        session = _session(request)
        config = request.app[CONFIG_KEY]

        if request.content_type.startswith("multipart/"):
            descriptors = await _read_upload_descriptors(request)
        else:
            data = await _read_json(request)
            files = data.get('files')
            if not isinstance(files, list):
                raise ValidationError("Expected a 'files' list")
            try:
                descriptors = [FileDescriptor.from_dict(entry) for entry in files]
            except (TypeError, ValueError, AttributeError) as e:
                raise ValidationError(f"Invalid file descriptor: {e}") from e

        if not descriptors:
            raise ValidationError("No files provided")

        accepted, rejected = partition_files(
            descriptors,
            max_size=config.knowledge.max_file_size,
            allowed_types=config.knowledge.allowed_types,
        )
        added = session.store.add_files(accepted)

        return web.json_response({
            'success': True,
            'added': [item.to_dict() for item in added],
            'rejected': [{'name': d.name, 'error': str(err)} for d, err in rejected],
        })
    except Exception as e:
        return _error_response(e, "handle_add_files")


async def handle_add_urls(request):
    """Register URLs; one invalid URL rejects the whole batch"""
    try:
        session = _session(request)
        data = await _read_json(request)
        urls = data.get('urls')
        if isinstance(urls, str):
            urls = [urls]
        if not isinstance(urls, list) or not urls:
            raise ValidationError("No URLs provided")

        added = session.store.add_urls(urls)
        return web.json_response({'success': True, 'added': [item.to_dict() for item in added]})
    except Exception as e:
        return _error_response(e, "handle_add_urls")


async def handle_remove_item(request):
    """Remove one item; unknown ids still succeed"""
    try:
        session = _session(request)
        removed = session.store.remove(request.match_info['item_id'])
        return web.json_response({'success': True, 'removed': removed})
    except Exception as e:
        return _error_response(e, "handle_remove_item")


async def handle_clear_knowledge(request):
    try:
        session = _session(request)
        session.store.clear()
        return web.json_response({'success': True})
    except Exception as e:
        return _error_response(e, "handle_clear_knowledge")


async def handle_query(request):
    try:
        session = _session(request)
        data = await _read_json(request)
        query = data.get('query')
        if not isinstance(query, str):
            raise ValidationError("Expected a 'query' string")

        result = session.store.query(query)
        return web.json_response({'success': True, 'result': result.to_dict()})
    except Exception as e:
        return _error_response(e, "handle_query")


# Chat
async def handle_chat_message(request):
    """Text input: run one exchange and return it"""
    try:
        session = _session(request)
        data = await _read_json(request)
        text = data.get('text', '')
        if not isinstance(text, str):
            raise ValidationError("Expected a 'text' string")

        exchange = await session.chat.submit_text(text)
        return web.json_response({
            'success': True,
            'exchange': exchange.to_dict() if exchange else None,
            'state': session.chat.get_state(),
        })
    except Exception as e:
        return _error_response(e, "handle_chat_message")


async def handle_voice_start(request):
    try:
        session = _session(request)
        listening = session.chat.start_voice()
        return web.json_response({
            'success': True,
            'listening': listening,
            'state': session.chat.get_state(),
        })
    except Exception as e:
        return _error_response(e, "handle_voice_start")


async def handle_voice_interim(request):
    """Interim recognizer text, or notice that the recognizer ended on its own"""
    try:
        session = _session(request)
        data = await _read_json(request)
        text = data.get('text')
        if text is not None:
            if not isinstance(text, str):
                raise ValidationError("Expected a 'text' string")
            session.chat.update_voice(text)

        restart = session.chat.handle_voice_end() if data.get('ended') else False
        return web.json_response({
            'success': True,
            'restart': restart,
            'state': session.chat.get_state(),
        })
    except Exception as e:
        return _error_response(e, "handle_voice_interim")


async def handle_voice_stop(request):
    try:
        session = _session(request)
        exchange = await session.chat.stop_voice()
        return web.json_response({
            'success': True,
            'exchange': exchange.to_dict() if exchange else None,
            'state': session.chat.get_state(),
        })
    except Exception as e:
        return _error_response(e, "handle_voice_stop")


async def handle_voice_cancel(request):
    try:
        session = _session(request)
        session.chat.cancel_voice()
        return web.json_response({'success': True, 'state': session.chat.get_state()})
    except Exception as e:
        return _error_response(e, "handle_voice_cancel")


async def handle_transcript(request):
    try:
        session = _session(request)
        return web.json_response({
            'success': True,
            'messages': session.chat.transcript.to_dict()['messages'],
            'state': session.chat.get_state(),
        })
    except Exception as e:
        return _error_response(e, "handle_transcript")


async def handle_list_voices(request):
    try:
        tts_service = request.app[TTS_KEY]
        voices = await tts_service.list_voices()
        return web.json_response({
            'success': True,
            'provider': tts_service.get_provider_info(),
            'voices': voices,
        })
    except Exception as e:
        return _error_response(e, "handle_list_voices")


# Dashboard
async def handle_dashboard(request):
    try:
        session = _session(request)
        return web.json_response({'success': True, 'dashboard': session.dashboard.snapshot()})
    except Exception as e:
        return _error_response(e, "handle_dashboard")


async def handle_update_settings(request):
    try:
        session = _session(request)
        data = await _read_json(request)
        settings = session.dashboard.update_settings(data)
        return web.json_response({'success': True, 'settings': settings.to_dict()})
    except Exception as e:
        return _error_response(e, "handle_update_settings")


async def handle_reset_settings(request):
    try:
        session = _session(request)
        settings = session.dashboard.reset_settings()
        return web.json_response({'success': True, 'settings': settings.to_dict()})
    except Exception as e:
        return _error_response(e, "handle_reset_settings")


# Embed
async def handle_embed(request):
    """Generate an embed snippet from a config, or from the dashboard settings"""
    try:
        session = _session(request)
        server_config = request.app[CONFIG_KEY].server
        data = await _read_json(request)

        embed_format = EmbedFormat.parse(data.get('format', EmbedFormat.MARKUP.value))
        raw_config = data.get('config')
        if raw_config is None:
            config = session.dashboard.settings.to_embed_config(api_key=data.get('apiKey', ''))
        elif isinstance(raw_config, dict):
            config = EmbedConfig.from_dict(raw_config)
        else:
            raise ValidationError("'config' must be an object")

        code = generate(embed_format, config, script_url=server_config.loader_url)
        return web.json_response({'success': True, 'format': embed_format.value, 'code': code})
    except Exception as e:
        return _error_response(e, "handle_embed")


async def handle_loader_script(request):
    """Serve widget-loader.js"""
    server_config = request.app[CONFIG_KEY].server
    return web.Response(
        text=render_loader_script(server_config.widget_host_url),
        content_type='application/javascript',
    )


# Session
async def handle_session_reset(request):
    try:
        session_id = request.headers.get(SESSION_HEADER) or DEFAULT_SESSION_ID
        session = request.app[SESSIONS_KEY].reset(session_id)
        return web.json_response({'success': True, 'session': session.info()})
    except Exception as e:
        return _error_response(e, "handle_session_reset")


async def handle_health_check(request):
    """Health check endpoint"""
    return web.json_response({
        'status': 'healthy',
        'service': 'voicewidget-backend',
        'tts': request.app[TTS_KEY].get_provider_info(),
        'sessions': len(request.app[SESSIONS_KEY].list_sessions()),
    })
