# Service layer components

from .tts_service import BaseTTSService, ElevenLabsTTSService, GTTSTTSService, TTSService

__all__ = [
    'BaseTTSService', 'ElevenLabsTTSService', 'GTTSTTSService', 'TTSService',
]
