"""
Text-to-Speech Service Module

Provides a unified interface for different TTS providers. ElevenLabs is the
default remote voice; gTTS works without an API key.
"""

import asyncio
import io
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp
from gtts import gTTS, gTTSError
from gtts.lang import tts_langs

from ..config.settings import TTSConfig
from ..errors import SynthesisError

logger = logging.getLogger(__name__)


class BaseTTSService(ABC):
    """Abstract base class for TTS services"""

    provider = "base"

    def __init__(self, config: TTSConfig):
        self.config = config

    @abstractmethod
    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """Convert text to audio bytes"""
        raise NotImplementedError

    @abstractmethod
    async def list_voices(self) -> List[Dict[str, Any]]:
        """List voices offered by the provider"""
        raise NotImplementedError

    def update_config(self, new_config: TTSConfig) -> None:
        """Update TTS configuration"""
        new_config.validate()
        self.config = new_config

    async def close(self) -> None:
        """Clean up resources"""
        return None


class ElevenLabsTTSService(BaseTTSService):
    """ElevenLabs text-to-speech over HTTP"""

    provider = "elevenlabs"

    def __init__(self, config: TTSConfig, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(config)
        self._session = session
        self._owns_session = session is None

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        if not self.config.api_key:
            raise SynthesisError("ElevenLabs API key is not configured")
        return {
            "Content-Type": "application/json",
            "Accept": accept,
            "xi-api-key": self.config.api_key,
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._session

    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """
        Convert text to speech

        Args:
            text: Text to speak
            voice_id: Voice to use (configured default if None)

        Returns:
            bytes: MPEG audio

        Raises:
            SynthesisError: on missing key, network failure or non-success status
        """
        if not text.strip():
            return b""

        voice = voice_id or self.config.voice_id
        url = f"{self.config.base_url.rstrip('/')}/text-to-speech/{voice}"
        payload = {
            "text": text,
            "model_id": self.config.model_id,
            "voice_settings": {
                "stability": self.config.stability,
                "similarity_boost": self.config.similarity_boost,
            },
        }
        headers = self._headers(accept="audio/mpeg")

        try:
            session = self._get_session()
            async with session.post(url, json=payload, headers=headers,
                                    timeout=aiohttp.ClientTimeout(total=self.config.timeout)) as response:
                if response.status != 200:
                    detail = await response.text()
                    raise SynthesisError(
                        f"ElevenLabs returned {response.status}: {detail[:200]}",
                        status=response.status,
                    )
                audio = await response.read()
        except aiohttp.ClientError as e:
            raise SynthesisError(f"Error with ElevenLabs API: {e}") from e
        except asyncio.TimeoutError as e:
            raise SynthesisError("ElevenLabs request timed out") from e

        logger.info(f"Synthesized {len(audio)} bytes of audio for {len(text)} characters")
        return audio

    async def list_voices(self) -> List[Dict[str, Any]]:
        """Get available voices from the ElevenLabs API"""
        url = f"{self.config.base_url.rstrip('/')}/voices"
        headers = self._headers()

        try:
            session = self._get_session()
            async with session.get(url, headers=headers) as response:
                if response.status != 200:
                    raise SynthesisError(
                        f"ElevenLabs voices request returned {response.status}",
                        status=response.status,
                    )
                data = await response.json()
        except aiohttp.ClientError as e:
            raise SynthesisError(f"Error fetching voices: {e}") from e
        except asyncio.TimeoutError as e:
            raise SynthesisError("ElevenLabs voices request timed out") from e

        return data.get("voices", [])

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


class GTTSTTSService(BaseTTSService):
    """Google Text-to-Speech service, no API key required"""

    provider = "gtts"

    def _render(self, text: str, language: str) -> bytes:
        buffer = io.BytesIO()
        tts = gTTS(text=text, lang=language, tld=self.config.tld, slow=False)
        tts.write_to_fp(buffer)
        return buffer.getvalue()

    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """Render text to MP3; voice_id selects the language when given"""
        if not text.strip():
            return b""

        language = voice_id or self.config.language
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._render, text, language)
        except (gTTSError, ValueError, AssertionError) as e:
            raise SynthesisError(f"gTTS synthesis failed: {e}") from e

    async def list_voices(self) -> List[Dict[str, Any]]:
        return [
            {"voice_id": code, "name": name}
            for code, name in sorted(tts_langs().items())
        ]


class TTSService:
    """
    Main TTS service interface that manages different TTS providers
    """

    def __init__(self,
                 config: TTSConfig = None,
                 provider: Optional[str] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize TTS service

        Args:
            config: TTS configuration
            provider: TTS provider override ('elevenlabs' or 'gtts')
            session: Optional shared HTTP session for remote providers
        """
        self.config = config or TTSConfig()
        self.provider = provider or self.config.provider
        self.service: Optional[BaseTTSService] = None

        self._initialize_service(session)

    def _initialize_service(self, session: Optional[aiohttp.ClientSession]) -> None:
        """Initialize the appropriate TTS service"""
        if self.provider == "elevenlabs":
            self.service = ElevenLabsTTSService(self.config, session=session)
        elif self.provider == "gtts":
            self.service = GTTSTTSService(self.config)
        else:
            raise ValueError(f"Unknown TTS provider: {self.provider}")

    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """Synthesize text using the configured TTS service"""
        return await self.service.synthesize(text, voice_id)

    async def list_voices(self) -> List[Dict[str, Any]]:
        return await self.service.list_voices()

    def update_config(self, new_config: TTSConfig) -> None:
        """Update TTS configuration"""
        self.service.update_config(new_config)
        self.config = new_config

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "voice_id": self.config.voice_id,
            "model_id": self.config.model_id,
            "configured": bool(self.config.api_key) or self.provider == "gtts",
        }

    async def close(self) -> None:
        """Clean up TTS service resources"""
        if self.service:
            await self.service.close()
