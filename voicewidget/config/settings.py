"""
Configuration Management for the Voice Widget

Centralized configuration handling with environment variable support,
validation, and easy customization.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


DEFAULT_ELEVENLABS_URL = "https://api.elevenlabs.io/v1"
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
DEFAULT_MODEL_ID = "eleven_monolingual_v1"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class TTSConfig:
    """Configuration for speech synthesis"""
    provider: str = "elevenlabs"  # elevenlabs, gtts
    api_key: Optional[str] = None
    base_url: str = DEFAULT_ELEVENLABS_URL
    voice_id: str = DEFAULT_VOICE_ID
    model_id: str = DEFAULT_MODEL_ID
    stability: float = 0.5
    similarity_boost: float = 0.5
    timeout: float = 15.0  # seconds, whole request

    # gTTS fallback settings
    language: str = "en"
    tld: str = "com"

    def __post_init__(self):
        """Load the API key from the environment when not given"""
        if self.api_key is None:
            self.api_key = os.getenv("ELEVENLABS_API_KEY")

    def validate(self) -> bool:
        """Validate configuration"""
        if self.provider not in ["elevenlabs", "gtts"]:
            raise ValueError(f"Unsupported TTS provider: {self.provider}")

        if not (0.0 <= self.stability <= 1.0):
            raise ValueError("stability must be between 0.0 and 1.0")

        if not (0.0 <= self.similarity_boost <= 1.0):
            raise ValueError("similarity_boost must be between 0.0 and 1.0")

        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

        valid_tlds = ["com", "com.au", "co.uk", "us", "ca", "co.in", "ie", "co.za"]
        if self.tld not in valid_tlds:
            raise ValueError(f"TLD must be one of: {valid_tlds}")

        return True


@dataclass
class KnowledgeConfig:
    """Configuration for the knowledge store"""
    max_file_size: int = 10 * 1024 * 1024  # 10MB per file
    allowed_types: Tuple[str, ...] = ("pdf", "word", "text/plain")
    ranker: str = "random"  # random, keyword
    top_k: int = 1

    def validate(self) -> bool:
        """Validate configuration"""
        if self.max_file_size <= 0:
            raise ValueError("max_file_size must be positive")

        if self.ranker not in ["random", "keyword"]:
            raise ValueError(f"Unsupported ranker: {self.ranker}")

        if self.top_k <= 0:
            raise ValueError("top_k must be positive")

        return True


@dataclass
class ChatConfig:
    """Configuration for the chat interaction flow"""
    auto_speak: bool = True
    synthesis_timeout: float = 20.0
    fallback_message: str = (
        "I don't have specific information about that in my knowledge base. "
        "Please try a different question or upload relevant documents."
    )
    error_message: str = (
        "Sorry, there was an error processing your request. Please try again later."
    )
    voice_available: bool = True

    def validate(self) -> bool:
        """Validate configuration"""
        if self.synthesis_timeout <= 0:
            raise ValueError("synthesis_timeout must be positive")

        if not self.fallback_message.strip() or not self.error_message.strip():
            raise ValueError("fallback_message and error_message must not be empty")

        return True


@dataclass
class ServerConfig:
    """Configuration for the HTTP server"""
    host: str = "localhost"
    port: int = 8767
    widget_host_url: str = "https://your-widget-host.com"
    cors_origin: str = "*"
    client_max_size: int = 12 * 1024 * 1024  # uploads up to the file cap plus form overhead
    session_ttl: float = 1800.0  # seconds a session may sit idle before it is discarded
    max_sessions: int = 500

    def validate(self) -> bool:
        """Validate configuration"""
        if not (0 < self.port < 65536):
            raise ValueError("port must be between 1 and 65535")

        if self.client_max_size <= 0:
            raise ValueError("client_max_size must be positive")

        if self.session_ttl <= 0:
            raise ValueError("session_ttl must be positive")

        if self.max_sessions <= 0:
            raise ValueError("max_sessions must be positive")

        return True

    @property
    def loader_url(self) -> str:
        return f"{self.widget_host_url.rstrip('/')}/widget-loader.js"


@dataclass
class WidgetAppConfig:
    """Main configuration for the widget backend"""

    # Component configurations
    tts: TTSConfig = field(default_factory=TTSConfig)
    knowledge: KnowledgeConfig = field(default_factory=KnowledgeConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    def validate(self) -> bool:
        """Validate all configurations"""
        self.tts.validate()
        self.knowledge.validate()
        self.chat.validate()
        self.server.validate()

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if self.log_level not in valid_log_levels:
            raise ValueError(f"log_level must be one of: {valid_log_levels}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary (API key masked)"""
        return {
            "tts": {
                "provider": self.tts.provider,
                "api_key": "***" if self.tts.api_key else None,
                "base_url": self.tts.base_url,
                "voice_id": self.tts.voice_id,
                "model_id": self.tts.model_id,
                "stability": self.tts.stability,
                "similarity_boost": self.tts.similarity_boost,
                "timeout": self.tts.timeout,
                "language": self.tts.language,
                "tld": self.tts.tld,
            },
            "knowledge": {
                "max_file_size": self.knowledge.max_file_size,
                "allowed_types": list(self.knowledge.allowed_types),
                "ranker": self.knowledge.ranker,
                "top_k": self.knowledge.top_k,
            },
            "chat": {
                "auto_speak": self.chat.auto_speak,
                "synthesis_timeout": self.chat.synthesis_timeout,
                "fallback_message": self.chat.fallback_message,
                "error_message": self.chat.error_message,
                "voice_available": self.chat.voice_available,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "widget_host_url": self.server.widget_host_url,
                "cors_origin": self.server.cors_origin,
                "client_max_size": self.server.client_max_size,
                "session_ttl": self.server.session_ttl,
                "max_sessions": self.server.max_sessions,
            },
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WidgetAppConfig':
        """Create configuration from dictionary"""
        knowledge_data = dict(data.get("knowledge", {}))
        if "allowed_types" in knowledge_data:
            knowledge_data["allowed_types"] = tuple(knowledge_data["allowed_types"])

        tts_data = dict(data.get("tts", {}))
        if tts_data.get("api_key") == "***":
            tts_data.pop("api_key")

        return cls(
            tts=TTSConfig(**tts_data),
            knowledge=KnowledgeConfig(**knowledge_data),
            chat=ChatConfig(**data.get("chat", {})),
            server=ServerConfig(**data.get("server", {})),
            log_level=data.get("log_level", "INFO"),
        )

    def update_from_env(self) -> None:
        """Update configuration from environment variables"""
        # TTS settings
        if os.getenv("TTS_PROVIDER"):
            self.tts.provider = os.getenv("TTS_PROVIDER", self.tts.provider)
        if os.getenv("ELEVENLABS_API_KEY"):
            self.tts.api_key = os.getenv("ELEVENLABS_API_KEY")
        if os.getenv("ELEVENLABS_BASE_URL"):
            self.tts.base_url = os.getenv("ELEVENLABS_BASE_URL", self.tts.base_url)
        if os.getenv("ELEVENLABS_VOICE_ID"):
            self.tts.voice_id = os.getenv("ELEVENLABS_VOICE_ID", self.tts.voice_id)
        if os.getenv("ELEVENLABS_MODEL_ID"):
            self.tts.model_id = os.getenv("ELEVENLABS_MODEL_ID", self.tts.model_id)
        if os.getenv("TTS_STABILITY"):
            self.tts.stability = float(os.getenv("TTS_STABILITY", str(self.tts.stability)))
        if os.getenv("TTS_SIMILARITY_BOOST"):
            self.tts.similarity_boost = float(os.getenv("TTS_SIMILARITY_BOOST", str(self.tts.similarity_boost)))
        if os.getenv("TTS_TIMEOUT"):
            self.tts.timeout = float(os.getenv("TTS_TIMEOUT", str(self.tts.timeout)))
        if os.getenv("GTTS_LANGUAGE"):
            self.tts.language = os.getenv("GTTS_LANGUAGE", self.tts.language)
        if os.getenv("GTTS_TLD"):
            self.tts.tld = os.getenv("GTTS_TLD", self.tts.tld)

        # Knowledge settings
        if os.getenv("KNOWLEDGE_MAX_FILE_SIZE"):
            self.knowledge.max_file_size = int(os.getenv("KNOWLEDGE_MAX_FILE_SIZE", str(self.knowledge.max_file_size)))
        if os.getenv("KNOWLEDGE_RANKER"):
            self.knowledge.ranker = os.getenv("KNOWLEDGE_RANKER", self.knowledge.ranker)
        if os.getenv("KNOWLEDGE_TOP_K"):
            self.knowledge.top_k = int(os.getenv("KNOWLEDGE_TOP_K", str(self.knowledge.top_k)))

        # Chat settings
        if os.getenv("CHAT_AUTO_SPEAK"):
            self.chat.auto_speak = _env_bool(os.getenv("CHAT_AUTO_SPEAK", "true"))
        if os.getenv("CHAT_SYNTHESIS_TIMEOUT"):
            self.chat.synthesis_timeout = float(os.getenv("CHAT_SYNTHESIS_TIMEOUT", str(self.chat.synthesis_timeout)))

        # Server settings
        if os.getenv("SERVER_HOST"):
            self.server.host = os.getenv("SERVER_HOST", self.server.host)
        if os.getenv("SERVER_PORT"):
            self.server.port = int(os.getenv("SERVER_PORT", str(self.server.port)))
        if os.getenv("WIDGET_HOST_URL"):
            self.server.widget_host_url = os.getenv("WIDGET_HOST_URL", self.server.widget_host_url)
        if os.getenv("SESSION_TTL"):
            self.server.session_ttl = float(os.getenv("SESSION_TTL", str(self.server.session_ttl)))
        if os.getenv("MAX_SESSIONS"):
            self.server.max_sessions = int(os.getenv("MAX_SESSIONS", str(self.server.max_sessions)))
        if os.getenv("LOG_LEVEL"):
            self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()


def get_default_config() -> WidgetAppConfig:
    """Get default configuration"""
    return WidgetAppConfig()


def create_config_from_env() -> WidgetAppConfig:
    """Create configuration with environment variable overrides"""
    config = WidgetAppConfig()
    config.update_from_env()
    config.validate()
    return config
