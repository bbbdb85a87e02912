from .settings import (
    TTSConfig, KnowledgeConfig, ChatConfig, ServerConfig, WidgetAppConfig,
    get_default_config, create_config_from_env,
)

__all__ = [
    'TTSConfig', 'KnowledgeConfig', 'ChatConfig', 'ServerConfig', 'WidgetAppConfig',
    'get_default_config', 'create_config_from_env',
]
