# Embed snippet generation and the widget bootstrap script

from .generator import (
    EmbedConfig, EmbedFormat, generate,
    generate_markup, generate_component, generate_plugin,
    DEFAULT_LOADER_URL,
)
from .loader import DEFAULT_WIDGET_CONFIG, merge_widget_config, render_loader_script

__all__ = [
    'EmbedConfig', 'EmbedFormat', 'generate',
    'generate_markup', 'generate_component', 'generate_plugin',
    'DEFAULT_LOADER_URL',
    'DEFAULT_WIDGET_CONFIG', 'merge_widget_config', 'render_loader_script',
]
