"""
Embed Code Generator

Pure functions that turn a widget configuration into installable source text
for a host page: a plain markup fragment, a React component, or a WordPress
plugin. Output depends only on the inputs, so the same configuration always
yields byte-identical text.
"""

import html
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import ValidationError

DEFAULT_LOADER_URL = "https://your-widget-host.com/widget-loader.js"

POSITIONS = ("bottom-right", "bottom-left", "top-right", "top-left")
THEMES = ("light", "dark")


class EmbedFormat(str, Enum):
    MARKUP = "markup"
    COMPONENT = "component"
    PLUGIN = "plugin"

    @classmethod
    def parse(cls, value: Union[str, 'EmbedFormat']) -> 'EmbedFormat':
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {"html": cls.MARKUP, "react": cls.COMPONENT, "wordpress": cls.PLUGIN}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Unknown embed format: {value!r}") from None


@dataclass(frozen=True)
class EmbedConfig:
    """Widget settings carried into an embed snippet"""
    api_key: str = ""
    position: str = "bottom-right"
    theme: str = "light"
    primary_color: str = "#5c6bc0"
    widget_title: str = "AI Assistant"
    welcome_message: str = "Hello! How can I help you today?"
    show_branding: bool = True
    auto_open: bool = False
    logo_url: Optional[str] = None

    # (attribute, camelCase key) in output order
    FIELDS = (
        ("api_key", "apiKey"),
        ("position", "position"),
        ("theme", "theme"),
        ("primary_color", "primaryColor"),
        ("widget_title", "widgetTitle"),
        ("welcome_message", "welcomeMessage"),
        ("show_branding", "showBranding"),
        ("auto_open", "autoOpen"),
        ("logo_url", "logoUrl"),
    )

    def validate(self) -> 'EmbedConfig':
        if self.position not in POSITIONS:
            raise ValidationError(f"position must be one of: {', '.join(POSITIONS)}")
        if self.theme not in THEMES:
            raise ValidationError(f"theme must be one of: {', '.join(THEMES)}")
        for attr, key in self.FIELDS:
            value = getattr(self, attr)
            if attr in ("show_branding", "auto_open"):
                if not isinstance(value, bool):
                    raise ValidationError(f"{key} must be true or false")
            elif attr == "logo_url":
                if value is not None and not isinstance(value, str):
                    raise ValidationError(f"{key} must be a string")
            elif not isinstance(value, str):
                raise ValidationError(f"{key} must be a string")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EmbedConfig':
        """Build from camelCase or snake_case keys; unknown keys are ignored"""
        kwargs = {}
        for attr, key in cls.FIELDS:
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        if not kwargs.get("logo_url"):
            kwargs["logo_url"] = None
        return cls(**kwargs).validate()

    def items(self) -> List[Tuple[str, Any]]:
        """(camelCase key, value) pairs; unset optional fields are left out"""
        pairs = []
        for attr, key in self.FIELDS:
            value = getattr(self, attr)
            if attr == "logo_url" and not value:
                continue
            pairs.append((key, value))
        return pairs

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.items())


def js_string(value: str) -> str:
    """JavaScript string literal with every "<" escaped, safe inside an inline <script>"""
    return json.dumps(value).replace("<", "\\u003c")


def js_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return js_string(str(value))


def php_string(value: str) -> str:
    """PHP single-quoted string literal"""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _config_object(config: EmbedConfig, indent: str) -> str:
    lines = [f"{indent}{key}: {js_value(value)}" for key, value in config.items()]
    return ",\n".join(lines)


def generate_markup(config: EmbedConfig, script_url: str = DEFAULT_LOADER_URL) -> str:
    """HTML fragment declaring the global config and loading the widget"""
    return (
        "<!-- AI Assistant Widget -->\n"
        "<script>\n"
        "  window.AIAssistantConfig = {\n"
        f"{_config_object(config, '    ')}\n"
        "  };\n"
        "</script>\n"
        f'<script src="{html.escape(script_url, quote=True)}"></script>\n'
        "<!-- End AI Assistant Widget -->"
    )


def generate_component(config: EmbedConfig, script_url: str = DEFAULT_LOADER_URL) -> str:
    """React component doing the same setup on mount and teardown on unmount"""
    return (
        "import { useEffect } from 'react';\n"
        "\n"
        "const AIAssistantWidget = () => {\n"
        "  useEffect(() => {\n"
        "    // Define configuration\n"
        "    window.AIAssistantConfig = {\n"
        f"{_config_object(config, '      ')}\n"
        "    };\n"
        "\n"
        "    // Load widget script\n"
        "    const script = document.createElement('script');\n"
        f"    script.src = {js_string(script_url)};\n"
        "    script.async = true;\n"
        "    document.body.appendChild(script);\n"
        "\n"
        "    // Cleanup on unmount\n"
        "    return () => {\n"
        "      document.body.removeChild(script);\n"
        "      const container = document.getElementById('ai-assistant-widget-container');\n"
        "      if (container) {\n"
        "        document.body.removeChild(container);\n"
        "      }\n"
        "      delete window.AIAssistantConfig;\n"
        "    };\n"
        "  }, []);\n"
        "\n"
        "  return null; // This component doesn't render anything\n"
        "};\n"
        "\n"
        "export default AIAssistantWidget;\n"
    )


def _plugin_config_lines(config: EmbedConfig, indent: str) -> str:
    lines = []
    for key, value in config.items():
        if key == "apiKey":
            rendered = "<?php echo wp_json_encode($ai_assistant_api_key, JSON_HEX_TAG); ?>"
        elif isinstance(value, bool):
            rendered = js_value(value)
        elif key == "logoUrl":
            rendered = f"<?php echo wp_json_encode(esc_url_raw({php_string(value)}), JSON_HEX_TAG); ?>"
        else:
            rendered = f"<?php echo wp_json_encode({php_string(value)}, JSON_HEX_TAG); ?>"
        lines.append(f"{indent}{key}: {rendered}")
    return ",\n".join(lines)


def generate_plugin(config: EmbedConfig, script_url: str = DEFAULT_LOADER_URL) -> str:
    """WordPress plugin that injects the snippet in the footer and adds an API key setting"""
    return (
        "<?php\n"
        "/**\n"
        " * Plugin Name: AI Assistant Widget\n"
        " * Description: Adds an AI Assistant powered by Eleven Labs to your WordPress site\n"
        " * Version: 1.0.0\n"
        " * Author: Your Name\n"
        " */\n"
        "\n"
        "// Exit if accessed directly\n"
        "if (!defined('ABSPATH')) {\n"
        "    exit;\n"
        "}\n"
        "\n"
        "// Add widget script to footer\n"
        "function ai_assistant_enqueue_script() {\n"
        "    $options = get_option('ai_assistant_options');\n"
        f"    $ai_assistant_api_key = !empty($options['api_key']) ? $options['api_key'] : {php_string(config.api_key)};\n"
        "    ?>\n"
        "    <script>\n"
        "        window.AIAssistantConfig = {\n"
        f"{_plugin_config_lines(config, '            ')}\n"
        "        };\n"
        "    </script>\n"
        f"    <script src=\"<?php echo esc_url({php_string(script_url)}); ?>\"></script>\n"
        "    <?php\n"
        "}\n"
        "add_action('wp_footer', 'ai_assistant_enqueue_script');\n"
        "\n"
        "// Add settings page\n"
        "function ai_assistant_add_settings_page() {\n"
        "    add_options_page(\n"
        "        'AI Assistant Settings',\n"
        "        'AI Assistant',\n"
        "        'manage_options',\n"
        "        'ai-assistant',\n"
        "        'ai_assistant_settings_page'\n"
        "    );\n"
        "}\n"
        "add_action('admin_menu', 'ai_assistant_add_settings_page');\n"
        "\n"
        "// Settings page content\n"
        "function ai_assistant_settings_page() {\n"
        "    ?>\n"
        "    <div class=\"wrap\">\n"
        "        <h1>AI Assistant Widget Settings</h1>\n"
        "        <form method=\"post\" action=\"options.php\">\n"
        "            <?php\n"
        "            settings_fields('ai_assistant_options');\n"
        "            do_settings_sections('ai-assistant');\n"
        "            submit_button();\n"
        "            ?>\n"
        "        </form>\n"
        "    </div>\n"
        "    <?php\n"
        "}\n"
        "\n"
        "// Register settings\n"
        "function ai_assistant_register_settings() {\n"
        "    register_setting('ai_assistant_options', 'ai_assistant_options');\n"
        "\n"
        "    add_settings_section(\n"
        "        'ai_assistant_main',\n"
        "        'Widget Configuration',\n"
        "        'ai_assistant_section_callback',\n"
        "        'ai-assistant'\n"
        "    );\n"
        "\n"
        "    add_settings_field(\n"
        "        'api_key',\n"
        "        'Eleven Labs API Key',\n"
        "        'ai_assistant_api_key_callback',\n"
        "        'ai-assistant',\n"
        "        'ai_assistant_main'\n"
        "    );\n"
        "}\n"
        "add_action('admin_init', 'ai_assistant_register_settings');\n"
        "\n"
        "// Section callback\n"
        "function ai_assistant_section_callback() {\n"
        "    echo '<p>Configure your AI Assistant widget settings below:</p>';\n"
        "}\n"
        "\n"
        "// API key field callback\n"
        "function ai_assistant_api_key_callback() {\n"
        "    $options = get_option('ai_assistant_options');\n"
        "    $api_key = isset($options['api_key']) ? $options['api_key'] : '';\n"
        "    ?>\n"
        "    <input type=\"text\" name=\"ai_assistant_options[api_key]\" value=\"<?php echo esc_attr($api_key); ?>\" class=\"regular-text\">\n"
        "    <?php\n"
        "}\n"
    )


_GENERATORS = {
    EmbedFormat.MARKUP: generate_markup,
    EmbedFormat.COMPONENT: generate_component,
    EmbedFormat.PLUGIN: generate_plugin,
}


def generate(format: Union[str, EmbedFormat],
             config: Union[EmbedConfig, Dict[str, Any], None] = None,
             script_url: str = DEFAULT_LOADER_URL) -> str:
    """
    Generate an embed snippet

    Args:
        format: 'markup', 'component' or 'plugin' (aliases html/react/wordpress)
        config: EmbedConfig or a camelCase dict
        script_url: Where the host page loads the widget bootstrap script

    Raises:
        ValidationError: on an unknown format or invalid config values
    """
    embed_format = EmbedFormat.parse(format)
    if config is None:
        config = EmbedConfig()
    elif isinstance(config, dict):
        config = EmbedConfig.from_dict(config)
    else:
        config.validate()

    return _GENERATORS[embed_format](config, script_url)
