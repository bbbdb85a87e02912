"""
Widget bootstrap script

Host pages load widget-loader.js after declaring window.AIAssistantConfig.
The script merges that object over the defaults below, mounts the widget
container, pulls in the stylesheet and the widget bundle, and can hand the
host its own embed snippet back.
"""

import json
from typing import Any, Dict, Optional

AUTO_OPEN_DELAY_MS = 1000
CONTAINER_ID = "ai-assistant-widget-container"

DEFAULT_WIDGET_CONFIG: Dict[str, Any] = {
    "apiKey": "",
    "position": "bottom-right",
    "theme": "light",
    "primaryColor": "#5c6bc0",
    "secondaryColor": "#3f51b5",
    "fontFamily": "Inter, system-ui, sans-serif",
    "logoUrl": None,
    "welcomeMessage": "Hello! How can I help you today?",
    "widgetTitle": "AI Assistant",
    "widgetIcon": "\U0001F4AC",
    "widgetCloseIcon": "✕",
    "knowledgeButtonIcon": "\U0001F4DA",
    "knowledgeButtonText": "Knowledge",
    "placeholderText": "Type your message...",
    "sendButtonText": "Send",
    "micButtonTextStart": "\U0001F3A4 Speak",
    "micButtonTextStop": "\U0001F534 Stop",
    "loadingIndicator": "...",
    "showBranding": True,
    "autoOpen": False,
}


def merge_widget_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Defaults overlaid with the known keys from overrides"""
    config = dict(DEFAULT_WIDGET_CONFIG)
    for key, value in (overrides or {}).items():
        if key in config:
            config[key] = value
    return config


_LOADER_TEMPLATE = """\
/**
 * AI Assistant widget loader
 * Reads window.AIAssistantConfig, merges it over the defaults and mounts the widget.
 */
(function() {
  var defaultConfig = __DEFAULTS__;
  var config = Object.assign({}, defaultConfig, window.AIAssistantConfig || {});
  var hostUrl = __HOST_URL__;
  var loaderUrl = __LOADER_URL__;

  var createWidgetContainer = function() {
    var container = document.createElement('div');
    container.id = __CONTAINER_ID__;
    document.body.appendChild(container);
    return container;
  };

  var loadStyles = function() {
    var link = document.createElement('link');
    link.rel = 'stylesheet';
    link.href = hostUrl + '/widget.css';
    document.head.appendChild(link);

    if (String(config.fontFamily).indexOf('Inter') !== -1) {
      var fontLink = document.createElement('link');
      fontLink.rel = 'stylesheet';
      fontLink.href = 'https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap';
      document.head.appendChild(fontLink);
    }
  };

  var loadScript = function() {
    var script = document.createElement('script');
    script.src = hostUrl + '/widget.js';
    script.onload = function() {
      window.AIAssistant.init(config);
      if (config.autoOpen) {
        setTimeout(function() {
          window.AIAssistant.open();
        }, __AUTO_OPEN_DELAY__);
      }
    };
    document.body.appendChild(script);
  };

  var quote = function(value) {
    return JSON.stringify(String(value)).replace(/</g, '\\\\u003c');
  };

  var escapeAttr = function(value) {
    return String(value)
      .replace(/&/g, '&amp;')
      .replace(/"/g, '&quot;')
      .replace(/</g, '&lt;')
      .replace(/>/g, '&gt;');
  };

  var generateEmbedCode = function() {
    var keys = ['apiKey', 'position', 'theme', 'primaryColor', 'widgetTitle',
                'welcomeMessage', 'showBranding', 'autoOpen', 'logoUrl'];
    var lines = [];
    keys.forEach(function(key) {
      var value = config[key];
      if (key === 'logoUrl' && !value) {
        return;
      }
      lines.push('    ' + key + ': ' + (typeof value === 'boolean' ? String(value) : quote(value)));
    });
    return [
      '<!-- AI Assistant Widget -->',
      '<script>',
      '  window.AIAssistantConfig = {',
      lines.join(',\\n'),
      '  };',
      '<\\/script>',
      '<script src="' + escapeAttr(loaderUrl) + '"><\\/script>',
      '<!-- End AI Assistant Widget -->'
    ].join('\\n');
  };

  var init = function() {
    window.AIAssistant = window.AIAssistant || {};
    window.AIAssistant.getEmbedCode = generateEmbedCode;
    window.AIAssistant.config = config;
    createWidgetContainer();
    loadStyles();
    loadScript();
  };

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', init);
  } else {
    init();
  }
})();
"""


def render_loader_script(host_url: str, defaults: Optional[Dict[str, Any]] = None) -> str:
    """JavaScript source of widget-loader.js for the given asset host"""
    host = host_url.rstrip("/")
    replacements = {
        "__DEFAULTS__": json.dumps(merge_widget_config(defaults), indent=2).replace("\n", "\n  "),
        "__HOST_URL__": json.dumps(host),
        "__LOADER_URL__": json.dumps(f"{host}/widget-loader.js"),
        "__CONTAINER_ID__": json.dumps(CONTAINER_ID),
        "__AUTO_OPEN_DELAY__": str(AUTO_OPEN_DELAY_MS),
    }
    script = _LOADER_TEMPLATE
    for placeholder, value in replacements.items():
        script = script.replace(placeholder, value)
    return script
