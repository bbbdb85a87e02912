"""
Dashboard

Backs the admin dashboard: the list of connected knowledge items, demo
analytics (fabricated numbers, there is no interaction log), and the widget
settings form. Settings live only as long as the session that owns them.
"""

import random
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

from .embed.generator import POSITIONS, THEMES, EmbedConfig
from .errors import ValidationError
from .knowledge.models import FileItem, KnowledgeItem
from .knowledge.store import KnowledgeStore

TOP_QUERIES = (
    "How do I reset my password?",
    "What are your business hours?",
    "Do you offer refunds?",
    "How can I contact support?",
    "What payment methods do you accept?",
)

VOICES = ("default", "male1", "female1", "female2")

_CAMEL_KEYS = {
    "primaryColor": "primary_color",
    "logoUrl": "logo_url",
    "welcomeMessage": "welcome_message",
    "widgetTitle": "widget_title",
    "autoOpen": "auto_open",
    "showBranding": "show_branding",
    "speechRate": "speech_rate",
    "autoSpeak": "auto_speak",
}


@dataclass
class DashboardSettings:
    """Widget settings form

    auto_speak switches spoken replies for the session's chat. voice and
    speech_rate are playback hints for the browser widget; the server does not
    apply them.
    """
    theme: str = "light"
    primary_color: str = "#5c6bc0"
    position: str = "bottom-right"
    logo_url: Optional[str] = None
    welcome_message: str = "Hello! How can I help you today?"
    widget_title: str = "AI Assistant"
    auto_open: bool = False
    show_branding: bool = True
    voice: str = "default"
    speech_rate: float = 1.0
    auto_speak: bool = True

    def validate(self) -> bool:
        if self.theme not in THEMES:
            raise ValidationError(f"theme must be one of: {', '.join(THEMES)}")
        if self.position not in POSITIONS:
            raise ValidationError(f"position must be one of: {', '.join(POSITIONS)}")
        if self.voice not in VOICES:
            raise ValidationError(f"voice must be one of: {', '.join(VOICES)}")
        if not (0.5 <= self.speech_rate <= 2.0):
            raise ValidationError("speechRate must be between 0.5 and 2.0")
        for name in ("auto_open", "show_branding", "auto_speak"):
            if not isinstance(getattr(self, name), bool):
                raise ValidationError(f"{name} must be true or false")
        # string fields are checked by the embed config they feed
        self.to_embed_config().validate()
        return True

    def update(self, changes: Dict[str, Any]) -> 'DashboardSettings':
        """Apply a partial form update; nothing changes if validation fails"""
        known = {f.name for f in fields(self)}
        values = asdict(self)
        for key, value in changes.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValidationError(f"Unknown setting: {key}")
            values[name] = value

        if "speech_rate" in values:
            try:
                values["speech_rate"] = float(values["speech_rate"])
            except (TypeError, ValueError):
                raise ValidationError("speechRate must be a number") from None
        if not values.get("logo_url"):
            values["logo_url"] = None

        candidate = DashboardSettings(**values)
        candidate.validate()
        for name, value in values.items():
            setattr(self, name, value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        camel = {v: k for k, v in _CAMEL_KEYS.items()}
        return {camel.get(name, name): value for name, value in asdict(self).items()}

    def to_embed_config(self, api_key: str = "") -> EmbedConfig:
        return EmbedConfig(
            api_key=api_key,
            position=self.position,
            theme=self.theme,
            primary_color=self.primary_color,
            widget_title=self.widget_title,
            welcome_message=self.welcome_message,
            show_branding=self.show_branding,
            auto_open=self.auto_open,
            logo_url=self.logo_url,
        )


class MockAnalytics:
    """Fabricated performance numbers for the demo dashboard"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, knowledge_base_size: int) -> Dict[str, Any]:
        return {
            "totalInteractions": self.rng.randrange(1000),
            "averageResponseTime": round(self.rng.uniform(0.5, 2.5), 2),
            "topQueries": list(TOP_QUERIES),
            "knowledgeBaseSize": knowledge_base_size,
        }


def display_type(item: KnowledgeItem) -> str:
    """'URL' for links, upper-cased MIME subtype for files"""
    if isinstance(item, FileItem):
        subtype = item.mime_type.split("/")[-1] if item.mime_type else ""
        return subtype.upper() or "FILE"
    return "URL"


class Dashboard:
    """Dashboard view over one session's knowledge store"""

    def __init__(self,
                 store: KnowledgeStore,
                 settings: Optional[DashboardSettings] = None,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.settings = settings or DashboardSettings()
        self.analytics_source = MockAnalytics(rng)

    def knowledge_items(self) -> List[Dict[str, Any]]:
        rows = []
        for item in self.store.list_items():
            row = item.to_dict()
            row["displayType"] = display_type(item)
            rows.append(row)
        return rows

    def analytics(self) -> Dict[str, Any]:
        return self.analytics_source.generate(len(self.store))

    def snapshot(self) -> Dict[str, Any]:
        return {
            "knowledge": self.knowledge_items(),
            "stats": self.store.stats().to_dict(),
            "analytics": self.analytics(),
            "settings": self.settings.to_dict(),
        }

    def update_settings(self, changes: Dict[str, Any]) -> DashboardSettings:
        return self.settings.update(changes)

    def reset_settings(self) -> DashboardSettings:
        self.settings = DashboardSettings()
        return self.settings

    def clear_knowledge(self) -> None:
        self.store.clear()
