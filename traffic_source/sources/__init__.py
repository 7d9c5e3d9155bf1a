"""
Event Sources

Public API:
    SourceMeta            — event source metadata dataclass
    EventSourceHandler    — abstract base class for all handlers
    EventSourceRegistry   — type tag → handler class mapping
    event_source_registry — global registry with the built-in handlers
"""

from traffic_source.constants import (
    SOURCE_FORM_SUBMIT,
    SOURCE_LINK_CLICK,
    SOURCE_PODIUM_WIDGET,
    SOURCE_YOUTUBE_VIDEO,
)

from .base import EventSourceHandler, SourceMeta
from .form_submit import FormSubmitHandler
from .link_click import LinkClickHandler
from .podium_widget import PodiumWidgetHandler
from .registry import EventSourceRegistry, event_source_registry
from .youtube_video import YouTubeVideoHandler

BUILTIN_SOURCES: dict[str, type[EventSourceHandler]] = {
    SOURCE_LINK_CLICK: LinkClickHandler,
    SOURCE_FORM_SUBMIT: FormSubmitHandler,
    SOURCE_PODIUM_WIDGET: PodiumWidgetHandler,
    SOURCE_YOUTUBE_VIDEO: YouTubeVideoHandler,
}


def register_builtin_sources(registry: EventSourceRegistry) -> EventSourceRegistry:
    for source_type, handler_cls in BUILTIN_SOURCES.items():
        registry.register(source_type, handler_cls)
    return registry


register_builtin_sources(event_source_registry)

__all__ = [
    "SourceMeta",
    "EventSourceHandler",
    "EventSourceRegistry",
    "event_source_registry",
    "register_builtin_sources",
    "BUILTIN_SOURCES",
    "LinkClickHandler",
    "FormSubmitHandler",
    "PodiumWidgetHandler",
    "YouTubeVideoHandler",
]
