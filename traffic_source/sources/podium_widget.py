"""
Podium Widget event source

The Podium chat widget reports activity by calling a single global function,
``window.PodiumEventsCallback(eventName, properties)``. There is one slot: the
last tracked event of this type to arm owns it. Only one such tracked event
is expected per page.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from traffic_source.constants import PODIUM_CALLBACK_NAME, PODIUM_EVENTS, SOURCE_PODIUM_WIDGET
from traffic_source.page import Page
from traffic_source.schemas.config import PodiumWidgetSource, TrackedEvent
from traffic_source.sources.base import Emit, EventSourceHandler, SourceMeta

logger = logging.getLogger(__name__)

_META = SourceMeta(type=SOURCE_PODIUM_WIDGET, label="Podium Widget", source_model=PodiumWidgetSource)

WidgetCallback = Callable[[str, Any], None]


def register_widget_callback(page: Page, callback: WidgetCallback) -> None:
    """Install the page's widget callback, replacing any previous one."""
    if callable(page.window.get(PODIUM_CALLBACK_NAME)):
        logger.debug("Replacing existing %s", PODIUM_CALLBACK_NAME)
    page.window[PODIUM_CALLBACK_NAME] = callback


class PodiumWidgetHandler(EventSourceHandler):
    @property
    def meta(self) -> SourceMeta:
        return _META

    def arm(self, tracked_event: TrackedEvent, source: PodiumWidgetSource, emit: Emit) -> bool:
        accepted = set(source.events)
        unknown = accepted.difference(PODIUM_EVENTS)
        if unknown:
            logger.debug(
                "Tracked event '%s' listens for widget events the widget is not known to send: %s",
                tracked_event.slug,
                ", ".join(sorted(unknown)),
                extra={"slug": tracked_event.slug, "integration": "Podium"},
            )

        def on_widget_event(event_name: str, properties: Any = None) -> None:
            if event_name in accepted:
                emit(event_name)

        register_widget_callback(self.page, on_widget_event)
        return True
