"""
Event Source Registry

Maps ``eventSource.type`` tags to handler classes. New source types are added
by registering a handler class; the dispatch engine never changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from traffic_source.page import Page
    from traffic_source.sources.base import EventSourceHandler

logger = logging.getLogger(__name__)


class EventSourceRegistry:
    def __init__(self) -> None:
        self._handlers: dict[str, type[EventSourceHandler]] = {}

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, source_type: str, handler_cls: type[EventSourceHandler]) -> None:
        """Register a handler class for a type tag. A later registration replaces an earlier one."""
        self._handlers[source_type] = handler_cls
        logger.debug("Event source registered: %s -> %s", source_type, handler_cls.__name__)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, source_type: str | None) -> type[EventSourceHandler] | None:
        """Return the handler class for the tag, or None if the tag is unknown."""
        if source_type is None:
            return None
        return self._handlers.get(source_type)

    def types(self) -> list[str]:
        return list(self._handlers)

    def is_registered(self, source_type: str) -> bool:
        return source_type in self._handlers

    def create(self, source_type: str, page: Page) -> EventSourceHandler | None:
        handler_cls = self.get(source_type)
        if handler_cls is None:
            return None
        return handler_cls(page)


# ── Global singleton ──────────────────────────────────────────────────────────
# Built-in handlers are registered in traffic_source.sources.__init__.
event_source_registry = EventSourceRegistry()
