"""
Headless Page

Stands in for the browser's ``window`` + ``document`` pair: a parsed HTML tree,
the page URL and referrer, client properties used for classification, a
``window`` globals table for third-party callback slots, session storage, and
a listener table for document-level event delegation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from traffic_source.constants import PAGE_UNLOAD_EVENT
from traffic_source.utils.session import InMemorySessionStorage, SessionStorage

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)

Listener = Callable[["DomEvent"], None]


@dataclass
class DomEvent:
    """An event dispatched at document level. ``detail`` carries CustomEvent data."""

    type: str
    target: Tag | None = None
    detail: dict[str, Any] = field(default_factory=dict)


class Page:
    def __init__(
        self,
        html: str,
        url: str,
        referrer: str = "",
        user_agent: str = DEFAULT_USER_AGENT,
        viewport_width: int = 1280,
        session_storage: SessionStorage | None = None,
    ):
        self.document = BeautifulSoup(html, "html.parser")
        self.url = url
        self.referrer = referrer
        self.user_agent = user_agent
        self.viewport_width = viewport_width
        self.session_storage: SessionStorage = session_storage or InMemorySessionStorage()
        self.window: dict[str, Any] = {}
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    @property
    def hostname(self) -> str:
        return (urlsplit(self.url).hostname or "").lower()

    # ── Event delegation ──────────────────────────────────────────────────────

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch_event(self, event: DomEvent) -> None:
        """
        Run every listener registered for the event type, in registration order.

        A listener that raises is logged and the remaining listeners still run,
        the same way a browser reports listener errors without stopping dispatch.
        """
        for listener in list(self._listeners.get(event.type, [])):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for '%s' raised", event.type)

    def click(self, element: Tag) -> None:
        self.dispatch_event(DomEvent("click", target=element))

    def submit(self, form: Tag) -> None:
        self.dispatch_event(DomEvent("submit", target=form))

    def unload(self) -> None:
        """Navigate away: listeners get a ``pagehide`` event before the page goes."""
        self.dispatch_event(DomEvent(PAGE_UNLOAD_EVENT))

    # ── Window globals ────────────────────────────────────────────────────────

    def call_global(self, name: str, *args: Any) -> Any:
        """Invoke a callable installed on ``window``, as a third-party script would."""
        callback = self.window.get(name)
        if not callable(callback):
            return None
        return callback(*args)

    # ── DOM helpers ───────────────────────────────────────────────────────────

    def append_script(self, src: str) -> Tag:
        script = self.document.new_tag("script", src=src)
        parent = self.document.head or self.document.body or self.document
        parent.append(script)
        return script
