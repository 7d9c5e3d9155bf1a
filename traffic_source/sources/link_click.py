"""
Link Click event source

Delegated click listener: the nearest ancestor of the clicked node matching
the selector must carry an ``href``; its raw attribute value is emitted.
"""

from __future__ import annotations

from traffic_source.constants import SOURCE_LINK_CLICK
from traffic_source.page import DomEvent
from traffic_source.schemas.config import LinkClickSource, TrackedEvent
from traffic_source.sources.base import Emit, EventSourceHandler, SourceMeta
from traffic_source.utils.selectors import safe_closest

_META = SourceMeta(type=SOURCE_LINK_CLICK, label="Link Click", source_model=LinkClickSource)


class LinkClickHandler(EventSourceHandler):
    @property
    def meta(self) -> SourceMeta:
        return _META

    def arm(self, tracked_event: TrackedEvent, source: LinkClickSource, emit: Emit) -> bool:
        slug = tracked_event.slug
        if not self._initial_targets(source.selector, slug):
            return False

        def on_click(event: DomEvent) -> None:
            link = safe_closest(event.target, source.selector, slug)
            # Buttons styled as links have no href and never count
            if link is None or not link.has_attr("href"):
                return
            emit(link["href"])

        self.page.add_event_listener("click", on_click)
        return True
