"""
Dispatch Service

Reads the inline tracking configuration, arms one handler per tracked event
through the event source registry, and owns ``emit``, the single point every
handler reports through.

The engine is UNINITIALIZED until a configuration validates, then ARMED for
the rest of the page's life. There is no re-initialization; page unload only
waits for beacons still in flight.
"""

import enum
import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from traffic_source.config import settings
from traffic_source.constants import PAGE_UNLOAD_EVENT
from traffic_source.exceptions import ConfigurationError
from traffic_source.page import Page
from traffic_source.schemas.config import TrackedEvent, TrackingConfiguration
from traffic_source.schemas.payload import EventPayload
from traffic_source.services.attribution_service import AttributionStore
from traffic_source.services.context_service import classify
from traffic_source.services.transport_service import BeaconTransport
from traffic_source.sources import event_source_registry
from traffic_source.sources.base import EventSourceHandler
from traffic_source.sources.registry import EventSourceRegistry

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str], Any]


class EngineState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ARMED = "armed"


def read_tracking_config(page: Page) -> Any | None:
    """
    Raw configuration from the page's inline JSON element.

    None when the element is absent (tracking simply not configured) or its
    contents are not valid JSON (logged).
    """
    element = page.document.select_one(settings.config_script_selector)
    if element is None:
        return None
    try:
        return json.loads(element.get_text())
    except (ValueError, RecursionError) as exc:
        logger.warning("Tracking configuration is not valid JSON: %s", exc)
        return None


def parse_configuration(raw_config: Any) -> TrackingConfiguration:
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Tracking configuration must be an object", {"received": type(raw_config).__name__})
    try:
        return TrackingConfiguration.model_validate(raw_config)
    except ValidationError as exc:
        raise ConfigurationError(
            "Tracking configuration needs a string 'endpoint' and a 'trackedEvents' array",
            {"errors": exc.errors(include_url=False)},
        ) from exc


class DispatchEngine:
    def __init__(
        self,
        page: Page,
        attribution: AttributionStore | None = None,
        registry: EventSourceRegistry | None = None,
        transport_factory: TransportFactory = BeaconTransport,
    ):
        self.page = page
        self.attribution = attribution or AttributionStore(page.session_storage)
        self.registry = registry or event_source_registry
        self.transport_factory = transport_factory
        self.state = EngineState.UNINITIALIZED
        self.config: TrackingConfiguration | None = None
        self.transport: Any = None
        self.armed_events: list[str] = []
        self._handlers: dict[str, EventSourceHandler] = {}

    @property
    def is_armed(self) -> bool:
        return self.state is EngineState.ARMED

    def initialize(self, raw_config: Any) -> bool:
        """
        Validate the configuration and arm every recognised tracked event.

        Never raises. Returns False (engine stays uninitialized) when the
        configuration shape is invalid.
        """
        if self.is_armed:
            logger.warning("Tracking engine already initialized, ignoring new configuration")
            return False

        try:
            config = parse_configuration(raw_config)
        except ConfigurationError as exc:
            logger.warning("%s, tracking disabled", exc.message)
            return False

        self.config = config
        self.transport = self.transport_factory(config.endpoint)
        self.state = EngineState.ARMED
        self.page.add_event_listener(PAGE_UNLOAD_EVENT, lambda event: self.close())

        for raw_event in config.tracked_events:
            self._arm_tracked_event(raw_event)

        logger.info(
            "Tracking armed for %d of %d tracked event(s)",
            len(self.armed_events),
            len(config.tracked_events),
            extra={"endpoint": config.endpoint},
        )
        return True

    def _arm_tracked_event(self, raw_event: Any) -> None:
        if not isinstance(raw_event, dict) or not raw_event.get("slug") or not raw_event.get("eventSource"):
            return
        try:
            tracked_event = TrackedEvent.model_validate(raw_event)
        except ValidationError:
            logger.debug("Skipping malformed tracked event entry: %r", raw_event)
            return

        source_type = tracked_event.source_type
        if source_type is None or not self.registry.is_registered(source_type):
            logger.debug("Skipping tracked event '%s' with unknown source type %r", tracked_event.slug, source_type)
            return
        handler = self._handler_for(source_type)

        try:
            source = handler.meta.source_model.model_validate(tracked_event.event_source)
        except ValidationError as exc:
            logger.warning(
                "Tracked event '%s' has an invalid %s source: %s",
                tracked_event.slug,
                source_type,
                "; ".join(error["msg"] for error in exc.errors()),
                extra={"slug": tracked_event.slug},
            )
            return

        slug = tracked_event.slug

        def emit(primary_value: str, aux_data: dict[str, Any] | None = None) -> EventPayload | None:
            return self.emit(slug, primary_value, aux_data)

        if handler.arm(tracked_event, source, emit):
            self.armed_events.append(slug)

    def _handler_for(self, source_type: str) -> EventSourceHandler:
        handler = self._handlers.get(source_type)
        if handler is None:
            handler = self.registry.create(source_type, self.page)
            self._handlers[source_type] = handler
        return handler

    def handler(self, source_type: str) -> EventSourceHandler | None:
        """The handler instance created for a source type on this page, if any."""
        return self._handlers.get(source_type)

    def build_payload(self, slug: str, primary_value: str, aux_data: dict[str, Any] | None = None) -> EventPayload:
        context = classify(self.page.user_agent, self.page.viewport_width)
        return EventPayload(
            event_type=slug,
            primary_value=primary_value,
            traffic_source=self.attribution.resolve_label(),
            device_type=context.device_type,
            page_url=self.page.url,
            browser_family=context.browser_family,
            os_family=context.os_family,
            event_source_data=aux_data,
        )

    def emit(self, slug: str, primary_value: str, aux_data: dict[str, Any] | None = None) -> EventPayload | None:
        """Build the payload for an occurrence now and hand it to the transport."""
        if not self.is_armed:
            logger.debug("Emit for '%s' before initialization ignored", slug)
            return None

        payload = self.build_payload(slug, primary_value, aux_data)
        self.transport.send_beacon(payload)
        logger.debug("Emitted '%s': %s", slug, primary_value, extra={"slug": slug})
        return payload

    # ── Page unload ───────────────────────────────────────────────────────────

    def close(self) -> None:
        """Page unload from synchronous code: wait for beacons still in flight."""
        if self.transport is not None:
            self.transport.close()

    async def aclose(self) -> None:
        """Page unload from the event loop: wait for beacons still in flight."""
        if self.transport is not None:
            await self.transport.aclose()
