"""
Page boot sequence

What runs when the tracking script is evaluated on a page: first-touch
attribution capture and marker field filling (synchronous, before any
interaction), then configuration loading and listener arming.
"""

import logging

from traffic_source.page import Page
from traffic_source.services.attribution_service import AttributionStore
from traffic_source.services.dispatch_service import DispatchEngine, read_tracking_config
from traffic_source.services.form_filler_service import fill_marker_fields

logger = logging.getLogger(__name__)


def boot_page(page: Page, **engine_kwargs) -> DispatchEngine:
    attribution = AttributionStore(page.session_storage)
    attribution.capture_once(page.url, page.referrer)
    fill_marker_fields(page.document, attribution)

    engine = DispatchEngine(page, attribution=attribution, **engine_kwargs)
    raw_config = read_tracking_config(page)
    if raw_config is None:
        logger.debug("No tracking configuration on %s", page.url)
        return engine

    engine.initialize(raw_config)
    return engine
