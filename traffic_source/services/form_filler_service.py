import logging

from bs4 import BeautifulSoup

from traffic_source.config import settings
from traffic_source.services.attribution_service import AttributionStore

logger = logging.getLogger(__name__)


def fill_marker_fields(document: BeautifulSoup, attribution: AttributionStore, marker: str | None = None) -> int:
    """
    Replace the value of hidden inputs carrying the marker with the attribution label.

    The comparison is case-insensitive. Returns the number of fields filled.
    """
    marker = (marker or settings.marker_value).lower()
    targets = [
        field for field in document.select('input[type="hidden"]') if str(field.get("value", "")).lower() == marker
    ]
    if not targets:
        return 0

    label = attribution.resolve_label()
    for field in targets:
        field["value"] = label

    logger.debug("Filled %d traffic source field(s) with '%s'", len(targets), label)
    return len(targets)
