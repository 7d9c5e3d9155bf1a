"""
Attribution Service

Captures first-touch traffic data (UTM parameters and the external referrer)
once per session and turns it into a human-readable traffic-source label.
"""

import json
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from traffic_source.config import settings
from traffic_source.constants import (
    ELLIPSIS,
    LABEL_DIRECT,
    MALFORMED_REFERRAL_MAX_LENGTH,
    REFERRER_SOURCES,
    UTM_TAGS,
)
from traffic_source.utils.session import SessionStorage

logger = logging.getLogger(__name__)

# hostname -> label
_REFERRER_LABELS: dict[str, str] = {
    hostname.lower(): label for label, hostnames in REFERRER_SOURCES for hostname in hostnames
}


def _hostname(url: str) -> str | None:
    """Hostname of an absolute URL, or None when the string does not parse as one."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return hostname.lower()


def extract_utm_params(url: str) -> dict[str, str]:
    """First non-empty value of each recognised UTM tag in the URL's query string."""
    try:
        query = parse_qs(urlsplit(url).query)
    except ValueError:
        return {}
    utm_params = {}
    for tag in UTM_TAGS:
        values = [v for v in query.get(tag, []) if v]
        if values:
            utm_params[tag] = values[0]
    return utm_params


def referrer_label(referrer: str) -> str:
    """Label for a stored referrer: curated source, plain referral, or malformed."""
    hostname = _hostname(referrer)
    if hostname is None:
        truncated = referrer[:MALFORMED_REFERRAL_MAX_LENGTH]
        if len(referrer) > MALFORMED_REFERRAL_MAX_LENGTH:
            truncated += ELLIPSIS
        return f"Malformed Referral: {truncated}"

    label = _REFERRER_LABELS.get(hostname)
    if label:
        return label
    return f"Referral from {hostname}"


class AttributionStore:
    """
    Session-scoped attribution slots.

    Both slots are written together exactly once per session. Later page
    views never overwrite them, so the label always describes the first touch.
    """

    def __init__(
        self,
        storage: SessionStorage,
        utm_key: str | None = None,
        referrer_key: str | None = None,
    ):
        self.storage = storage
        self.utm_key = utm_key or settings.storage_key_utm
        self.referrer_key = referrer_key or settings.storage_key_referrer

    def capture_once(self, url: str, referrer: str | None) -> bool:
        """
        Store UTM params and external referrer if this session has neither yet.

        Returns True when the slots were written, False on the no-op path.
        """
        if self.storage.get_item(self.utm_key) is not None or self.storage.get_item(self.referrer_key) is not None:
            return False

        utm_params = extract_utm_params(url)

        stored_referrer = ""
        referrer = (referrer or "").strip()
        if referrer:
            page_host = _hostname(url)
            if _hostname(referrer) != page_host:
                stored_referrer = referrer

        self.storage.set_item(self.utm_key, json.dumps(utm_params))
        self.storage.set_item(self.referrer_key, stored_referrer)
        logger.debug("Captured attribution (utm=%s, referrer=%r)", utm_params, stored_referrer)
        return True

    def utm_params(self) -> dict[str, Any]:
        raw = self.storage.get_item(self.utm_key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable UTM session data: %r", raw[:100])
            return {}
        return data if isinstance(data, dict) else {}

    def referrer(self) -> str:
        return self.storage.get_item(self.referrer_key) or ""

    def resolve_label(self) -> str:
        """UTM medium (and term) first, then the referrer, then "Direct"."""
        utm_params = self.utm_params()
        medium = utm_params.get("utm_medium")
        if medium:
            term = utm_params.get("utm_term")
            return f"Tracked: {medium} - {term}" if term else f"Tracked: {medium}"

        referrer = self.referrer()
        if referrer:
            return referrer_label(referrer)

        return LABEL_DIRECT
