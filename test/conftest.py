"""
Pytest configuration and fixtures for the tracking runtime tests
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from traffic_source.page import Page  # noqa: E402
from traffic_source.services.dispatch_service import DispatchEngine  # noqa: E402
from utils.mocks import RecordingTransport  # noqa: E402

ENDPOINT = "https://example.com/wp-json/wego/v1/track-event"

CHROME_ANDROID_UA = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Mobile Safari/537.36"
)
CHROME_WINDOWS_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)


def config_script(config) -> str:
    """Inline configuration element as the server renders it"""
    body = config if isinstance(config, str) else json.dumps(config)
    return f'<script type="application/json" class="wego-tracking-config">{body}</script>'


def tracked(slug: str, **event_source) -> dict:
    return {"slug": slug, "eventSource": event_source}


@pytest.fixture
def make_page():
    """Factory building a Page from a body fragment"""

    def _make_page(body: str = "", url: str = "https://example.com/landing", **kwargs) -> Page:
        html = f"<html><head><title>Test</title></head><body>{body}</body></html>"
        kwargs.setdefault("user_agent", CHROME_WINDOWS_UA)
        return Page(html, url=url, **kwargs)

    return _make_page


@pytest.fixture
def make_engine():
    """Factory building a DispatchEngine that records beacons instead of sending them"""

    def _make_engine(page: Page, tracked_events: list | None = None, **kwargs) -> DispatchEngine:
        engine = DispatchEngine(page, transport_factory=RecordingTransport, **kwargs)
        if tracked_events is not None:
            engine.initialize({"endpoint": ENDPOINT, "trackedEvents": tracked_events})
        return engine

    return _make_engine
