"""
Tracking page inspector

Boots the tracking runtime against a saved HTML page and reports what a
visitor arriving at that URL would get: the attribution label, the filled
marker fields, and which tracked events armed.

    python main.py page.html --url "https://example.com/?utm_medium=email" --referrer https://www.google.com/
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from traffic_source.config import settings
from traffic_source.main import boot_page
from traffic_source.page import DEFAULT_USER_AGENT, Page
from traffic_source.services.context_service import classify
from traffic_source.utils.logging import configure_logging
from traffic_source.utils.session import RedisSessionStorage, SessionStorage

logger = logging.getLogger(__name__)


class _NullTransport:
    """Inspection never sends beacons."""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint

    def send_beacon(self, payload) -> bool:
        return False

    def close(self) -> None:
        pass

    async def aclose(self) -> None:
        pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect event tracking on a saved HTML page")
    parser.add_argument("html", type=Path, help="Path to the saved HTML page")
    parser.add_argument("--url", required=True, help="URL the page is served at (query string included)")
    parser.add_argument("--referrer", default="", help="document.referrer of the visit")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    parser.add_argument("--viewport-width", type=int, default=1280)
    parser.add_argument(
        "--session-id",
        help="Share attribution with earlier runs of this session (requires TRAFFIC_SOURCE_REDIS_URL)",
    )
    return parser


def build_session_storage(session_id: str | None) -> SessionStorage | None:
    if not session_id:
        return None
    if not settings.redis_url:
        logger.warning("--session-id given but TRAFFIC_SOURCE_REDIS_URL is not set, using a fresh session")
        return None
    return RedisSessionStorage.from_url(settings.redis_url, session_id)


async def inspect_page(args: argparse.Namespace) -> dict:
    page = Page(
        args.html.read_text(encoding="utf-8"),
        url=args.url,
        referrer=args.referrer,
        user_agent=args.user_agent,
        viewport_width=args.viewport_width,
        session_storage=build_session_storage(args.session_id),
    )
    engine = boot_page(page, transport_factory=_NullTransport)
    context = classify(page.user_agent, page.viewport_width)
    await engine.aclose()
    return {
        "traffic_source": engine.attribution.resolve_label(),
        "device_type": context.device_type,
        "browser_family": context.browser_family,
        "os_family": context.os_family,
        "endpoint": engine.config.endpoint if engine.config else None,
        "armed_events": engine.armed_events,
    }


def main(argv: list[str] | None = None) -> int:
    configure_logging(settings)
    args = build_parser().parse_args(argv)
    if not args.html.exists():
        logger.error("File not found: %s", args.html)
        return 1

    report = asyncio.run(inspect_page(args))
    for key, value in report.items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
