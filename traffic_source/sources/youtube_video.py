"""
YouTube Video event source

Tracks player state changes of embedded YouTube iframes through the IFrame
Player API (``window.YT``).

The API loads asynchronously. Until it does, matching iframes from every
tracked event of this type are queued on one pending list, and a single task
waits on a one-shot future resolved by ``window.onYouTubeIframeAPIReady``.
There is no timeout: if the API never loads nothing is initialized, but a
warning is logged once the wait gets long.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import parse_qs, urlsplit, urlunsplit

from bs4 import Tag

from traffic_source.config import settings
from traffic_source.constants import (
    PLAYER_STATE_LABELS,
    SOURCE_YOUTUBE_VIDEO,
    YOUTUBE_API_GLOBAL,
    YOUTUBE_INITIALIZED_ATTR,
    YOUTUBE_READY_CALLBACK_NAME,
    YOUTUBE_WATCH_URL,
)
from traffic_source.page import Page
from traffic_source.schemas.config import TrackedEvent, YouTubeVideoSource
from traffic_source.sources.base import Emit, EventSourceHandler, SourceMeta

logger = logging.getLogger(__name__)

_META = SourceMeta(type=SOURCE_YOUTUBE_VIDEO, label="YouTube Video", source_model=YouTubeVideoSource)


class YouTubePlayer(Protocol):
    def get_video_data(self) -> dict[str, Any]: ...

    def get_current_time(self) -> float: ...


@dataclass
class PlayerStateEvent:
    """What the player passes to ``onStateChange``: the state code and the player itself."""

    data: int
    target: YouTubePlayer


@dataclass
class _PendingVideo:
    iframe: Tag
    slug: str
    source: YouTubeVideoSource
    emit: Emit


def format_playback_time(seconds: float | None) -> str:
    """Seconds as H:MM:SS."""
    total = int(max(seconds or 0, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def ensure_js_api(src: str) -> str:
    """Add ``enablejsapi=1`` to an embed URL that lacks the parameter."""
    if not src:
        return src
    parts = urlsplit(src)
    if "enablejsapi" in parse_qs(parts.query, keep_blank_values=True):
        return src
    query = f"{parts.query}&enablejsapi=1" if parts.query else "enablejsapi=1"
    return urlunsplit(parts._replace(query=query))


class YouTubeVideoHandler(EventSourceHandler):
    def __init__(self, page: Page):
        super().__init__(page)
        self._pending: list[_PendingVideo] = []
        self._api_ready: asyncio.Future | None = None
        self._waiter: asyncio.Task | None = None
        self.players: list[Any] = []

    @property
    def meta(self) -> SourceMeta:
        return _META

    def arm(self, tracked_event: TrackedEvent, source: YouTubeVideoSource, emit: Emit) -> bool:
        slug = tracked_event.slug
        iframes = self._initial_targets(source.selector, slug)
        if not iframes:
            return False

        if self.api_loaded:
            self._pending.extend(_PendingVideo(iframe, slug, source, emit) for iframe in iframes)
            self._initialize_pending()
            return True

        try:
            self._wait_for_api()
        except RuntimeError:
            logger.warning(
                "YouTube tracking for '%s' needs a running event loop, not arming",
                slug,
                extra={"slug": slug},
            )
            return False

        self._pending.extend(_PendingVideo(iframe, slug, source, emit) for iframe in iframes)
        return True

    # ── API loading ───────────────────────────────────────────────────────────

    @property
    def api_loaded(self) -> bool:
        api = self.page.window.get(YOUTUBE_API_GLOBAL)
        return api is not None and callable(getattr(api, "Player", None))

    @property
    def waiting(self) -> bool:
        return self._api_ready is not None and not self._api_ready.done()

    async def wait_for_players(self) -> None:
        """Wait until videos queued behind the API load have been initialized."""
        if self._waiter is not None:
            await self._waiter

    def _wait_for_api(self) -> None:
        if self._api_ready is not None:
            return

        loop = asyncio.get_running_loop()
        self._api_ready = loop.create_future()
        self._inject_api_script()

        previous = self.page.window.get(YOUTUBE_READY_CALLBACK_NAME)

        def on_api_ready() -> None:
            if callable(previous):
                previous()
            if not self._api_ready.done():
                self._api_ready.set_result(None)

        self.page.window[YOUTUBE_READY_CALLBACK_NAME] = on_api_ready
        self._waiter = loop.create_task(self._initialize_when_ready())

    def _inject_api_script(self) -> None:
        if self.page.document.find("script", src=settings.youtube_api_url) is None:
            self.page.append_script(settings.youtube_api_url)

    async def _initialize_when_ready(self) -> None:
        try:
            await asyncio.wait_for(asyncio.shield(self._api_ready), timeout=settings.youtube_ready_warning_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "YouTube IFrame API not ready after %ss, %d video(s) still waiting",
                settings.youtube_ready_warning_seconds,
                len(self._pending),
            )
            await self._api_ready
        self._initialize_pending()

    # ── Player setup ──────────────────────────────────────────────────────────

    def _initialize_pending(self) -> None:
        pending, self._pending = self._pending, []
        for video in pending:
            self._initialize_player(video)

    def _initialize_player(self, video: _PendingVideo) -> None:
        iframe = video.iframe
        if iframe.get(YOUTUBE_INITIALIZED_ATTR) == "true":
            return
        iframe[YOUTUBE_INITIALIZED_ATTR] = "true"

        iframe["src"] = ensure_js_api(iframe.get("src", ""))
        if not iframe.get("id"):
            iframe["id"] = f"wego-yt-{secrets.token_hex(4)}"

        api = self.page.window[YOUTUBE_API_GLOBAL]
        try:
            player = api.Player(
                iframe["id"],
                events={"onStateChange": lambda event: self._on_state_change(event, video)},
            )
        except Exception as exc:
            logger.warning(
                "Could not create YouTube player for #%s (tracked event '%s'): %s",
                iframe["id"],
                video.slug,
                exc,
                extra={"slug": video.slug, "integration": "YouTube"},
            )
            return
        self.players.append(player)

    def _on_state_change(self, event: PlayerStateEvent, video: _PendingVideo) -> None:
        state = PLAYER_STATE_LABELS.get(event.data)
        if state is None or state not in video.source.states:
            return

        player = event.target
        try:
            video_data = player.get_video_data() or {}
            current_time = player.get_current_time()
        except Exception as exc:
            logger.warning(
                "YouTube player data unavailable for tracked event '%s': %s",
                video.slug,
                exc,
                extra={"slug": video.slug, "integration": "YouTube"},
            )
            return

        video_id = str(video_data.get("video_id") or "")
        title = video_data.get("title") or video_id or "Untitled video"
        playback_time = format_playback_time(current_time)

        video.emit(
            f"{title}: {state} ({playback_time})",
            {
                "video_id": video_id,
                "video_title": title,
                "video_url": YOUTUBE_WATCH_URL.format(video_id=video_id),
                "state_change": state,
                "current_time": playback_time,
            },
        )
