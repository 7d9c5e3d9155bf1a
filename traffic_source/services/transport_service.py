"""
Transport Service

Fire-and-forget beacon delivery to the collector endpoint. Nothing waits for
the response and failures are swallowed.

Inside a running event loop each beacon is a task. Outside one (synchronous
callers such as ``page.click``) each beacon is posted from a daemon thread.
``close()`` / ``aclose()`` wait for whatever is still in flight; the dispatch
engine calls them when the page unloads so a click that navigates away is
not lost.
"""

import asyncio
import logging
import threading

import httpx

from traffic_source.config import settings
from traffic_source.schemas.payload import EventPayload

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class BeaconTransport:
    def __init__(
        self,
        endpoint: str,
        timeout: float | None = None,
        http_transport: httpx.AsyncBaseTransport | httpx.BaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout if timeout is not None else settings.beacon_timeout_seconds
        self._http_transport = http_transport
        self._in_flight: set[asyncio.Task] = set()
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def send_beacon(self, payload: EventPayload) -> bool:
        """Queue one POST of the payload. Returns True once queued."""
        body = payload.to_json()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._post_in_thread(body, payload.event_type)
            return True

        task = loop.create_task(self._post(body, payload.event_type))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return True

    # ── Delivery ──────────────────────────────────────────────────────────────

    async def _post(self, body: str, event_type: str) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._http_transport) as client:
                await client.post(self.endpoint, content=body, headers=JSON_HEADERS)
        except Exception as exc:
            self._log_failure(event_type, exc)

    def _post_in_thread(self, body: str, event_type: str) -> None:
        def run() -> None:
            try:
                with httpx.Client(timeout=self.timeout, transport=self._http_transport) as client:
                    client.post(self.endpoint, content=body, headers=JSON_HEADERS)
            except Exception as exc:
                self._log_failure(event_type, exc)
            finally:
                with self._lock:
                    self._threads.discard(thread)

        thread = threading.Thread(target=run, name=f"beacon-{event_type}", daemon=True)
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _log_failure(self, event_type: str, exc: Exception) -> None:
        logger.debug(
            "Beacon for '%s' not delivered: %s",
            event_type,
            exc,
            extra={"event_type": event_type, "endpoint": self.endpoint},
        )

    # ── Draining ──────────────────────────────────────────────────────────────

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._in_flight) + len(self._threads)

    def close(self, timeout: float | None = None) -> None:
        """Wait for beacons posted from threads to finish."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout if timeout is not None else self.timeout)

    async def aclose(self) -> None:
        """Wait for every in-flight beacon, task or thread, to finish."""
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        if self._threads:
            await asyncio.to_thread(self.close)
