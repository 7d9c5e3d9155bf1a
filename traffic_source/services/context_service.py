"""
Context Service

Classifies the client from its user-agent string (and viewport width for the
device type). Check order is significant: user agents carry each other's
tokens (Chrome's UA contains "Safari", Android's contains "Linux").
"""

import re
from typing import NamedTuple

from traffic_source.config import settings
from traffic_source.constants import DEVICE_DESKTOP, DEVICE_MOBILE, DEVICE_TABLET, FAMILY_OTHER

_BROWSER_CHECKS: list[tuple[str, re.Pattern[str]]] = [
    ("Edge", re.compile(r"edg(e|a|ios)?/", re.I)),
    ("Chrome", re.compile(r"chrome/|crios/", re.I)),
    ("Safari", re.compile(r"safari/", re.I)),
    ("Firefox", re.compile(r"firefox/|fxios/", re.I)),
    ("Opera", re.compile(r"opr/|opera", re.I)),
    ("Internet Explorer", re.compile(r"msie |trident/", re.I)),
]

_OS_CHECKS: list[tuple[str, re.Pattern[str]]] = [
    ("iOS", re.compile(r"iphone|ipad|ipod", re.I)),
    ("Android", re.compile(r"android", re.I)),
    ("Windows", re.compile(r"windows", re.I)),
    ("macOS", re.compile(r"macintosh|mac os x", re.I)),
    ("Linux", re.compile(r"linux", re.I)),
    ("Chrome OS", re.compile(r"\bcros\b", re.I)),
]

_TABLET_RE = re.compile(r"ipad|tablet", re.I)
_ANDROID_RE = re.compile(r"android", re.I)
_MOBILE_TOKEN_RE = re.compile(r"mobile", re.I)
_MOBILE_RE = re.compile(r"mobile|iphone|ipod", re.I)


class ClientContext(NamedTuple):
    device_type: str
    browser_family: str
    os_family: str


def device_type(user_agent: str, viewport_width: int | None = None, breakpoint: int | None = None) -> str:
    ua = user_agent or ""
    if _TABLET_RE.search(ua) or (_ANDROID_RE.search(ua) and not _MOBILE_TOKEN_RE.search(ua)):
        return DEVICE_TABLET

    breakpoint = breakpoint if breakpoint is not None else settings.mobile_viewport_breakpoint
    if _MOBILE_RE.search(ua) or (viewport_width is not None and viewport_width < breakpoint):
        return DEVICE_MOBILE

    return DEVICE_DESKTOP


def _first_match(user_agent: str, checks: list[tuple[str, re.Pattern[str]]]) -> str:
    for label, pattern in checks:
        if pattern.search(user_agent or ""):
            return label
    return FAMILY_OTHER


def browser_family(user_agent: str) -> str:
    return _first_match(user_agent, _BROWSER_CHECKS)


def os_family(user_agent: str) -> str:
    return _first_match(user_agent, _OS_CHECKS)


def classify(user_agent: str, viewport_width: int | None = None) -> ClientContext:
    return ClientContext(
        device_type=device_type(user_agent, viewport_width),
        browser_family=browser_family(user_agent),
        os_family=os_family(user_agent),
    )
