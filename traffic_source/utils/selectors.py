"""
Selector Utilities

Wrappers around soupsieve matching that never raise. Selectors come from site
configuration and may be malformed; a bad selector is logged with the tracked
event slug and treated as "no match".
"""

import logging

import soupsieve as sv
from bs4 import Tag

from traffic_source.exceptions import SelectorError

logger = logging.getLogger(__name__)


def compile_selector(selector: str, slug: str | None = None) -> sv.SoupSieve:
    """Compile a selector, raising SelectorError for invalid syntax."""
    try:
        return sv.compile(selector)
    except (sv.SelectorSyntaxError, ValueError, TypeError) as exc:
        raise SelectorError(selector, slug=slug, reason=str(exc)) from exc


def _report(exc: SelectorError) -> None:
    logger.warning(
        "%s: %s",
        exc.message,
        exc.details.get("reason"),
        extra={"slug": exc.details.get("slug"), "selector": exc.details.get("selector")},
    )


def safe_select(root: Tag, selector: str, slug: str | None = None) -> list[Tag] | None:
    """
    querySelectorAll equivalent.

    Returns the matching elements, or None when the selector is invalid
    (the failure is logged once here).
    """
    try:
        return compile_selector(selector, slug).select(root)
    except SelectorError as exc:
        _report(exc)
        return None


def safe_closest(element: Tag | None, selector: str, slug: str | None = None) -> Tag | None:
    """Element.closest equivalent: nearest inclusive ancestor matching selector."""
    if not isinstance(element, Tag):
        return None
    try:
        return compile_selector(selector, slug).closest(element)
    except SelectorError as exc:
        _report(exc)
        return None

