"""
Event Source Base Classes

SourceMeta: declarative metadata for an event source type (tag, label, config model).
EventSourceHandler: abstract base class every event source handler subclasses.

A handler is created once per page by the dispatch engine and armed once per
tracked event of its type.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from bs4 import Tag
from pydantic import BaseModel

from traffic_source.utils.selectors import safe_select

if TYPE_CHECKING:
    from traffic_source.page import Page
    from traffic_source.schemas.config import TrackedEvent

logger = logging.getLogger(__name__)


class Emit(Protocol):
    def __call__(self, primary_value: str, aux_data: dict[str, Any] | None = None) -> Any: ...


@dataclass
class SourceMeta:
    """
    Declarative metadata describing an event source type.

    Attributes:
        type:         The ``eventSource.type`` tag this handler answers to.
        label:        Human-readable name, e.g. "Link Click".
        source_model: Pydantic model the ``eventSource`` object is validated against.
    """

    type: str
    label: str
    source_model: type[BaseModel]


class EventSourceHandler(ABC):
    def __init__(self, page: Page):
        self.page = page

    @property
    @abstractmethod
    def meta(self) -> SourceMeta:
        """Return the handler's metadata."""
        ...

    @abstractmethod
    def arm(self, tracked_event: TrackedEvent, source: Any, emit: Emit) -> bool:
        """
        Attach whatever listeners this source needs.

        Args:
            tracked_event: The tracked event being armed (slug is used in diagnostics).
            source:        The validated ``eventSource`` model.
            emit:          Callback taking the primary value and optional auxiliary data.

        Returns:
            True if listeners were attached (or deferred), False if arming was skipped.
        """

    def _initial_targets(self, selector: str, slug: str) -> list[Tag]:
        """
        Elements matching the selector right now.

        Empty when nothing matches or the selector is invalid; either way the
        handler skips arming. Elements added to the page later are not tracked.
        """
        targets = safe_select(self.page.document, selector, slug)
        if targets is None:
            return []
        if not targets:
            logger.info(
                "No elements match '%s' for tracked event '%s', not arming",
                selector,
                slug,
                extra={"slug": slug, "selector": selector},
            )
        return targets
