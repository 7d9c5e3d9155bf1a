"""
Tracking configuration schemas

The inline configuration document is validated in two steps: the outer shape
(``endpoint`` + ``trackedEvents``) as a whole, then each tracked event's
``eventSource`` against the model of the handler registered for its type.
Unknown types never reach this module.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from traffic_source.constants import (
    SOURCE_FORM_SUBMIT,
    SOURCE_LINK_CLICK,
    SOURCE_PODIUM_WIDGET,
    SOURCE_YOUTUBE_VIDEO,
    VIDEO_STATES,
)


class TrackingConfiguration(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint: StrictStr = Field(..., description="Collector URL beacons are POSTed to")
    tracked_events: list[Any] = Field(..., alias="trackedEvents", description="Raw tracked event entries")


class TrackedEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    slug: StrictStr = Field(..., min_length=1, description="Collector-side identifier")
    event_source: dict[str, Any] = Field(..., alias="eventSource")

    @property
    def source_type(self) -> str | None:
        value = self.event_source.get("type")
        return value if isinstance(value, str) else None


class EventSourceBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str


class SelectorSource(EventSourceBase):
    selector: StrictStr = Field(..., description="CSS selector for the trigger elements")

    @field_validator("selector")
    @classmethod
    def selector_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("selector cannot be empty")
        return v.strip()


class LinkClickSource(SelectorSource):
    type: str = SOURCE_LINK_CLICK


class FormSubmitSource(SelectorSource):
    type: str = SOURCE_FORM_SUBMIT


class PodiumWidgetSource(EventSourceBase):
    type: str = SOURCE_PODIUM_WIDGET
    events: list[StrictStr] = Field(default_factory=list, description="Accepted widget callback event names")


class YouTubeVideoSource(SelectorSource):
    type: str = SOURCE_YOUTUBE_VIDEO
    states: list[StrictStr] = Field(default_factory=list, description="Player states to report")

    @field_validator("states")
    @classmethod
    def states_are_canonical(cls, v: list[str]) -> list[str]:
        invalid = [state for state in v if state not in VIDEO_STATES]
        if invalid:
            raise ValueError(f"invalid video state(s): {', '.join(invalid)}")
        return v
