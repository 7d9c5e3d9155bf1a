from .config import (
    FormSubmitSource,
    LinkClickSource,
    PodiumWidgetSource,
    TrackedEvent,
    TrackingConfiguration,
    YouTubeVideoSource,
)
from .payload import EventPayload

# Define the public API of this module
__all__ = [
    "TrackingConfiguration",
    "TrackedEvent",
    "LinkClickSource",
    "FormSubmitSource",
    "PodiumWidgetSource",
    "YouTubeVideoSource",
    "EventPayload",
]
