import json
from typing import Any

from pydantic import BaseModel, Field


class EventPayload(BaseModel):
    """Body of one beacon sent to the collector."""

    event_type: str = Field(..., description="Tracked event slug")
    primary_value: str = Field(..., description="Human-meaningful value extracted from the occurrence")
    traffic_source: str
    device_type: str
    page_url: str
    browser_family: str
    os_family: str
    event_source_data: dict[str, Any] | None = Field(None, description="Structured detail from the event source")

    def to_wire(self) -> dict[str, Any]:
        """Dict for JSON serialization. ``event_source_data`` is omitted, not nulled, when absent."""
        if self.event_source_data is None:
            return self.model_dump(exclude={"event_source_data"})
        return self.model_dump()

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False)
