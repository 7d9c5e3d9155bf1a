"""
Structured Logging

JSON formatter and a one-call setup used by the CLI. Library modules only
ever do ``logging.getLogger(__name__)``; handlers are configured here.
"""

import json
import logging
from datetime import datetime, timezone

from traffic_source.config import Settings

# Fields that tracking modules attach through ``extra=``
EXTRA_FIELDS = ("slug", "selector", "event_type", "endpoint", "integration")


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings (plain text or JSON lines)."""
    handler = logging.StreamHandler()
    if settings.log_json:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level.upper())
