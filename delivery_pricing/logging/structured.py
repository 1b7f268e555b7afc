"""
Structured JSON Logger
======================

Bounded Context: Observability Infrastructure

One JSON object per record, keyed by a typed LogEvent, so fee outcomes and
catalog failures can be filtered per shop in a log aggregator.

Record layout:
    {
        "timestamp": "2026-10-18T15:30:45.123456+00:00",
        "level": "WARNING",
        "component": "orchestrator",
        "event": "catalog.fetch.timeout",
        "message": "Shop fetch did not finish before the deadline",
        "metadata": {"shop_id": "shop-4", "timeout_s": 5.0}
    }

Failed fetches add an "exception" object with the exception type and text.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent

Metadata = Optional[Dict[str, Any]]


class JSONFormatter(logging.Formatter):
    """Emit the pre-rendered JSON message untouched (no prefix, no level tag)."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class StructuredLogger:
    """
    JSON logger bound to one engine component.

    Records go to the ``delivery_pricing.<component>`` stdlib logger, which
    gets a stderr handler on first use and still propagates, so host
    applications (and pytest's caplog) see every record.

    Thread Safety:
        Thread-safe via Python's logging module; fetch worker threads log
        through the same instance.
    """

    def __init__(self, component: str, level: int = logging.INFO):
        self.component = component
        self.logger = logging.getLogger(f"delivery_pricing.{component}")
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def debug(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._emit(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._emit(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._emit(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log at ERROR, summarising exc_info into the record.

        Only type and message are kept: fetch failures are expected and a
        traceback per shop would drown the batch summary.
        """
        self._emit(logging.ERROR, event, message, metadata, exc_info)

    def _emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Metadata,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }
        if metadata:
            entry['metadata'] = metadata
        if exc_info is not None:
            entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
            }

        # default=str covers Coordinates, enums and Paths in metadata
        self.logger.log(level, json.dumps(entry, default=str))


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """Factory used by the orchestrator and build_orchestrator()."""
    return StructuredLogger(component=component, level=level)
