"""
Structured Logging for the Pricing Engine
=========================================

Bounded Context: Observability

JSON-structured logs with typed event names.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from delivery_pricing.logging import create_logger, LogEvent
    >>> logger = create_logger("orchestrator")
    >>> logger.warning(
    ...     event=LogEvent.CATALOG_FETCH_FAILED,
    ...     message="Shop fetch failed",
    ...     metadata={'shop_id': 'shop-1'}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
