"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for the pricing engine's structured logs.

Event Naming Convention:
    <component>.<category>[.<action>]

    component: fee, catalog, batch
    category: evaluated, fetch, cache_hit
    action: failed, timeout

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, metadata.shop_id
    | filter event = "catalog.fetch.failed"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - fee.*: Per-shop fee outcomes
    - catalog.*: Shop record fetches
    - batch.*: Cart-level orchestration
    - error.*: Error conditions
    """

    # ========== Fee Events ==========
    FEE_EVALUATED = "fee.evaluated"
    """Fee computed for an in-zone shop."""

    FEE_OUT_OF_ZONE = "fee.out_of_zone"
    """Consumer outside the shop's polygons or beyond its last tier."""

    FEE_UNCONFIGURED = "fee.unconfigured"
    """Shop has no pricing policy or no coordinates; zero fee returned."""

    # ========== Catalog Events ==========
    CATALOG_FETCH_FAILED = "catalog.fetch.failed"
    """Shop record fetch raised."""

    CATALOG_FETCH_TIMEOUT = "catalog.fetch.timeout"
    """Shop record fetch did not finish before the batch deadline."""

    CATALOG_RECORD_MISSING = "catalog.record.missing"
    """Catalog has no record for the shop."""

    # ========== Batch Events ==========
    BATCH_COMPLETED = "batch.completed"
    """Cart-level fee map built."""

    BATCH_CACHE_HIT = "batch.cache_hit"
    """Inputs unchanged; previous fee map reused."""

    BATCH_INVALIDATED = "batch.invalidated"
    """Cached fee map discarded on request."""


# Event categories for filtering
FEE_EVENTS = {
    LogEvent.FEE_EVALUATED,
    LogEvent.FEE_OUT_OF_ZONE,
    LogEvent.FEE_UNCONFIGURED,
}

CATALOG_EVENTS = {
    LogEvent.CATALOG_FETCH_FAILED,
    LogEvent.CATALOG_FETCH_TIMEOUT,
    LogEvent.CATALOG_RECORD_MISSING,
}

BATCH_EVENTS = {
    LogEvent.BATCH_COMPLETED,
    LogEvent.BATCH_CACHE_HIT,
    LogEvent.BATCH_INVALIDATED,
}
